from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import AccessUpdate, DataRequest, envelope
from app.schemas.forum import ThreadCreate, ThreadUpdate
from app.services import forum_posts, forum_threads
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_thread(
    payload: DataRequest[ThreadCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    thread = forum_threads.create_thread(db, messenger, user, **payload.data.model_dump())
    return envelope({"thread": thread.to_dict()})


@router.get("")
def list_threads(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"threads": forum_threads.get_threads_by_user(db, user)})


@router.get("/{thread_id}")
def get_thread(thread_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"thread": forum_threads.get_thread(db, thread_id, user)})


@router.get("/{thread_id}/posts")
def list_thread_posts(thread_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"posts": forum_posts.get_posts_by_thread(db, thread_id, user)})


@router.put("/{thread_id}")
def update_thread(
    thread_id: str,
    payload: DataRequest[ThreadUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    thread = forum_threads.update_thread(db, messenger, thread_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"thread": thread.to_dict()})


@router.put("/{thread_id}/access")
def update_thread_access(
    thread_id: str,
    payload: DataRequest[AccessUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    thread = forum_threads.update_thread_access(db, messenger, thread_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"thread": thread.to_dict()})


@router.delete("/{thread_id}")
def remove_thread(
    thread_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"thread": forum_threads.remove_thread(db, messenger, thread_id, user)})
