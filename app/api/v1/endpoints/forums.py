from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import AccessUpdate, DataRequest, envelope
from app.schemas.forum import ForumCreate, ForumUpdate
from app.services import forum_threads, forums
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_forum(
    payload: DataRequest[ForumCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    forum = forums.create_forum(db, messenger, user, **payload.data.model_dump())
    return envelope({"forum": forum.to_dict()})


@router.get("")
def list_forums(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"forums": forums.get_forums(db, user)})


@router.get("/{forum_id}")
def get_forum(forum_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"forum": forums.get_forum(db, forum_id, user)})


@router.get("/{forum_id}/threads")
def list_forum_threads(forum_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"threads": forum_threads.get_threads_by_forum(db, forum_id, user)})


@router.put("/{forum_id}")
def update_forum(
    forum_id: str,
    payload: DataRequest[ForumUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    forum = forums.update_forum(db, messenger, forum_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"forum": forum.to_dict()})


@router.put("/{forum_id}/access")
def update_forum_access(
    forum_id: str,
    payload: DataRequest[AccessUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    forum = forums.update_forum_access(db, messenger, forum_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"forum": forum.to_dict()})


@router.delete("/{forum_id}")
def remove_forum(
    forum_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"forum": forums.remove_forum(db, messenger, forum_id, user)})
