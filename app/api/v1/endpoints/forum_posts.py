from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.forum import PostCreate, PostUpdate
from app.services import forum_posts
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_post(
    payload: DataRequest[PostCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    post = forum_posts.create_post(db, messenger, user, **payload.data.model_dump())
    return envelope({"post": post.to_dict()})


@router.get("/{post_id}")
def get_post(post_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"post": forum_posts.get_post(db, post_id, user)})


@router.put("/{post_id}")
def update_post(
    post_id: str,
    payload: DataRequest[PostUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    post = forum_posts.update_post(db, messenger, post_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"post": post.to_dict()})


@router.delete("/{post_id}")
def remove_post(
    post_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"post": forum_posts.remove_post(db, messenger, post_id, user)})
