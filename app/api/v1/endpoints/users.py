from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.user import AccessLevelUpdate, UserUpdate
from app.services import users
from app.services.messenger import Messenger

router = APIRouter()


@router.get("")
def list_users(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"users": users.get_users(db, user)})


@router.get("/{user_id}")
def get_user(user_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"user": users.get_user(db, user_id, user)})


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: DataRequest[UserUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    updated = users.update_user(db, messenger, user_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"user": updated.to_dict()})


@router.post("/{user_id}/verify")
def verify_user(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"user": users.verify_user(db, messenger, user_id, user).to_dict()})


@router.post("/{user_id}/ban")
def ban_user(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"user": users.ban_user(db, messenger, user_id, user).to_dict()})


@router.post("/{user_id}/unban")
def unban_user(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"user": users.unban_user(db, messenger, user_id, user).to_dict()})


@router.put("/{user_id}/accessLevel")
def update_access_level(
    user_id: str,
    payload: DataRequest[AccessLevelUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    updated = users.update_access_level(db, messenger, user_id, user, payload.data.access_level)
    return envelope({"user": updated.to_dict()})
