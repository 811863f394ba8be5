from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import AccessUpdate, DataRequest, envelope
from app.schemas.room import RoomCreate, RoomFollow, RoomUpdate
from app.services import messages, rooms
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_room(
    payload: DataRequest[RoomCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    room = rooms.create_room(db, messenger, user, **payload.data.model_dump())
    return envelope({"room": room.to_dict()})


@router.get("")
def list_rooms(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"rooms": rooms.get_rooms(db, user)})


@router.get("/followed")
def list_followed_rooms(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"rooms": rooms.get_followed_rooms(db, user)})


@router.get("/{room_id}")
def get_room(room_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"room": rooms.get_room(db, room_id, user)})


@router.get("/{room_id}/messages")
def list_room_messages(room_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"messages": messages.get_messages_by_room(db, room_id, user)})


@router.put("/{room_id}")
def update_room(
    room_id: str,
    payload: DataRequest[RoomUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    room = rooms.update_room(db, messenger, room_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"room": room.to_dict()})


@router.put("/{room_id}/access")
def update_room_access(
    room_id: str,
    payload: DataRequest[AccessUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    room = rooms.update_room_access(db, messenger, room_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"room": room.to_dict()})


@router.post("/{room_id}/follow")
def follow_room(
    room_id: str,
    payload: Optional[DataRequest[RoomFollow]] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    body = payload.data if payload else RoomFollow()
    return envelope(rooms.follow_room(db, messenger, room_id, user, password=body.password, alias_id=body.alias_id))


@router.post("/{room_id}/unfollow")
def unfollow_room(
    room_id: str,
    payload: Optional[DataRequest[RoomFollow]] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    alias_id = payload.data.alias_id if payload else None
    return envelope(rooms.unfollow_room(db, messenger, room_id, user, alias_id=alias_id))


@router.delete("/{room_id}")
def remove_room(
    room_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"room": rooms.remove_room(db, messenger, room_id, user)})
