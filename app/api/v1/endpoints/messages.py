from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.room import MessageCreate, MessageUpdate, WhisperCreate
from app.services import messages
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def send_message(
    payload: DataRequest[MessageCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    message = messages.send_chat_message(db, messenger, user, **payload.data.model_dump())
    return envelope({"message": message.to_dict()})


@router.post("/whispers")
def send_whisper(
    payload: DataRequest[WhisperCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    message = messages.send_whisper(db, messenger, user, **payload.data.model_dump())
    return envelope({"message": message.to_dict()})


@router.put("/{message_id}")
def update_message(
    message_id: str,
    payload: DataRequest[MessageUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    message = messages.update_message(db, messenger, message_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"message": message.to_dict()})


@router.delete("/{message_id}")
def remove_message(
    message_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"message": messages.remove_message(db, messenger, message_id, user)})
