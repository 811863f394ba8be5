from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.access import has_access_to, strip_object
from app.core.config import get_settings
from app.core.errors import InvalidData, NotAllowed
from app.core.permissions import AccessLevel, is_user_allowed
from app.models import Message, MessageType
from app.services import connector, manager, rooms
from app.services.messenger import ChangeType, EmitType, Messenger

_EDITABLE = {"text", "image", "owner_alias_id", "custom_time_created", "custom_last_updated"}


def _emit_type(message: Message) -> EmitType:
    return EmitType.WHISPER if message.message_type == MessageType.WHISPER.value else EmitType.CHATMSG


def check_text(text: Optional[list[str]], image: Optional[dict] = None) -> list[str]:
    """Messages need text within the length limit unless they carry an image."""
    text = [line for line in (text or []) if line is not None]
    length = len("".join(text))
    if not image and (length <= 0 or length > get_settings().message_max_length):
        raise InvalidData(f"Message text must be 1-{get_settings().message_max_length} characters")
    return text


def _store(db: Session, messenger: Messenger, message: Message) -> Message:
    message = connector.save_object(db, message)
    messenger.emit_change(_emit_type(message), "message", strip_object(message.to_dict()), ChangeType.CREATE, room=message.room_id)
    return message


def send_chat_message(
    db: Session,
    messenger: Messenger,
    user,
    *,
    room_id: str,
    text: Optional[list[str]] = None,
    image: Optional[dict] = None,
    owner_alias_id: Optional[str] = None,
) -> Message:
    is_user_allowed("SendMessage", user)
    text = check_text(text, image)
    manager.check_alias(user, owner_alias_id)
    rooms.load_room(db, room_id, user, needs_access=True)
    return _store(
        db,
        messenger,
        Message(
            room_id=room_id,
            message_type=MessageType.CHAT.value,
            text=text,
            image=image,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
        ),
    )


def send_whisper(
    db: Session,
    messenger: Messenger,
    user,
    *,
    participant_ids: list[str],
    text: Optional[list[str]] = None,
    image: Optional[dict] = None,
) -> Message:
    """Whisper to another user or alias; the private room is created on first use."""
    is_user_allowed("SendWhisper", user)
    text = check_text(text, image)
    room = rooms.get_or_create_whisper_room(db, messenger, user, participant_ids)
    alias_ids = getattr(user, "alias_ids", None) or []
    owner_alias_id = next((participant for participant in participant_ids if participant in alias_ids), None)
    return _store(
        db,
        messenger,
        Message(
            room_id=room.id,
            message_type=MessageType.WHISPER.value,
            text=text,
            image=image,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=room.visibility,
        ),
    )


def get_messages_by_room(db: Session, room_id: str, user) -> list[dict]:
    """History of a followed room, oldest first. Admins may read any room."""
    is_user_allowed("GetHistory", user)
    if user.access_level < AccessLevel.ADMIN and room_id not in (getattr(user, "followed_rooms", None) or []):
        raise NotAllowed(f"Follow room {room_id} to read its messages")
    rooms.load_room(db, room_id, user, needs_access=True)
    out = []
    for message in connector.get_objects(db, Message, Message.room_id == room_id, order_by=Message.created_at):
        data = message.to_dict()
        out.append(data if has_access_to(message, user).has_full_access else strip_object(data))
    return out


def update_message(db: Session, messenger: Messenger, message_id: str, user, updates: dict[str, Any]) -> Message:
    is_user_allowed("UpdateMessage", user)
    allowed = {key: value for key, value in updates.items() if key in _EDITABLE}
    current = connector.get_object(db, Message, message_id)
    if "text" in allowed:
        allowed["text"] = check_text(allowed["text"], allowed.get("image") or current.image)
    return manager.update_object(
        db, messenger, Message, message_id, allowed, user, event=_emit_type(current), key="message", room=current.room_id
    )


def remove_message(db: Session, messenger: Messenger, message_id: str, user) -> dict:
    is_user_allowed("RemoveMessage", user)
    current = connector.get_object(db, Message, message_id)
    return manager.remove_object(
        db, messenger, Message, message_id, user, event=_emit_type(current), key="message", room=current.room_id
    )
