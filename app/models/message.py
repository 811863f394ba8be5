import enum

from sqlalchemy import Column, String, JSON
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class MessageType(str, enum.Enum):
    CHAT = "chat"
    WHISPER = "whisper"


class Message(Base, TimestampMixin, AccessControlled):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    room_id = Column(String(36), nullable=False, index=True)
    message_type = Column(String(16), default=MessageType.CHAT.value, nullable=False)
    text = Column(JSON, default=_empty_list, nullable=False)
    image = Column(JSON, nullable=True)
