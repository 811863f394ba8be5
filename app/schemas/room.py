from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class RoomCreate(CamelModel):
    room_name: str
    password: Optional[str] = None
    owner_alias_id: Optional[str] = None
    is_anonymous: bool = False
    is_public: bool = True
    visibility: int = 0
    access_level: int = 0


class RoomUpdate(CamelModel):
    room_name: Optional[str] = None
    password: Optional[str] = None
    owner_alias_id: Optional[str] = None
    is_anonymous: Optional[bool] = None
    name_is_locked: Optional[bool] = None
    custom_time_created: Optional[datetime] = None
    custom_last_updated: Optional[datetime] = None


class RoomFollow(CamelModel):
    password: Optional[str] = None
    alias_id: Optional[str] = None


class MessageCreate(CamelModel):
    room_id: str
    text: Optional[list[str]] = None
    image: Optional[dict] = None
    owner_alias_id: Optional[str] = None


class WhisperCreate(CamelModel):
    participant_ids: list[str]
    text: Optional[list[str]] = None
    image: Optional[dict] = None


class MessageUpdate(CamelModel):
    text: Optional[list[str]] = None
    image: Optional[dict] = None
    owner_alias_id: Optional[str] = None
    custom_time_created: Optional[datetime] = None
    custom_last_updated: Optional[datetime] = None
