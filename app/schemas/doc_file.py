from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class DocFileCreate(CamelModel):
    title: str
    text: list[str]
    code: Optional[str] = None
    video_codes: Optional[list[str]] = None
    images: Optional[list[dict]] = None
    owner_alias_id: Optional[str] = None
    visibility: int = 0
    access_level: int = 0
    is_public: bool = False


class DocFileUpdate(CamelModel):
    title: Optional[str] = None
    text: Optional[list[str]] = None
    code: Optional[str] = None
    video_codes: Optional[list[str]] = None
    images: Optional[list[dict]] = None
    owner_alias_id: Optional[str] = None
    custom_time_created: Optional[datetime] = None
    custom_last_updated: Optional[datetime] = None


class DocFileUnlock(CamelModel):
    code: str
    alias_id: Optional[str] = None
