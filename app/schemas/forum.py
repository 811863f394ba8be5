from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class ForumCreate(CamelModel):
    title: str
    text: Optional[list[str]] = None
    is_personal: bool = False
    image: Optional[dict] = None
    owner_alias_id: Optional[str] = None
    visibility: int = 0
    is_public: bool = False


class ForumUpdate(CamelModel):
    title: Optional[str] = None
    text: Optional[list[str]] = None
    image: Optional[dict] = None
    owner_alias_id: Optional[str] = None
    custom_time_created: Optional[datetime] = None
    custom_last_updated: Optional[datetime] = None


class ThreadCreate(CamelModel):
    forum_id: str
    title: str
    text: Optional[list[str]] = None
    owner_alias_id: Optional[str] = None
    visibility: int = 0
    is_public: bool = False


class ThreadUpdate(CamelModel):
    title: Optional[str] = None
    text: Optional[list[str]] = None
    owner_alias_id: Optional[str] = None
    likes: Optional[int] = None
    dislikes: Optional[int] = None
    custom_time_created: Optional[datetime] = None
    custom_last_updated: Optional[datetime] = None


class PostCreate(CamelModel):
    thread_id: str
    text: list[str]
    parent_post_id: Optional[str] = None
    owner_alias_id: Optional[str] = None
    visibility: int = 0


class PostUpdate(CamelModel):
    text: Optional[list[str]] = None
    owner_alias_id: Optional[str] = None
    likes: Optional[int] = None
    dislikes: Optional[int] = None
    custom_time_created: Optional[datetime] = None
    custom_last_updated: Optional[datetime] = None
