import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from sqlalchemy.sql import func

# Stable id of the pseudo wallet that pays out rewards.
SYSTEM_WALLET_ID = "SYSTEM"

_RENAMED = {
    "created_at": "timeCreated",
    "updated_at": "lastUpdated",
}


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _empty_list() -> list:
    return []


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), default=utcnow, onupdate=utcnow, nullable=False)


class SerializerMixin:
    __hidden_fields__: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        out = {}
        for column in self.__table__.columns:
            if column.key in self.__hidden_fields__:
                continue
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, list):
                value = list(value)
            out[_RENAMED.get(column.key, to_camel(column.key))] = value
        return out


class AccessControlled(SerializerMixin):
    """Ownership, allow-lists and visibility shared by every access-checked entity."""

    owner_id = Column(String(36), nullable=True, index=True)
    owner_alias_id = Column(String(36), nullable=True)
    team_id = Column(String(36), nullable=True)
    custom_time_created = Column(DateTime(timezone=True), nullable=True)
    custom_last_updated = Column(DateTime(timezone=True), nullable=True)
    visibility = Column(Integer, default=0, nullable=False)
    access_level = Column(Integer, default=0, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    user_ids = Column(JSON, default=_empty_list, nullable=False)
    team_ids = Column(JSON, default=_empty_list, nullable=False)
    user_admin_ids = Column(JSON, default=_empty_list, nullable=False)
    team_admin_ids = Column(JSON, default=_empty_list, nullable=False)
    banned_ids = Column(JSON, default=_empty_list, nullable=False)
