import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Index
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid


class TriggerEventType(str, enum.Enum):
    DOCFILE = "docFile"
    CHATMSG = "chatMsg"
    WHISPER = "whisper"
    POSITION = "position"


class TriggerChangeType(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    REMOVE = "remove"


class TriggerType(str, enum.Enum):
    PROXIMITY = "proximity"
    TIMED = "timed"
    MANUAL = "manual"
    TRIGGER = "trigger"


class TriggerEvent(Base, TimestampMixin, AccessControlled):
    __tablename__ = "trigger_events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    event_type = Column(String(32), nullable=False)
    change_type = Column(String(32), nullable=False)
    trigger_type = Column(String(32), default=TriggerType.MANUAL.value, nullable=False)
    content = Column(JSON, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True)
    termination_time = Column(DateTime(timezone=True), nullable=True)
    # Seconds between runs of a recurring event.
    duration = Column(Integer, nullable=True)
    iterations = Column(Integer, nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    triggered_by = Column(String(36), nullable=True)
    should_target_single = Column(Boolean, default=False, nullable=False)
    single_use = Column(Boolean, default=True, nullable=False)
    coordinates = Column(JSON, nullable=True)


Index("ix_trigger_events_type_active", TriggerEvent.trigger_type, TriggerEvent.is_active)
