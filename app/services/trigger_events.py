import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.access import has_access_to
from app.core.errors import InvalidData
from app.core.permissions import is_user_allowed
from app.models import TriggerChangeType, TriggerEvent, TriggerEventType, TriggerType
from app.services import connector, manager
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)

DEFAULT_RECURRING_ITERATIONS = 2

_EDITABLE = {
    "event_type",
    "change_type",
    "trigger_type",
    "content",
    "start_time",
    "termination_time",
    "duration",
    "iterations",
    "is_recurring",
    "is_active",
    "should_target_single",
    "single_use",
    "coordinates",
    "owner_alias_id",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_choice(enum_type, value: Optional[str], name: str) -> Optional[str]:
    if value is None:
        return None
    try:
        return enum_type(value).value
    except ValueError as exc:
        allowed = ", ".join(item.value for item in enum_type)
        raise InvalidData(f"{name} must be one of {allowed}") from exc


def normalize_event(values: dict[str, Any]) -> dict[str, Any]:
    """Validate enum fields and fill in the defaults that depend on other fields."""
    values = dict(values)
    values["event_type"] = _check_choice(TriggerEventType, values.get("event_type"), "eventType")
    values["change_type"] = _check_choice(TriggerChangeType, values.get("change_type"), "changeType")
    values["trigger_type"] = _check_choice(TriggerType, values.get("trigger_type"), "triggerType") or TriggerType.MANUAL.value

    if values["trigger_type"] == TriggerType.PROXIMITY.value and not values.get("coordinates"):
        raise InvalidData("Proximity events need coordinates")
    if values.get("is_recurring"):
        values["single_use"] = False
        if values.get("iterations") is None:
            values["iterations"] = DEFAULT_RECURRING_ITERATIONS
    if values.get("start_time") is None and (values.get("termination_time") or values.get("is_recurring")):
        values["start_time"] = _utcnow()
    return {key: value for key, value in values.items() if value is not None}


def create_trigger_event(db: Session, messenger: Messenger, user, values: dict[str, Any]) -> TriggerEvent:
    is_user_allowed("CreateTriggerEvent", user)
    if values.get("event_type") is None or values.get("change_type") is None:
        raise InvalidData("eventType and changeType are required")
    if values.get("content") is None:
        raise InvalidData("content is required")
    manager.check_alias(user, values.get("owner_alias_id"))
    values = normalize_event({key: value for key, value in values.items() if key in _EDITABLE})
    event = connector.save_object(db, TriggerEvent(owner_id=user.id, **values))
    messenger.emit_change(EmitType.TRIGGEREVENT, "triggerEvent", event.to_dict(), ChangeType.CREATE, room=user.id)
    return event


def get_trigger_event(db: Session, event_id: str, user) -> dict:
    is_user_allowed("GetTriggerEvents", user)
    event, _ = manager.get_object_by_id(db, TriggerEvent, event_id, user, needs_access=True)
    return event.to_dict()


def get_trigger_events(db: Session, user) -> list[dict]:
    is_user_allowed("GetTriggerEvents", user)
    events = connector.get_objects(db, TriggerEvent, order_by=TriggerEvent.created_at)
    return [event.to_dict() for event in events if has_access_to(event, user).has_access]


def update_trigger_event(db: Session, messenger: Messenger, event_id: str, user, updates: dict[str, Any]) -> TriggerEvent:
    is_user_allowed("UpdateTriggerEvent", user)
    event = manager.get_with_full_access(db, TriggerEvent, event_id, user)
    merged = {key: getattr(event, key) for key in _EDITABLE}
    merged.update({key: value for key, value in updates.items() if key in _EDITABLE})
    normalized = normalize_event(merged)
    changes = {key: value for key, value in normalized.items() if key in updates or getattr(event, key) != value}
    return manager.update_object(
        db, messenger, TriggerEvent, event_id, changes, user, event=EmitType.TRIGGEREVENT, key="triggerEvent", room=user.id
    )


def remove_trigger_event(db: Session, messenger: Messenger, event_id: str, user) -> dict:
    is_user_allowed("RemoveTriggerEvent", user)
    return manager.remove_object(
        db, messenger, TriggerEvent, event_id, user, event=EmitType.TRIGGEREVENT, key="triggerEvent", room=user.id
    )


def fire(event: TriggerEvent, messenger: Messenger) -> None:
    """Deliver the event content to its targets."""
    room = event.triggered_by if event.should_target_single and event.triggered_by else None
    payload = {"data": {event.event_type: event.content, "changeType": event.change_type, "triggerEventId": event.id}}
    messenger.emit(event.event_type, payload, room=room, include_sender=True)


def run_event(db: Session, messenger: Messenger, event: TriggerEvent) -> Optional[TriggerEvent]:
    """Fire the event, then count down its iterations or remove it."""
    fire(event, messenger)
    logger.info("Trigger event %s fired (%s/%s)", event.id, event.event_type, event.change_type)

    if (event.is_recurring or event.iterations) and (event.iterations or 0) > 0:
        updates: dict[str, Any] = {"iterations": event.iterations - 1}
        if event.is_recurring:
            updates["start_time"] = _utcnow()
        event = connector.update_object(db, event, updates)
        messenger.emit_change(EmitType.TRIGGEREVENT, "triggerEvent", event.to_dict(), ChangeType.UPDATE, room=event.owner_id)
        return event

    if event.single_use or (event.iterations is not None and event.iterations <= 0):
        event_id = event.id
        connector.remove_object(db, event)
        messenger.emit_change(EmitType.TRIGGEREVENT, "triggerEvent", {"objectId": event_id}, ChangeType.REMOVE, room=event.owner_id)
        return None
    return event


def run_trigger_event(db: Session, messenger: Messenger, event_id: str, user) -> Optional[dict]:
    is_user_allowed("RunTriggerEvent", user)
    event, _ = manager.get_object_by_id(db, TriggerEvent, event_id, user, needs_access=True)
    if not event.is_active:
        raise InvalidData(f"Trigger event {event_id} is not active")
    event = run_event(db, messenger, event)
    return event.to_dict() if event is not None else None


def run_timed_events(db: Session, messenger: Messenger, now: Optional[datetime] = None) -> int:
    """One tick of the timed runner over timed and proximity events. Returns how many fired.

    Events without a start time (never scheduled) are left for manual or proximity runs.
    """
    now = now or _utcnow()
    fired = 0
    events = connector.get_objects(
        db,
        TriggerEvent,
        TriggerEvent.trigger_type.in_([TriggerType.TIMED.value, TriggerType.PROXIMITY.value]),
        TriggerEvent.is_active.is_(True),
    )
    for event in events:
        start_time = _as_utc(event.start_time)
        if start_time is None or now <= start_time:
            continue
        termination_time = _as_utc(event.termination_time)
        if termination_time and now > termination_time:
            event_id = event.id
            connector.remove_object(db, event)
            messenger.emit_change(
                EmitType.TRIGGEREVENT,
                "triggerEvent",
                {"objectId": event_id},
                ChangeType.REMOVE,
                room=event.owner_id,
            )
            continue
        next_run = start_time + timedelta(seconds=event.duration or 0)
        if event.single_use or (event.is_recurring and now > next_run):
            run_event(db, messenger, event)
            fired += 1
    return fired
