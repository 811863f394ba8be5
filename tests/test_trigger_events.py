from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import InvalidData
from app.models import TriggerEvent, User
from app.services import trigger_events
from app.services.messenger import Messenger


def _now():
    return datetime.now(timezone.utc)


def _event(db, make_user, **values):
    user = make_user("gm")
    base = {"event_type": "chatMsg", "change_type": "create", "content": {"text": ["The lantern flickers"]}}
    base.update(values)
    return trigger_events.create_trigger_event(db, Messenger(), user, base)


def test_normalize_rejects_unknown_event_type():
    with pytest.raises(InvalidData):
        trigger_events.normalize_event({"event_type": "smoke", "change_type": "create"})


def test_proximity_needs_coordinates():
    with pytest.raises(InvalidData):
        trigger_events.normalize_event({"event_type": "chatMsg", "change_type": "create", "trigger_type": "proximity"})


def test_recurring_defaults():
    values = trigger_events.normalize_event({"event_type": "chatMsg", "change_type": "create", "is_recurring": True})
    assert values["single_use"] is False
    assert values["iterations"] == trigger_events.DEFAULT_RECURRING_ITERATIONS
    assert values["trigger_type"] == "manual"
    assert values["start_time"] is not None


def test_create_requires_content(db, make_user):
    with pytest.raises(InvalidData):
        trigger_events.create_trigger_event(db, Messenger(), make_user("gm"), {"event_type": "chatMsg", "change_type": "create"})


def test_manual_run_fires_and_removes_single_use(db, make_user):
    event = _event(db, make_user)
    messenger = Messenger()
    result = trigger_events.run_trigger_event(db, messenger, event.id, db.get(User, event.owner_id))
    assert result is None

    fired = [emission for emission in messenger.outbox if emission.event == "chatMsg"]
    assert fired[0].data["data"]["chatMsg"] == {"text": ["The lantern flickers"]}
    assert db.query(TriggerEvent).count() == 0


def test_timed_event_waits_for_start(db, make_user):
    _event(db, make_user, trigger_type="timed", start_time=_now() + timedelta(minutes=5))
    assert trigger_events.run_timed_events(db, Messenger()) == 0
    assert db.query(TriggerEvent).count() == 1


def test_timed_event_fires_once(db, make_user):
    _event(db, make_user, trigger_type="timed", start_time=_now() - timedelta(seconds=5))
    messenger = Messenger()
    assert trigger_events.run_timed_events(db, messenger) == 1
    assert db.query(TriggerEvent).count() == 0
    assert "chatMsg" in [emission.event for emission in messenger.outbox]


def test_expired_event_is_removed_without_firing(db, make_user):
    _event(
        db,
        make_user,
        trigger_type="timed",
        start_time=_now() - timedelta(hours=2),
        termination_time=_now() - timedelta(hours=1),
    )
    messenger = Messenger()
    assert trigger_events.run_timed_events(db, messenger) == 0
    assert db.query(TriggerEvent).count() == 0
    assert "chatMsg" not in [emission.event for emission in messenger.outbox]


def test_recurring_event_counts_down(db, make_user):
    event = _event(
        db,
        make_user,
        trigger_type="timed",
        is_recurring=True,
        duration=60,
        start_time=_now() - timedelta(minutes=5),
    )
    assert trigger_events.run_timed_events(db, Messenger()) == 1
    db.refresh(event)
    assert event.iterations == 1

    # Restarted just now, the next run waits for the duration.
    assert trigger_events.run_timed_events(db, Messenger()) == 0
    assert trigger_events.run_timed_events(db, Messenger(), now=_now() + timedelta(minutes=2)) == 1
    db.refresh(event)
    assert event.iterations == 0


def test_trigger_event_endpoints(client, make_user, auth_headers):
    user = make_user("gm")
    body = {"data": {"eventType": "whisper", "changeType": "create", "content": {"text": ["psst"]}}}
    res = client.post("/api/v1/triggerEvents", json=body, headers=auth_headers(user))
    assert res.status_code == 200
    event = res.json()["data"]["triggerEvent"]
    assert event["triggerType"] == "manual"

    other = make_user("other")
    assert client.get(f"/api/v1/triggerEvents/{event['id']}", headers=auth_headers(other)).status_code == 401
    res = client.post(f"/api/v1/triggerEvents/{event['id']}/run", headers=auth_headers(user))
    assert res.status_code == 200


def test_scheduled_proximity_event_runs_on_timer(db, make_user):
    coordinates = {"latitude": 59.33, "longitude": 18.06, "radius": 50}
    _event(db, make_user, trigger_type="proximity", coordinates=coordinates, start_time=_now() - timedelta(seconds=5))
    messenger = Messenger()
    assert trigger_events.run_timed_events(db, messenger) == 1
    assert db.query(TriggerEvent).count() == 0
    assert "chatMsg" in [emission.event for emission in messenger.outbox]


def test_unscheduled_proximity_event_is_left_alone(db, make_user):
    coordinates = {"latitude": 59.33, "longitude": 18.06, "radius": 50}
    _event(db, make_user, trigger_type="proximity", coordinates=coordinates)
    assert trigger_events.run_timed_events(db, Messenger()) == 0
    assert db.query(TriggerEvent).count() == 1
