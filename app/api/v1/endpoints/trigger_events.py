from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.trigger_event import TriggerEventIn
from app.services import trigger_events
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_trigger_event(
    payload: DataRequest[TriggerEventIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    event = trigger_events.create_trigger_event(db, messenger, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"triggerEvent": event.to_dict()})


@router.get("")
def list_trigger_events(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"triggerEvents": trigger_events.get_trigger_events(db, user)})


@router.get("/{event_id}")
def get_trigger_event(event_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"triggerEvent": trigger_events.get_trigger_event(db, event_id, user)})


@router.put("/{event_id}")
def update_trigger_event(
    event_id: str,
    payload: DataRequest[TriggerEventIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    event = trigger_events.update_trigger_event(db, messenger, event_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"triggerEvent": event.to_dict()})


@router.post("/{event_id}/run")
def run_trigger_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"triggerEvent": trigger_events.run_trigger_event(db, messenger, event_id, user)})


@router.delete("/{event_id}")
def remove_trigger_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"triggerEvent": trigger_events.remove_trigger_event(db, messenger, event_id, user)})
