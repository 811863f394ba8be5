from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import envelope
from app.services import calibration_missions
from app.services.messenger import Messenger

router = APIRouter()


@router.get("")
def list_missions(
    getInactive: bool = False,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return envelope({"missions": calibration_missions.get_calibration_missions(db, user, get_inactive=getInactive)})


@router.get("/active")
def get_active_mission(
    stationId: Optional[int] = None,
    ownerId: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    mission = calibration_missions.get_active_calibration_mission(
        db, messenger, user, owner_id=ownerId, station_id=stationId
    )
    return envelope({"mission": mission})


@router.post("/users/{owner_id}/complete")
def complete_mission(
    owner_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope(calibration_missions.complete_calibration_mission(db, messenger, owner_id, user))


@router.post("/users/{owner_id}/cancel")
def cancel_mission(
    owner_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope(calibration_missions.cancel_calibration_mission(db, messenger, owner_id, user))


@router.delete("/stations/{station_id}")
def remove_missions_by_station(station_id: int, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(calibration_missions.remove_calibration_missions_by_station(db, station_id, user))
