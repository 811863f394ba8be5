"""Calibration missions: short hacking-game tasks that pay out to the owner's wallet."""

from datetime import datetime, timedelta, timezone
import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import DoesNotExist, External, InvalidData, NotAllowed, TooFrequent
from app.core.permissions import AccessLevel, is_user_allowed
from app.models import CalibrationMission, LanternStation, User
from app.models.base import SYSTEM_WALLET_ID
from app.services import connector, lantern, transactions
from app.services.hacking_api import HackingApiClient, get_hacking_client
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)

# Stations of the most recent finished missions that are skipped for the next one.
RECENT_STATIONS = 2


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_code() -> str:
    return f"{secrets.randbelow(10 ** 8):08d}"


def _active_filter():
    return (CalibrationMission.completed.is_(False), CalibrationMission.cancelled.is_(False))


def _resolve_owner(db: Session, user, owner_id: Optional[str]) -> User:
    """Users fetch their own mission; moderators may act on anyone's."""
    if owner_id is None or owner_id == user.id:
        return connector.get_object(db, User, user.id)
    if user.access_level < AccessLevel.MODERATOR:
        raise NotAllowed("Cannot access another user's calibration mission")
    return connector.get_object(db, User, owner_id)


def _emit(messenger: Messenger, mission: CalibrationMission, change_type: ChangeType) -> None:
    payload = {"objectId": mission.id} if change_type == ChangeType.REMOVE else mission.to_dict()
    messenger.emit_change(EmitType.CALIBRATIONMISSION, "mission", payload, change_type, room=mission.owner)


def get_active_mission(db: Session, owner_id: str) -> Optional[CalibrationMission]:
    return connector.find_object(db, CalibrationMission, CalibrationMission.owner == owner_id, *_active_filter())


def get_valid_stations(db: Session, owner_id: str) -> list[LanternStation]:
    """Stations the owner may calibrate next: all but those of their latest finished missions."""
    finished = connector.get_objects(
        db,
        CalibrationMission,
        CalibrationMission.owner == owner_id,
        CalibrationMission.completed.is_(True) | CalibrationMission.cancelled.is_(True),
        order_by=CalibrationMission.created_at.desc(),
    )
    excluded = {mission.station_id for mission in finished[:RECENT_STATIONS]}
    stations = connector.get_objects(db, LanternStation, order_by=LanternStation.station_id)
    return [station for station in stations if station.station_id not in excluded]


def get_active_calibration_mission(
    db: Session,
    messenger: Messenger,
    user,
    *,
    owner_id: Optional[str] = None,
    station_id: Optional[int] = None,
    client: Optional[HackingApiClient] = None,
) -> dict:
    """Return the owner's running mission or start a new one on a random valid station."""
    is_user_allowed("GetCalibrationMission", user)
    owner = _resolve_owner(db, user, owner_id)

    if lantern.get_round(db).is_active:
        raise InvalidData("Calibration is unavailable while the lantern round is active")

    active = get_active_mission(db, owner.id)
    if active is not None:
        return active.to_dict()

    settings = get_settings()
    latest = connector.find_object(
        db,
        CalibrationMission,
        CalibrationMission.owner == owner.id,
        CalibrationMission.created_at > _utcnow() - timedelta(minutes=settings.calibration_timeout_minutes),
    )
    if latest is not None:
        available_at = _as_utc(latest.created_at) + timedelta(minutes=settings.calibration_timeout_minutes)
        raise TooFrequent(
            "Calibration mission timeout has not passed",
            extra={"timeLeft": int((available_at - _utcnow()).total_seconds())},
        )

    if connector.find_object(db, LanternStation) is None:
        raise DoesNotExist("No lantern stations exist")
    stations = get_valid_stations(db, owner.id)
    if station_id is not None:
        stations = [station for station in stations if station.station_id == station_id]
        if not stations:
            raise InvalidData(f"Station {station_id} can not be calibrated right now")
    if not stations:
        raise DoesNotExist("No valid lantern stations")

    station = secrets.choice(stations)
    mission = connector.save_object(
        db,
        CalibrationMission(owner=owner.id, station_id=station.station_id, code=generate_code()),
    )
    try:
        (client or get_hacking_client()).set_mission(station_id=station.station_id, code=mission.code, owner=owner.username)
    except External:
        connector.remove_object(db, mission)
        raise

    logger.info("Calibration mission %s started for %s on station %s", mission.id, owner.id, station.station_id)
    _emit(messenger, mission, ChangeType.CREATE)
    return mission.to_dict()


def get_calibration_missions(db: Session, user, *, get_inactive: bool = False) -> list[dict]:
    is_user_allowed("GetCalibrationMissions", user)
    filters = () if get_inactive else _active_filter()
    missions = connector.get_objects(db, CalibrationMission, *filters, order_by=CalibrationMission.created_at)
    return [mission.to_dict() for mission in missions]


def complete_calibration_mission(db: Session, messenger: Messenger, owner_id: str, user) -> dict:
    """Mark the owner's mission completed and pay the station reward from the system wallet."""
    is_user_allowed("CompleteCalibrationMission", user)
    mission = get_active_mission(db, owner_id)
    if mission is None:
        raise DoesNotExist(f"No active calibration mission for {owner_id}")

    settings = get_settings()
    station = connector.find_object(db, LanternStation, LanternStation.station_id == mission.station_id)
    reward = settings.calibration_reward_amount
    if station is not None and station.calibration_reward:
        reward = station.calibration_reward

    transaction, _, _ = transactions.record_transaction(
        db,
        messenger,
        from_wallet_id=SYSTEM_WALLET_ID,
        to_wallet_id=owner_id,
        amount=reward,
        owner_id=user.id,
        note=f"Calibration of station {mission.station_id}",
    )
    mission = connector.update_object(db, mission, {"completed": True, "time_completed": _utcnow()})
    logger.info("Calibration mission %s completed reward=%s", mission.id, reward)
    _emit(messenger, mission, ChangeType.UPDATE)
    return {"mission": mission.to_dict(), "transaction": transaction.to_dict()}


def cancel_calibration_mission(db: Session, messenger: Messenger, owner_id: str, user) -> dict:
    is_user_allowed("CancelCalibrationMission", user)
    mission = get_active_mission(db, owner_id)
    if mission is None:
        raise DoesNotExist(f"No active calibration mission for {owner_id}")
    mission = connector.update_object(db, mission, {"cancelled": True})
    _emit(messenger, mission, ChangeType.REMOVE)
    return {"mission": mission.to_dict()}


def remove_calibration_missions_by_station(db: Session, station_id: int, user) -> dict:
    is_user_allowed("RemoveCalibrationMissions", user)
    removed = connector.remove_objects(db, CalibrationMission, CalibrationMission.station_id == station_id)
    logger.info("Removed %s calibration missions for station %s", removed, station_id)
    return {"stationId": station_id, "removed": removed}
