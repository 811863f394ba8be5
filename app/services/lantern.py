"""Lantern hacking: stations, lantern teams, the global round and signal maths."""

from datetime import datetime, timezone
import logging
import math
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import AlreadyExists, External, InvalidData
from app.core.permissions import is_user_allowed
from app.models import LanternRound, LanternStation, LanternTeam
from app.services import connector
from app.services.hacking_api import HackingApiClient, get_hacking_client
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)

ROUND_ID = 1

_STATION_FIELDS = {"station_name", "signal_value", "is_active", "owner", "is_under_attack", "calibration_reward"}
_TEAM_FIELDS = {"team_name", "short_name", "points", "is_active"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Round


def get_round(db: Session) -> LanternRound:
    lantern_round = connector.find_object(db, LanternRound, LanternRound.id == ROUND_ID)
    if lantern_round is None:
        lantern_round = connector.save_object(db, LanternRound(id=ROUND_ID, is_active=False))
    return lantern_round


def time_left(lantern_round: LanternRound, now: Optional[datetime] = None) -> Optional[int]:
    """Seconds until the round ends (active) or starts (inactive)."""
    target = _as_utc(lantern_round.end_time if lantern_round.is_active else lantern_round.start_time)
    if target is None:
        return None
    return int((target - (now or _utcnow())).total_seconds())


def get_lantern_round(db: Session, user) -> dict:
    is_user_allowed("GetLanternRound", user)
    lantern_round = get_round(db)
    return {"round": lantern_round.to_dict(), "timeLeft": time_left(lantern_round)}


def update_lantern_round(
    db: Session,
    messenger: Messenger,
    user,
    *,
    is_active: Optional[bool] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
) -> LanternRound:
    is_user_allowed("UpdateLanternRound", user)
    current = get_round(db)
    was_active = current.is_active
    updates: dict[str, Any] = {}
    if is_active is not None:
        updates["is_active"] = is_active
    if start_time is not None:
        updates["start_time"] = start_time
    if end_time is not None:
        updates["end_time"] = end_time
    lantern_round = connector.update_object(db, current, updates)

    messenger.emit(
        EmitType.LANTERNROUND,
        {"data": {"round": lantern_round.to_dict(), "timeLeft": time_left(lantern_round), "changeType": ChangeType.UPDATE.value}},
        include_sender=True,
    )
    if not lantern_round.is_active:
        reset_stations(db)
    if lantern_round.is_active != was_active:
        if lantern_round.is_active:
            messenger.broadcast("LANTERN ACTIVITY DETECTED. LANTERN ONLINE", title="ATTENTION! SIGNAL DETECTED")
        else:
            messenger.broadcast("DISCONNECTING. LANTERN OFFLINE", title="ATTENTION! SIGNAL LOST")
    logger.info("Lantern round updated active=%s", lantern_round.is_active)
    return lantern_round


# Stations


def get_station(db: Session, station_id: int) -> LanternStation:
    return connector.get_object(db, LanternStation, station_id, field="station_id")


def split_stations(stations: list[LanternStation]) -> dict[str, list[dict]]:
    return {
        "activeStations": [station.to_dict() for station in stations if station.is_active],
        "inactiveStations": [station.to_dict() for station in stations if not station.is_active],
    }


def get_lantern_stations(db: Session, user) -> dict[str, list[dict]]:
    is_user_allowed("GetLanternStations", user)
    return split_stations(connector.get_objects(db, LanternStation, order_by=LanternStation.station_id))


def get_lantern_station(db: Session, station_id: int, user) -> dict:
    is_user_allowed("GetLanternStations", user)
    return get_station(db, station_id).to_dict()


def _emit_stations(db: Session, messenger: Messenger) -> None:
    stations = connector.get_objects(db, LanternStation, order_by=LanternStation.station_id)
    messenger.emit(EmitType.LANTERNSTATIONS, {"data": {"stations": [station.to_dict() for station in stations]}}, include_sender=True)


def create_lantern_station(db: Session, messenger: Messenger, user, values: dict[str, Any]) -> LanternStation:
    is_user_allowed("CreateLanternStation", user)
    if values.get("station_id") is None or not values.get("station_name"):
        raise InvalidData("stationId and stationName are required")
    if connector.find_object(db, LanternStation, LanternStation.station_id == values["station_id"]):
        raise AlreadyExists(f"Station {values['station_id']} already exists")
    settings = get_settings()
    fields = {key: value for key, value in values.items() if key in _STATION_FIELDS}
    fields.setdefault("signal_value", settings.lantern_signal_default)
    station = connector.save_object(db, LanternStation(station_id=values["station_id"], **fields))
    _emit_stations(db, messenger)
    return station


def update_lantern_station(db: Session, messenger: Messenger, station_id: int, user, values: dict[str, Any]) -> LanternStation:
    is_user_allowed("UpdateLanternStation", user)
    station = get_station(db, station_id)
    updates = {key: value for key, value in values.items() if key in _STATION_FIELDS}
    station = connector.update_object(db, station, updates)
    _emit_stations(db, messenger)
    return station


def delete_lantern_station(db: Session, messenger: Messenger, station_id: int, user) -> dict:
    is_user_allowed("DeleteLanternStation", user)
    connector.remove_object(db, get_station(db, station_id))
    _emit_stations(db, messenger)
    return {"stationId": station_id}


def reset_stations(db: Session) -> int:
    settings = get_settings()
    stations = connector.get_objects(db, LanternStation)
    for station in stations:
        connector.update_object(db, station, {"signal_value": settings.lantern_signal_default, "is_under_attack": False})
    return len(stations)


# Signal


def next_signal_value(signal_value: int, boosting: bool, *, default: int, threshold: int, change_percentage: float, max_change: int) -> int:
    """Boost or dampen a signal; moves back toward the default use the max change."""
    difference = abs(signal_value - default)
    change = (threshold - difference) * change_percentage
    if boosting and signal_value < default:
        change = max_change
    elif not boosting and signal_value > default:
        change = max_change

    raw = signal_value + (change if boosting else -abs(change))
    value = math.ceil(raw)
    return max(default - threshold, min(default + threshold, value))


def apply_signal_change(
    db: Session,
    messenger: Messenger,
    station_id: int,
    *,
    boosting: bool,
    client: Optional[HackingApiClient] = None,
) -> LanternStation:
    """Move the station signal one step and report the new boost to the hacking API."""
    settings = get_settings()
    station = get_station(db, station_id)
    value = next_signal_value(
        station.signal_value,
        boosting,
        default=settings.lantern_signal_default,
        threshold=settings.lantern_signal_threshold,
        change_percentage=settings.lantern_change_percentage,
        max_change=settings.lantern_signal_max_change,
    )
    station = connector.update_object(db, station, {"signal_value": value})
    (client or get_hacking_client()).set_boost(station_id=station.station_id, boost=value)
    _emit_stations(db, messenger)
    return station


def update_signal_value(
    db: Session,
    messenger: Messenger,
    station_id: int,
    user,
    *,
    boosting: bool,
    client: Optional[HackingApiClient] = None,
) -> LanternStation:
    is_user_allowed("UpdateLanternSignal", user)
    return apply_signal_change(db, messenger, station_id, boosting=boosting, client=client)


def drift_stations(db: Session, messenger: Messenger, *, client: Optional[HackingApiClient] = None) -> int:
    """One reset tick: every station moves one step toward the default while the round is active."""
    if not get_round(db).is_active:
        return 0
    default = get_settings().lantern_signal_default
    client = client or get_hacking_client()
    moved = 0
    for station in connector.get_objects(db, LanternStation):
        if station.signal_value == default:
            continue
        step = -1 if station.signal_value > default else 1
        station = connector.update_object(db, station, {"signal_value": station.signal_value + step})
        moved += 1
        try:
            client.set_boost(station_id=station.station_id, boost=station.signal_value)
        except External as exc:
            logger.warning("Signal drift for station %s not reported: %s", station.station_id, exc.detail)
    if moved:
        _emit_stations(db, messenger)
    return moved


# Lantern teams


def get_lantern_teams(db: Session, user) -> list[dict]:
    is_user_allowed("GetLanternTeams", user)
    return [team.to_dict() for team in connector.get_objects(db, LanternTeam, order_by=LanternTeam.team_id)]


def _emit_teams(db: Session, messenger: Messenger) -> None:
    teams = connector.get_objects(db, LanternTeam, order_by=LanternTeam.team_id)
    messenger.emit(EmitType.LANTERNTEAMS, {"data": {"teams": [team.to_dict() for team in teams]}}, include_sender=True)


def create_lantern_team(db: Session, messenger: Messenger, user, values: dict[str, Any]) -> LanternTeam:
    is_user_allowed("CreateLanternTeam", user)
    if values.get("team_id") is None or not values.get("team_name") or not values.get("short_name"):
        raise InvalidData("teamId, teamName and shortName are required")
    duplicate = connector.find_object(
        db,
        LanternTeam,
        (LanternTeam.team_id == values["team_id"])
        | (LanternTeam.team_name == values["team_name"])
        | (LanternTeam.short_name == values["short_name"]),
    )
    if duplicate is not None:
        raise AlreadyExists(f"Lantern team {values['team_name']} already exists")
    fields = {key: value for key, value in values.items() if key in _TEAM_FIELDS}
    team = connector.save_object(db, LanternTeam(team_id=values["team_id"], **fields))
    _emit_teams(db, messenger)
    return team


def update_lantern_team(
    db: Session,
    messenger: Messenger,
    team_id: int,
    user,
    values: dict[str, Any],
    *,
    reset_points: bool = False,
) -> LanternTeam:
    is_user_allowed("UpdateLanternTeam", user)
    team = connector.get_object(db, LanternTeam, team_id, field="team_id")
    updates = {key: value for key, value in values.items() if key in _TEAM_FIELDS}
    if reset_points:
        updates["points"] = 0
    team = connector.update_object(db, team, updates)
    _emit_teams(db, messenger)
    return team


def delete_lantern_team(db: Session, messenger: Messenger, team_id: int, user) -> dict:
    is_user_allowed("DeleteLanternTeam", user)
    connector.remove_object(db, connector.get_object(db, LanternTeam, team_id, field="team_id"))
    _emit_teams(db, messenger)
    return {"teamId": team_id}


def get_lantern_info(db: Session, user) -> dict:
    is_user_allowed("GetLanternInfo", user)
    lantern_round = get_round(db)
    stations = connector.get_objects(db, LanternStation, order_by=LanternStation.station_id)
    return {
        "round": lantern_round.to_dict(),
        "timeLeft": time_left(lantern_round),
        **split_stations(stations),
        "teams": [team.to_dict() for team in connector.get_objects(db, LanternTeam, order_by=LanternTeam.team_id)],
    }
