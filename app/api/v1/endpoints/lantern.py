from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.lantern import (
    FakePasswordsIn,
    GameUsersCreate,
    HackAttempt,
    LanternTeamIn,
    RoundUpdate,
    SignalUpdate,
    StationIn,
)
from app.services import lantern, lantern_hacks
from app.services.messenger import Messenger

router = APIRouter()


@router.get("/lanternInfo")
def get_lantern_info(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(lantern.get_lantern_info(db, user))


@router.get("/lanternRound")
def get_lantern_round(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(lantern.get_lantern_round(db, user))


@router.put("/lanternRound")
def update_lantern_round(
    payload: DataRequest[RoundUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    lantern_round = lantern.update_lantern_round(db, messenger, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"round": lantern_round.to_dict(), "timeLeft": lantern.time_left(lantern_round)})


@router.get("/lanternStations")
def list_stations(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(lantern.get_lantern_stations(db, user))


@router.post("/lanternStations")
def create_station(
    payload: DataRequest[StationIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    station = lantern.create_lantern_station(db, messenger, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"station": station.to_dict()})


@router.get("/lanternStations/{station_id}")
def get_station(station_id: int, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"station": lantern.get_lantern_station(db, station_id, user)})


@router.put("/lanternStations/{station_id}")
def update_station(
    station_id: int,
    payload: DataRequest[StationIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    station = lantern.update_lantern_station(db, messenger, station_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"station": station.to_dict()})


@router.put("/lanternStations/{station_id}/signal")
def update_signal(
    station_id: int,
    payload: DataRequest[SignalUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    station = lantern.update_signal_value(db, messenger, station_id, user, boosting=payload.data.boosting)
    return envelope({"station": station.to_dict()})


@router.delete("/lanternStations/{station_id}")
def delete_station(
    station_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope(lantern.delete_lantern_station(db, messenger, station_id, user))


@router.get("/lanternTeams")
def list_lantern_teams(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"teams": lantern.get_lantern_teams(db, user)})


@router.post("/lanternTeams")
def create_lantern_team(
    payload: DataRequest[LanternTeamIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    team = lantern.create_lantern_team(db, messenger, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"team": team.to_dict()})


@router.put("/lanternTeams/{team_id}")
def update_lantern_team(
    team_id: int,
    payload: DataRequest[LanternTeamIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    values = payload.data.model_dump(exclude_unset=True)
    reset_points = values.pop("reset_points", False)
    team = lantern.update_lantern_team(db, messenger, team_id, user, values, reset_points=reset_points)
    return envelope({"team": team.to_dict()})


@router.delete("/lanternTeams/{team_id}")
def delete_lantern_team(
    team_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope(lantern.delete_lantern_team(db, messenger, team_id, user))


@router.get("/lanternHacks/{station_id}")
def get_lantern_hack(station_id: int, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(lantern_hacks.get_lantern_hack(db, station_id, user))


@router.post("/lanternHacks/{station_id}/manipulate")
def manipulate_station(
    station_id: int,
    payload: DataRequest[HackAttempt],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    result = lantern_hacks.manipulate_station(
        db, messenger, station_id, user, password=payload.data.password, boosting=payload.data.boosting
    )
    return envelope(result)


@router.post("/gameUsers")
def create_game_users(
    payload: DataRequest[GameUsersCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    created = lantern_hacks.create_game_users(db, user, [item.model_dump() for item in payload.data.game_users])
    return envelope({"gameUsers": [game_user.to_dict() for game_user in created]})


@router.get("/gameUsers")
def list_game_users(
    stationId: Optional[int] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return envelope({"gameUsers": lantern_hacks.get_game_users(db, user, station_id=stationId)})


@router.post("/fakePasswords")
def add_fake_passwords(
    payload: DataRequest[FakePasswordsIn],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return envelope({"passwords": lantern_hacks.add_fake_passwords(db, user, payload.data.passwords)})


@router.get("/fakePasswords")
def list_fake_passwords(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"passwords": lantern_hacks.get_fake_passwords(db, user)})
