from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class StationIn(CamelModel):
    station_id: Optional[int] = None
    station_name: Optional[str] = None
    signal_value: Optional[int] = None
    is_active: Optional[bool] = None
    owner: Optional[int] = None
    is_under_attack: Optional[bool] = None
    calibration_reward: Optional[int] = None


class SignalUpdate(CamelModel):
    boosting: bool


class LanternTeamIn(CamelModel):
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    short_name: Optional[str] = None
    points: Optional[int] = None
    is_active: Optional[bool] = None
    reset_points: bool = False


class RoundUpdate(CamelModel):
    is_active: Optional[bool] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class CalibrationRequest(CamelModel):
    station_id: Optional[int] = None


class HackAttempt(CamelModel):
    password: str
    boosting: bool


class GameUserIn(CamelModel):
    user_name: str
    station_id: Optional[int] = None
    passwords: list[str]


class GameUsersCreate(CamelModel):
    game_users: list[GameUserIn]


class FakePasswordsIn(CamelModel):
    passwords: list[str]
