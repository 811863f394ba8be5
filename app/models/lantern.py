from sqlalchemy import Column, Integer, String, Boolean, DateTime
from app.core.database import Base
from app.models.base import SerializerMixin, TimestampMixin, generate_uuid


class LanternStation(Base, TimestampMixin, SerializerMixin):
    __tablename__ = "lantern_stations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    station_id = Column(Integer, unique=True, nullable=False)
    station_name = Column(String(64), nullable=False)
    signal_value = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)
    # Lantern team id that currently holds the station.
    owner = Column(Integer, nullable=True)
    is_under_attack = Column(Boolean, default=False, nullable=False)
    calibration_reward = Column(Integer, nullable=True)


class LanternTeam(Base, TimestampMixin, SerializerMixin):
    __tablename__ = "lantern_teams"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    team_id = Column(Integer, unique=True, nullable=False)
    team_name = Column(String(64), unique=True, nullable=False)
    short_name = Column(String(16), unique=True, nullable=False)
    points = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)


class LanternRound(Base, TimestampMixin, SerializerMixin):
    __tablename__ = "lantern_rounds"

    id = Column(Integer, primary_key=True)
    is_active = Column(Boolean, default=False, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
