from sqlalchemy import Column, Integer, String, Boolean, JSON
from app.core.database import Base
from app.models.base import SerializerMixin, TimestampMixin, generate_uuid, _empty_list


class LanternHack(Base, TimestampMixin, SerializerMixin):
    """A user's open (or finished) attempt at a station. One per user."""

    __tablename__ = "lantern_hacks"
    __hidden_fields__ = ("game_users",)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    owner_id = Column(String(36), unique=True, nullable=False, index=True)
    station_id = Column(Integer, nullable=False)
    tries_left = Column(Integer, default=3, nullable=False)
    done = Column(Boolean, default=False, nullable=False)
    was_successful = Column(Boolean, nullable=True)
    # [{userName, password, isCorrect, passwordHint: {index, character}}]
    game_users = Column(JSON, default=_empty_list, nullable=False)


class GameUser(Base, TimestampMixin, SerializerMixin):
    __tablename__ = "game_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_name = Column(String(64), unique=True, nullable=False)
    # Null means the user can show up at any station.
    station_id = Column(Integer, nullable=True, index=True)
    passwords = Column(JSON, default=_empty_list, nullable=False)


class FakePassword(Base, TimestampMixin, SerializerMixin):
    __tablename__ = "fake_passwords"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    password = Column(String(64), unique=True, nullable=False)
