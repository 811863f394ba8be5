from sqlalchemy import Column, String, Boolean, JSON
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class Room(Base, TimestampMixin, AccessControlled):
    __tablename__ = "rooms"
    __hidden_fields__ = ("password",)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    room_name = Column(String(255), unique=True, nullable=False)
    room_name_lower_case = Column(String(255), unique=True, nullable=False, index=True)
    # bcrypt hash; null for open rooms.
    password = Column(String(255), nullable=True)
    participant_ids = Column(JSON, default=_empty_list, nullable=False)
    followers = Column(JSON, default=_empty_list, nullable=False)
    name_is_locked = Column(Boolean, default=False, nullable=False)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    is_whisper = Column(Boolean, default=False, nullable=False)
    is_system_room = Column(Boolean, default=False, nullable=False)
    is_user = Column(Boolean, default=False, nullable=False)
    is_team = Column(Boolean, default=False, nullable=False)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["hasPassword"] = bool(self.password)
        return data
