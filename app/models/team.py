from sqlalchemy import Column, String, Boolean
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid


class Team(Base, TimestampMixin, AccessControlled):
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    team_name = Column(String(64), unique=True, nullable=False)
    short_name = Column(String(16), unique=True, nullable=False)
    is_verified = Column(Boolean, default=True, nullable=False)
    is_protected = Column(Boolean, default=False, nullable=False)

    @property
    def member_ids(self) -> list[str]:
        return list(self.user_ids or [])
