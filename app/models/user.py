from sqlalchemy import Column, String, Boolean, Index, DateTime, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class User(Base, TimestampMixin, AccessControlled):
    __tablename__ = "users"
    __hidden_fields__ = ("hashed_password", "verification_token", "verification_token_expires_at")

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_banned = Column(Boolean, default=False, nullable=False)
    has_full_access = Column(Boolean, default=False, nullable=False)
    part_of_teams = Column(JSON, default=_empty_list, nullable=False)
    followed_rooms = Column(JSON, default=_empty_list, nullable=False)
    verification_token = Column(String(128), nullable=True, index=True)
    verification_token_expires_at = Column(DateTime(timezone=True), nullable=True)

    aliases = relationship(
        "Alias",
        primaryjoin="User.id == foreign(Alias.owner_id)",
        viewonly=True,
        lazy="selectin",
    )

    @property
    def alias_ids(self) -> list[str]:
        return [alias.id for alias in self.aliases]


Index("ix_users_access_level_banned", User.access_level, User.is_banned)
