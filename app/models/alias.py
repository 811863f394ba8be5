from sqlalchemy import Column, String, Boolean
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid


class Alias(Base, TimestampMixin, AccessControlled):
    __tablename__ = "aliases"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    alias_name = Column(String(64), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    is_verified = Column(Boolean, default=True, nullable=False)
