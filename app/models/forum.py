from sqlalchemy import Column, String, Boolean, JSON
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class Forum(Base, TimestampMixin, AccessControlled):
    __tablename__ = "forums"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), unique=True, nullable=False)
    text = Column(JSON, default=_empty_list, nullable=False)
    is_personal = Column(Boolean, default=False, nullable=False)
    image = Column(JSON, nullable=True)
