from sqlalchemy import Column, String, JSON
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class DocFile(Base, TimestampMixin, AccessControlled):
    __tablename__ = "doc_files"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    # Entering the code unlocks the file for the user.
    code = Column(String(32), unique=True, nullable=False, index=True)
    title = Column(String(255), unique=True, nullable=False)
    text = Column(JSON, default=_empty_list, nullable=False)
    video_codes = Column(JSON, default=_empty_list, nullable=False)
    images = Column(JSON, default=_empty_list, nullable=False)
