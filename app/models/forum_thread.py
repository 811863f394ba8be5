from sqlalchemy import Column, Integer, String, JSON, ForeignKey, Index
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class ForumThread(Base, TimestampMixin, AccessControlled):
    __tablename__ = "forum_threads"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    forum_id = Column(String(36), ForeignKey("forums.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    text = Column(JSON, default=_empty_list, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    dislikes = Column(Integer, default=0, nullable=False)
    images = Column(JSON, default=_empty_list, nullable=False)


Index("ix_forum_threads_forum_id", ForumThread.forum_id)
