from sqlalchemy import Column, Integer, String, JSON, ForeignKey, Index
from app.core.database import Base
from app.models.base import AccessControlled, TimestampMixin, generate_uuid, _empty_list


class ForumPost(Base, TimestampMixin, AccessControlled):
    __tablename__ = "forum_posts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    thread_id = Column(String(36), ForeignKey("forum_threads.id", ondelete="CASCADE"), nullable=False)
    parent_post_id = Column(String(36), nullable=True)
    text = Column(JSON, default=_empty_list, nullable=False)
    depth = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    dislikes = Column(Integer, default=0, nullable=False)
    images = Column(JSON, default=_empty_list, nullable=False)


Index("ix_forum_posts_thread_id", ForumPost.thread_id)
