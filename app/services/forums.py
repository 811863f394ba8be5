import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import AlreadyExists
from app.core.permissions import is_user_allowed
from app.models import Forum, ForumPost, ForumThread
from app.services import connector, manager
from app.services.messenger import EmitType, Messenger

logger = logging.getLogger(__name__)


def create_forum(
    db: Session,
    messenger: Messenger,
    user,
    *,
    title: str,
    text: Optional[list[str]] = None,
    is_personal: bool = False,
    image: Optional[dict] = None,
    owner_alias_id: Optional[str] = None,
    visibility: int = 0,
    is_public: bool = False,
) -> Forum:
    is_user_allowed("CreateForum", user)
    manager.check_alias(user, owner_alias_id)
    if connector.find_object(db, Forum, Forum.title == title):
        raise AlreadyExists(f"Forum {title} already exists")
    forum = connector.save_object(
        db,
        Forum(
            title=title,
            text=text or [],
            is_personal=is_personal,
            image=image,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=visibility,
            is_public=is_public,
        ),
    )
    manager.emit_created(messenger, EmitType.FORUM, "forum", forum)
    return forum


def get_forum(db: Session, forum_id: str, user) -> dict:
    is_user_allowed("GetForum", user)
    forum, access = manager.get_object_by_id(db, Forum, forum_id, user)
    return manager.present(forum, access)


def get_forums(db: Session, user) -> list[dict]:
    is_user_allowed("GetForum", user)
    return manager.present_many(connector.get_objects(db, Forum, order_by=Forum.title), user)


def update_forum(db: Session, messenger: Messenger, forum_id: str, user, updates: dict) -> Forum:
    is_user_allowed("UpdateForum", user)
    allowed = {
        key: value
        for key, value in updates.items()
        if key in {"title", "text", "image", "is_personal", "owner_alias_id", "custom_last_updated", "custom_time_created"}
    }
    if "title" in allowed:
        existing = connector.find_object(db, Forum, Forum.title == allowed["title"])
        if existing is not None and existing.id != forum_id:
            raise AlreadyExists(f"Forum {allowed['title']} already exists")
    return manager.update_object(db, messenger, Forum, forum_id, allowed, user, event=EmitType.FORUM, key="forum")


def update_forum_access(db: Session, messenger: Messenger, forum_id: str, user, **kwargs) -> Forum:
    is_user_allowed("UpdateForum", user)
    return manager.update_access(db, messenger, Forum, forum_id, user, event=EmitType.FORUM, key="forum", **kwargs)


def touch_forum(db: Session, forum: Forum) -> None:
    connector.update_object(db, forum, {})


def remove_forum(db: Session, messenger: Messenger, forum_id: str, user) -> dict:
    """Remove the forum with its threads and their posts."""
    is_user_allowed("RemoveForum", user)
    manager.get_with_full_access(db, Forum, forum_id, user)
    thread_ids = [thread.id for thread in connector.get_objects(db, ForumThread, ForumThread.forum_id == forum_id)]
    if thread_ids:
        connector.remove_objects(db, ForumPost, ForumPost.thread_id.in_(thread_ids))
        connector.remove_objects(db, ForumThread, ForumThread.id.in_(thread_ids))
    logger.info("Forum %s removed with %s thread(s)", forum_id, len(thread_ids))
    return manager.remove_object(db, messenger, Forum, forum_id, user, event=EmitType.FORUM, key="forum")
