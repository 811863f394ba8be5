from typing import Optional

from sqlalchemy.orm import Session

from app.core.permissions import is_user_allowed
from app.models import Forum, ForumPost, ForumThread
from app.services import connector, forums, manager
from app.services.messenger import EmitType, Messenger


def create_thread(
    db: Session,
    messenger: Messenger,
    user,
    *,
    forum_id: str,
    title: str,
    text: Optional[list[str]] = None,
    owner_alias_id: Optional[str] = None,
    visibility: int = 0,
    is_public: bool = False,
) -> ForumThread:
    is_user_allowed("CreateForumThread", user)
    manager.check_alias(user, owner_alias_id)
    forum, _ = manager.get_object_by_id(db, Forum, forum_id, user, needs_access=True)
    thread = connector.save_object(
        db,
        ForumThread(
            forum_id=forum.id,
            title=title,
            text=text or [],
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=visibility,
            is_public=is_public,
            # Readers of the forum can read its threads.
            user_ids=list(forum.user_ids or []),
            team_ids=list(forum.team_ids or []),
        ),
    )
    forums.touch_forum(db, forum)
    manager.emit_created(messenger, EmitType.FORUMTHREAD, "thread", thread)
    return thread


def get_thread(db: Session, thread_id: str, user) -> dict:
    is_user_allowed("GetForumThread", user)
    thread, access = manager.get_object_by_id(db, ForumThread, thread_id, user)
    manager.get_object_by_id(db, Forum, thread.forum_id, user, needs_access=True)
    return manager.present(thread, access)


def get_threads_by_forum(db: Session, forum_id: str, user) -> list[dict]:
    """Threads are only listed for users with access to the forum itself."""
    is_user_allowed("GetForumThread", user)
    manager.get_object_by_id(db, Forum, forum_id, user, needs_access=True)
    threads = connector.get_objects(db, ForumThread, ForumThread.forum_id == forum_id, order_by=ForumThread.updated_at)
    return manager.present_many(threads, user, full_access_only=False)


def get_threads_by_user(db: Session, user) -> list[dict]:
    is_user_allowed("GetForumThread", user)
    threads = connector.get_objects(db, ForumThread, order_by=ForumThread.updated_at)
    return manager.present_many(threads, user)


def update_thread(db: Session, messenger: Messenger, thread_id: str, user, updates: dict) -> ForumThread:
    is_user_allowed("UpdateForumThread", user)
    allowed = {
        key: value
        for key, value in updates.items()
        if key in {"title", "text", "owner_alias_id", "custom_last_updated", "custom_time_created", "likes", "dislikes"}
    }
    return manager.update_object(
        db, messenger, ForumThread, thread_id, allowed, user, event=EmitType.FORUMTHREAD, key="thread"
    )


def update_thread_access(db: Session, messenger: Messenger, thread_id: str, user, **kwargs) -> ForumThread:
    is_user_allowed("UpdateForumThread", user)
    return manager.update_access(
        db, messenger, ForumThread, thread_id, user, event=EmitType.FORUMTHREAD, key="thread", **kwargs
    )


def touch_thread(db: Session, thread: ForumThread) -> None:
    connector.update_object(db, thread, {})


def remove_thread(db: Session, messenger: Messenger, thread_id: str, user) -> dict:
    is_user_allowed("RemoveForumThread", user)
    manager.get_with_full_access(db, ForumThread, thread_id, user)
    connector.remove_objects(db, ForumPost, ForumPost.thread_id == thread_id)
    return manager.remove_object(db, messenger, ForumThread, thread_id, user, event=EmitType.FORUMTHREAD, key="thread")
