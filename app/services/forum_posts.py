from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import InvalidData
from app.core.permissions import is_user_allowed
from app.models import ForumPost, ForumThread
from app.services import connector, forum_threads, manager
from app.services.messenger import EmitType, Messenger


def create_post(
    db: Session,
    messenger: Messenger,
    user,
    *,
    thread_id: str,
    text: list[str],
    parent_post_id: Optional[str] = None,
    owner_alias_id: Optional[str] = None,
    visibility: int = 0,
) -> ForumPost:
    is_user_allowed("CreateForumPost", user)
    manager.check_alias(user, owner_alias_id)
    thread, _ = manager.get_object_by_id(db, ForumThread, thread_id, user, needs_access=True)

    depth = 0
    if parent_post_id:
        parent = connector.get_object(db, ForumPost, parent_post_id)
        if parent.thread_id != thread.id:
            raise InvalidData("Parent post belongs to another thread")
        depth = parent.depth + 1

    post = connector.save_object(
        db,
        ForumPost(
            thread_id=thread.id,
            parent_post_id=parent_post_id,
            text=text,
            depth=depth,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=visibility,
            user_ids=list(thread.user_ids or []),
            team_ids=list(thread.team_ids or []),
            is_public=thread.is_public,
        ),
    )
    forum_threads.touch_thread(db, thread)
    manager.emit_created(messenger, EmitType.FORUMPOST, "post", post)
    return post


def get_post(db: Session, post_id: str, user) -> dict:
    is_user_allowed("GetForumPost", user)
    post, access = manager.get_object_by_id(db, ForumPost, post_id, user)
    return manager.present(post, access)


def get_posts_by_thread(db: Session, thread_id: str, user) -> list[dict]:
    is_user_allowed("GetForumPost", user)
    manager.get_object_by_id(db, ForumThread, thread_id, user, needs_access=True)
    posts = connector.get_objects(db, ForumPost, ForumPost.thread_id == thread_id, order_by=ForumPost.created_at)
    return manager.present_many(posts, user, full_access_only=False)


def update_post(db: Session, messenger: Messenger, post_id: str, user, updates: dict) -> ForumPost:
    is_user_allowed("UpdateForumPost", user)
    allowed = {
        key: value
        for key, value in updates.items()
        if key in {"text", "owner_alias_id", "custom_last_updated", "custom_time_created", "likes", "dislikes"}
    }
    return manager.update_object(db, messenger, ForumPost, post_id, allowed, user, event=EmitType.FORUMPOST, key="post")


def remove_post(db: Session, messenger: Messenger, post_id: str, user) -> dict:
    is_user_allowed("RemoveForumPost", user)
    return manager.remove_object(db, messenger, ForumPost, post_id, user, event=EmitType.FORUMPOST, key="post")
