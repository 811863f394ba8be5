"""Fetch/list/update/remove flows shared by the entity services."""

from typing import Any, Callable, Iterable, Optional, TypeVar

from sqlalchemy.orm import Session

from app.core.access import AccessResult, has_access_to, strip_object
from app.core.errors import NotAllowed
from app.services import connector
from app.services.messenger import ChangeType, EmitType, Messenger

T = TypeVar("T")

View = Callable[[Any], dict]


def public_view(obj: Any) -> dict:
    return strip_object(obj.to_dict())


def present(obj: Any, access: AccessResult) -> dict:
    data = obj.to_dict()
    if not access.has_access:
        return strip_object(data)
    return data


def present_many(objects: Iterable[Any], user, *, full_access_only: bool = True) -> list[dict]:
    """Visible objects; stripped unless the user administers them."""
    out = []
    for obj in objects:
        access = has_access_to(obj, user)
        if not access.can_see:
            continue
        granted = access.has_full_access if full_access_only else access.has_access
        data = obj.to_dict()
        out.append(data if granted else strip_object(data))
    return out


def get_object_by_id(
    db: Session,
    model: type[T],
    object_id: Any,
    user,
    *,
    needs_access: bool = False,
    field: str = "id",
) -> tuple[T, AccessResult]:
    obj = connector.get_object(db, model, object_id, field=field)
    access = has_access_to(obj, user)
    if not access.can_see or (needs_access and not access.has_access):
        raise NotAllowed(f"Access to {model.__tablename__} {object_id} denied")
    return obj, access


def get_with_full_access(db: Session, model: type[T], object_id: Any, user, *, field: str = "id") -> T:
    obj = connector.get_object(db, model, object_id, field=field)
    if not has_access_to(obj, user).has_full_access:
        raise NotAllowed(f"Changes to {model.__tablename__} {object_id} denied")
    return obj


def check_alias(user, owner_alias_id: Optional[str]) -> None:
    if owner_alias_id and owner_alias_id not in (getattr(user, "alias_ids", None) or []):
        raise NotAllowed("Alias does not belong to user")


def emit_created(messenger: Messenger, event: EmitType, key: str, obj: Any, *, room: Optional[str] = None) -> dict:
    data = obj.to_dict()
    messenger.emit_change(event, key, strip_object(data), ChangeType.CREATE, room=room)
    return data


def update_object(
    db: Session,
    messenger: Messenger,
    model: type[T],
    object_id: Any,
    updates: dict[str, Any],
    user,
    *,
    event: EmitType,
    key: str,
    room: Optional[str] = None,
    view: View = public_view,
) -> T:
    obj = get_with_full_access(db, model, object_id, user)
    check_alias(user, updates.get("owner_alias_id"))
    obj = connector.update_object(db, obj, updates)
    messenger.emit_change(event, key, view(obj), ChangeType.UPDATE, room=room)
    return obj


def remove_object(
    db: Session,
    messenger: Messenger,
    model: type,
    object_id: Any,
    user,
    *,
    event: EmitType,
    key: str,
    room: Optional[str] = None,
) -> dict:
    obj = get_with_full_access(db, model, object_id, user)
    connector.remove_object(db, obj)
    removed = {"objectId": object_id}
    messenger.emit_change(event, key, removed, ChangeType.REMOVE, room=room)
    return removed


def update_access(
    db: Session,
    messenger: Messenger,
    model: type[T],
    object_id: Any,
    user,
    *,
    event: EmitType,
    key: str,
    should_remove: bool = False,
    is_public: Optional[bool] = None,
    visibility: Optional[int] = None,
    access_level: Optional[int] = None,
    view: View = public_view,
    **lists: Optional[list[str]],
) -> T:
    obj = get_with_full_access(db, model, object_id, user)
    if any(lists.values()):
        if should_remove:
            obj = connector.remove_object_access(db, obj, **lists)
        else:
            obj = connector.add_object_access(db, obj, **lists)
    obj = connector.update_access(db, obj, is_public=is_public, visibility=visibility, access_level=access_level)
    messenger.emit_change(event, key, view(obj), ChangeType.UPDATE)
    return obj
