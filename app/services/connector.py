"""Generic persistence helpers shared by every entity service."""

from contextlib import contextmanager
import logging
from typing import Any, Iterable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AlreadyExists, Database, DoesNotExist, InvalidData
from app.models.base import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACCESS_LISTS = ("user_ids", "team_ids", "user_admin_ids", "team_admin_ids", "banned_ids")


@contextmanager
def committing(db: Session, *, what: str = "object"):
    try:
        yield
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Integrity error while saving %s: %s", what, exc.orig)
        raise AlreadyExists(f"{what} already exists") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Database error while saving %s: %s", what, exc)
        raise Database(f"Failed to save {what}") from exc


def get_object(db: Session, model: type[T], object_id: Any, *, field: str = "id") -> T:
    try:
        obj = db.query(model).filter(getattr(model, field) == object_id).first()
    except SQLAlchemyError as exc:
        raise Database(f"Failed to get {model.__tablename__}") from exc
    if obj is None:
        raise DoesNotExist(f"{model.__tablename__} {object_id} does not exist")
    return obj


def find_object(db: Session, model: type[T], *filters) -> Optional[T]:
    try:
        return db.query(model).filter(*filters).first()
    except SQLAlchemyError as exc:
        raise Database(f"Failed to get {model.__tablename__}") from exc


def get_objects(db: Session, model: type[T], *filters, order_by=None) -> list[T]:
    try:
        query = db.query(model).filter(*filters)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()
    except SQLAlchemyError as exc:
        raise Database(f"Failed to get {model.__tablename__}") from exc


def save_object(db: Session, obj: T) -> T:
    with committing(db, what=obj.__tablename__):
        db.add(obj)
    db.refresh(obj)
    return obj


def update_object(db: Session, obj: T, updates: dict[str, Any]) -> T:
    with committing(db, what=obj.__tablename__):
        for key, value in updates.items():
            setattr(obj, key, value)
        if hasattr(obj, "updated_at"):
            obj.updated_at = utcnow()
    db.refresh(obj)
    return obj


def remove_object(db: Session, obj: Any) -> None:
    with committing(db, what=obj.__tablename__):
        db.delete(obj)


def remove_objects(db: Session, model: type, *filters) -> int:
    with committing(db, what=model.__tablename__):
        removed = db.query(model).filter(*filters).delete(synchronize_session=False)
    return removed


def _merge(current: Optional[Iterable[str]], added: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(list(current or []) + list(added)))


def add_object_access(db: Session, obj: T, **lists: Optional[list[str]]) -> T:
    """Append ids to the access lists; banned ids are pulled from every other list."""
    lists = {key: value for key, value in lists.items() if value}
    unknown = set(lists) - set(ACCESS_LISTS)
    if unknown:
        raise InvalidData(f"Unknown access lists: {', '.join(sorted(unknown))}")
    if not lists:
        raise InvalidData("At least one of user_ids, team_ids, user_admin_ids, team_admin_ids, banned_ids is required")

    updates = {key: _merge(getattr(obj, key), value) for key, value in lists.items()}
    banned = set(lists.get("banned_ids") or [])
    if banned:
        for key in ACCESS_LISTS:
            if key == "banned_ids":
                continue
            current = updates.get(key, getattr(obj, key) or [])
            updates[key] = [item for item in current if item not in banned]
    return update_object(db, obj, updates)


def remove_object_access(db: Session, obj: T, **lists: Optional[list[str]]) -> T:
    lists = {key: value for key, value in lists.items() if value}
    unknown = set(lists) - set(ACCESS_LISTS)
    if unknown:
        raise InvalidData(f"Unknown access lists: {', '.join(sorted(unknown))}")
    if not lists:
        raise InvalidData("At least one of user_ids, team_ids, user_admin_ids, team_admin_ids, banned_ids is required")

    updates = {
        key: [item for item in (getattr(obj, key) or []) if item not in set(value)]
        for key, value in lists.items()
    }
    return update_object(db, obj, updates)


def update_access(
    db: Session,
    obj: T,
    *,
    is_public: Optional[bool] = None,
    visibility: Optional[int] = None,
    access_level: Optional[int] = None,
) -> T:
    updates = {
        key: value
        for key, value in {"is_public": is_public, "visibility": visibility, "access_level": access_level}.items()
        if value is not None
    }
    if not updates:
        return obj
    return update_object(db, obj, updates)
