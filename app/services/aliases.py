from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import AlreadyExists
from app.core.permissions import is_user_allowed
from app.models import Alias
from app.services import connector, manager, users
from app.services.messenger import EmitType, Messenger


def create_alias(
    db: Session,
    messenger: Messenger,
    user,
    *,
    alias_name: str,
    full_name: Optional[str] = None,
    visibility: int = 0,
) -> Alias:
    is_user_allowed("CreateAlias", user)
    if users.name_taken(db, alias_name):
        raise AlreadyExists(f"Alias {alias_name} is taken")
    alias = connector.save_object(
        db,
        Alias(alias_name=alias_name, full_name=full_name, owner_id=user.id, visibility=visibility),
    )
    # Refresh the relationship so the new alias counts in access checks right away.
    if hasattr(user, "aliases"):
        db.refresh(user)
    manager.emit_created(messenger, EmitType.ALIAS, "alias", alias)
    return alias


def get_alias(db: Session, alias_id: str, user) -> dict:
    is_user_allowed("GetAliases", user)
    alias, access = manager.get_object_by_id(db, Alias, alias_id, user)
    return manager.present(alias, access)


def get_aliases_by_user(db: Session, user) -> list[dict]:
    is_user_allowed("GetAliases", user)
    aliases = connector.get_objects(db, Alias, Alias.owner_id == user.id, order_by=Alias.alias_name)
    return [alias.to_dict() for alias in aliases]


def get_aliases(db: Session, user) -> list[dict]:
    is_user_allowed("GetAliases", user)
    return manager.present_many(connector.get_objects(db, Alias, order_by=Alias.alias_name), user)


def update_alias(db: Session, messenger: Messenger, alias_id: str, user, updates: dict) -> Alias:
    is_user_allowed("UpdateAlias", user)
    allowed = {key: value for key, value in updates.items() if key in {"full_name", "visibility"}}
    return manager.update_object(db, messenger, Alias, alias_id, allowed, user, event=EmitType.ALIAS, key="alias")


def remove_alias(db: Session, messenger: Messenger, alias_id: str, user) -> dict:
    is_user_allowed("RemoveAlias", user)
    return manager.remove_object(db, messenger, Alias, alias_id, user, event=EmitType.ALIAS, key="alias")
