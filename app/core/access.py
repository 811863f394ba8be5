"""Access predicate shared by every service that hands out access-controlled objects."""

from dataclasses import dataclass, field
from typing import Any

from app.core.permissions import AccessLevel

ANONYMOUS_USER_ID = "222222222222222222222221"


@dataclass
class AnonymousUser:
    id: str = ANONYMOUS_USER_ID
    username: str = "anonymous"
    access_level: int = AccessLevel.ANONYMOUS
    has_full_access: bool = False
    is_banned: bool = False
    is_verified: bool = True
    part_of_teams: list = field(default_factory=list)
    alias_ids: list = field(default_factory=list)

    @property
    def is_anonymous(self) -> bool:
        return True


@dataclass(frozen=True)
class AccessResult:
    can_see: bool
    has_access: bool
    has_full_access: bool


NO_ACCESS = AccessResult(False, False, False)


def _ids(value) -> set:
    return set(value or [])


def has_access_to(obj: Any, user: Any) -> AccessResult:
    """Compute what the user may do with an access-controlled object."""
    user_id = user.id
    alias_ids = _ids(getattr(user, "alias_ids", []))
    user_teams = _ids(getattr(user, "part_of_teams", []))

    is_admin = (
        obj.owner_id == user_id
        or bool(getattr(user, "has_full_access", False))
        or user.access_level >= AccessLevel.ADMIN
    )

    banned = _ids(obj.banned_ids)
    if not is_admin and (user_id in banned or alias_ids & banned):
        return NO_ACCESS

    user_ids = _ids(obj.user_ids)
    user_has_access = user_id in user_ids or user_id == obj.owner_id
    team_has_access = bool(_ids(obj.team_ids) & user_teams)
    alias_has_access = (obj.owner_alias_id in alias_ids) or bool(alias_ids & user_ids)

    user_admin_ids = _ids(obj.user_admin_ids)
    user_admin = user_id in user_admin_ids
    team_admin = bool(_ids(obj.team_admin_ids) & user_teams)
    alias_admin = (obj.owner_alias_id is not None and obj.owner_alias_id in alias_ids) or bool(alias_ids & user_admin_ids)

    has_access = is_admin or obj.is_public or user_has_access or team_has_access or alias_has_access
    can_see = has_access or user.access_level >= (obj.visibility or 0)
    has_full_access = is_admin or user_admin or team_admin or alias_admin

    return AccessResult(can_see=can_see, has_access=has_access, has_full_access=has_full_access)


def strip_object(data: dict) -> dict:
    """Public view of a serialized object: alias as owner, custom timestamps, no access lists."""
    stripped = dict(data)
    stripped["ownerId"] = data.get("ownerAliasId") or data.get("ownerId")
    stripped["timeCreated"] = data.get("customTimeCreated") or data.get("timeCreated")
    stripped["lastUpdated"] = data.get("customLastUpdated") or data.get("lastUpdated")
    for key in ("ownerAliasId", "customTimeCreated", "customLastUpdated"):
        stripped.pop(key, None)
    for key in ("userIds", "teamIds", "userAdminIds", "teamAdminIds", "bannedIds"):
        stripped[key] = []
    stripped["hasFullAccess"] = False
    return stripped
