from types import SimpleNamespace

from app.core.access import NO_ACCESS, AnonymousUser, has_access_to, strip_object
from app.core.permissions import AccessLevel


def _obj(**overrides):
    values = {
        "owner_id": "owner",
        "owner_alias_id": None,
        "visibility": 0,
        "is_public": False,
        "user_ids": [],
        "team_ids": [],
        "user_admin_ids": [],
        "team_admin_ids": [],
        "banned_ids": [],
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _user(user_id="reader", access_level=AccessLevel.STANDARD, **overrides):
    values = {
        "id": user_id,
        "access_level": access_level,
        "has_full_access": False,
        "part_of_teams": [],
        "alias_ids": [],
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_owner_has_full_access():
    access = has_access_to(_obj(), _user("owner"))
    assert access.can_see and access.has_access and access.has_full_access


def test_visibility_lets_user_see_without_access():
    access = has_access_to(_obj(visibility=1), _user())
    assert access.can_see
    assert not access.has_access
    assert not access.has_full_access


def test_visibility_above_level_hides_object():
    access = has_access_to(_obj(visibility=AccessLevel.MODERATOR), _user())
    assert access == NO_ACCESS


def test_team_membership_grants_access():
    access = has_access_to(_obj(team_ids=["team-1"]), _user(part_of_teams=["team-1"]))
    assert access.has_access
    assert not access.has_full_access


def test_team_admin_grants_full_access():
    access = has_access_to(_obj(team_admin_ids=["team-1"]), _user(part_of_teams=["team-1"]))
    assert access.has_full_access


def test_alias_owner_has_access():
    access = has_access_to(_obj(owner_alias_id="alias-1"), _user(alias_ids=["alias-1"]))
    assert access.has_access


def test_alias_owner_has_full_access():
    access = has_access_to(_obj(owner_alias_id="alias-1"), _user(alias_ids=["alias-1"]))
    assert access.has_full_access


def test_alias_in_admin_list_has_full_access():
    access = has_access_to(_obj(user_admin_ids=["alias-2"]), _user(alias_ids=["alias-2"]))
    assert access.has_full_access
    assert not has_access_to(_obj(), _user(alias_ids=["alias-2"])).has_full_access


def test_banned_user_gets_nothing_even_if_listed():
    obj = _obj(user_ids=["reader"], banned_ids=["reader"], is_public=True)
    assert has_access_to(obj, _user()) == NO_ACCESS


def test_banned_alias_blocks_its_user():
    obj = _obj(is_public=True, banned_ids=["alias-1"])
    assert has_access_to(obj, _user(alias_ids=["alias-1"])) == NO_ACCESS


def test_admin_ignores_ban_list():
    obj = _obj(banned_ids=["boss"])
    access = has_access_to(obj, _user("boss", access_level=AccessLevel.ADMIN))
    assert access.has_full_access


def test_anonymous_user_sees_public_object():
    access = has_access_to(_obj(is_public=True), AnonymousUser())
    assert access.can_see and access.has_access
    assert not access.has_full_access


def test_strip_object_hides_lists_and_uses_alias():
    data = {
        "id": "x",
        "ownerId": "owner",
        "ownerAliasId": "alias-1",
        "timeCreated": "2026-01-01T00:00:00",
        "customTimeCreated": "1999-01-01T00:00:00",
        "lastUpdated": "2026-01-02T00:00:00",
        "customLastUpdated": None,
        "userIds": ["a"],
        "teamIds": ["b"],
        "userAdminIds": ["c"],
        "teamAdminIds": ["d"],
        "bannedIds": ["e"],
    }
    stripped = strip_object(data)
    assert stripped["ownerId"] == "alias-1"
    assert stripped["timeCreated"] == "1999-01-01T00:00:00"
    assert stripped["lastUpdated"] == "2026-01-02T00:00:00"
    assert stripped["userIds"] == [] and stripped["bannedIds"] == []
    assert "ownerAliasId" not in stripped
    assert data["userIds"] == ["a"]


def test_banning_pulls_ids_from_other_access_lists(db, make_user):
    from app.models import Wallet
    from app.services import connector

    owner, reader = make_user("alice"), make_user("bob")
    wallet = connector.add_object_access(db, db.get(Wallet, owner.id), user_ids=[reader.id], user_admin_ids=[reader.id])

    wallet = connector.add_object_access(db, wallet, banned_ids=[reader.id])

    assert wallet.banned_ids == [reader.id]
    assert reader.id not in wallet.user_ids
    assert reader.id not in wallet.user_admin_ids
    assert has_access_to(wallet, reader) == NO_ACCESS
