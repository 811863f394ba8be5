import pytest

from app.core.errors import AlreadyExists, InvalidData, NotAllowed
from app.core.permissions import AccessLevel
from app.models import User, Wallet
from app.services import aliases, teams, users
from app.services.messenger import Messenger


def test_alias_shares_namespace_with_usernames(db, make_user):
    alice = make_user("alice")
    make_user("bob")
    with pytest.raises(AlreadyExists):
        aliases.create_alias(db, Messenger(), alice, alias_name="Bob")

    alias = aliases.create_alias(db, Messenger(), alice, alias_name="shadow")
    assert alias.owner_id == alice.id
    with pytest.raises(AlreadyExists):
        users.register_user(db, Messenger(), username="SHADOW", password="secret-pass")


def test_team_creation_sets_up_wallet_and_membership(db, make_user):
    alice = make_user("alice")
    team = teams.create_team(db, Messenger(), alice, team_name="Night Owls", short_name="OWL")

    wallet = db.get(Wallet, team.id)
    assert wallet.amount == 0
    assert wallet.team_id == team.id
    db.refresh(alice)
    assert team.id in alice.part_of_teams

    with pytest.raises(AlreadyExists):
        teams.create_team(db, Messenger(), alice, team_name="Other", short_name="OWL")


def test_members_join_and_leave(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    team = teams.create_team(db, Messenger(), alice, team_name="Night Owls", short_name="OWL")

    with pytest.raises(NotAllowed):
        teams.add_member(db, Messenger(), team.id, bob, bob.id)

    team = teams.add_member(db, Messenger(), team.id, alice, bob.id)
    assert bob.id in team.user_ids
    assert team.id in db.get(User, bob.id).part_of_teams

    with pytest.raises(InvalidData):
        teams.remove_member(db, Messenger(), team.id, alice, alice.id)

    team = teams.remove_member(db, Messenger(), team.id, bob, bob.id)
    assert bob.id not in team.user_ids
    assert team.id not in db.get(User, bob.id).part_of_teams


def test_removing_team_removes_wallet(db, make_user):
    alice = make_user("alice")
    admin = make_user("admin", access_level=AccessLevel.ADMIN)
    team = teams.create_team(db, Messenger(), alice, team_name="Night Owls", short_name="OWL")

    with pytest.raises(NotAllowed):
        teams.remove_team(db, Messenger(), team.id, alice)
    assert teams.remove_team(db, Messenger(), team.id, admin) == {"objectId": team.id}
    assert db.get(Wallet, team.id) is None
    assert team.id not in db.get(User, alice.id).part_of_teams


def test_ban_rules(db, make_user):
    alice = make_user("alice")
    mod = make_user("mod", access_level=AccessLevel.MODERATOR)
    admin = make_user("admin", access_level=AccessLevel.ADMIN)

    with pytest.raises(NotAllowed):
        users.ban_user(db, Messenger(), mod.id, alice)
    with pytest.raises(NotAllowed):
        users.ban_user(db, Messenger(), admin.id, mod)

    assert users.ban_user(db, Messenger(), alice.id, mod).is_banned is True
    assert users.unban_user(db, Messenger(), alice.id, mod).is_banned is False


def test_access_level_cannot_exceed_granter(db, make_user):
    alice = make_user("alice")
    admin = make_user("admin", access_level=AccessLevel.ADMIN)
    with pytest.raises(NotAllowed):
        users.update_access_level(db, Messenger(), alice.id, admin, AccessLevel.GOD)
    assert users.update_access_level(db, Messenger(), alice.id, admin, AccessLevel.MODERATOR).access_level == 3


def test_bootstrap_admins(db, make_user):
    make_user("alice")
    assert users.bootstrap_admins(db, ["alice", "ghost"]) == 1
    user = db.query(User).filter(User.username == "alice").first()
    assert user.access_level == AccessLevel.ADMIN
