import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.access import has_access_to
from app.core.errors import AlreadyExists, InvalidData, NotAllowed
from app.core.permissions import is_user_allowed
from app.models import Team, User
from app.services import connector, manager, wallets
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)


def create_team(
    db: Session,
    messenger: Messenger,
    user,
    *,
    team_name: str,
    short_name: str,
    owner_alias_id: Optional[str] = None,
    visibility: int = 0,
    is_public: bool = False,
) -> Team:
    is_user_allowed("CreateTeam", user)
    manager.check_alias(user, owner_alias_id)
    if connector.find_object(db, Team, (Team.team_name == team_name) | (Team.short_name == short_name)):
        raise AlreadyExists(f"Team {team_name} or {short_name} already exists")

    team = connector.save_object(
        db,
        Team(
            team_name=team_name,
            short_name=short_name,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            visibility=visibility,
            is_public=is_public,
            user_ids=[user.id],
        ),
    )
    team = connector.update_object(db, team, {"team_ids": [team.id]})
    wallets.create_wallet(db, team.id, user.id, team_id=team.id, amount=0)
    _join(db, user.id, team.id)

    logger.info("Team %s created by %s", team.team_name, user.id)
    manager.emit_created(messenger, EmitType.TEAM, "team", team)
    return team


def _join(db: Session, user_id: str, team_id: str) -> None:
    member = connector.get_object(db, User, user_id)
    teams = list(member.part_of_teams or [])
    if team_id not in teams:
        connector.update_object(db, member, {"part_of_teams": teams + [team_id]})


def _leave(db: Session, user_id: str, team_id: str) -> None:
    member = connector.find_object(db, User, User.id == user_id)
    if member is None:
        return
    connector.update_object(db, member, {"part_of_teams": [item for item in (member.part_of_teams or []) if item != team_id]})


def get_team(db: Session, team_id: str, user) -> dict:
    is_user_allowed("GetTeams", user)
    team, access = manager.get_object_by_id(db, Team, team_id, user)
    return manager.present(team, access)


def get_teams(db: Session, user) -> list[dict]:
    is_user_allowed("GetTeams", user)
    return manager.present_many(connector.get_objects(db, Team, order_by=Team.team_name), user)


def update_team(db: Session, messenger: Messenger, team_id: str, user, updates: dict) -> Team:
    is_user_allowed("UpdateTeam", user)
    allowed = {
        key: value
        for key, value in updates.items()
        if key in {"team_name", "short_name", "visibility", "is_public", "owner_alias_id", "is_protected"}
    }
    return manager.update_object(db, messenger, Team, team_id, allowed, user, event=EmitType.TEAM, key="team")


def add_member(db: Session, messenger: Messenger, team_id: str, user, member_id: str) -> Team:
    is_user_allowed("UpdateTeam", user)
    team = manager.get_with_full_access(db, Team, team_id, user)
    connector.get_object(db, User, member_id)
    team = connector.add_object_access(db, team, user_ids=[member_id])
    _join(db, member_id, team.id)
    messenger.emit_change(EmitType.TEAM, "team", team.to_dict(), ChangeType.UPDATE, room=team.id)
    return team


def remove_member(db: Session, messenger: Messenger, team_id: str, user, member_id: str) -> Team:
    is_user_allowed("UpdateTeam", user)
    team = connector.get_object(db, Team, team_id)
    # Members may leave on their own.
    if member_id != user.id and not has_access_to(team, user).has_full_access:
        raise NotAllowed(f"Changes to teams {team_id} denied")
    if member_id == team.owner_id:
        raise InvalidData("The team owner cannot leave the team")
    team = connector.remove_object_access(db, team, user_ids=[member_id])
    _leave(db, member_id, team.id)
    messenger.emit_change(EmitType.TEAM, "team", team.to_dict(), ChangeType.UPDATE, room=team.id)
    return team


def remove_team(db: Session, messenger: Messenger, team_id: str, user) -> dict:
    is_user_allowed("RemoveTeam", user)
    team = manager.get_with_full_access(db, Team, team_id, user)
    members = list(team.user_ids or [])
    removed = manager.remove_object(db, messenger, Team, team_id, user, event=EmitType.TEAM, key="team")
    wallets.remove_wallet(db, team_id)
    for member_id in members:
        _leave(db, member_id, team_id)
    return removed
