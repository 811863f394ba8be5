from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.user import TeamCreate, TeamMember, TeamUpdate
from app.services import teams
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_team(
    payload: DataRequest[TeamCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    team = teams.create_team(db, messenger, user, **payload.data.model_dump())
    return envelope({"team": team.to_dict()})


@router.get("")
def list_teams(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"teams": teams.get_teams(db, user)})


@router.get("/{team_id}")
def get_team(team_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"team": teams.get_team(db, team_id, user)})


@router.put("/{team_id}")
def update_team(
    team_id: str,
    payload: DataRequest[TeamUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    team = teams.update_team(db, messenger, team_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"team": team.to_dict()})


@router.post("/{team_id}/members")
def add_member(
    team_id: str,
    payload: DataRequest[TeamMember],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    team = teams.add_member(db, messenger, team_id, user, payload.data.member_id)
    return envelope({"team": team.to_dict()})


@router.delete("/{team_id}/members/{member_id}")
def remove_member(
    team_id: str,
    member_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    team = teams.remove_member(db, messenger, team_id, user, member_id)
    return envelope({"team": team.to_dict()})


@router.delete("/{team_id}")
def remove_team(
    team_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"team": teams.remove_team(db, messenger, team_id, user)})
