from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.user import AliasCreate, AliasUpdate
from app.services import aliases
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_alias(
    payload: DataRequest[AliasCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    alias = aliases.create_alias(db, messenger, user, **payload.data.model_dump())
    return envelope({"alias": alias.to_dict()})


@router.get("")
def list_aliases(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"aliases": aliases.get_aliases(db, user)})


@router.get("/mine")
def list_own_aliases(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"aliases": aliases.get_aliases_by_user(db, user)})


@router.get("/{alias_id}")
def get_alias(alias_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"alias": aliases.get_alias(db, alias_id, user)})


@router.put("/{alias_id}")
def update_alias(
    alias_id: str,
    payload: DataRequest[AliasUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    alias = aliases.update_alias(db, messenger, alias_id, user, payload.data.model_dump(exclude_unset=True))
    return envelope({"alias": alias.to_dict()})


@router.delete("/{alias_id}")
def remove_alias(
    alias_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope({"alias": aliases.remove_alias(db, messenger, alias_id, user)})
