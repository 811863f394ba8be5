from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import DataRequest, envelope
from app.schemas.transaction import TransactionCreate, TransactionUpdate
from app.services import transactions
from app.services.messenger import Messenger

router = APIRouter()


@router.post("")
def create_transaction(
    payload: DataRequest[TransactionCreate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope(transactions.create_transaction(db, messenger, user, **payload.data.model_dump()))


@router.get("")
def list_transactions(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"transactions": transactions.get_transactions_by_user(db, user)})


@router.get("/{transaction_id}")
def get_transaction(transaction_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"transaction": transactions.get_transaction(db, transaction_id, user)})


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: str,
    payload: DataRequest[TransactionUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    transaction = transactions.update_transaction(db, messenger, transaction_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"transaction": transaction.to_dict()})


@router.delete("/{transaction_id}")
def remove_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    return envelope(transactions.remove_transaction(db, messenger, transaction_id, user))
