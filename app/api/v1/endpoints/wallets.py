from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_messenger
from app.schemas.common import AccessUpdate, DataRequest, envelope
from app.schemas.wallet import WalletUpdate
from app.services import transactions, wallets
from app.services.messenger import Messenger

router = APIRouter()


@router.get("")
def list_wallets(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"wallets": wallets.get_wallets(db, user)})


@router.get("/{wallet_id}")
def get_wallet(wallet_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"wallet": wallets.get_wallet(db, wallet_id, user)})


@router.get("/{wallet_id}/transactions")
def list_wallet_transactions(wallet_id: str, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"transactions": transactions.get_transactions_by_wallet(db, wallet_id, user)})


@router.put("/{wallet_id}")
def update_wallet(
    wallet_id: str,
    payload: DataRequest[WalletUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    wallet = wallets.update_wallet(db, messenger, wallet_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"wallet": wallet.to_dict()})


@router.put("/{wallet_id}/access")
def update_wallet_access(
    wallet_id: str,
    payload: DataRequest[AccessUpdate],
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    wallet = wallets.update_wallet_access(db, messenger, wallet_id, user, **payload.data.model_dump(exclude_unset=True))
    return envelope({"wallet": wallet.to_dict()})
