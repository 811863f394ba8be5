import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.errors import InvalidData
from app.core.permissions import is_user_allowed
from app.models import Transaction, Wallet
from app.models.base import SYSTEM_WALLET_ID
from app.services import connector, manager, wallets
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)


def _emit_transaction(messenger: Messenger, transaction: Transaction, change_type: ChangeType, payload: dict) -> None:
    for room in {transaction.from_wallet_id, transaction.to_wallet_id} - {SYSTEM_WALLET_ID}:
        messenger.emit_change(EmitType.TRANSACTION, "transaction", payload, change_type, room=room)


def record_transaction(
    db: Session,
    messenger: Messenger,
    *,
    from_wallet_id: str,
    to_wallet_id: str,
    amount: int,
    owner_id: Optional[str],
    note: Optional[str] = None,
    coordinates: Optional[dict] = None,
    owner_alias_id: Optional[str] = None,
) -> tuple[Transaction, Optional[Wallet], Optional[Wallet]]:
    """Move the funds, then persist the record and queue the notifications."""
    if amount is None or amount <= 0:
        raise InvalidData("Transaction amount must be positive")
    if from_wallet_id == to_wallet_id:
        raise InvalidData("Cannot transfer to the same wallet")

    if to_wallet_id != SYSTEM_WALLET_ID:
        # Fail before the source is debited.
        connector.get_object(db, Wallet, to_wallet_id)
    from_wallet, to_wallet = wallets.run_transfer(db, from_wallet_id, to_wallet_id, amount)

    user_ids = [wallet.owner_id for wallet in (from_wallet, to_wallet) if wallet is not None and wallet.owner_id]
    team_ids = [wallet.team_id for wallet in (from_wallet, to_wallet) if wallet is not None and wallet.team_id]
    transaction = connector.save_object(
        db,
        Transaction(
            amount=amount,
            from_wallet_id=from_wallet_id,
            to_wallet_id=to_wallet_id,
            note=note,
            coordinates=coordinates,
            owner_id=owner_id,
            owner_alias_id=owner_alias_id,
            team_id=from_wallet.team_id if from_wallet is not None else None,
            user_ids=list(dict.fromkeys(user_ids)),
            team_ids=list(dict.fromkeys(team_ids)),
        ),
    )
    logger.info(
        "Transaction %s: %s -> %s amount=%s",
        transaction.id,
        from_wallet_id,
        to_wallet_id,
        amount,
    )

    _emit_transaction(messenger, transaction, ChangeType.CREATE, transaction.to_dict())
    wallets.emit_wallet(messenger, from_wallet)
    wallets.emit_wallet(messenger, to_wallet)
    return transaction, from_wallet, to_wallet


def create_transaction(
    db: Session,
    messenger: Messenger,
    user,
    *,
    from_wallet_id: str,
    to_wallet_id: str,
    amount: int,
    note: Optional[str] = None,
    coordinates: Optional[dict] = None,
    owner_alias_id: Optional[str] = None,
) -> dict:
    is_user_allowed("CreateTransaction", user)
    if amount is None or amount <= 0:
        raise InvalidData("Transaction amount must be positive")
    if from_wallet_id == to_wallet_id:
        raise InvalidData("Cannot transfer to the same wallet")
    manager.check_alias(user, owner_alias_id)
    # Spending requires access to the source wallet, seeing it is not enough.
    manager.get_object_by_id(db, Wallet, from_wallet_id, user, needs_access=True)

    transaction, from_wallet, _ = record_transaction(
        db,
        messenger,
        from_wallet_id=from_wallet_id,
        to_wallet_id=to_wallet_id,
        amount=amount,
        owner_id=user.id,
        note=note,
        coordinates=coordinates,
        owner_alias_id=owner_alias_id,
    )
    return {"transaction": transaction.to_dict(), "wallet": from_wallet.to_dict()}


def get_transaction(db: Session, transaction_id: str, user) -> dict:
    is_user_allowed("GetTransaction", user)
    transaction, access = manager.get_object_by_id(db, Transaction, transaction_id, user)
    return manager.present(transaction, access)


def get_transactions_by_wallet(db: Session, wallet_id: str, user) -> list[dict]:
    is_user_allowed("GetTransaction", user)
    manager.get_object_by_id(db, Wallet, wallet_id, user, needs_access=True)
    transactions = connector.get_objects(
        db,
        Transaction,
        or_(Transaction.from_wallet_id == wallet_id, Transaction.to_wallet_id == wallet_id),
        order_by=Transaction.created_at,
    )
    return manager.present_many(transactions, user, full_access_only=False)


def get_transactions_by_user(db: Session, user) -> list[dict]:
    is_user_allowed("GetTransaction", user)
    wallet_ids = [wallet.id for wallet in wallets.get_own_wallets(db, user)]
    if not wallet_ids:
        return []
    transactions = connector.get_objects(
        db,
        Transaction,
        or_(Transaction.from_wallet_id.in_(wallet_ids), Transaction.to_wallet_id.in_(wallet_ids)),
        order_by=Transaction.created_at,
    )
    return manager.present_many(transactions, user, full_access_only=False)


def update_transaction(
    db: Session,
    messenger: Messenger,
    transaction_id: str,
    user,
    *,
    note: Optional[str] = None,
    owner_alias_id: Optional[str] = None,
) -> Transaction:
    is_user_allowed("UpdateTransaction", user)
    updates = {key: value for key, value in {"note": note, "owner_alias_id": owner_alias_id}.items() if value is not None}
    if not updates:
        raise InvalidData("Only note and ownerAliasId can be changed")
    return manager.update_object(
        db,
        messenger,
        Transaction,
        transaction_id,
        updates,
        user,
        event=EmitType.TRANSACTION,
        key="transaction",
    )


def remove_transaction(db: Session, messenger: Messenger, transaction_id: str, user) -> dict:
    """Reverse the transfer, then delete the record."""
    is_user_allowed("RemoveTransaction", user)
    transaction = manager.get_with_full_access(db, Transaction, transaction_id, user)

    to_wallet, from_wallet = wallets.run_transfer(
        db,
        transaction.to_wallet_id,
        transaction.from_wallet_id,
        transaction.amount,
    )
    connector.remove_object(db, transaction)
    logger.info("Transaction %s reversed by %s", transaction_id, user.id)

    _emit_transaction(messenger, transaction, ChangeType.REMOVE, {"objectId": transaction_id})
    wallets.emit_wallet(messenger, from_wallet)
    wallets.emit_wallet(messenger, to_wallet)
    return {"transaction": {"objectId": transaction_id}}
