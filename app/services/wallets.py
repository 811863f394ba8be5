import logging
from typing import Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import Database, DoesNotExist, Insufficient, InvalidData
from app.core.permissions import is_user_allowed
from app.models import Wallet
from app.models.base import SYSTEM_WALLET_ID, utcnow
from app.services import connector, manager
from app.services.messenger import ChangeType, EmitType, Messenger

settings = get_settings()
logger = logging.getLogger(__name__)


def create_wallet(
    db: Session,
    wallet_id: str,
    owner_id: str,
    *,
    team_id: Optional[str] = None,
    amount: Optional[int] = None,
) -> Wallet:
    wallet = Wallet(
        id=wallet_id,
        owner_id=owner_id,
        team_id=team_id,
        team_ids=[team_id] if team_id else [],
        amount=settings.default_wallet_amount if amount is None else amount,
    )
    return connector.save_object(db, wallet)


def check_amount(wallet: Wallet, amount: int) -> None:
    if wallet.amount - amount < settings.wallet_minimum_amount:
        raise Insufficient(
            f"Wallet {wallet.id} has {wallet.amount}, cannot spend {amount} (minimum {settings.wallet_minimum_amount})"
        )


def change_amount(db: Session, wallet_id: str, delta: int) -> Wallet:
    """Apply a relative change in one statement so concurrent deltas are not overwritten."""
    try:
        result = db.execute(
            update(Wallet)
            .where(Wallet.id == wallet_id)
            .values(amount=Wallet.amount + delta, updated_at=utcnow())
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Wallet amount update failed wallet=%s delta=%s error=%s", wallet_id, delta, exc)
        raise Database(f"Failed to update wallet {wallet_id}") from exc
    if result.rowcount == 0:
        raise DoesNotExist(f"wallets {wallet_id} does not exist")
    wallet = connector.get_object(db, Wallet, wallet_id)
    db.refresh(wallet)
    return wallet


def run_transfer(
    db: Session,
    from_wallet_id: str,
    to_wallet_id: str,
    amount: int,
) -> tuple[Optional[Wallet], Optional[Wallet]]:
    """Decrement the source, then increment the destination.

    The system wallet is a pseudo wallet with unlimited funds and no row.
    A failure between the two steps is not compensated.
    """
    from_wallet = None
    to_wallet = None
    if from_wallet_id != SYSTEM_WALLET_ID:
        check_amount(connector.get_object(db, Wallet, from_wallet_id), amount)
        from_wallet = change_amount(db, from_wallet_id, -amount)
    if to_wallet_id != SYSTEM_WALLET_ID:
        to_wallet = change_amount(db, to_wallet_id, amount)
    return from_wallet, to_wallet


def emit_wallet(messenger: Messenger, wallet: Optional[Wallet]) -> None:
    if wallet is None:
        return
    messenger.emit_change(EmitType.WALLET, "wallet", wallet.to_dict(), ChangeType.UPDATE, room=wallet.id)


def get_wallet(db: Session, wallet_id: str, user) -> dict:
    is_user_allowed("GetWallet", user)
    wallet, access = manager.get_object_by_id(db, Wallet, wallet_id, user)
    return manager.present(wallet, access)


def get_wallets(db: Session, user) -> list[dict]:
    is_user_allowed("GetWallet", user)
    wallets = connector.get_objects(db, Wallet, order_by=Wallet.created_at)
    return manager.present_many(wallets, user)


def get_own_wallets(db: Session, user) -> list[Wallet]:
    teams = list(getattr(user, "part_of_teams", None) or [])
    return connector.get_objects(
        db,
        Wallet,
        or_(Wallet.id == user.id, Wallet.id.in_(teams)) if teams else Wallet.id == user.id,
    )


def update_wallet(
    db: Session,
    messenger: Messenger,
    wallet_id: str,
    user,
    *,
    amount: Optional[int] = None,
    reset_amount: bool = False,
    should_decrease_amount: bool = False,
    is_protected: Optional[bool] = None,
    owner_alias_id: Optional[str] = None,
) -> Wallet:
    is_user_allowed("UpdateWalletAmount" if amount is not None or reset_amount else "UpdateWallet", user)
    wallet = manager.get_with_full_access(db, Wallet, wallet_id, user)
    manager.check_alias(user, owner_alias_id)

    if reset_amount:
        wallet = connector.update_object(db, wallet, {"amount": 0})
    elif amount is not None:
        if amount <= 0:
            raise InvalidData("Amount must be positive; use should_decrease_amount to subtract")
        if should_decrease_amount:
            check_amount(wallet, amount)
            wallet = change_amount(db, wallet.id, -amount)
        else:
            wallet = change_amount(db, wallet.id, amount)

    updates = {}
    if is_protected is not None:
        updates["is_protected"] = is_protected
    if owner_alias_id:
        updates["owner_alias_id"] = owner_alias_id
    if updates:
        wallet = connector.update_object(db, wallet, updates)

    logger.info("Wallet %s updated by %s amount=%s", wallet.id, user.id, wallet.amount)
    emit_wallet(messenger, wallet)
    return wallet


def update_wallet_access(db: Session, messenger: Messenger, wallet_id: str, user, **kwargs) -> Wallet:
    is_user_allowed("UpdateWallet", user)
    return manager.update_access(db, messenger, Wallet, wallet_id, user, event=EmitType.WALLET, key="wallet", **kwargs)


def remove_wallet(db: Session, wallet_id: str) -> None:
    wallet = connector.find_object(db, Wallet, Wallet.id == wallet_id)
    if wallet is not None:
        connector.remove_object(db, wallet)
