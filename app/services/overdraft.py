"""Periodic amortization of negative wallet balances."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models import Wallet
from app.services import connector, wallets
from app.services.messenger import Messenger

logger = logging.getLogger(__name__)


def amortized_amount(amount: int, rate: int, target: int) -> int:
    """Balance after one tick: the deficit shrinks by `rate`, never past `target`."""
    target = min(target, 0)
    if amount >= target:
        return amount
    return min(amount + max(rate, 0), target)


def sweep_overdrafts(
    db: Session,
    messenger: Messenger,
    *,
    rate: Optional[int] = None,
    target: Optional[int] = None,
) -> list[Wallet]:
    settings = get_settings()
    rate = settings.overdraft_amortization_rate if rate is None else rate
    target = settings.overdraft_sweep_target if target is None else target

    changed = []
    for wallet in connector.get_objects(db, Wallet, Wallet.amount < min(target, 0)):
        new_amount = amortized_amount(wallet.amount, rate, target)
        if new_amount == wallet.amount:
            continue
        wallet = wallets.change_amount(db, wallet.id, new_amount - wallet.amount)
        changed.append(wallet)

        wallets.emit_wallet(messenger, wallet)
        message = f"Wallet {wallet.id} is overdrawn. Balance is now {wallet.amount}."
        if wallet.owner_id:
            messenger.broadcast(message, room=wallet.owner_id, title="Overdraft")
        messenger.notify_moderators(message, title="Overdraft")

    if changed:
        logger.info("Overdraft sweep adjusted %s wallet(s)", len(changed))
    return changed
