import pytest

from app.models import Wallet
from app.services import overdraft, wallets
from app.services.messenger import Messenger


@pytest.mark.parametrize(
    "amount,rate,target,expected",
    [
        (-5, 2, 0, -3),
        (-1, 5, 0, 0),
        (3, 1, 0, 3),
        (0, 1, 0, 0),
        (-5, 1, 4, -4),
        (-10, 3, -8, -8),
        (-5, -2, 0, -5),
    ],
)
def test_amortized_amount(amount, rate, target, expected):
    assert overdraft.amortized_amount(amount, rate, target) == expected


def test_sweep_moves_negative_wallets_toward_zero(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    wallets.change_amount(db, alice.id, -13)

    messenger = Messenger()
    changed = overdraft.sweep_overdrafts(db, messenger, rate=2, target=0)

    assert [wallet.id for wallet in changed] == [alice.id]
    db.expire_all()
    assert db.get(Wallet, alice.id).amount == -1
    assert db.get(Wallet, bob.id).amount == 10

    events = [(emission.event, emission.room) for emission in messenger.outbox]
    assert ("wallet", alice.id) in events
    assert ("broadcast", alice.id) in events
    assert ("broadcast", "accessLevel:3") in events


def test_sweep_without_overdrafts_is_quiet(db, make_user):
    make_user("alice")
    messenger = Messenger()
    assert overdraft.sweep_overdrafts(db, messenger, rate=1, target=0) == []
    assert messenger.outbox == []
