import pytest

from app.core.errors import Insufficient, InvalidData
from app.core.permissions import AccessLevel
from app.core.security import create_access_token
from app.models import Wallet
from app.services import transactions
from app.services.messenger import Messenger


def _amount(db, wallet_id):
    db.expire_all()
    return db.get(Wallet, wallet_id).amount


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.access_level)}"}


def _transfer(client, user, to_id, amount, from_id=None):
    body = {"data": {"fromWalletId": from_id or user.id, "toWalletId": to_id, "amount": amount}}
    return client.post("/api/v1/transactions", json=body, headers=_headers(user))


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_amount_is_rejected(client, db, make_user, amount):
    alice, bob = make_user("alice"), make_user("bob")
    res = _transfer(client, alice, bob.id, amount)
    assert res.status_code == 400
    assert res.json()["error"]["type"] == "InvalidData"
    assert _amount(db, alice.id) == 10


def test_transfer_moves_funds(client, db, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    res = _transfer(client, alice, bob.id, 4)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["transaction"]["amount"] == 4
    assert data["wallet"]["amount"] == 6
    assert _amount(db, alice.id) == 6
    assert _amount(db, bob.id) == 14


def test_transfer_above_balance_is_insufficient(client, db, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    res = _transfer(client, alice, bob.id, 11)
    assert res.status_code == 400
    assert res.json()["error"]["type"] == "Insufficient"
    assert _amount(db, alice.id) == 10
    assert _amount(db, bob.id) == 10


def test_transfer_to_missing_wallet_does_not_debit(client, db, make_user):
    alice = make_user("alice")
    res = _transfer(client, alice, "missing-wallet", 3)
    assert res.status_code == 404
    assert _amount(db, alice.id) == 10


def test_cannot_spend_from_someone_elses_wallet(client, db, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    res = _transfer(client, alice, alice.id, 3, from_id=bob.id)
    assert res.status_code == 401
    assert _amount(db, bob.id) == 10


def test_removing_transaction_recredits_source(client, db, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    admin = make_user("admin", access_level=AccessLevel.ADMIN)
    transaction_id = _transfer(client, alice, bob.id, 4).json()["data"]["transaction"]["id"]

    res = client.delete(f"/api/v1/transactions/{transaction_id}", headers=_headers(admin))
    assert res.status_code == 200
    assert _amount(db, alice.id) == 10
    assert _amount(db, bob.id) == 10
    assert client.get(f"/api/v1/transactions/{transaction_id}", headers=_headers(admin)).status_code == 404


def test_reversal_needs_funds_on_recipient(client, db, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    admin = make_user("admin", access_level=AccessLevel.ADMIN)
    transaction_id = _transfer(client, alice, bob.id, 8).json()["data"]["transaction"]["id"]
    assert _transfer(client, bob, alice.id, 15).status_code == 200

    res = client.delete(f"/api/v1/transactions/{transaction_id}", headers=_headers(admin))
    assert res.status_code == 400
    assert res.json()["error"]["type"] == "Insufficient"


def test_standard_user_cannot_remove_transactions(client, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    transaction_id = _transfer(client, alice, bob.id, 2).json()["data"]["transaction"]["id"]
    res = client.delete(f"/api/v1/transactions/{transaction_id}", headers=_headers(alice))
    assert res.status_code == 401


def test_record_transaction_queues_events_for_both_wallets(db, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    messenger = Messenger()
    transactions.record_transaction(
        db, messenger, from_wallet_id=alice.id, to_wallet_id=bob.id, amount=2, owner_id=alice.id
    )
    rooms = {(emission.event, emission.room) for emission in messenger.outbox}
    assert ("transaction", alice.id) in rooms
    assert ("transaction", bob.id) in rooms
    assert ("wallet", alice.id) in rooms
    assert ("wallet", bob.id) in rooms


def test_self_transfer_is_invalid(db, make_user):
    alice = make_user("alice")
    with pytest.raises(InvalidData):
        transactions.create_transaction(db, Messenger(), alice, from_wallet_id=alice.id, to_wallet_id=alice.id, amount=1)


def test_wallet_floor_applies(db, make_user, monkeypatch):
    from app.services import wallets

    monkeypatch.setattr(wallets.settings, "wallet_minimum_amount", 5)
    alice, bob = make_user("alice"), make_user("bob")
    with pytest.raises(Insufficient):
        transactions.create_transaction(db, Messenger(), alice, from_wallet_id=alice.id, to_wallet_id=bob.id, amount=6)


def test_admin_wallet_updates(db, make_user, monkeypatch):
    from app.services import wallets

    admin = make_user("admin", access_level=AccessLevel.ADMIN)
    alice = make_user("alice")

    assert wallets.update_wallet(db, Messenger(), alice.id, admin, amount=5).amount == 15
    assert wallets.update_wallet(db, Messenger(), alice.id, admin, amount=3, should_decrease_amount=True).amount == 12

    monkeypatch.setattr(wallets.settings, "wallet_minimum_amount", 10)
    with pytest.raises(Insufficient):
        wallets.update_wallet(db, Messenger(), alice.id, admin, amount=3, should_decrease_amount=True)
    assert _amount(db, alice.id) == 12

    messenger = Messenger()
    assert wallets.update_wallet(db, messenger, alice.id, admin, reset_amount=True).amount == 0
    assert [(emission.event, emission.room) for emission in messenger.outbox] == [("wallet", alice.id)]


def test_standard_user_cannot_change_wallet_amount(db, make_user):
    from app.core.errors import NotAllowed
    from app.services import wallets

    alice = make_user("alice")
    with pytest.raises(NotAllowed):
        wallets.update_wallet(db, Messenger(), alice.id, alice, amount=5)


def test_failed_credit_leaves_source_debited(db, make_user, monkeypatch):
    from app.core.errors import Database
    from app.services import wallets

    alice, bob = make_user("alice"), make_user("bob")
    original = wallets.change_amount

    def failing_credit(session, wallet_id, delta):
        if delta > 0:
            raise Database(f"Failed to update wallet {wallet_id}")
        return original(session, wallet_id, delta)

    monkeypatch.setattr(wallets, "change_amount", failing_credit)
    with pytest.raises(Database):
        transactions.create_transaction(db, Messenger(), alice, from_wallet_id=alice.id, to_wallet_id=bob.id, amount=4)

    assert _amount(db, alice.id) == 6
    assert _amount(db, bob.id) == 10
