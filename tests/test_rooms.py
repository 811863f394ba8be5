import pytest

from app.core.errors import AlreadyExists, InvalidData, NotAllowed
from app.models import Message, Room
from app.services import messages, rooms
from app.services.messenger import Messenger


def _room(db, owner, name="Backroom", **kwargs):
    return rooms.create_room(db, Messenger(), owner, room_name=name, **kwargs)


def test_create_room_follows_and_joins(db, make_user):
    owner = make_user("alice")
    messenger = Messenger(sid="sid-1")

    room = rooms.create_room(db, messenger, owner, room_name="Backroom")

    assert room.room_name_lower_case == "backroom"
    assert room.followers == [owner.id]
    assert owner.followed_rooms == [room.id]
    assert messenger.joins == [room.id]
    assert [emission.event for emission in messenger.outbox] == ["room"]


@pytest.mark.parametrize("name", ["Public", "whisper:abc", "x" * 21, ""])
def test_protected_or_invalid_room_names(db, make_user, name):
    with pytest.raises(InvalidData):
        _room(db, make_user("alice"), name)


def test_room_names_are_unique_ignoring_case(db, make_user):
    owner = make_user("alice")
    _room(db, owner, "Backroom")
    with pytest.raises(AlreadyExists):
        _room(db, owner, "BACKROOM")


def test_password_room_needs_password_to_follow(db, make_user):
    owner = make_user("alice")
    guest = make_user("bob")
    room = _room(db, owner, password="knock")

    assert room.is_public is False
    assert room.to_dict()["hasPassword"] is True
    assert "password" not in room.to_dict()
    with pytest.raises(NotAllowed):
        rooms.follow_room(db, Messenger(), room.id, guest)
    with pytest.raises(NotAllowed):
        rooms.follow_room(db, Messenger(), room.id, guest, password="wrong")

    messenger = Messenger(sid="sid-2")
    result = rooms.follow_room(db, messenger, room.id, guest, password="knock")

    assert result["user"] == {"objectId": guest.id}
    assert guest.followed_rooms == [room.id]
    assert messenger.joins == [room.id]
    assert [emission.event for emission in messenger.outbox] == ["user", "room", "follow"]


def test_unfollow_drops_followed_room(db, make_user):
    owner = make_user("alice")
    guest = make_user("bob")
    room = _room(db, owner)
    rooms.follow_room(db, Messenger(), room.id, guest)

    result = rooms.unfollow_room(db, Messenger(), room.id, guest)

    assert result["changeType"] == "remove"
    assert guest.followed_rooms == []
    assert guest.id not in db.get(Room, room.id).followers


def test_chat_needs_room_access_and_history_needs_follow(db, make_user):
    owner = make_user("alice")
    guest = make_user("bob")
    room = _room(db, owner, password="knock")

    with pytest.raises(NotAllowed):
        messages.send_chat_message(db, Messenger(), guest, room_id=room.id, text=["hi"])
    with pytest.raises(NotAllowed):
        messages.get_messages_by_room(db, room.id, guest)

    messages.send_chat_message(db, Messenger(), owner, room_id=room.id, text=["welcome"])
    rooms.follow_room(db, Messenger(), room.id, guest, password="knock")
    messages.send_chat_message(db, Messenger(), guest, room_id=room.id, text=["thanks"])

    history = messages.get_messages_by_room(db, room.id, guest)
    assert sorted(message["text"][0] for message in history) == ["thanks", "welcome"]


def test_message_text_limits(db, make_user):
    owner = make_user("alice")
    room = _room(db, owner)
    with pytest.raises(InvalidData):
        messages.send_chat_message(db, Messenger(), owner, room_id=room.id, text=[])
    with pytest.raises(InvalidData):
        messages.send_chat_message(db, Messenger(), owner, room_id=room.id, text=["x" * 2501])
    message = messages.send_chat_message(db, Messenger(), owner, room_id=room.id, image={"imageName": "map.png"})
    assert message.text == []


def test_whisper_room_is_created_once(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    eve = make_user("eve")

    first = messages.send_whisper(db, Messenger(), alice, participant_ids=[alice.id, bob.id], text=["psst"])
    second = messages.send_whisper(db, Messenger(), bob, participant_ids=[bob.id, alice.id], text=["what"])

    assert first.room_id == second.room_id
    assert first.message_type == "whisper"
    room = db.get(Room, first.room_id)
    assert room.is_whisper is True
    assert room.room_name == rooms.whisper_room_name([alice.id, bob.id])
    assert len(messages.get_messages_by_room(db, room.id, bob)) == 2
    with pytest.raises(NotAllowed):
        messages.get_messages_by_room(db, room.id, eve)
    with pytest.raises(NotAllowed):
        messages.send_whisper(db, Messenger(), eve, participant_ids=[alice.id, bob.id], text=["hi"])
    with pytest.raises(NotAllowed):
        rooms.update_room(db, Messenger(), room.id, alice, {"room_name": "Renamed"})


def test_locked_room_name_cannot_change(db, make_user):
    owner = make_user("alice")
    room = _room(db, owner)
    rooms.update_room(db, Messenger(), room.id, owner, {"name_is_locked": True})
    with pytest.raises(NotAllowed):
        rooms.update_room(db, Messenger(), room.id, owner, {"room_name": "Frontroom"})


def test_remove_room_drops_messages_and_follows(db, make_user):
    owner = make_user("alice")
    guest = make_user("bob")
    room = _room(db, owner)
    rooms.follow_room(db, Messenger(), room.id, guest)
    messages.send_chat_message(db, Messenger(), guest, room_id=room.id, text=["bye"])

    assert rooms.remove_room(db, Messenger(), room.id, owner) == {"objectId": room.id}

    assert db.query(Message).count() == 0
    db.refresh(guest)
    assert guest.followed_rooms == []


def test_room_endpoints(client, make_user, auth_headers):
    owner = make_user("alice")
    guest = make_user("bob")
    res = client.post(
        "/api/v1/rooms", json={"data": {"roomName": "Backroom", "password": "knock"}}, headers=auth_headers(owner)
    )
    assert res.status_code == 200
    room = res.json()["data"]["room"]
    assert room["hasPassword"] is True

    res = client.post(f"/api/v1/rooms/{room['id']}/follow", headers=auth_headers(guest))
    assert res.status_code == 401
    res = client.post(
        f"/api/v1/rooms/{room['id']}/follow", json={"data": {"password": "knock"}}, headers=auth_headers(guest)
    )
    assert res.status_code == 200

    res = client.post(
        "/api/v1/messages", json={"data": {"roomId": room["id"], "text": ["hello"]}}, headers=auth_headers(guest)
    )
    assert res.status_code == 200

    res = client.get(f"/api/v1/rooms/{room['id']}/messages", headers=auth_headers(owner))
    assert [message["text"] for message in res.json()["data"]["messages"]] == [["hello"]]

    res = client.get("/api/v1/rooms/followed", headers=auth_headers(guest))
    assert [item["id"] for item in res.json()["data"]["rooms"]] == [room["id"]]
