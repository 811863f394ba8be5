import asyncio

import pytest
from fastapi.routing import APIRoute

from app.core.access import AnonymousUser
from app.core.config import get_settings
from app.core.permissions import AccessLevel
from app.core.security import create_access_token, create_refresh_token
from app.main import app
from app.sockets.handlers import rooms_for
from app.sockets.server import sio


@pytest.fixture
def socket_calls(monkeypatch):
    calls = {"emitted": [], "rooms": [], "session": {}}

    async def fake_get_session(sid, namespace=None):
        return calls["session"]

    async def fake_save_session(sid, session, namespace=None):
        calls["session"] = session

    async def fake_enter_room(sid, room, namespace=None):
        calls["rooms"].append(room)

    async def fake_emit(event, data=None, to=None, room=None, skip_sid=None, namespace=None, **kwargs):
        calls["emitted"].append({"event": event, "data": data, "to": to, "skip_sid": skip_sid})

    monkeypatch.setattr(sio, "get_session", fake_get_session)
    monkeypatch.setattr(sio, "save_session", fake_save_session)
    monkeypatch.setattr(sio, "enter_room", fake_enter_room)
    monkeypatch.setattr(sio, "emit", fake_emit)
    return calls


def _call(event_name, *args):
    return asyncio.run(sio.handlers["/"][event_name](*args))


def test_rooms_for_anonymous_user():
    assert rooms_for(AnonymousUser()) == ["accessLevel:0"]


def test_rooms_for_user(db, make_user):
    user = make_user("alice", part_of_teams=["team-1"], followed_rooms=["room-9"])
    assert rooms_for(user) == [user.id, "team-1", "room-9", "accessLevel:0", "accessLevel:1"]


def test_connect_joins_rooms(db, make_user, socket_calls):
    user = make_user("alice")
    token = create_access_token(user.id, user.access_level)
    assert _call("connect", "sid-1", {}, {"token": token}) is True
    assert socket_calls["session"] == {"user_id": user.id}
    assert user.id in socket_calls["rooms"]


def test_connect_rejects_refresh_token(db, make_user, socket_calls):
    user = make_user("alice")
    token = create_refresh_token(user.id, user.access_level)
    assert _call("connect", "sid-1", {}, {"token": token}) is False
    assert socket_calls["rooms"] == []


def test_connect_without_token_is_anonymous(db, socket_calls):
    assert _call("connect", "sid-1", {}, None) is True
    assert socket_calls["session"] == {"user_id": None}
    assert socket_calls["rooms"] == ["accessLevel:0"]


def test_event_acks_data_and_flushes(db, make_user, socket_calls):
    user = make_user("alice")
    socket_calls["session"] = {"user_id": user.id}

    ack = _call("createDevice", "sid-1", {"data": {"deviceName": "phone"}})

    assert ack["data"]["device"]["deviceName"] == "phone"
    assert socket_calls["emitted"][0]["event"] == "device"
    assert socket_calls["emitted"][0]["skip_sid"] == "sid-1"


def test_event_acks_error_for_anonymous(db, socket_calls):
    socket_calls["session"] = {"user_id": None}
    ack = _call("createDevice", "sid-1", {"data": {"deviceName": "phone"}})
    assert ack["error"]["type"] == "NotAllowed"
    assert ack["error"]["status"] == 401
    assert socket_calls["emitted"] == []


def test_event_reports_missing_parameter(db, make_user, socket_calls):
    socket_calls["session"] = {"user_id": make_user("alice").id}
    ack = _call("getDevice", "sid-1", {})
    assert ack["error"]["type"] == "InvalidData"


def test_event_rejects_invalid_body(db, make_user, socket_calls):
    socket_calls["session"] = {"user_id": make_user("alice").id}
    ack = _call("createDevice", "sid-1", {"data": {"deviceType": "gps"}})
    assert ack["error"]["type"] == "InvalidData"


def test_lantern_info_for_anonymous_socket(db, socket_calls):
    socket_calls["session"] = {"user_id": None}
    ack = _call("getLanternInfo", "sid-1", {})
    assert ack["data"]["round"]["isActive"] is False


def test_non_integer_station_id_acks_invalid_data(db, make_user, socket_calls):
    socket_calls["session"] = {"user_id": make_user("admin", access_level=AccessLevel.ADMIN).id}
    ack = _call("updateLanternStation", "sid-1", {"stationId": "abc", "data": {"stationName": "One"}})
    assert ack["error"]["type"] == "InvalidData"
    assert "stationId" in ack["error"]["detail"]


def test_room_follow_joins_socket_room(db, make_user, socket_calls):
    owner = make_user("alice")
    guest = make_user("bob")
    socket_calls["session"] = {"user_id": owner.id}
    room = _call("createRoom", "sid-1", {"data": {"roomName": "Backroom", "password": "knock"}})["data"]["room"]

    socket_calls["session"] = {"user_id": guest.id}
    denied = _call("followRoom", "sid-2", {"roomId": room["id"]})
    ack = _call("followRoom", "sid-2", {"roomId": room["id"], "data": {"password": "knock"}})

    assert denied["error"]["type"] == "NotAllowed"
    assert ack["data"]["user"] == {"objectId": guest.id}
    assert socket_calls["rooms"] == [room["id"], room["id"]]


# REST route -> socket event. Auth routes hand out tokens and stay REST only.
REST_EVENTS = {
    ("GET", "/users"): "getUsers",
    ("GET", "/users/{user_id}"): "getUser",
    ("PUT", "/users/{user_id}"): "updateUser",
    ("POST", "/users/{user_id}/verify"): "verifyUser",
    ("POST", "/users/{user_id}/ban"): "banUser",
    ("POST", "/users/{user_id}/unban"): "unbanUser",
    ("PUT", "/users/{user_id}/accessLevel"): "updateUserAccessLevel",
    ("POST", "/aliases"): "createAlias",
    ("GET", "/aliases"): "getAllAliases",
    ("GET", "/aliases/mine"): "getAliases",
    ("GET", "/aliases/{alias_id}"): "getAlias",
    ("PUT", "/aliases/{alias_id}"): "updateAlias",
    ("DELETE", "/aliases/{alias_id}"): "removeAlias",
    ("POST", "/teams"): "createTeam",
    ("GET", "/teams"): "getTeams",
    ("GET", "/teams/{team_id}"): "getTeam",
    ("PUT", "/teams/{team_id}"): "updateTeam",
    ("POST", "/teams/{team_id}/members"): "addTeamMember",
    ("DELETE", "/teams/{team_id}/members/{member_id}"): "removeTeamMember",
    ("DELETE", "/teams/{team_id}"): "removeTeam",
    ("GET", "/wallets"): "getWallets",
    ("GET", "/wallets/{wallet_id}"): "getWallet",
    ("GET", "/wallets/{wallet_id}/transactions"): "getTransactions",
    ("PUT", "/wallets/{wallet_id}"): "updateWallet",
    ("PUT", "/wallets/{wallet_id}/access"): "updateWalletAccess",
    ("POST", "/transactions"): "createTransaction",
    ("GET", "/transactions"): "getTransactions",
    ("GET", "/transactions/{transaction_id}"): "getTransaction",
    ("PUT", "/transactions/{transaction_id}"): "updateTransaction",
    ("DELETE", "/transactions/{transaction_id}"): "removeTransaction",
    ("POST", "/devices"): "createDevice",
    ("GET", "/devices"): "getDevices",
    ("GET", "/devices/{device_id}"): "getDevice",
    ("PUT", "/devices/{device_id}"): "updateDevice",
    ("PUT", "/devices/{device_id}/access"): "updateDeviceAccess",
    ("DELETE", "/devices/{device_id}"): "removeDevice",
    ("POST", "/forums"): "createForum",
    ("GET", "/forums"): "getForums",
    ("GET", "/forums/{forum_id}"): "getForum",
    ("GET", "/forums/{forum_id}/threads"): "getForumThreads",
    ("PUT", "/forums/{forum_id}"): "updateForum",
    ("PUT", "/forums/{forum_id}/access"): "updateForumAccess",
    ("DELETE", "/forums/{forum_id}"): "removeForum",
    ("POST", "/forumThreads"): "createForumThread",
    ("GET", "/forumThreads"): "getForumThreads",
    ("GET", "/forumThreads/{thread_id}"): "getForumThread",
    ("GET", "/forumThreads/{thread_id}/posts"): "getForumPosts",
    ("PUT", "/forumThreads/{thread_id}"): "updateForumThread",
    ("PUT", "/forumThreads/{thread_id}/access"): "updateForumThreadAccess",
    ("DELETE", "/forumThreads/{thread_id}"): "removeForumThread",
    ("POST", "/forumPosts"): "createForumPost",
    ("GET", "/forumPosts/{post_id}"): "getForumPost",
    ("PUT", "/forumPosts/{post_id}"): "updateForumPost",
    ("DELETE", "/forumPosts/{post_id}"): "removeForumPost",
    ("POST", "/triggerEvents"): "createTriggerEvent",
    ("GET", "/triggerEvents"): "getTriggerEvents",
    ("GET", "/triggerEvents/{event_id}"): "getTriggerEvent",
    ("PUT", "/triggerEvents/{event_id}"): "updateTriggerEvent",
    ("POST", "/triggerEvents/{event_id}/run"): "runTriggerEvent",
    ("DELETE", "/triggerEvents/{event_id}"): "removeTriggerEvent",
    ("GET", "/lanternInfo"): "getLanternInfo",
    ("GET", "/lanternRound"): "getLanternRound",
    ("PUT", "/lanternRound"): "updateLanternRound",
    ("GET", "/lanternStations"): "getLanternStations",
    ("POST", "/lanternStations"): "createLanternStation",
    ("GET", "/lanternStations/{station_id}"): "getLanternStation",
    ("PUT", "/lanternStations/{station_id}"): "updateLanternStation",
    ("PUT", "/lanternStations/{station_id}/signal"): "updateLanternSignal",
    ("DELETE", "/lanternStations/{station_id}"): "deleteLanternStation",
    ("GET", "/lanternTeams"): "getLanternTeams",
    ("POST", "/lanternTeams"): "createLanternTeam",
    ("PUT", "/lanternTeams/{team_id}"): "updateLanternTeam",
    ("DELETE", "/lanternTeams/{team_id}"): "deleteLanternTeam",
    ("GET", "/lanternHacks/{station_id}"): "getLanternHack",
    ("POST", "/lanternHacks/{station_id}/manipulate"): "manipulateStation",
    ("POST", "/gameUsers"): "createGameUsers",
    ("GET", "/gameUsers"): "getGameUsers",
    ("POST", "/fakePasswords"): "addFakePasswords",
    ("GET", "/fakePasswords"): "getFakePasswords",
    ("GET", "/calibrationMissions"): "getCalibrationMissions",
    ("GET", "/calibrationMissions/active"): "getCalibrationMission",
    ("POST", "/calibrationMissions/users/{owner_id}/complete"): "completeCalibrationMission",
    ("POST", "/calibrationMissions/users/{owner_id}/cancel"): "cancelCalibrationMission",
    ("DELETE", "/calibrationMissions/stations/{station_id}"): "removeCalibrationMissions",
    ("POST", "/rooms"): "createRoom",
    ("GET", "/rooms"): "getRooms",
    ("GET", "/rooms/followed"): "getFollowedRooms",
    ("GET", "/rooms/{room_id}"): "getRoom",
    ("GET", "/rooms/{room_id}/messages"): "getHistory",
    ("PUT", "/rooms/{room_id}"): "updateRoom",
    ("PUT", "/rooms/{room_id}/access"): "updateRoomAccess",
    ("POST", "/rooms/{room_id}/follow"): "followRoom",
    ("POST", "/rooms/{room_id}/unfollow"): "unfollowRoom",
    ("DELETE", "/rooms/{room_id}"): "removeRoom",
    ("POST", "/messages"): "sendMessage",
    ("POST", "/messages/whispers"): "sendWhisper",
    ("PUT", "/messages/{message_id}"): "updateMessage",
    ("DELETE", "/messages/{message_id}"): "removeMessage",
    ("POST", "/docFiles"): "createDocFile",
    ("GET", "/docFiles"): "getDocFiles",
    ("POST", "/docFiles/unlock"): "unlockDocFile",
    ("GET", "/docFiles/{doc_file_id}"): "getDocFile",
    ("POST", "/docFiles/{doc_file_id}/unlock"): "unlockDocFile",
    ("PUT", "/docFiles/{doc_file_id}"): "updateDocFile",
    ("PUT", "/docFiles/{doc_file_id}/access"): "updateDocFileAccess",
    ("DELETE", "/docFiles/{doc_file_id}"): "removeDocFile",
}


def _api_routes():
    prefix = get_settings().api_v1_prefix
    for route in app.routes:
        if not isinstance(route, APIRoute) or not route.path.startswith(prefix + "/"):
            continue
        path = route.path[len(prefix):]
        if path.startswith("/auth"):
            continue
        for method in route.methods:
            yield method, path


def test_every_rest_route_has_a_socket_event():
    routes = set(_api_routes())
    assert routes == set(REST_EVENTS)
    missing = sorted({name for name in REST_EVENTS.values() if name not in sio.handlers["/"]})
    assert missing == []
