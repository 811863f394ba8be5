import logging

import pytest

from app.core.errors import AlreadyExists, External, NotAllowed
from app.core.permissions import AccessLevel
from app.models import LanternStation
from app.services import lantern
from app.services.messenger import Messenger

SIGNAL = {"default": 100, "threshold": 50, "change_percentage": 0.2, "max_change": 10}


@pytest.mark.parametrize(
    "signal,boosting,expected",
    [
        (100, True, 110),
        (100, False, 90),
        (90, True, 100),
        (120, False, 110),
        (140, True, 142),
        (60, False, 58),
        (149, True, 150),
        (150, True, 150),
        (50, False, 50),
    ],
)
def test_next_signal_value(signal, boosting, expected):
    assert lantern.next_signal_value(signal, boosting, **SIGNAL) == expected


def _station(db, station_id, signal_value=100, **extra):
    db.add(LanternStation(station_id=station_id, station_name=f"Station {station_id}", signal_value=signal_value, **extra))
    db.commit()


def _admin(make_user):
    return make_user("admin", access_level=AccessLevel.ADMIN)


def test_drift_only_runs_while_round_is_active(db, make_user):
    _station(db, 1, 110)
    _station(db, 2, 95)
    messenger = Messenger()
    assert lantern.drift_stations(db, messenger) == 0

    lantern.update_lantern_round(db, Messenger(), _admin(make_user), is_active=True)
    assert lantern.drift_stations(db, messenger) == 2
    assert lantern.get_station(db, 1).signal_value == 109
    assert lantern.get_station(db, 2).signal_value == 96
    assert [emission.event for emission in messenger.outbox] == ["lanternStations"]


def test_round_activation_broadcasts_and_deactivation_resets(db, make_user):
    admin = _admin(make_user)
    _station(db, 1, 130, is_under_attack=True)

    messenger = Messenger()
    lantern.update_lantern_round(db, messenger, admin, is_active=True)
    texts = [e.data["data"]["message"]["text"][0] for e in messenger.outbox if e.event == "broadcast"]
    assert texts == ["LANTERN ACTIVITY DETECTED. LANTERN ONLINE"]
    assert lantern.get_station(db, 1).signal_value == 130

    messenger = Messenger()
    lantern.update_lantern_round(db, messenger, admin, is_active=False)
    texts = [e.data["data"]["message"]["text"][0] for e in messenger.outbox if e.event == "broadcast"]
    assert texts == ["DISCONNECTING. LANTERN OFFLINE"]
    station = lantern.get_station(db, 1)
    assert station.signal_value == 100
    assert station.is_under_attack is False


def test_update_round_without_change_does_not_broadcast(db, make_user):
    messenger = Messenger()
    lantern.update_lantern_round(db, messenger, _admin(make_user), is_active=False)
    assert [e.event for e in messenger.outbox] == ["lanternRound"]


def test_signal_update_uses_settings(db, make_user):
    _station(db, 3, 100)
    station = lantern.update_signal_value(db, Messenger(), 3, _admin(make_user), boosting=True)
    assert station.signal_value == 110


def test_direct_signal_update_needs_admin(db, make_user):
    _station(db, 3, 100)
    with pytest.raises(NotAllowed):
        lantern.update_signal_value(db, Messenger(), 3, make_user("runner"), boosting=True)
    assert lantern.get_station(db, 3).signal_value == 100


class RecordingClient:
    def __init__(self, fail=False):
        self.boosts = []
        self.fail = fail

    def set_boost(self, *, station_id, boost):
        self.boosts.append((station_id, boost))
        if self.fail:
            raise External("Hacking API error 503")


def test_drift_reports_each_moved_station(db, make_user):
    _station(db, 1, 110)
    _station(db, 2, 100)
    _station(db, 3, 90)
    lantern.update_lantern_round(db, Messenger(), _admin(make_user), is_active=True)
    client = RecordingClient()
    assert lantern.drift_stations(db, Messenger(), client=client) == 2
    assert sorted(client.boosts) == [(1, 109), (3, 91)]


def test_drift_keeps_going_when_hacking_api_fails(db, make_user, caplog):
    _station(db, 1, 110)
    _station(db, 2, 90)
    lantern.update_lantern_round(db, Messenger(), _admin(make_user), is_active=True)
    messenger = Messenger()
    with caplog.at_level(logging.WARNING, logger="app.services.lantern"):
        assert lantern.drift_stations(db, messenger, client=RecordingClient(fail=True)) == 2
    assert lantern.get_station(db, 2).signal_value == 91
    assert "not reported" in caplog.text
    assert [emission.event for emission in messenger.outbox] == ["lanternStations"]


def test_station_create_rules(db, make_user):
    admin = _admin(make_user)
    station = lantern.create_lantern_station(db, Messenger(), admin, {"station_id": 7, "station_name": "Seven"})
    assert station.signal_value == 100

    with pytest.raises(AlreadyExists):
        lantern.create_lantern_station(db, Messenger(), admin, {"station_id": 7, "station_name": "Again"})
    with pytest.raises(NotAllowed):
        lantern.create_lantern_station(db, Messenger(), make_user("bob"), {"station_id": 8, "station_name": "Eight"})


def test_lantern_team_points_reset(db, make_user):
    admin = _admin(make_user)
    lantern.create_lantern_team(db, Messenger(), admin, {"team_id": 1, "team_name": "Red", "short_name": "R", "points": 12})
    with pytest.raises(AlreadyExists):
        lantern.create_lantern_team(db, Messenger(), admin, {"team_id": 2, "team_name": "Red", "short_name": "R2"})

    team = lantern.update_lantern_team(db, Messenger(), 1, admin, {"is_active": True}, reset_points=True)
    assert team.points == 0
    assert team.is_active is True


def test_lantern_info_is_public(client, db):
    _station(db, 1, is_active=True)
    _station(db, 2)
    res = client.get("/api/v1/lanternInfo")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["round"]["isActive"] is False
    assert [s["stationId"] for s in data["activeStations"]] == [1]
    assert [s["stationId"] for s in data["inactiveStations"]] == [2]
    assert data["teams"] == []


def test_station_endpoints_need_admin(client, make_user, auth_headers):
    body = {"data": {"stationId": 4, "stationName": "Four"}}
    user = make_user("bob")
    assert client.post("/api/v1/lanternStations", json=body, headers=auth_headers(user)).status_code == 401

    admin = _admin(make_user)
    res = client.post("/api/v1/lanternStations", json=body, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["data"]["station"]["signalValue"] == 100

    signal = {"data": {"boosting": False}}
    assert client.put("/api/v1/lanternStations/4/signal", json=signal, headers=auth_headers(user)).status_code == 401
    res = client.put("/api/v1/lanternStations/4/signal", json=signal, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["data"]["station"]["signalValue"] == 90

    res = client.delete("/api/v1/lanternStations/4", headers=auth_headers(admin))
    assert res.json()["data"] == {"stationId": 4}
