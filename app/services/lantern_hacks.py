"""The lantern hack game: guess a game user's password to move a station's signal."""

import logging
import secrets
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import AlreadyExists, DoesNotExist, InvalidData
from app.core.permissions import is_user_allowed
from app.models import FakePassword, GameUser, LanternHack
from app.services import connector, lantern
from app.services.hacking_api import HackingApiClient
from app.services.messenger import Messenger

logger = logging.getLogger(__name__)

# Fake passwords shown next to the real ones.
FAKE_PASSWORD_SAMPLE = 13
GAME_USERS_PER_HACK = 2

_random = secrets.SystemRandom()


def _correct_user(hack: LanternHack) -> dict:
    return next(game_user for game_user in hack.game_users if game_user.get("isCorrect"))


def _pick_game_users(db: Session, station_id: int) -> list[dict]:
    candidates = connector.get_objects(
        db,
        GameUser,
        or_(GameUser.station_id == station_id, GameUser.station_id.is_(None)),
    )
    candidates = [game_user for game_user in candidates if game_user.passwords]
    if not candidates:
        raise DoesNotExist(f"No game users for station {station_id}")

    picked = []
    for game_user in _random.sample(candidates, min(GAME_USERS_PER_HACK, len(candidates))):
        password = _random.choice(game_user.passwords)
        index = _random.randrange(len(password))
        picked.append(
            {
                "userName": game_user.user_name,
                "password": password,
                "isCorrect": False,
                "passwordHint": {"index": index, "character": password[index]},
            }
        )
    picked[0]["isCorrect"] = True
    return picked


def create_lantern_hack(db: Session, station_id: int, owner_id: str, *, tries_left: Optional[int] = None) -> LanternHack:
    """Start a fresh hack for the owner, replacing any earlier one."""
    values = {
        "station_id": station_id,
        "game_users": _pick_game_users(db, station_id),
        "tries_left": tries_left if tries_left is not None else get_settings().hacking_tries_amount,
        "done": False,
        "was_successful": None,
    }
    existing = connector.find_object(db, LanternHack, LanternHack.owner_id == owner_id)
    if existing is not None:
        return connector.update_object(db, existing, values)
    return connector.save_object(db, LanternHack(owner_id=owner_id, **values))


def hack_data(db: Session, hack: LanternHack) -> dict:
    """What the hacker sees: a shuffled password list and a hint for the right user."""
    fakes = [fake.password for fake in connector.get_objects(db, FakePassword)]
    passwords = _random.sample(fakes, min(FAKE_PASSWORD_SAMPLE, len(fakes)))
    passwords += [game_user["password"] for game_user in hack.game_users]
    _random.shuffle(passwords)
    correct = _correct_user(hack)
    return {
        "passwords": passwords,
        "triesLeft": hack.tries_left,
        "userName": correct["userName"],
        "passwordHint": correct["passwordHint"],
        "stationId": hack.station_id,
    }


def get_lantern_hack(db: Session, station_id: int, user) -> dict:
    """Return the user's open hack on the station, starting one if needed."""
    is_user_allowed("HackLantern", user)
    lantern.get_station(db, station_id)
    hack = connector.find_object(db, LanternHack, LanternHack.owner_id == user.id)
    if hack is None or hack.done or hack.station_id != station_id:
        hack = create_lantern_hack(db, station_id, user.id)
        logger.info("Lantern hack started user=%s station=%s", user.id, station_id)
    return hack_data(db, hack)


def manipulate_station(
    db: Session,
    messenger: Messenger,
    station_id: int,
    user,
    *,
    password: str,
    boosting: bool,
    client: Optional[HackingApiClient] = None,
) -> dict:
    """Guess the password. A correct guess moves the signal and closes the hack."""
    is_user_allowed("HackLantern", user)
    if not password:
        raise InvalidData("password is required")
    hack = connector.find_object(
        db,
        LanternHack,
        LanternHack.owner_id == user.id,
        LanternHack.station_id == station_id,
        LanternHack.done.is_(False),
    )
    if hack is None:
        raise DoesNotExist(f"No open lantern hack on station {station_id}")

    correct = _correct_user(hack)["password"].lower()
    guess = password.lower()

    if guess == correct and hack.tries_left > 0:
        # Closed before the signal moves so one hack never boosts twice.
        connector.update_object(db, hack, {"done": True, "was_successful": True})
        lantern.apply_signal_change(db, messenger, station_id, boosting=boosting, client=client)
        logger.info("Lantern hack succeeded user=%s station=%s boosting=%s", user.id, station_id, boosting)
        return {"success": True, "boostingSignal": boosting}

    tries_left = hack.tries_left - 1
    if tries_left <= 0:
        connector.update_object(db, hack, {"tries_left": 0, "done": True, "was_successful": False})
        logger.info("Lantern hack failed user=%s station=%s", user.id, station_id)
        return {"success": False, "triesLeft": 0}

    connector.update_object(db, hack, {"tries_left": tries_left})
    return {
        "success": False,
        "triesLeft": tries_left,
        "matches": {"amount": sum(1 for char in guess if char in correct)},
    }


# Game items


def create_game_users(db: Session, user, game_users: list[dict]) -> list[GameUser]:
    is_user_allowed("CreateGameItems", user)
    created = []
    for values in game_users:
        passwords = [password.lower() for password in values.get("passwords") or [] if password]
        if not values.get("user_name") or not passwords:
            raise InvalidData("Game users need userName and passwords")
        if connector.find_object(db, GameUser, GameUser.user_name == values["user_name"]):
            raise AlreadyExists(f"Game user {values['user_name']} already exists")
        created.append(
            connector.save_object(
                db,
                GameUser(user_name=values["user_name"], station_id=values.get("station_id"), passwords=passwords),
            )
        )
    logger.info("Created %s game user(s)", len(created))
    return created


def get_game_users(db: Session, user, station_id: Optional[int] = None) -> list[dict]:
    is_user_allowed("GetGameItems", user)
    filters = [GameUser.station_id == station_id] if station_id is not None else []
    return [game_user.to_dict() for game_user in connector.get_objects(db, GameUser, *filters, order_by=GameUser.user_name)]


def add_fake_passwords(db: Session, user, passwords: list[str]) -> list[str]:
    """Store new fake passwords. Already known ones are skipped."""
    is_user_allowed("CreateGameItems", user)
    known = {fake.password for fake in connector.get_objects(db, FakePassword)}
    added = []
    for password in dict.fromkeys(password.lower() for password in passwords if password):
        if password in known:
            continue
        connector.save_object(db, FakePassword(password=password))
        added.append(password)
    return added


def get_fake_passwords(db: Session, user) -> list[str]:
    is_user_allowed("GetGameItems", user)
    return [fake.password for fake in connector.get_objects(db, FakePassword, order_by=FakePassword.password)]
