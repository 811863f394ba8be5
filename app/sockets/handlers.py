"""Socket events. Each mirrors a REST route and acks with {"data": ...} or {"error": ...}."""

from functools import wraps
import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.database import SessionLocal
from app.core.errors import GeneralError, InvalidData
from app.core.permissions import AccessLevel, access_room
from app.dependencies import load_user, user_from_token
from app.schemas.common import AccessUpdate
from app.schemas.device import DeviceCreate, DeviceUpdate
from app.schemas.doc_file import DocFileCreate, DocFileUnlock, DocFileUpdate
from app.schemas.forum import ForumCreate, ForumUpdate, PostCreate, PostUpdate, ThreadCreate, ThreadUpdate
from app.schemas.lantern import (
    FakePasswordsIn,
    GameUsersCreate,
    HackAttempt,
    LanternTeamIn,
    RoundUpdate,
    SignalUpdate,
    StationIn,
)
from app.schemas.room import MessageCreate, MessageUpdate, RoomCreate, RoomFollow, RoomUpdate, WhisperCreate
from app.schemas.transaction import TransactionCreate, TransactionUpdate
from app.schemas.trigger_event import TriggerEventIn
from app.schemas.user import AccessLevelUpdate, AliasCreate, AliasUpdate, TeamCreate, TeamMember, TeamUpdate, UserUpdate
from app.schemas.wallet import WalletUpdate
from app.services import (
    aliases,
    calibration_missions,
    devices,
    doc_files,
    forum_posts,
    forum_threads,
    forums,
    lantern,
    lantern_hacks,
    messages,
    rooms,
    teams,
    transactions,
    trigger_events,
    users,
    wallets,
)
from app.services.messenger import Messenger
from app.sockets.server import sio

logger = logging.getLogger(__name__)

Handler = Callable[[Session, Messenger, Any, dict], Any]


def rooms_for(user) -> list[str]:
    """User id (also the wallet id), team ids and every access-level room up to the user's."""
    level_rooms = [access_room(level) for level in AccessLevel if level <= user.access_level]
    if getattr(user, "is_anonymous", False):
        return level_rooms
    return [user.id, *(user.part_of_teams or []), *(user.followed_rooms or []), *level_rooms]


def _resolve_rooms(token: Optional[str]) -> tuple[Optional[str], list[str]]:
    db = SessionLocal()
    try:
        user = user_from_token(db, token)
        user_id = None if getattr(user, "is_anonymous", False) else user.id
        return user_id, rooms_for(user)
    finally:
        db.close()


@sio.event
async def connect(sid, environ, auth=None):
    token = (auth or {}).get("token") if isinstance(auth, dict) else None
    try:
        user_id, joined = await run_in_threadpool(_resolve_rooms, token)
    except GeneralError as exc:
        logger.info("Socket %s rejected: %s", sid, exc.detail)
        return False
    await sio.save_session(sid, {"user_id": user_id})
    for room in joined:
        await sio.enter_room(sid, room)
    logger.info("Socket %s connected user=%s", sid, user_id)
    return True


@sio.event
async def disconnect(sid, *args):
    logger.info("Socket %s disconnected", sid)


def _run(func: Handler, user_id: Optional[str], messenger: Messenger, params: dict) -> Any:
    db = SessionLocal()
    try:
        user = load_user(db, user_id)
        return func(db, messenger, user, params)
    finally:
        db.close()


def event(name: str):
    """Register a sync handler run in the threadpool with its own session."""

    def decorator(func: Handler) -> Handler:
        @wraps(func)
        async def handler(sid, params=None):
            params = params if isinstance(params, dict) else {}
            session = await sio.get_session(sid)
            messenger = Messenger(sid)
            try:
                data = await run_in_threadpool(_run, func, session.get("user_id"), messenger, params)
            except GeneralError as exc:
                logger.info("Socket event %s failed: %s %s", name, exc.name, exc.detail)
                return exc.to_dict()
            await messenger.flush(sio)
            return {"data": data}

        sio.on(name, handler)
        return func

    return decorator


def _body(schema: type[BaseModel], params: dict, *, partial: bool = True) -> dict:
    raw = params.get("data", params)
    try:
        return schema.model_validate(raw or {}).model_dump(exclude_unset=partial)
    except ValidationError as exc:
        raise InvalidData("Invalid parameters", extra={"errors": exc.errors(include_url=False, include_context=False)}) from exc


def _param(params: dict, key: str) -> Any:
    value = params.get(key)
    if value is None:
        raise InvalidData(f"{key} is required")
    return value


def _int_param(params: dict, key: str) -> int:
    value = _param(params, key)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidData(f"{key} must be an integer") from exc


# Users


@event("getUsers")
def get_users(db, messenger, user, params):
    return {"users": users.get_users(db, user)}


@event("getUser")
def get_user(db, messenger, user, params):
    return {"user": users.get_user(db, _param(params, "userId"), user)}


@event("updateUser")
def update_user(db, messenger, user, params):
    updated = users.update_user(db, messenger, _param(params, "userId"), user, **_body(UserUpdate, params))
    return {"user": updated.to_dict()}


@event("verifyUser")
def verify_user(db, messenger, user, params):
    return {"user": users.verify_user(db, messenger, _param(params, "userId"), user).to_dict()}


@event("banUser")
def ban_user(db, messenger, user, params):
    return {"user": users.ban_user(db, messenger, _param(params, "userId"), user).to_dict()}


@event("unbanUser")
def unban_user(db, messenger, user, params):
    return {"user": users.unban_user(db, messenger, _param(params, "userId"), user).to_dict()}


@event("updateUserAccessLevel")
def update_user_access_level(db, messenger, user, params):
    body = _body(AccessLevelUpdate, params, partial=False)
    updated = users.update_access_level(db, messenger, _param(params, "userId"), user, body["access_level"])
    return {"user": updated.to_dict()}


# Aliases and teams


@event("createAlias")
def create_alias(db, messenger, user, params):
    return {"alias": aliases.create_alias(db, messenger, user, **_body(AliasCreate, params, partial=False)).to_dict()}


@event("getAllAliases")
def get_all_aliases(db, messenger, user, params):
    return {"aliases": aliases.get_aliases(db, user)}


@event("getAliases")
def get_aliases(db, messenger, user, params):
    return {"aliases": aliases.get_aliases_by_user(db, user)}


@event("getAlias")
def get_alias(db, messenger, user, params):
    return {"alias": aliases.get_alias(db, _param(params, "aliasId"), user)}


@event("updateAlias")
def update_alias(db, messenger, user, params):
    alias = aliases.update_alias(db, messenger, _param(params, "aliasId"), user, _body(AliasUpdate, params))
    return {"alias": alias.to_dict()}


@event("removeAlias")
def remove_alias(db, messenger, user, params):
    return {"alias": aliases.remove_alias(db, messenger, _param(params, "aliasId"), user)}


@event("createTeam")
def create_team(db, messenger, user, params):
    return {"team": teams.create_team(db, messenger, user, **_body(TeamCreate, params, partial=False)).to_dict()}


@event("getTeams")
def get_teams(db, messenger, user, params):
    return {"teams": teams.get_teams(db, user)}


@event("getTeam")
def get_team(db, messenger, user, params):
    return {"team": teams.get_team(db, _param(params, "teamId"), user)}


@event("updateTeam")
def update_team(db, messenger, user, params):
    return {"team": teams.update_team(db, messenger, _param(params, "teamId"), user, _body(TeamUpdate, params)).to_dict()}


@event("addTeamMember")
def add_team_member(db, messenger, user, params):
    body = _body(TeamMember, params, partial=False)
    return {"team": teams.add_member(db, messenger, _param(params, "teamId"), user, body["member_id"]).to_dict()}


@event("removeTeamMember")
def remove_team_member(db, messenger, user, params):
    team = teams.remove_member(db, messenger, _param(params, "teamId"), user, _param(params, "memberId"))
    return {"team": team.to_dict()}


@event("removeTeam")
def remove_team(db, messenger, user, params):
    return {"team": teams.remove_team(db, messenger, _param(params, "teamId"), user)}


# Wallets and transactions


@event("getWallets")
def get_wallets(db, messenger, user, params):
    return {"wallets": wallets.get_wallets(db, user)}


@event("getWallet")
def get_wallet(db, messenger, user, params):
    return {"wallet": wallets.get_wallet(db, _param(params, "walletId"), user)}


@event("updateWallet")
def update_wallet(db, messenger, user, params):
    wallet = wallets.update_wallet(db, messenger, _param(params, "walletId"), user, **_body(WalletUpdate, params))
    return {"wallet": wallet.to_dict()}


@event("updateWalletAccess")
def update_wallet_access(db, messenger, user, params):
    wallet = wallets.update_wallet_access(db, messenger, _param(params, "walletId"), user, **_body(AccessUpdate, params))
    return {"wallet": wallet.to_dict()}


@event("createTransaction")
def create_transaction(db, messenger, user, params):
    return transactions.create_transaction(db, messenger, user, **_body(TransactionCreate, params, partial=False))


@event("getTransactions")
def get_transactions(db, messenger, user, params):
    if params.get("walletId"):
        return {"transactions": transactions.get_transactions_by_wallet(db, params["walletId"], user)}
    return {"transactions": transactions.get_transactions_by_user(db, user)}


@event("getTransaction")
def get_transaction(db, messenger, user, params):
    return {"transaction": transactions.get_transaction(db, _param(params, "transactionId"), user)}


@event("updateTransaction")
def update_transaction(db, messenger, user, params):
    transaction = transactions.update_transaction(
        db, messenger, _param(params, "transactionId"), user, **_body(TransactionUpdate, params)
    )
    return {"transaction": transaction.to_dict()}


@event("removeTransaction")
def remove_transaction(db, messenger, user, params):
    return transactions.remove_transaction(db, messenger, _param(params, "transactionId"), user)


# Devices


@event("createDevice")
def create_device(db, messenger, user, params):
    return {"device": devices.create_device(db, messenger, user, **_body(DeviceCreate, params, partial=False)).to_dict()}


@event("getDevices")
def get_devices(db, messenger, user, params):
    return {"devices": devices.get_devices(db, user)}


@event("getDevice")
def get_device(db, messenger, user, params):
    return {"device": devices.get_device(db, _param(params, "deviceId"), user)}


@event("updateDevice")
def update_device(db, messenger, user, params):
    device = devices.update_device(db, messenger, _param(params, "deviceId"), user, _body(DeviceUpdate, params))
    return {"device": device.to_dict()}


@event("updateDeviceAccess")
def update_device_access(db, messenger, user, params):
    device = devices.update_device_access(db, messenger, _param(params, "deviceId"), user, **_body(AccessUpdate, params))
    return {"device": device.to_dict()}


@event("removeDevice")
def remove_device(db, messenger, user, params):
    return {"device": devices.remove_device(db, messenger, _param(params, "deviceId"), user)}


# Forums


@event("createForum")
def create_forum(db, messenger, user, params):
    return {"forum": forums.create_forum(db, messenger, user, **_body(ForumCreate, params, partial=False)).to_dict()}


@event("getForums")
def get_forums(db, messenger, user, params):
    return {"forums": forums.get_forums(db, user)}


@event("getForum")
def get_forum(db, messenger, user, params):
    return {"forum": forums.get_forum(db, _param(params, "forumId"), user)}


@event("updateForum")
def update_forum(db, messenger, user, params):
    return {"forum": forums.update_forum(db, messenger, _param(params, "forumId"), user, _body(ForumUpdate, params)).to_dict()}


@event("updateForumAccess")
def update_forum_access(db, messenger, user, params):
    forum = forums.update_forum_access(db, messenger, _param(params, "forumId"), user, **_body(AccessUpdate, params))
    return {"forum": forum.to_dict()}


@event("removeForum")
def remove_forum(db, messenger, user, params):
    return {"forum": forums.remove_forum(db, messenger, _param(params, "forumId"), user)}


@event("createForumThread")
def create_forum_thread(db, messenger, user, params):
    thread = forum_threads.create_thread(db, messenger, user, **_body(ThreadCreate, params, partial=False))
    return {"thread": thread.to_dict()}


@event("getForumThreads")
def get_forum_threads(db, messenger, user, params):
    if params.get("forumId"):
        return {"threads": forum_threads.get_threads_by_forum(db, params["forumId"], user)}
    return {"threads": forum_threads.get_threads_by_user(db, user)}


@event("getForumThread")
def get_forum_thread(db, messenger, user, params):
    return {"thread": forum_threads.get_thread(db, _param(params, "threadId"), user)}


@event("updateForumThread")
def update_forum_thread(db, messenger, user, params):
    thread = forum_threads.update_thread(db, messenger, _param(params, "threadId"), user, _body(ThreadUpdate, params))
    return {"thread": thread.to_dict()}


@event("updateForumThreadAccess")
def update_forum_thread_access(db, messenger, user, params):
    thread = forum_threads.update_thread_access(db, messenger, _param(params, "threadId"), user, **_body(AccessUpdate, params))
    return {"thread": thread.to_dict()}


@event("removeForumThread")
def remove_forum_thread(db, messenger, user, params):
    return {"thread": forum_threads.remove_thread(db, messenger, _param(params, "threadId"), user)}


@event("createForumPost")
def create_forum_post(db, messenger, user, params):
    return {"post": forum_posts.create_post(db, messenger, user, **_body(PostCreate, params, partial=False)).to_dict()}


@event("getForumPosts")
def get_forum_posts(db, messenger, user, params):
    return {"posts": forum_posts.get_posts_by_thread(db, _param(params, "threadId"), user)}


@event("getForumPost")
def get_forum_post(db, messenger, user, params):
    return {"post": forum_posts.get_post(db, _param(params, "postId"), user)}


@event("updateForumPost")
def update_forum_post(db, messenger, user, params):
    post = forum_posts.update_post(db, messenger, _param(params, "postId"), user, _body(PostUpdate, params))
    return {"post": post.to_dict()}


@event("removeForumPost")
def remove_forum_post(db, messenger, user, params):
    return {"post": forum_posts.remove_post(db, messenger, _param(params, "postId"), user)}


# Rooms and messages


@event("createRoom")
def create_room(db, messenger, user, params):
    return {"room": rooms.create_room(db, messenger, user, **_body(RoomCreate, params, partial=False)).to_dict()}


@event("getRooms")
def get_rooms(db, messenger, user, params):
    return {"rooms": rooms.get_rooms(db, user)}


@event("getFollowedRooms")
def get_followed_rooms(db, messenger, user, params):
    return {"rooms": rooms.get_followed_rooms(db, user)}


@event("getRoom")
def get_room(db, messenger, user, params):
    return {"room": rooms.get_room(db, _param(params, "roomId"), user)}


@event("updateRoom")
def update_room(db, messenger, user, params):
    return {"room": rooms.update_room(db, messenger, _param(params, "roomId"), user, _body(RoomUpdate, params)).to_dict()}


@event("updateRoomAccess")
def update_room_access(db, messenger, user, params):
    room = rooms.update_room_access(db, messenger, _param(params, "roomId"), user, **_body(AccessUpdate, params))
    return {"room": room.to_dict()}


@event("followRoom")
def follow_room(db, messenger, user, params):
    body = _body(RoomFollow, params, partial=False)
    return rooms.follow_room(db, messenger, _param(params, "roomId"), user, **body)


@event("unfollowRoom")
def unfollow_room(db, messenger, user, params):
    body = _body(RoomFollow, params, partial=False)
    return rooms.unfollow_room(db, messenger, _param(params, "roomId"), user, alias_id=body["alias_id"])


@event("removeRoom")
def remove_room(db, messenger, user, params):
    return {"room": rooms.remove_room(db, messenger, _param(params, "roomId"), user)}


@event("getHistory")
def get_history(db, messenger, user, params):
    return {"messages": messages.get_messages_by_room(db, _param(params, "roomId"), user)}


@event("sendMessage")
def send_message(db, messenger, user, params):
    message = messages.send_chat_message(db, messenger, user, **_body(MessageCreate, params, partial=False))
    return {"message": message.to_dict()}


@event("sendWhisper")
def send_whisper(db, messenger, user, params):
    message = messages.send_whisper(db, messenger, user, **_body(WhisperCreate, params, partial=False))
    return {"message": message.to_dict()}


@event("updateMessage")
def update_message(db, messenger, user, params):
    message = messages.update_message(db, messenger, _param(params, "messageId"), user, _body(MessageUpdate, params))
    return {"message": message.to_dict()}


@event("removeMessage")
def remove_message(db, messenger, user, params):
    return {"message": messages.remove_message(db, messenger, _param(params, "messageId"), user)}


# Doc files


@event("createDocFile")
def create_doc_file(db, messenger, user, params):
    doc_file = doc_files.create_doc_file(db, messenger, user, **_body(DocFileCreate, params, partial=False))
    return {"docFile": {**doc_file.to_dict(), "isLocked": False}}


@event("getDocFiles")
def get_doc_files(db, messenger, user, params):
    return {"docFiles": doc_files.get_doc_files(db, user)}


@event("getDocFile")
def get_doc_file(db, messenger, user, params):
    return {"docFile": doc_files.get_doc_file(db, _param(params, "docFileId"), user)}


@event("unlockDocFile")
def unlock_doc_file(db, messenger, user, params):
    body = _body(DocFileUnlock, params, partial=False)
    return {"docFile": doc_files.unlock_doc_file(db, messenger, user, doc_file_id=params.get("docFileId"), **body)}


@event("updateDocFile")
def update_doc_file(db, messenger, user, params):
    doc_file = doc_files.update_doc_file(db, messenger, _param(params, "docFileId"), user, _body(DocFileUpdate, params))
    return {"docFile": doc_file.to_dict()}


@event("updateDocFileAccess")
def update_doc_file_access(db, messenger, user, params):
    doc_file = doc_files.update_doc_file_access(db, messenger, _param(params, "docFileId"), user, **_body(AccessUpdate, params))
    return {"docFile": doc_file.to_dict()}


@event("removeDocFile")
def remove_doc_file(db, messenger, user, params):
    return {"docFile": doc_files.remove_doc_file(db, messenger, _param(params, "docFileId"), user)}


# Trigger events


@event("createTriggerEvent")
def create_trigger_event(db, messenger, user, params):
    return {"triggerEvent": trigger_events.create_trigger_event(db, messenger, user, _body(TriggerEventIn, params)).to_dict()}


@event("getTriggerEvents")
def get_trigger_events(db, messenger, user, params):
    return {"triggerEvents": trigger_events.get_trigger_events(db, user)}


@event("getTriggerEvent")
def get_trigger_event(db, messenger, user, params):
    return {"triggerEvent": trigger_events.get_trigger_event(db, _param(params, "eventId"), user)}


@event("updateTriggerEvent")
def update_trigger_event(db, messenger, user, params):
    trigger_event = trigger_events.update_trigger_event(
        db, messenger, _param(params, "eventId"), user, _body(TriggerEventIn, params)
    )
    return {"triggerEvent": trigger_event.to_dict()}


@event("runTriggerEvent")
def run_trigger_event(db, messenger, user, params):
    return {"triggerEvent": trigger_events.run_trigger_event(db, messenger, _param(params, "eventId"), user)}


@event("removeTriggerEvent")
def remove_trigger_event(db, messenger, user, params):
    return {"triggerEvent": trigger_events.remove_trigger_event(db, messenger, _param(params, "eventId"), user)}


# Lantern hacking


@event("getLanternInfo")
def get_lantern_info(db, messenger, user, params):
    return lantern.get_lantern_info(db, user)


@event("getLanternRound")
def get_lantern_round(db, messenger, user, params):
    return lantern.get_lantern_round(db, user)


@event("updateLanternRound")
def update_lantern_round(db, messenger, user, params):
    lantern_round = lantern.update_lantern_round(db, messenger, user, **_body(RoundUpdate, params))
    return {"round": lantern_round.to_dict(), "timeLeft": lantern.time_left(lantern_round)}


@event("getLanternStations")
def get_lantern_stations(db, messenger, user, params):
    return lantern.get_lantern_stations(db, user)


@event("getLanternStation")
def get_lantern_station(db, messenger, user, params):
    return {"station": lantern.get_lantern_station(db, _int_param(params, "stationId"), user)}


@event("createLanternStation")
def create_lantern_station(db, messenger, user, params):
    return {"station": lantern.create_lantern_station(db, messenger, user, _body(StationIn, params)).to_dict()}


@event("updateLanternStation")
def update_lantern_station(db, messenger, user, params):
    station = lantern.update_lantern_station(db, messenger, _int_param(params, "stationId"), user, _body(StationIn, params))
    return {"station": station.to_dict()}


@event("updateLanternSignal")
def update_lantern_signal(db, messenger, user, params):
    body = _body(SignalUpdate, params, partial=False)
    station = lantern.update_signal_value(db, messenger, _int_param(params, "stationId"), user, boosting=body["boosting"])
    return {"station": station.to_dict()}


@event("deleteLanternStation")
def delete_lantern_station(db, messenger, user, params):
    return lantern.delete_lantern_station(db, messenger, _int_param(params, "stationId"), user)


@event("getLanternTeams")
def get_lantern_teams(db, messenger, user, params):
    return {"teams": lantern.get_lantern_teams(db, user)}


@event("createLanternTeam")
def create_lantern_team(db, messenger, user, params):
    return {"team": lantern.create_lantern_team(db, messenger, user, _body(LanternTeamIn, params)).to_dict()}


@event("updateLanternTeam")
def update_lantern_team(db, messenger, user, params):
    values = _body(LanternTeamIn, params)
    reset_points = values.pop("reset_points", False)
    team = lantern.update_lantern_team(db, messenger, _int_param(params, "teamId"), user, values, reset_points=reset_points)
    return {"team": team.to_dict()}


@event("deleteLanternTeam")
def delete_lantern_team(db, messenger, user, params):
    return lantern.delete_lantern_team(db, messenger, _int_param(params, "teamId"), user)


@event("getLanternHack")
def get_lantern_hack(db, messenger, user, params):
    return lantern_hacks.get_lantern_hack(db, _int_param(params, "stationId"), user)


@event("manipulateStation")
def manipulate_station(db, messenger, user, params):
    body = _body(HackAttempt, params, partial=False)
    return lantern_hacks.manipulate_station(db, messenger, _int_param(params, "stationId"), user, **body)


@event("createGameUsers")
def create_game_users(db, messenger, user, params):
    body = _body(GameUsersCreate, params, partial=False)
    created = lantern_hacks.create_game_users(db, user, body["game_users"])
    return {"gameUsers": [game_user.to_dict() for game_user in created]}


@event("getGameUsers")
def get_game_users(db, messenger, user, params):
    station_id = _int_param(params, "stationId") if params.get("stationId") is not None else None
    return {"gameUsers": lantern_hacks.get_game_users(db, user, station_id=station_id)}


@event("addFakePasswords")
def add_fake_passwords(db, messenger, user, params):
    body = _body(FakePasswordsIn, params, partial=False)
    return {"passwords": lantern_hacks.add_fake_passwords(db, user, body["passwords"])}


@event("getFakePasswords")
def get_fake_passwords(db, messenger, user, params):
    return {"passwords": lantern_hacks.get_fake_passwords(db, user)}


# Calibration missions


@event("getCalibrationMissions")
def get_calibration_missions(db, messenger, user, params):
    return {"missions": calibration_missions.get_calibration_missions(db, user, get_inactive=bool(params.get("getInactive")))}


@event("getCalibrationMission")
def get_calibration_mission(db, messenger, user, params):
    mission = calibration_missions.get_active_calibration_mission(
        db, messenger, user, owner_id=params.get("ownerId"), station_id=params.get("stationId")
    )
    return {"mission": mission}


@event("completeCalibrationMission")
def complete_calibration_mission(db, messenger, user, params):
    return calibration_missions.complete_calibration_mission(db, messenger, _param(params, "ownerId"), user)


@event("cancelCalibrationMission")
def cancel_calibration_mission(db, messenger, user, params):
    return calibration_missions.cancel_calibration_mission(db, messenger, _param(params, "ownerId"), user)


@event("removeCalibrationMissions")
def remove_calibration_missions(db, messenger, user, params):
    return calibration_missions.remove_calibration_missions_by_station(db, _int_param(params, "stationId"), user)
