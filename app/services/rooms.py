"""Chat rooms: password-gated access, followers and the private rooms behind whispers."""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.access import AccessResult, has_access_to, strip_object
from app.core.config import get_settings
from app.core.errors import AlreadyExists, DoesNotExist, InvalidData, NotAllowed
from app.core.permissions import AccessLevel, is_user_allowed
from app.core.security import hash_password, verify_password
from app.models import Alias, Message, Room, User
from app.services import connector, manager
from app.services.messenger import ChangeType, EmitType, Messenger

logger = logging.getLogger(__name__)

# Names of the rooms every user is placed in; nobody may create or rename to them.
PROTECTED_ROOM_NAMES = {"public", "important", "news", "schedule", "broadcast"}
WHISPER_PREFIX = "whisper:"

_EDITABLE = {
    "room_name",
    "password",
    "owner_alias_id",
    "is_anonymous",
    "name_is_locked",
    "custom_time_created",
    "custom_last_updated",
}


def _merge(current, added) -> list[str]:
    return list(dict.fromkeys(list(current or []) + list(added)))


def _check_room_name(db: Session, room_name: Optional[str], *, room_id: Optional[str] = None) -> str:
    if not room_name:
        raise InvalidData("roomName is required")
    if len(room_name) > get_settings().room_name_max_length:
        raise InvalidData(f"roomName may be at most {get_settings().room_name_max_length} characters")
    lowered = room_name.lower()
    if lowered in PROTECTED_ROOM_NAMES or lowered.startswith(WHISPER_PREFIX):
        raise InvalidData(f"{room_name} is a protected room name")
    existing = connector.find_object(db, Room, Room.room_name_lower_case == lowered)
    if existing is not None and existing.id != room_id:
        raise AlreadyExists(f"Room {room_name} already exists")
    return lowered


def _hash_room_password(password: Optional[str]) -> Optional[str]:
    if not password:
        return None
    if len(password) > get_settings().room_password_max_length:
        raise InvalidData("Room password is too long")
    return hash_password(password)


def load_room(db: Session, room_id: str, user, *, password: Optional[str] = None, needs_access: bool = False) -> tuple[Room, AccessResult]:
    """Fetch a room the user can see; needs_access also demands access or the room password."""
    room = connector.get_object(db, Room, room_id)
    access = has_access_to(room, user)
    if not access.can_see:
        raise NotAllowed(f"Access to room {room_id} denied")
    if needs_access and not access.has_access:
        if not (room.password and password and verify_password(password, room.password)):
            raise NotAllowed(f"Access to room {room_id} denied")
    return room, access


def _follow_as_user(db: Session, user, room_id: str) -> None:
    if room_id not in (user.followed_rooms or []):
        connector.update_object(db, user, {"followed_rooms": _merge(user.followed_rooms, [room_id])})


def _emit_follow(messenger: Messenger, room: Room, follower_id: str, change_type: ChangeType, *, room_target: str) -> dict:
    data = {"user": {"objectId": follower_id}, "room": strip_object(room.to_dict()), "changeType": change_type.value}
    messenger.emit(EmitType.FOLLOW, {"data": data}, room=room_target)
    return data


def create_room(
    db: Session,
    messenger: Messenger,
    user,
    *,
    room_name: str,
    password: Optional[str] = None,
    owner_alias_id: Optional[str] = None,
    is_anonymous: bool = False,
    is_public: bool = True,
    visibility: int = 0,
    access_level: int = 0,
) -> Room:
    is_user_allowed("CreateRoom", user)
    lowered = _check_room_name(db, room_name)
    manager.check_alias(user, owner_alias_id)
    if visibility > user.access_level or access_level > user.access_level:
        raise NotAllowed("Room visibility or access level above your own")
    hashed = _hash_room_password(password)
    follower_id = owner_alias_id or user.id
    room = connector.save_object(
        db,
        Room(
            room_name=room_name,
            room_name_lower_case=lowered,
            password=hashed,
            owner_id=user.id,
            owner_alias_id=owner_alias_id,
            is_anonymous=is_anonymous,
            # A password only matters when the room is closed.
            is_public=is_public and hashed is None,
            visibility=visibility,
            access_level=access_level,
            followers=[follower_id],
        ),
    )
    _follow_as_user(db, user, room.id)
    messenger.enter(room.id)
    manager.emit_created(messenger, EmitType.ROOM, "room", room)
    logger.info("Room %s created by %s", room.room_name, user.id)
    return room


def get_room(db: Session, room_id: str, user) -> dict:
    is_user_allowed("GetRoom", user)
    room, access = load_room(db, room_id, user)
    return manager.present(room, access)


def get_rooms(db: Session, user) -> list[dict]:
    is_user_allowed("GetRoom", user)
    return manager.present_many(connector.get_objects(db, Room, order_by=Room.room_name_lower_case), user)


def get_followed_rooms(db: Session, user) -> list[dict]:
    is_user_allowed("GetRoom", user)
    followed = getattr(user, "followed_rooms", None) or []
    if not followed:
        return []
    rooms = connector.get_objects(db, Room, Room.id.in_(followed), order_by=Room.room_name_lower_case)
    return manager.present_many(rooms, user, full_access_only=False)


def update_room(db: Session, messenger: Messenger, room_id: str, user, updates: dict[str, Any]) -> Room:
    is_user_allowed("UpdateRoom", user)
    allowed = {key: value for key, value in updates.items() if key in _EDITABLE}
    room = manager.get_with_full_access(db, Room, room_id, user)
    if room.is_whisper or room.is_system_room:
        raise NotAllowed(f"Room {room_id} may not be changed")
    if "room_name" in allowed:
        if room.name_is_locked:
            raise NotAllowed(f"Room {room_id} has a locked name")
        allowed["room_name_lower_case"] = _check_room_name(db, allowed["room_name"], room_id=room_id)
    if "password" in allowed:
        allowed["password"] = _hash_room_password(allowed["password"])
    return manager.update_object(db, messenger, Room, room_id, allowed, user, event=EmitType.ROOM, key="room", room=room_id)


def update_room_access(db: Session, messenger: Messenger, room_id: str, user, **kwargs) -> Room:
    is_user_allowed("UpdateRoom", user)
    return manager.update_access(db, messenger, Room, room_id, user, event=EmitType.ROOM, key="room", **kwargs)


def follow_room(
    db: Session,
    messenger: Messenger,
    room_id: str,
    user,
    *,
    password: Optional[str] = None,
    alias_id: Optional[str] = None,
) -> dict:
    """Follow as the user or one of their aliases. Followers get access and join the socket room."""
    is_user_allowed("FollowRoom", user)
    manager.check_alias(user, alias_id)
    room, _ = load_room(db, room_id, user, password=password, needs_access=True)
    follower_id = alias_id or user.id
    room = connector.update_object(
        db,
        room,
        {"user_ids": _merge(room.user_ids, [follower_id]), "followers": _merge(room.followers, [follower_id])},
    )
    _follow_as_user(db, user, room.id)
    messenger.enter(room.id)
    messenger.emit_change(EmitType.USER, "user", {"id": user.id, "followedRooms": list(user.followed_rooms)}, ChangeType.UPDATE, room=user.id)
    messenger.emit_change(EmitType.ROOM, "room", strip_object(room.to_dict()), ChangeType.UPDATE, room=room.id)
    return _emit_follow(messenger, room, follower_id, ChangeType.UPDATE, room_target=room.id)


def unfollow_room(db: Session, messenger: Messenger, room_id: str, user, *, alias_id: Optional[str] = None) -> dict:
    is_user_allowed("UnfollowRoom", user)
    manager.check_alias(user, alias_id)
    room = connector.get_object(db, Room, room_id)
    if room.is_system_room:
        raise NotAllowed(f"Room {room_id} may not be unfollowed")
    follower_id = alias_id or user.id
    room = connector.update_object(db, room, {"followers": [item for item in room.followers or [] if item != follower_id]})
    own_ids = {user.id, *(getattr(user, "alias_ids", None) or [])}
    if not own_ids & set(room.followers):
        connector.update_object(db, user, {"followed_rooms": [item for item in user.followed_rooms or [] if item != room_id]})
    return _emit_follow(messenger, room, follower_id, ChangeType.REMOVE, room_target=room.id)


def remove_room(db: Session, messenger: Messenger, room_id: str, user) -> dict:
    """Remove the room with its messages and drop it from every follower."""
    is_user_allowed("RemoveRoom", user)
    room = manager.get_with_full_access(db, Room, room_id, user)
    if room.is_system_room:
        raise NotAllowed(f"Room {room_id} may not be removed")
    removed = connector.remove_objects(db, Message, Message.room_id == room_id)
    for follower in connector.get_objects(db, User):
        if room_id in (follower.followed_rooms or []):
            connector.update_object(db, follower, {"followed_rooms": [item for item in follower.followed_rooms if item != room_id]})
    logger.info("Room %s removed with %s message(s)", room_id, removed)
    return manager.remove_object(db, messenger, Room, room_id, user, event=EmitType.ROOM, key="room")


# Whisper rooms


def _owner_of(db: Session, identity_id: str) -> User:
    user = connector.find_object(db, User, User.id == identity_id)
    if user is not None:
        return user
    alias = connector.find_object(db, Alias, Alias.id == identity_id)
    if alias is None:
        raise DoesNotExist(f"User or alias {identity_id} does not exist")
    return connector.get_object(db, User, alias.owner_id)


def whisper_room_name(participant_ids: list[str]) -> str:
    return WHISPER_PREFIX + ":".join(sorted(participant_ids))


def get_or_create_whisper_room(db: Session, messenger: Messenger, user, participant_ids: list[str]) -> Room:
    """The private room between two identities, one of which must be the user's."""
    participants = list(dict.fromkeys(participant_ids or []))
    if len(participants) != 2:
        raise InvalidData("A whisper needs exactly two participants")
    own_ids = {user.id, *(getattr(user, "alias_ids", None) or [])}
    if not own_ids & set(participants):
        raise NotAllowed("Whispers must be sent from your own user or alias")

    name = whisper_room_name(participants)
    room = connector.find_object(db, Room, Room.room_name_lower_case == name.lower())
    if room is not None:
        return room

    owners = [_owner_of(db, participant) for participant in participants]
    room = connector.save_object(
        db,
        Room(
            room_name=name,
            room_name_lower_case=name.lower(),
            owner_id=user.id,
            participant_ids=sorted(participants),
            user_ids=sorted(participants),
            followers=sorted(participants),
            is_whisper=True,
            visibility=AccessLevel.SUPERUSER,
            access_level=AccessLevel.SUPERUSER,
        ),
    )
    for owner in owners:
        _follow_as_user(db, owner, room.id)
        _emit_follow(messenger, room, owner.id, ChangeType.CREATE, room_target=owner.id)
    messenger.enter(room.id)
    logger.info("Whisper room %s created", room.id)
    return room
