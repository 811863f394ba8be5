"""Outbox for socket events produced by services.

Services run synchronously (threadpool) and only queue events; the REST layer
flushes the outbox as a background task and socket handlers flush it before
acknowledging.
"""

from dataclasses import dataclass
import enum
import logging
from typing import Any, Optional

from app.core.permissions import AccessLevel, access_room

logger = logging.getLogger(__name__)


class ChangeType(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    REMOVE = "remove"


class EmitType(str, enum.Enum):
    USER = "user"
    ALIAS = "alias"
    TEAM = "team"
    WALLET = "wallet"
    TRANSACTION = "transaction"
    DEVICE = "device"
    FORUM = "forum"
    FORUMTHREAD = "forumThread"
    FORUMPOST = "forumPost"
    TRIGGEREVENT = "triggerEvent"
    LANTERNSTATIONS = "lanternStations"
    LANTERNTEAMS = "lanternTeams"
    LANTERNROUND = "lanternRound"
    CALIBRATIONMISSION = "calibrationMission"
    ROOM = "room"
    FOLLOW = "follow"
    CHATMSG = "chatMsg"
    WHISPER = "whisper"
    DOCFILE = "docFile"
    BROADCAST = "broadcast"


@dataclass
class Emission:
    event: str
    data: dict
    room: Optional[str] = None
    skip_sid: Optional[str] = None


class Messenger:
    def __init__(self, sid: Optional[str] = None):
        # Socket id of the caller; broadcasts skip the sender, who gets the ack instead.
        self.sid = sid
        self.outbox: list[Emission] = []
        # Socket rooms the caller joins on flush (followed rooms, new whispers).
        self.joins: list[str] = []

    def emit(self, event: str, data: dict, *, room: Optional[str] = None, include_sender: bool = False) -> None:
        skip_sid = None if include_sender else self.sid
        self.outbox.append(Emission(event=str(event.value if isinstance(event, enum.Enum) else event), data=data, room=room, skip_sid=skip_sid))

    def emit_change(
        self,
        event: EmitType,
        key: str,
        payload: Any,
        change_type: ChangeType,
        *,
        room: Optional[str] = None,
    ) -> None:
        self.emit(event, {"data": {key: payload, "changeType": change_type.value}}, room=room)

    def broadcast(self, message: str, *, room: Optional[str] = None, title: Optional[str] = None) -> None:
        data = {"data": {"message": {"text": [message], "title": title}}}
        self.emit(EmitType.BROADCAST, data, room=room, include_sender=True)

    def notify_moderators(self, message: str, *, title: Optional[str] = None) -> None:
        self.broadcast(message, room=access_room(AccessLevel.MODERATOR), title=title)

    def enter(self, room: str) -> None:
        if self.sid and room not in self.joins:
            self.joins.append(room)

    async def flush(self, sio) -> None:
        joins, self.joins = self.joins, []
        for room in joins:
            await sio.enter_room(self.sid, room)
        pending, self.outbox = self.outbox, []
        for emission in pending:
            try:
                await sio.emit(emission.event, emission.data, to=emission.room, skip_sid=emission.skip_sid)
            except Exception as exc:
                # Emission is best-effort; the state change is already committed.
                logger.warning("Socket emit failed event=%s room=%s error=%s", emission.event, emission.room, exc)
