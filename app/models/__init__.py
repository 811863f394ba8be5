from app.models.user import User
from app.models.alias import Alias
from app.models.team import Team
from app.models.wallet import Wallet
from app.models.transaction import Transaction
from app.models.device import Device, DeviceType
from app.models.forum import Forum
from app.models.forum_thread import ForumThread
from app.models.forum_post import ForumPost
from app.models.trigger_event import TriggerEvent, TriggerEventType, TriggerChangeType, TriggerType
from app.models.lantern import LanternStation, LanternTeam, LanternRound
from app.models.lantern_hack import LanternHack, GameUser, FakePassword
from app.models.calibration_mission import CalibrationMission
from app.models.room import Room
from app.models.message import Message, MessageType
from app.models.doc_file import DocFile

__all__ = [
    "User",
    "Alias",
    "Team",
    "Wallet",
    "Transaction",
    "Device",
    "DeviceType",
    "Forum",
    "ForumThread",
    "ForumPost",
    "TriggerEvent",
    "TriggerEventType",
    "TriggerChangeType",
    "TriggerType",
    "LanternStation",
    "LanternTeam",
    "LanternRound",
    "LanternHack",
    "GameUser",
    "FakePassword",
    "CalibrationMission",
    "Room",
    "Message",
    "MessageType",
    "DocFile",
]
