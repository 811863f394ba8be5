"""Access levels and the minimum level each command needs."""

import enum

from app.core.config import get_settings
from app.core.errors import Banned, NeedsVerification, NotAllowed


class AccessLevel(enum.IntEnum):
    ANONYMOUS = 0
    STANDARD = 1
    PRIVILEGED = 2
    MODERATOR = 3
    ADMIN = 4
    SUPERUSER = 5
    GOD = 6


COMMANDS: dict[str, AccessLevel] = {
    # Users
    "CreateUser": AccessLevel.ANONYMOUS,
    "GetUsers": AccessLevel.STANDARD,
    "GetUser": AccessLevel.STANDARD,
    "UpdateUser": AccessLevel.STANDARD,
    "VerifyUser": AccessLevel.PRIVILEGED,
    "BanUser": AccessLevel.MODERATOR,
    "UnbanUser": AccessLevel.MODERATOR,
    "UpdateUserAccessLevel": AccessLevel.ADMIN,
    # Aliases
    "CreateAlias": AccessLevel.STANDARD,
    "GetAliases": AccessLevel.STANDARD,
    "UpdateAlias": AccessLevel.STANDARD,
    "RemoveAlias": AccessLevel.ADMIN,
    # Teams
    "CreateTeam": AccessLevel.STANDARD,
    "GetTeams": AccessLevel.ANONYMOUS,
    "UpdateTeam": AccessLevel.STANDARD,
    "RemoveTeam": AccessLevel.ADMIN,
    # Wallets
    "GetWallet": AccessLevel.STANDARD,
    "UpdateWallet": AccessLevel.MODERATOR,
    "UpdateWalletAmount": AccessLevel.MODERATOR,
    "RemoveWallet": AccessLevel.ADMIN,
    # Transactions
    "CreateTransaction": AccessLevel.STANDARD,
    "GetTransaction": AccessLevel.STANDARD,
    "UpdateTransaction": AccessLevel.STANDARD,
    "RemoveTransaction": AccessLevel.MODERATOR,
    # Devices
    "CreateDevice": AccessLevel.STANDARD,
    "GetDevices": AccessLevel.ANONYMOUS,
    "UpdateDevice": AccessLevel.ANONYMOUS,
    "UpdateDeviceName": AccessLevel.MODERATOR,
    "RemoveDevice": AccessLevel.STANDARD,
    # Forums
    "CreateForum": AccessLevel.MODERATOR,
    "GetForum": AccessLevel.ANONYMOUS,
    "UpdateForum": AccessLevel.MODERATOR,
    "RemoveForum": AccessLevel.ADMIN,
    "CreateForumThread": AccessLevel.STANDARD,
    "GetForumThread": AccessLevel.ANONYMOUS,
    "UpdateForumThread": AccessLevel.STANDARD,
    "RemoveForumThread": AccessLevel.STANDARD,
    "CreateForumPost": AccessLevel.STANDARD,
    "GetForumPost": AccessLevel.ANONYMOUS,
    "UpdateForumPost": AccessLevel.STANDARD,
    "RemoveForumPost": AccessLevel.STANDARD,
    # Trigger events
    "CreateTriggerEvent": AccessLevel.STANDARD,
    "GetTriggerEvents": AccessLevel.STANDARD,
    "UpdateTriggerEvent": AccessLevel.STANDARD,
    "RemoveTriggerEvent": AccessLevel.STANDARD,
    "RunTriggerEvent": AccessLevel.STANDARD,
    # Lantern hacking
    "GetLanternInfo": AccessLevel.ANONYMOUS,
    "GetLanternStations": AccessLevel.ANONYMOUS,
    "CreateLanternStation": AccessLevel.ADMIN,
    "UpdateLanternStation": AccessLevel.ADMIN,
    "DeleteLanternStation": AccessLevel.ADMIN,
    "UpdateLanternSignal": AccessLevel.ADMIN,
    "HackLantern": AccessLevel.STANDARD,
    "CreateGameItems": AccessLevel.MODERATOR,
    "GetGameItems": AccessLevel.MODERATOR,
    "GetLanternTeams": AccessLevel.ANONYMOUS,
    "CreateLanternTeam": AccessLevel.ADMIN,
    "UpdateLanternTeam": AccessLevel.ADMIN,
    "DeleteLanternTeam": AccessLevel.ADMIN,
    "GetLanternRound": AccessLevel.ANONYMOUS,
    "UpdateLanternRound": AccessLevel.ADMIN,
    # Calibration missions
    "GetCalibrationMission": AccessLevel.STANDARD,
    "GetCalibrationMissions": AccessLevel.MODERATOR,
    "CompleteCalibrationMission": AccessLevel.ADMIN,
    "CancelCalibrationMission": AccessLevel.ADMIN,
    "RemoveCalibrationMissions": AccessLevel.ADMIN,
    # Rooms and messages
    "CreateRoom": AccessLevel.STANDARD,
    "GetRoom": AccessLevel.ANONYMOUS,
    "UpdateRoom": AccessLevel.STANDARD,
    "RemoveRoom": AccessLevel.STANDARD,
    "FollowRoom": AccessLevel.STANDARD,
    "UnfollowRoom": AccessLevel.STANDARD,
    "SendMessage": AccessLevel.STANDARD,
    "SendWhisper": AccessLevel.STANDARD,
    "GetHistory": AccessLevel.ANONYMOUS,
    "UpdateMessage": AccessLevel.STANDARD,
    "RemoveMessage": AccessLevel.STANDARD,
    # Doc files
    "CreateDocFile": AccessLevel.STANDARD,
    "GetDocFile": AccessLevel.ANONYMOUS,
    "UpdateDocFile": AccessLevel.STANDARD,
    "RemoveDocFile": AccessLevel.STANDARD,
}


def is_user_allowed(command: str, user) -> None:
    """Raise unless the user may run the command at all.

    Object-level checks happen afterwards through the access predicate.
    """
    level = COMMANDS[command]
    if getattr(user, "is_banned", False):
        raise Banned(f"User is banned and may not {command}")
    if level > AccessLevel.ANONYMOUS and get_settings().require_verification and not getattr(user, "is_verified", True):
        raise NeedsVerification(f"User must be verified to {command}")
    if level > user.access_level:
        raise NotAllowed(f"{command} requires access level {int(level)}")


def access_room(level: int) -> str:
    return f"accessLevel:{int(level)}"
