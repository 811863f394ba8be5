from datetime import datetime, timedelta, timezone
import logging
import secrets
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.access import strip_object
from app.core.config import get_settings
from app.core.errors import AlreadyExists, Banned, Expired, GeneralError, InvalidData, NeedsVerification, NotAllowed
from app.core.permissions import AccessLevel, is_user_allowed
from app.core.security import hash_password, verify_password
from app.models import Alias, User
from app.services import connector, manager, wallets
from app.services.email import send_verification_email
from app.services.messenger import ChangeType, EmitType, Messenger

settings = get_settings()
logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _mask_email(value: str) -> str:
    try:
        local, domain = value.split("@", 1)
    except ValueError:
        return "***"
    return f"{local[:2]}***@{domain}"


def name_taken(db: Session, name: str) -> bool:
    """Usernames and alias names share one namespace."""
    lowered = name.lower()
    return (
        connector.find_object(db, User, func.lower(User.username) == lowered) is not None
        or connector.find_object(db, Alias, func.lower(Alias.alias_name) == lowered) is not None
    )


def register_user(
    db: Session,
    messenger: Messenger,
    *,
    username: str,
    password: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    visibility: int = 0,
) -> User:
    if name_taken(db, username):
        raise AlreadyExists(f"Username {username} is taken")
    if email and connector.find_object(db, User, User.email == email) is not None:
        raise AlreadyExists("Email already registered")

    user = User(
        username=username,
        email=email,
        full_name=full_name,
        hashed_password=hash_password(password),
        access_level=AccessLevel.STANDARD,
        visibility=visibility,
        is_verified=not settings.require_verification,
    )
    if email:
        user.verification_token = secrets.token_urlsafe(32)
        user.verification_token_expires_at = _utcnow() + timedelta(days=2)
    user = connector.save_object(db, user)
    user = connector.update_object(db, user, {"owner_id": user.id})
    wallets.create_wallet(db, user.id, user.id)

    if email:
        try:
            send_verification_email(email, username, user.verification_token)
        except GeneralError as exc:
            # Registration succeeds without the mail; moderators can verify manually.
            logger.warning(
                "Verification email send failed to=%s provider=%s error=%s",
                _mask_email(email),
                settings.email_provider,
                exc,
            )

    messenger.emit_change(EmitType.USER, "user", strip_object(user.to_dict()), ChangeType.CREATE)
    return user


def authenticate(db: Session, *, password: str, username: Optional[str] = None, user_id: Optional[str] = None) -> User:
    if not username and not user_id:
        raise InvalidData("userId or username has to be set")
    if user_id:
        user = connector.find_object(db, User, User.id == user_id)
    else:
        user = connector.find_object(db, User, func.lower(User.username) == username.lower())
    if not user or not verify_password(password, user.hashed_password):
        raise NotAllowed("Invalid credentials")
    if user.is_banned:
        raise Banned(f"User {user.username} is banned")
    if not user.is_verified:
        raise NeedsVerification(f"User {user.username} is not verified")
    return user


def verify_email_token(db: Session, messenger: Messenger, token: str) -> User:
    user = connector.find_object(db, User, User.verification_token == token)
    if not user:
        raise InvalidData("Invalid verification token")
    if user.verification_token_expires_at and _as_utc(user.verification_token_expires_at) < _utcnow():
        raise Expired("Verification token has expired")
    user = connector.update_object(
        db,
        user,
        {"is_verified": True, "verification_token": None, "verification_token_expires_at": None},
    )
    messenger.emit_change(EmitType.USER, "user", strip_object(user.to_dict()), ChangeType.UPDATE)
    return user


def get_user(db: Session, user_id: str, user) -> dict:
    is_user_allowed("GetUser", user)
    found, access = manager.get_object_by_id(db, User, user_id, user)
    return manager.present(found, access)


def get_users(db: Session, user) -> list[dict]:
    is_user_allowed("GetUsers", user)
    users = connector.get_objects(db, User, order_by=User.username)
    return manager.present_many(users, user)


def update_user(
    db: Session,
    messenger: Messenger,
    user_id: str,
    user,
    *,
    full_name: Optional[str] = None,
    email: Optional[str] = None,
    visibility: Optional[int] = None,
    password: Optional[str] = None,
) -> User:
    is_user_allowed("UpdateUser", user)
    target = manager.get_with_full_access(db, User, user_id, user)
    updates = {}
    if full_name is not None:
        updates["full_name"] = full_name
    if email is not None:
        updates["email"] = email
    if visibility is not None:
        updates["visibility"] = visibility
    if password:
        updates["hashed_password"] = hash_password(password)
    if not updates:
        return target
    target = connector.update_object(db, target, updates)
    messenger.emit_change(EmitType.USER, "user", strip_object(target.to_dict()), ChangeType.UPDATE)
    return target


def _set_flags(db: Session, messenger: Messenger, command: str, user_id: str, user, updates: dict) -> User:
    is_user_allowed(command, user)
    target = connector.get_object(db, User, user_id)
    if target.access_level >= user.access_level and target.id != user.id:
        raise NotAllowed(f"Cannot {command} a user with an equal or higher access level")
    target = connector.update_object(db, target, updates)
    logger.info("%s %s by %s", command, target.username, user.id)
    messenger.emit_change(EmitType.USER, "user", strip_object(target.to_dict()), ChangeType.UPDATE)
    return target


def verify_user(db: Session, messenger: Messenger, user_id: str, user) -> User:
    is_user_allowed("VerifyUser", user)
    target = connector.update_object(db, connector.get_object(db, User, user_id), {"is_verified": True})
    messenger.emit_change(EmitType.USER, "user", strip_object(target.to_dict()), ChangeType.UPDATE)
    return target


def ban_user(db: Session, messenger: Messenger, user_id: str, user) -> User:
    return _set_flags(db, messenger, "BanUser", user_id, user, {"is_banned": True})


def unban_user(db: Session, messenger: Messenger, user_id: str, user) -> User:
    return _set_flags(db, messenger, "UnbanUser", user_id, user, {"is_banned": False})


def update_access_level(db: Session, messenger: Messenger, user_id: str, user, access_level: int) -> User:
    if access_level > user.access_level:
        raise NotAllowed("Cannot grant a higher access level than your own")
    return _set_flags(db, messenger, "UpdateUserAccessLevel", user_id, user, {"access_level": int(access_level)})


def bootstrap_admins(db: Session, usernames: list[str]) -> int:
    updated = 0
    missing: list[str] = []
    for username in usernames:
        user = connector.find_object(db, User, func.lower(User.username) == username)
        if not user:
            missing.append(username)
            continue
        if user.access_level < AccessLevel.ADMIN:
            connector.update_object(db, user, {"access_level": int(AccessLevel.ADMIN), "is_verified": True})
            updated += 1
    if updated:
        logger.info("Bootstrapped admin access for %s user(s).", updated)
    if missing:
        logger.warning("BOOTSTRAP_ADMIN_USERNAMES users not found: %s", ", ".join(missing))
    return updated
