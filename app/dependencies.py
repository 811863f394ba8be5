from typing import Optional, Union

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

from app.core.access import AnonymousUser
from app.core.database import get_db
from app.core.errors import NotAllowed
from app.core.security import decode_token
from app.models import User
from app.services.messenger import Messenger
from app.sockets.server import sio

bearer_scheme = HTTPBearer(auto_error=False)

CurrentUser = Union[User, AnonymousUser]


def user_from_token(db: Session, token: Optional[str]) -> CurrentUser:
    """Resolve an access token; no token means an anonymous caller."""
    if not token:
        return AnonymousUser()
    try:
        payload = decode_token(token)
    except jwt.PyJWTError as exc:
        raise NotAllowed("Invalid token") from exc
    if payload.get("type") != "access":
        raise NotAllowed("Invalid token")
    user = db.query(User).filter(User.id == payload.get("sub")).first()
    if not user:
        raise NotAllowed("User not found")
    return user


def load_user(db: Session, user_id: Optional[str]) -> CurrentUser:
    if not user_id:
        return AnonymousUser()
    user = db.query(User).filter(User.id == user_id).first()
    return user or AnonymousUser()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    return user_from_token(db, credentials.credentials if credentials else None)


def require_user(user: CurrentUser = Depends(get_current_user)) -> User:
    if getattr(user, "is_anonymous", False):
        raise NotAllowed("Authentication required")
    return user


def get_messenger(background_tasks: BackgroundTasks) -> Messenger:
    """Outbox for the request; flushed to the socket server after the response."""
    messenger = Messenger()
    background_tasks.add_task(messenger.flush, sio)
    return messenger
