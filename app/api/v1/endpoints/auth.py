import logging

from fastapi import APIRouter, Depends, Request
import jwt
from sqlalchemy.orm import Session

from app.core.access import strip_object
from app.core.database import get_db
from app.core.errors import NotAllowed
from app.core.security import create_access_token, create_refresh_token, decode_token
from app.dependencies import get_messenger, require_user
from app.middlewares.rate_limit import limiter
from app.models import User
from app.schemas.auth import EmailVerification, LoginRequest, RefreshRequest, RegisterRequest, TokenPair
from app.schemas.common import DataRequest, envelope
from app.services import users
from app.services.messenger import Messenger

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_pair(user: User) -> dict:
    pair = TokenPair(
        access_token=create_access_token(str(user.id), user.access_level),
        refresh_token=create_refresh_token(str(user.id), user.access_level),
    )
    return pair.model_dump(by_alias=True)


@router.post("/register")
@limiter.limit("10/minute")
def register(
    request: Request,
    payload: DataRequest[RegisterRequest],
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    user = users.register_user(db, messenger, **payload.data.model_dump())
    return envelope({"user": user.to_dict()})


@router.post("/login")
@limiter.limit("10/minute")
def login(request: Request, payload: DataRequest[LoginRequest], db: Session = Depends(get_db)):
    body = payload.data
    user = users.authenticate(db, password=body.password, username=body.username, user_id=body.user_id)
    logger.info("Login user=%s", user.id)
    return envelope({**_token_pair(user), "user": user.to_dict()})


@router.post("/refresh")
@limiter.limit("30/minute")
def refresh(request: Request, payload: DataRequest[RefreshRequest], db: Session = Depends(get_db)):
    try:
        decoded = decode_token(payload.data.refresh_token)
    except jwt.PyJWTError as exc:
        raise NotAllowed("Invalid refresh token") from exc
    if decoded.get("type") != "refresh":
        raise NotAllowed("Invalid refresh token")

    user = db.query(User).filter(User.id == decoded.get("sub")).first()
    if not user or user.is_banned:
        raise NotAllowed("User not found or banned")
    return envelope(_token_pair(user))


@router.get("/me")
def me(user: User = Depends(require_user)):
    return envelope({"user": user.to_dict()})


@router.post("/verify-email")
@limiter.limit("10/minute")
def verify_email(
    request: Request,
    payload: DataRequest[EmailVerification],
    db: Session = Depends(get_db),
    messenger: Messenger = Depends(get_messenger),
):
    user = users.verify_email_token(db, messenger, payload.data.token)
    return envelope({"user": strip_object(user.to_dict())})
