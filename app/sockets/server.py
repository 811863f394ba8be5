import socketio

from app.core.config import get_settings, parse_cors_origins

settings = get_settings()

_origins = parse_cors_origins(settings.cors_origins or "")

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=_origins or "*",
    logger=False,
    engineio_logger=False,
)
