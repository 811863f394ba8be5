from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import socketio
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as SQLAlchemyTimeoutError
from app.api.v1.routes import router as api_router
from app.core.config import get_settings, parse_cors_origins, parse_name_list
import logging
import time
from urllib.parse import urlparse
from app.core.database import Base, engine, SessionLocal
from app.core.errors import GeneralError, InvalidData
from app.core.logging import configure_logging
from app.middlewares.rate_limit import limiter
from app.services import lantern, overdraft, scheduler, trigger_events, users
from app.sockets import handlers  # noqa: F401  registers socket events
from app.sockets.server import sio


settings = get_settings()

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.limiter = limiter
app.state.loops = []
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
_started_at = time.time()


@app.exception_handler(GeneralError)
async def general_error_handler(request, exc: GeneralError):
    if exc.status_code >= 500:
        logger.warning("%s on %s %s: %s", exc.name, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request, exc: RequestValidationError):
    error = InvalidData("Request body is invalid", extra={"errors": jsonable_encoder(exc.errors())})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyTimeoutError)
async def sqlalchemy_timeout_handler(request, exc):
    logger.warning("Database pool timeout on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Service is busy. Please retry in a moment."},
    )

configured_origins = parse_cors_origins(settings.cors_origins or "")
def _origin_from_url(raw: str) -> str | None:
    text = str(raw or "").strip()
    if not text:
        return None
    parsed = urlparse(text)
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return None


frontend_origin = _origin_from_url(settings.frontend_base_url)
allow_origins = list(dict.fromkeys(configured_origins + ([frontend_origin] if frontend_origin else [])))

logger.info("CORS allow_origins=%s", allow_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)


def _bootstrap_admins() -> None:
    usernames = parse_name_list(settings.bootstrap_admin_usernames or "")
    if not usernames:
        return

    db = SessionLocal()
    try:
        users.bootstrap_admins(db, usernames)
    except (GeneralError, SQLAlchemyError) as exc:
        logger.warning("Admin bootstrap failed: %s", exc)
    finally:
        db.close()


@app.on_event("startup")
async def startup():
    if settings.auto_create_tables:
        # Optional local fallback for fresh environments.
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            logger.warning("DB unavailable on startup, skipping table creation: %s", exc)
    _bootstrap_admins()

    app.state.loops = scheduler.start_loops(
        sio,
        [
            ("overdraft-sweep", settings.overdraft_sweep_interval_seconds, overdraft.sweep_overdrafts),
            ("lantern-reset", settings.lantern_signal_reset_interval_seconds, lantern.drift_stations),
            ("trigger-runner", settings.trigger_event_interval_seconds, trigger_events.run_timed_events),
        ],
    )


@app.on_event("shutdown")
async def shutdown():
    await scheduler.stop_loops(app.state.loops)
    app.state.loops = []


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/healthz")
def healthz():
    # Liveness: process is up.
    return {
        "status": "ok",
        "uptime_seconds": int(max(0, time.time() - _started_at)),
        "service": settings.app_name,
    }


@app.get("/readyz")
def readyz():
    # Readiness: database is reachable.
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "ready",
            "uptime_seconds": int(max(0, time.time() - _started_at)),
        }
    except SQLAlchemyError as exc:
        logger.warning("Readiness DB check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "detail": "database_unavailable"},
        )
    finally:
        db.close()


# Served by uvicorn: socket.io on /socket.io, everything else to FastAPI.
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
