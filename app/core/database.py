import importlib.util
import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
from app.core.config import get_settings


class Base(DeclarativeBase):
    pass


settings = get_settings()
logger = logging.getLogger(__name__)

# Lower bounds for the postgres pool: socket handlers and the background loops
# each hold a session next to the REST requests.
MIN_POOL_SIZE = 5
MIN_MAX_OVERFLOW = 5
MIN_POOL_TIMEOUT = 8

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "db"}


def _resolve_database_url(database_url: str) -> str:
    """Prefer psycopg2; fall back to psycopg 3 when only that driver is installed."""
    if not database_url.startswith("postgresql://"):
        return database_url
    if importlib.util.find_spec("psycopg2") is None and importlib.util.find_spec("psycopg") is not None:
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


def _postgres_options(host: str | None) -> dict[str, Any]:
    pool = {
        "pool_size": max(MIN_POOL_SIZE, int(settings.db_pool_size)),
        "max_overflow": max(MIN_MAX_OVERFLOW, int(settings.db_max_overflow)),
        "pool_timeout": max(MIN_POOL_TIMEOUT, int(settings.db_pool_timeout)),
    }
    configured = (settings.db_pool_size, settings.db_max_overflow, settings.db_pool_timeout)
    if tuple(pool.values()) != tuple(int(value) for value in configured):
        logger.warning("Raised DB pool settings to the minimum: %s", pool)

    connect_args: dict[str, Any] = {
        "keepalives": 1,
        "keepalives_idle": 30,
        "keepalives_interval": 10,
        "keepalives_count": 5,
    }
    if host not in _LOCAL_HOSTS:
        connect_args["sslmode"] = "require"
    return {
        **pool,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": settings.db_pool_recycle,
        "pool_use_lifo": True,
        "connect_args": connect_args,
    }


def engine_options(database_url: str) -> dict[str, Any]:
    url = make_url(database_url)
    if url.drivername.startswith("postgresql"):
        return _postgres_options(url.host)
    if url.drivername.startswith("sqlite"):
        # Socket handlers and background loops use sessions from the threadpool.
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:") or "mode=memory" in database_url:
            # One shared connection, otherwise every session sees an empty database.
            options["poolclass"] = StaticPool
        return options
    return {}


database_url = _resolve_database_url(str(settings.database_url))

engine = create_engine(database_url, **engine_options(database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
