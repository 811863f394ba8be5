from functools import lru_cache
import json
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors_origins(value: str) -> list[str]:
    if not value:
        return []

    parsed: list[str]
    raw = value.strip()
    if raw.startswith("["):
        try:
            items = json.loads(raw)
            parsed = [str(item).strip() for item in items if str(item).strip()]
        except (TypeError, ValueError):
            parsed = []
    else:
        parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]

    # Preserve order and remove duplicates.
    return list(dict.fromkeys(parsed))


def parse_name_list(value: str) -> list[str]:
    return [item.strip().lower() for item in (value or "").split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Lantern ARG"
    environment: str = "development"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Security
    secret_key: str
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    password_bcrypt_rounds: int = 12
    # Users stay unverified until a moderator (or the mail link) verifies them.
    require_verification: bool = False

    # Database
    database_url: str = "sqlite+pysqlite:///./lantern.db"
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: int = 15
    db_pool_recycle: int = 1200
    db_pool_pre_ping: bool = True

    # Rate limiting
    rate_limit_enabled: bool = True

    # Frontend URLs (used for email links)
    frontend_base_url: str = "http://localhost:5173"

    # Email (verification)
    email_provider: str = "console"  # console|resend|brevo
    email_from: str = "Lantern <no-reply@lantern.local>"
    resend_api_key: Optional[str] = None
    brevo_api_key: Optional[str] = None

    # Wallets
    default_wallet_amount: int = 10
    wallet_minimum_amount: int = 0

    # Overdraft sweep (0 disables the loop)
    overdraft_sweep_interval_seconds: int = 0
    overdraft_amortization_rate: int = 1
    # Balance the sweep amortizes negative wallets up to.
    overdraft_sweep_target: int = 0

    # Lantern hacking
    lantern_signal_default: int = 100
    lantern_signal_threshold: int = 50
    lantern_change_percentage: float = 0.2
    lantern_signal_max_change: int = 10
    lantern_signal_reset_interval_seconds: int = 0
    hacking_tries_amount: int = 3

    # Rooms, messages and doc files
    room_name_max_length: int = 20
    room_password_max_length: int = 100
    message_max_length: int = 2500
    doc_file_max_length: int = 3500
    doc_file_title_min_length: int = 3
    doc_file_title_max_length: int = 40
    doc_file_code_min_length: int = 3
    doc_file_code_max_length: int = 10

    # Calibration missions
    calibration_timeout_minutes: int = 20
    calibration_reward_amount: int = 5
    hacking_api_url: Optional[str] = None
    hacking_api_key: Optional[str] = None
    hacking_api_timeout_seconds: int = 10

    # Trigger events (0 disables the timed runner)
    trigger_event_interval_seconds: int = 0

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    auto_create_tables: bool = False

    # Ops: bootstrap admin users (comma-separated usernames).
    bootstrap_admin_usernames: str = ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
