from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

# Dev-only signing secrets.  load_settings() refuses them when APP_ENV=prod.
DEV_JWT_SECRET = "dev-only-access-secret-change-me"
DEV_JWT_REFRESH_SECRET = "dev-only-refresh-secret-change-me"


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getint(name: str, default: str, *, minimum: int = 1) -> int:
    raw = _getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum} (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    jwt_secret: str
    jwt_refresh_secret: str
    access_token_ttl_min: int = 15
    refresh_token_ttl_days: int = 7
    app_url: str = "http://localhost:8000"
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    port = _getint("PORT", "8000")

    database_url = _getenv("DATABASE_URL", "") or None
    redis_url = _getenv("REDIS_URL", "") or None

    # --- Token signing -------------------------------------------------------
    # Access and refresh tokens are signed with different secrets, so a leak
    # of one secret cannot be used to forge the other token class.
    jwt_secret = _getenv("JWT_SECRET", DEV_JWT_SECRET)
    jwt_refresh_secret = _getenv("JWT_REFRESH_SECRET", DEV_JWT_REFRESH_SECRET)

    if not jwt_secret or not jwt_refresh_secret:
        raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must be non-empty")
    if jwt_secret == jwt_refresh_secret:
        raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must differ")
    if app_env_raw == "prod" and (
        jwt_secret == DEV_JWT_SECRET or jwt_refresh_secret == DEV_JWT_REFRESH_SECRET
    ):
        raise ValueError("dev signing secrets are not allowed when APP_ENV=prod")

    cors_origins = tuple(
        o.strip()
        for o in _getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if o.strip()
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("1", "true", "yes"),
        port=port,
        database_url=database_url,
        redis_url=redis_url,
        jwt_secret=jwt_secret,
        jwt_refresh_secret=jwt_refresh_secret,
        access_token_ttl_min=_getint("ACCESS_TOKEN_TTL_MIN", "15"),
        refresh_token_ttl_days=_getint("REFRESH_TOKEN_TTL_DAYS", "7"),
        app_url=_getenv("APP_URL", "http://localhost:8000").rstrip("/"),
        upload_dir=_getenv("UPLOAD_DIR", "uploads"),
        max_upload_bytes=_getint("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)),
        cors_origins=cors_origins,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
