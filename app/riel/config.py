import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str
    csrf_enabled: bool

    storage_backend: str
    media_root: str
    media_base_url: str
    upload_folder: str
    s3_endpoint: str
    s3_region: str
    s3_bucket: str
    s3_access_key_id: str
    s3_secret_access_key: str
    s3_public_base_url: str

    mail_backend: str
    mail_from: str
    site_url: str
    unsubscribe_token_ttl_hours: int
    campaign_delivery_mode: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///riel.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        csrf_enabled=_getenv("CSRF_ENABLED", "1") != "0",
        storage_backend=_getenv("STORAGE_BACKEND", "local"),
        media_root=_getenv("MEDIA_ROOT", ""),
        media_base_url=_getenv("MEDIA_BASE_URL", "/media"),
        upload_folder=_getenv("UPLOAD_FOLDER", "riel-films"),
        s3_endpoint=_getenv("S3_ENDPOINT", ""),
        s3_region=_getenv("S3_REGION", "nyc3"),
        s3_bucket=_getenv("S3_BUCKET", ""),
        s3_access_key_id=_getenv("S3_ACCESS_KEY_ID", ""),
        s3_secret_access_key=_getenv("S3_SECRET_ACCESS_KEY", ""),
        s3_public_base_url=_getenv("S3_PUBLIC_BASE_URL", ""),
        mail_backend=_getenv("MAIL_BACKEND", "log"),
        mail_from=_getenv("MAIL_FROM", "Riel Films <noreply@rielfilms.com>"),
        site_url=_getenv("SITE_URL", "http://localhost:3000").rstrip("/"),
        unsubscribe_token_ttl_hours=_getenv_int("UNSUBSCRIBE_TOKEN_TTL_HOURS", 24 * 30),
        campaign_delivery_mode=_getenv("CAMPAIGN_DELIVERY_MODE", "inline").lower(),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "CSRF_ENABLED": s.csrf_enabled,
        "STORAGE_BACKEND": s.storage_backend,
        "MEDIA_ROOT": s.media_root,
        "MEDIA_BASE_URL": s.media_base_url,
        "UPLOAD_FOLDER": s.upload_folder,
        "S3_ENDPOINT": s.s3_endpoint,
        "S3_REGION": s.s3_region,
        "S3_BUCKET": s.s3_bucket,
        "S3_ACCESS_KEY_ID": s.s3_access_key_id,
        "S3_SECRET_ACCESS_KEY": s.s3_secret_access_key,
        "S3_PUBLIC_BASE_URL": s.s3_public_base_url,
        "MAIL_BACKEND": s.mail_backend,
        "MAIL_FROM": s.mail_from,
        "SITE_URL": s.site_url,
        "UNSUBSCRIBE_TOKEN_TTL_HOURS": s.unsubscribe_token_ttl_hours,
        "CAMPAIGN_DELIVERY_MODE": s.campaign_delivery_mode,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
        # request body cap; upload route enforces its own 5MB file limit
        "MAX_CONTENT_LENGTH": 10 * 1024 * 1024,
    }


def is_production(config: dict) -> bool:
    return (config.get("ENV") or "").strip().lower() in ("prod", "production")
