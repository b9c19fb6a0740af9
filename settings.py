import logging
import os
import urllib.parse
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "change-me"
DEFAULT_ORIGINS = ("http://localhost:3000", "http://localhost:8000")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./leave_management.db"

    # JWT Configuration
    jwt_secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = "7d"
    bcrypt_rounds: int = 10

    # SMTP; notifications are disabled unless server and sender are set
    mail_server: Optional[str] = None
    mail_port: int = 587
    mail_username: Optional[str] = None
    mail_password: Optional[str] = None
    mail_from: Optional[str] = None
    mail_from_name: str = "Leave Management System"
    mail_starttls: bool = True
    mail_ssl_tls: bool = False

    upload_dir: str = "uploads"
    max_upload_size: int = 5 * 1024 * 1024

    allowed_origins: Tuple[str, ...] = DEFAULT_ORIGINS
    auto_create_tables: bool = True
    log_level: str = "INFO"

    default_admin_email: str = "admin@company.com"
    default_admin_password: str = "admin123"

    @property
    def mail_enabled(self) -> bool:
        return bool(self.mail_server and self.mail_from)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _database_url() -> str:
    # Use the DATABASE_URL directly when present (already URL encoded)
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_user = os.getenv("DB_USER")
    db_password = os.getenv("DB_PASSWORD")
    db_host = os.getenv("DB_HOST")
    db_port = os.getenv("DB_PORT", "3306")
    db_name = os.getenv("DB_NAME")
    if all([db_user, db_password, db_host, db_name]):
        encoded_password = urllib.parse.quote_plus(db_password)
        return f"mysql+pymysql://{db_user}:{encoded_password}@{db_host}:{db_port}/{db_name}"

    return Settings.database_url


def _allowed_origins() -> Tuple[str, ...]:
    origins = []
    for env_var in ("REACT_APP_API_URL", "FRONTEND_URL"):
        value = os.getenv(env_var, "")
        origins.extend(origin.strip() for origin in value.split(",") if origin.strip())

    # Remove duplicates while preserving order
    origins = list(dict.fromkeys(origins))
    return tuple(origins) or DEFAULT_ORIGINS


def get_settings() -> Settings:
    """Build settings from the process environment and an optional .env file."""
    load_dotenv(override=False)

    settings = Settings(
        database_url=_database_url(),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY") or DEFAULT_SECRET_KEY,
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_in=os.getenv("JWT_EXPIRES_IN", "7d"),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
        mail_server=os.getenv("MAIL_SERVER") or None,
        mail_port=_env_int("MAIL_PORT", 587),
        mail_username=os.getenv("MAIL_USERNAME") or None,
        mail_password=os.getenv("MAIL_PASSWORD") or None,
        mail_from=os.getenv("MAIL_FROM") or None,
        mail_from_name=os.getenv("MAIL_FROM_NAME", "Leave Management System"),
        mail_starttls=_env_bool("MAIL_STARTTLS", True),
        mail_ssl_tls=_env_bool("MAIL_SSL_TLS", False),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        max_upload_size=_env_int("MAX_UPLOAD_SIZE", 5 * 1024 * 1024),
        allowed_origins=_allowed_origins(),
        auto_create_tables=_env_bool("AUTO_CREATE_TABLES", True),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_admin_email=os.getenv("DEFAULT_ADMIN_EMAIL", "admin@company.com"),
        default_admin_password=os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123"),
    )

    if settings.jwt_secret_key == DEFAULT_SECRET_KEY:
        logger.warning("JWT_SECRET_KEY is not set, falling back to an insecure default")
    return settings
