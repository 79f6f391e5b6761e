import os
from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, ConfigDict, SecretStr


class ConfigError(ValueError):
    pass


def get_secret(secret_name: str) -> str | None:
    secret_path = f'/run/secrets/{secret_name}'
    try:
        with open(secret_path, 'r', encoding='utf-8') as secret_file:
            return secret_file.read().strip()
    except IOError:
        return os.getenv(secret_name)


def _required(name: str, value: str | None) -> str:
    if not value:
        raise ConfigError(f"Missing required setting: {name}")
    return value


def _timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"Unknown VENUE_TIMEZONE: {name}") from None
    return name


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database_url: str
    redis_url: str | None = None

    secret_key: SecretStr
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    jwt_issuer: str = "seat-booking-api"
    jwt_audience: str = "seat-booking-web"
    cookie_name: str = "token"
    cookie_secure: bool = False

    admin_password: SecretStr
    operator_email: str
    operator_password: SecretStr

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_starttls: bool = True
    mail_from: str | None = None

    venue_timezone: str = "Asia/Kolkata"
    seat_price: Decimal = Decimal("300")
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "INFO"

    audit_stream: str = "audit:events"
    audit_group: str = "audit-g1"
    audit_batch: int = 200
    audit_block_ms: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        postgres_db = os.getenv("POSTGRES_DB")
        postgres_user = os.getenv("POSTGRES_USER")
        db_password = get_secret("db_password")
        db_host = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432")

        if not (postgres_user and db_password and postgres_db):
            raise ConfigError("Can't build DATABASE_URL")
        database_url = f"postgresql+asyncpg://{postgres_user}:{db_password}@{db_host}:{db_port}/{postgres_db}"

        smtp_password = get_secret("smtp_password")
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

        return cls(
            database_url=database_url,
            redis_url=os.getenv("REDIS_URL"),
            secret_key=_required("secret_key", get_secret("secret_key")),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")),
            cookie_secure=os.getenv("COOKIE_SECURE", "false").lower() == "true",
            admin_password=_required("admin_password", get_secret("admin_password")),
            operator_email=_required("OPERATOR_EMAIL", os.getenv("OPERATOR_EMAIL")).strip().lower(),
            operator_password=_required("operator_password", get_secret("operator_password")),
            smtp_host=os.getenv("SMTP_HOST"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_username=os.getenv("SMTP_USERNAME"),
            smtp_password=smtp_password or None,
            smtp_starttls=os.getenv("SMTP_STARTTLS", "true").lower() == "true",
            mail_from=os.getenv("MAIL_FROM") or os.getenv("SMTP_USERNAME"),
            venue_timezone=_timezone(os.getenv("VENUE_TIMEZONE", "Asia/Kolkata")),
            seat_price=Decimal(os.getenv("SEAT_PRICE", "300")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            audit_stream=os.getenv("AUDIT_STREAM", "audit:events"),
            audit_group=os.getenv("AUDIT_GROUP", "audit-g1"),
            audit_batch=int(os.getenv("AUDIT_BATCH", "200")),
            audit_block_ms=int(os.getenv("AUDIT_BLOCK_MS", "5000")),
        )
