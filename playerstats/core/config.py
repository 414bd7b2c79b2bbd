from typing import Optional
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings
from enum import Enum

class BaseConfig(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name":True
    }

class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

class CompressionType(str, Enum):
    GZIP = "gz"
    BZIP2 = "bz2"
    ZIP = "zip"

class AppSettings(BaseSettings):
    app_name: str = Field(
        default="Player Statistics",
        min_length=1,
        max_length=100,
        alias="APP_NAME"
    )
    app_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        alias="APP_PORT"
    )

    app_host: str = Field(default="0.0.0.0")
    app_reload: bool = Field(default=False)
    app_log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}")
    log_file: str = Field(default="logs/app.log")
    log_rotation: str = Field(default="1 day")
    log_compression: CompressionType = Field(default=CompressionType.GZIP)

    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    flag_base_url: str = Field(
        default="https://cdn.ipinfo.io/static/images/countries-flags",
        alias="FLAG_BASE_URL",
    )
    default_player_thumbnail: str = Field(
        default="/static/images/video-playlist.svg",
        alias="DEFAULT_PLAYER_THUMBNAIL",
    )
    default_avatar_url: str = Field(
        default="/static/images/avatar.png",
        alias="DEFAULT_AVATAR_URL",
    )

    model_config = BaseConfig.model_config

class DatabaseSettings(BaseSettings):
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")
    postgres_user: str = Field(default="playerstats", min_length=1, alias="POSTGRES_USER")
    postgres_password: str = Field(default="playerstats", min_length=1, alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="playerstats", min_length=1, alias="POSTGRES_DB")
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, ge=1, le=65535, alias="POSTGRES_PORT")
    debug_sql: bool = Field(default=False)

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    model_config = BaseConfig.model_config


class RedisSettings(BaseSettings):
    redis_port: int = Field(default=6379, ge=1, le=65535, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    model_config = BaseConfig.model_config

class JWTSettings(BaseSettings):
    secret_key: str = Field(default="change-me-change-me-change-me-change-me", min_length=32, alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")

    model_config = BaseConfig.model_config


class GeoSettings(BaseSettings):
    ipinfo_url: HttpUrl = Field(default="https://ipinfo.io", alias="IPINFO_URL")
    ipinfo_timeout: float = Field(default=5.0, gt=0, alias="IPINFO_TIMEOUT")

    model_config = BaseConfig.model_config


class SupportSettings(BaseSettings):
    support_email: str = Field(default="support@example.com", alias="SUPPORT_EMAIL")
    site_url: str = Field(default="http://localhost:8000", alias="SITE_URL")
    banned_url_check: HttpUrl = Field(
        default="https://support.example.com/public/v1/check-banned-url",
        alias="SUPPORT_BANNED_URL_CHECK",
    )
    features_url: HttpUrl = Field(
        default="https://support.example.com/public/v1/item-features",
        alias="SUPPORT_FEATURES_URL",
    )
    item_name: str = Field(default="playerstats", alias="SUPPORT_ITEM_NAME")
    request_timeout: float = Field(default=10.0, gt=0)

    model_config = BaseConfig.model_config


class MailSettings(BaseSettings):
    smtp_host: str = Field(default="localhost", alias="SMTP_HOST")
    smtp_port: int = Field(default=25, ge=1, le=65535, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(default=None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    smtp_starttls: bool = Field(default=False, alias="SMTP_STARTTLS")
    mail_from: str = Field(default="noreply@example.com", alias="MAIL_FROM")

    model_config = BaseConfig.model_config
