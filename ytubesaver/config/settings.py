import json
import logging
import os
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3001, ge=1, le=65535, description="Listening port")
    environment: Literal["development", "production"] = Field(
        default="development", description="Environment designation"
    )


class DownloadConfig(BaseModel):
    output_dir: str = Field(default="downloads", description="Flat directory for finished downloads")
    timeout_seconds: int = Field(default=300, ge=1, description="Download timeout in seconds")
    info_timeout_seconds: int = Field(default=30, ge=1, description="Metadata timeout in seconds")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    retries: int = Field(default=3, ge=0, description="Network retries inside yt-dlp")


class CleanupConfig(BaseModel):
    max_age_seconds: int = Field(default=3600, ge=0, description="Delete downloads older than this")


class YtDlpConfig(BaseModel):
    binary: Optional[str] = Field(
        default=None,
        description="Explicit yt-dlp executable (falls back to PATH, then python -m yt_dlp)"
    )


class RedisConfig(BaseModel):
    url: Optional[str] = Field(default=None, description="Redis connection URL (rate limiting only)")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")


class RateLimitConfig(BaseModel):
    enabled: bool = Field(default=True, description="Enable rate limiting")
    max_requests: int = Field(default=10, ge=1, description="Max requests per window")
    window_seconds: int = Field(default=60, ge=1, description="Rate limit window in seconds")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="YTubeSaver API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(
        default=["http://localhost:3000", "https://laudarisd.github.io"],
        description="CORS allowed origins"
    )
    debug: bool = Field(default=False, description="Enable debug mode")


class ProviderConfig(BaseModel):
    kind: Literal["cobalt", "generic"] = Field(description="Adapter used to talk to the service")
    endpoint: str = Field(description="Service endpoint URL")


class ClientConfig(BaseModel):
    backend_url: str = Field(default="http://localhost:3001/api", description="Base URL of the API")
    timeout_seconds: float = Field(default=60.0, gt=0, description="HTTP timeout for client requests")
    providers: List[ProviderConfig] = Field(
        default_factory=lambda: [
            ProviderConfig(kind="cobalt", endpoint="https://api.cobalt.tools/api/json"),
            ProviderConfig(kind="generic", endpoint="https://api.savemp3.cc/"),
        ],
        description="Fallback download services, tried in order"
    )


class Config(BaseSettings):
    """Main configuration model"""
    model_config = SettingsConfigDict(
        env_prefix="YTUBESAVER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)
    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    @classmethod
    def load_from_file(cls, config_path: str = CONFIG_PATH) -> "Config":
        """Load configuration from JSON file"""
        if os.path.exists(config_path):
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
                logger.info(f"Configuration loaded from {config_path}")
                return cls(**config_data)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load config from {config_path}: {str(e)}")
                logger.info("Using default configuration")
        else:
            logger.warning(f"Config file {config_path} not found, using defaults")

        return cls()

    @classmethod
    def load_from_env(cls) -> "Config":
        """Load configuration from the flat environment variables"""
        config_data: Dict[str, Any] = {}

        server = {}
        if os.getenv("PORT"):
            server["port"] = int(os.getenv("PORT"))
        if os.getenv("APP_ENV"):
            server["environment"] = os.getenv("APP_ENV").lower()
        if server:
            config_data["server"] = server

        download = {}
        if os.getenv("DOWNLOAD_DIR"):
            download["output_dir"] = os.getenv("DOWNLOAD_DIR")
        if os.getenv("DOWNLOAD_TIMEOUT"):
            download["timeout_seconds"] = int(os.getenv("DOWNLOAD_TIMEOUT"))
        if os.getenv("INFO_TIMEOUT"):
            download["info_timeout_seconds"] = int(os.getenv("INFO_TIMEOUT"))
        if download:
            config_data["download"] = download

        if os.getenv("CLEANUP_MAX_AGE"):
            config_data["cleanup"] = {"max_age_seconds": int(os.getenv("CLEANUP_MAX_AGE"))}

        if os.getenv("YT_DLP_PATH"):
            config_data["ytdlp"] = {"binary": os.getenv("YT_DLP_PATH")}

        if os.getenv("REDIS_URL"):
            config_data["redis"] = {"url": os.getenv("REDIS_URL")}

        if os.getenv("LOG_LEVEL"):
            config_data["logging"] = {"level": os.getenv("LOG_LEVEL")}

        if os.getenv("CORS_ORIGINS"):
            origins = [o.strip() for o in os.getenv("CORS_ORIGINS").split(",") if o.strip()]
            config_data["api"] = {"cors_origins": origins}

        if os.getenv("BACKEND_URL"):
            config_data["client"] = {"backend_url": os.getenv("BACKEND_URL")}

        return cls(**config_data) if config_data else cls()

    @property
    def is_production(self) -> bool:
        return self.server.environment == "production"


def load_config() -> Config:
    """Load configuration with priority: config.json > env vars > defaults"""
    if os.path.exists(CONFIG_PATH):
        return Config.load_from_file(CONFIG_PATH)
    logger.info(f"Config file not found at {CONFIG_PATH}, checking environment variables")
    return Config.load_from_env()


config = load_config()
