"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Congress Portal API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # Redis
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_decode_responses: bool = Field(default=True, alias="REDIS_DECODE_RESPONSES")

    # JWT
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=720, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Password hashing
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, alias="BCRYPT_ROUNDS")

    # Localization of user-facing auth messages
    default_locale: str = Field(default="en", alias="DEFAULT_LOCALE")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if isinstance(self.cors_origins_str, str):
            return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]
        return [self.cors_origins_str]

    # Portal client (session store + route guard)
    portal_base_url: str = Field(default="http://localhost:8000", alias="PORTAL_BASE_URL")
    session_storage_key: str = Field(default="campus_connect_session", alias="SESSION_STORAGE_KEY")
    session_storage_path: str | None = Field(
        default=None,
        alias="SESSION_STORAGE_PATH",
        description="JSON file backing the session store; in-memory when unset",
    )
    guard_internal_delay_ms: int = Field(default=500, ge=0, alias="GUARD_INTERNAL_DELAY_MS")
    guard_entry_delay_ms: int = Field(default=200, ge=0, alias="GUARD_ENTRY_DELAY_MS")
    guard_internal_prefixes_str: str = Field(
        default="/dashboard,/admin",
        alias="GUARD_INTERNAL_PREFIXES",
    )
    user_login_path: str = Field(default="/login", alias="USER_LOGIN_PATH")
    admin_login_path: str = Field(default="/admin/login", alias="ADMIN_LOGIN_PATH")

    @property
    def guard_internal_prefixes(self) -> tuple[str, ...]:
        """Route prefixes that get the longer redirect grace period."""
        return tuple(
            prefix.strip() for prefix in self.guard_internal_prefixes_str.split(",") if prefix.strip()
        )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
