"""Configuration management for the config updater."""

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config_updater import __version__
from config_updater.errors import ConfigError

DEFAULT_CONFIG_PATH = "/config/config.yaml"
DEFAULT_POST_UPDATE_HOOK = "/hooks/post-update"
DEFAULT_ON_ERROR_HOOK = "/hooks/on-error"
DEFAULT_USER_AGENT = f"clash-config-updater/{__version__}"


class Settings(BaseSettings):
    """Updater settings loaded once from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Source
    sub_url: str = Field(description="URL of the remote configuration document")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header value")

    # Local state
    config_path: str = Field(
        default=DEFAULT_CONFIG_PATH, description="Path of the managed configuration file"
    )
    min_config_size: int = Field(
        default=1024, ge=0, description="Smallest payload in bytes accepted as valid"
    )

    # Scheduling
    update_interval: int = Field(default=3600, gt=0, description="Seconds between update checks")

    # Hooks
    post_update_hook: str = Field(
        default=DEFAULT_POST_UPDATE_HOOK, description="Executable run after a successful write"
    )
    on_error_hook: str = Field(
        default=DEFAULT_ON_ERROR_HOOK, description="Executable run after a failed cycle"
    )

    @field_validator("sub_url")
    @classmethod
    def _validate_sub_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("SUB_URL must not be empty")
        if not value.startswith(("http://", "https://")):
            raise ValueError("SUB_URL must start with http:// or https://")
        return value


class LoggingSettings(BaseSettings):
    """Logging settings, readable before the updater settings are validated."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


def _format_validation_error(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())).upper() or "settings"
        message = err.get("msg", "invalid value")
        if err.get("type") == "missing":
            message = "environment variable is required"
        elif message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        lines.append(f"{field}: {message}")
    return "; ".join(lines)


def load_settings(**overrides: object) -> Settings:
    """Build and validate the updater settings.

    Raises:
        ConfigError: If a required setting is missing or any value is invalid.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


@lru_cache
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings instance."""
    return LoggingSettings()
