import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from reskit.core.logging import get_logger


__all__ = [
    "Settings",
    "CookieSettings",
    "FileSettings",
    "RedirectSettings",
    "LoggingSettings",
    "ConfigurationError",
    "get_settings",
]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class CookieSettings(BaseModel):
    """Cookie signing configuration."""

    secret: SecretStr | None = Field(
        default=None,
        description="Secret used to sign cookies when no request-scoped secret is set",
    )


class FileSettings(BaseModel):
    """File streaming configuration used by downloads."""

    chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Number of bytes read per chunk when streaming a file",
    )


class RedirectSettings(BaseModel):
    default_status: int = Field(default=302, ge=300, le=399)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Log level name")
    json_logs: bool = Field(default=False, description="Render logs as JSON")


class Settings(BaseSettings):
    """
    Configuration settings for reskit.

    Settings are loaded from environment variables, a .env file and an
    optional TOML file named by RESKIT_CONFIG_FILE. Environment variables take
    precedence over TOML values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    cookies: CookieSettings = Field(
        default_factory=CookieSettings,
        description="Cookie signing settings",
    )

    files: FileSettings = Field(
        default_factory=FileSettings,
        description="File streaming settings",
    )

    redirect: RedirectSettings = Field(
        default_factory=RedirectSettings,
        description="Redirect defaults",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls,
        config_path: Path | str | None = None,
        **kwargs: Any,
    ) -> "Settings":
        """Create Settings from an optional TOML file, env vars and overrides."""
        if config_path is None:
            config_path_env = os.environ.get("RESKIT_CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        settings = cls()

        if config_path and config_path.exists():
            config_data = cls.load_toml_config(config_path)
            logger = get_logger(__name__)
            logger.info(
                "config_file_loaded",
                path=str(config_path),
                category="config",
            )
            for key, value in config_data.items():
                if not hasattr(settings, key) or not isinstance(value, dict):
                    continue
                nested_obj = getattr(settings, key)
                for nested_key, nested_value in value.items():
                    env_key = f"{key.upper()}__{nested_key.upper()}"
                    if os.getenv(env_key) is None:
                        setattr(nested_obj, nested_key, nested_value)

        def _apply_overrides(target: Any, overrides: dict[str, Any]) -> None:
            for k, v in overrides.items():
                sub = getattr(target, k, None)
                if isinstance(v, dict) and isinstance(sub, BaseModel):
                    _apply_overrides(sub, v)
                else:
                    setattr(target, k, v)

        if kwargs:
            _apply_overrides(settings, kwargs)

        return settings


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings.from_config()
