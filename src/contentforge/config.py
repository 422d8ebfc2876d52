import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

USER_AGENT = "ContentForge/1.0"


class ForgeConfig(BaseSettings):
    """Service configuration with support for YAML files and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    deepseek_api_key: str = Field(min_length=1, description="API key for the completion provider")
    deepseek_model: str = Field(default="deepseek-chat", description="Completion model name")
    deepseek_base_url: str = Field(
        default="https://api.deepseek.com",
        description="Base URL of the completion provider, used by the health probe",
    )
    cloudinary_cloud_name: str = Field(min_length=1, description="Cloudinary cloud name")
    cloudinary_api_key: str = Field(min_length=1, description="Cloudinary API key")
    cloudinary_api_secret: str = Field(min_length=1, description="Cloudinary API secret")
    cloudinary_upload_preset: str = Field(min_length=1, description="Cloudinary upload preset")
    environment: Literal["development", "production"] = Field(
        default="development",
        description="Development mode exposes internal error messages",
    )
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")  # noqa: S104
    port: int = Field(default=3000, ge=1, le=65535, description="Port to bind the server to")
    cors_origin: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origin outside development mode",
    )
    log_level: str = Field(default="INFO", description="Log level for the service logger")
    completion_timeout: float = Field(default=30.0, gt=0, description="Seconds before a completion call is aborted")
    health_timeout: float = Field(default=2.0, gt=0, description="Seconds before the health probe gives up")
    pdf_fetch_timeout: float = Field(default=30.0, gt=0, description="Seconds before a PDF download is aborted")
    rate_limit_max: int = Field(default=100, ge=1, description="Requests allowed per client in one window")
    rate_limit_window: int = Field(default=900, ge=1, description="Rate limit window in seconds")
    max_json_bytes: int = Field(default=10 * 1024 * 1024, ge=1, description="Largest accepted JSON request body")

    @field_validator("cors_origin")
    @classmethod
    def _check_cors_origin(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = "cors_origin must be an http(s) URL"
            raise ValueError(msg)
        return value.rstrip("/")

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def rate_limit(self) -> str:
        """Limit string in the `limits` notation, e.g. ``100/900 seconds``."""
        return f"{self.rate_limit_max}/{self.rate_limit_window} seconds"


def load_config(config_path: str | None = None) -> ForgeConfig:
    """Load configuration from file and environment variables.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        ForgeConfig instance with merged configuration

    Raises:
        pydantic.ValidationError: If required settings are missing or malformed

    """
    config_dict: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
            if yaml_config:
                config_dict = _resolve_env_vars(yaml_config)

    return ForgeConfig(**config_dict)


def _resolve_env_vars(config: Any) -> Any:
    """Recursively resolve environment variable references in config.

    Supports ${VAR_NAME} syntax in string values.
    """
    if isinstance(config, dict):
        return {key: _resolve_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [_resolve_env_vars(item) for item in config]
    if isinstance(config, str) and config.startswith("${") and config.endswith("}"):
        env_var = config[2:-1]
        return os.getenv(env_var, config)
    return config
