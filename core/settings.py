from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from core.exceptions import ConfigurationError

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


# Deployment variables that override values from the YAML file.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "AWS_REGION": ("storage", "region"),
    "AWS_ENDPOINT_URL": ("storage", "endpoint_url"),
    "AWS_BUCKET": ("storage", "bucket"),
    "STORAGE_BACKEND": ("storage", "backend"),
    "STORAGE_DIR": ("storage", "local_root"),
    "PORT": ("server", "port"),
    "URI": ("public", "base_uri"),
}


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)


class AuthSettings(BaseModel):
    token_env: str = "AUTH_TOKEN"

    @property
    def token(self) -> str:
        return os.getenv(self.token_env, "")


class StorageSettings(BaseModel):
    backend: Literal["s3", "local"] = "local"
    bucket: str | None = None
    region: str | None = None
    endpoint_url: str | None = None
    prefix: str = "transcripts"
    local_root: Path = Path("data/transcripts")
    access_key_id_env: str = "AWS_ACCESS_KEY_ID"
    secret_access_key_env: str = "AWS_SECRET_ACCESS_KEY"

    @field_validator("bucket", "region", "endpoint_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:  # noqa: D401
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _require_bucket(self) -> "StorageSettings":
        if self.backend == "s3" and not self.bucket:
            raise ValueError("storage.bucket is required for the s3 backend")
        return self

    @property
    def access_key_id(self) -> str | None:
        return os.getenv(self.access_key_id_env) or None

    @property
    def secret_access_key(self) -> str | None:
        return os.getenv(self.secret_access_key_env) or None


class PublicSettings(BaseModel):
    base_uri: str = "http://localhost:8080/transcripts"

    @field_validator("base_uri")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:  # noqa: D401
        return value.rstrip("/")


class CorsSettings(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    public: PublicSettings = Field(default_factory=PublicSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                TRANSCRIPTS_CONFIG environment variable or defaults to config/default.yaml.

        Returns:
            Settings instance with loaded configuration and environment overrides applied.

        Raises:
            ConfigurationError: If the file does not exist or the configuration is invalid.
        """
        config_path = path or Path(os.getenv("TRANSCRIPTS_CONFIG", "config/default.yaml"))
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                {"path": str(config_path)},
            )
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        if not isinstance(payload, dict):
            raise ConfigurationError("Configuration root must be a mapping", {"path": str(config_path)})
        _apply_env_overrides(payload)
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}", {"path": str(config_path)}) from exc

    def require_auth_token(self) -> str:
        token = self.auth.token
        if not token:
            raise ConfigurationError(
                f"Environment variable '{self.auth.token_env}' is required for authorization",
                {"env": self.auth.token_env},
            )
        return token


def _apply_env_overrides(payload: dict[str, Any]) -> None:
    for env_name, (section, field) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is None or value == "":
            continue
        target = payload.get(section)
        if not isinstance(target, dict):
            target = {}
            payload[section] = target
        target[field] = value


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "ServerSettings",
    "AuthSettings",
    "StorageSettings",
    "PublicSettings",
    "CorsSettings",
    "ENV_OVERRIDES",
    "get_settings",
]
