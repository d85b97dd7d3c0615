"""Settings for the content service with observability configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


def _split_csv(value: Any) -> tuple[str, ...]:
    if value in (None, ""):
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple, set)):
        return tuple(str(item).strip() for item in value if str(item).strip())
    return ()


class Settings(BaseSettings):
    redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")
    # Connection attempts resolve to "unavailable" after this many seconds
    redis_connect_timeout_seconds: float = _env_field(2.0, "REDIS_CONNECT_TIMEOUT_SECONDS")
    redis_socket_timeout_seconds: float = _env_field(5.0, "REDIS_SOCKET_TIMEOUT_SECONDS")
    store_cas_retries: int = _env_field(5, "STORE_CAS_RETRIES")

    content_root: Path = _env_field(Path("content"), "CONTENT_ROOT")
    content_key_prefix: str = _env_field("tcc:", "CONTENT_KEY_PREFIX")
    site_name: str = _env_field("TCC", "SITE_NAME")

    pdf_fetch_timeout_seconds: float = _env_field(10.0, "PDF_FETCH_TIMEOUT_SECONDS")
    pdf_trusted_hosts: Any = _env_field(("res.cloudinary.com",), "PDF_TRUSTED_HOSTS")

    admin_token: Optional[str] = _env_field(None, "ADMIN_TOKEN")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_metrics_public: bool = _env_field(False, "OBS_METRICS_PUBLIC")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("contentsite-api", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")

    cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

    # Environment helpers
    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development")

    def store_key(self, name: str) -> str:
        return f"{self.content_key_prefix}{name}"

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cors_allow_origins", "pdf_trusted_hosts", mode="before")
    def _split_lists(cls, value):  # type: ignore[override]
        return _split_csv(value)


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)


def is_true(value: str | bool | None) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
