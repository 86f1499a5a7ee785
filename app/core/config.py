"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Values are validated at load time.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_UPLOAD_MIME_TYPES = ",".join(
    (
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.oasis.opendocument.text",
        "image/jpeg",
        "image/png",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
)


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    database_url may be empty: the app still starts, and endpoints that need
    the database answer 503 until it is configured.
    """

    # App
    app_name: str = "deadline-workspace"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (PostgreSQL via asyncpg; schema managed by Alembic)
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int = 20
    db_max_overflow: int = 30
    db_command_timeout: int = 60

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Storage (local filesystem; upload step of the two-step document protocol)
    storage_root: str = "/var/deadline-workspace/storage"
    storage_base_url: str | None = None
    max_upload_size: int = 50 * 1024 * 1024  # 50MB
    allowed_upload_mime_types: str = _DEFAULT_UPLOAD_MIME_TYPES
    allowed_upload_extensions: str = ".pdf,.doc,.docx,.odt,.jpg,.jpeg,.png,.xls,.xlsx"

    # Request / middleware
    actor_header_name: str = "X-Actor-ID"
    request_id_header: str = "X-Request-ID"

    # External deadline service (fulfilment notification on close)
    deadline_service_url: str | None = None
    deadline_service_timeout_seconds: float = 10.0

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def upload_mime_types(self) -> frozenset[str]:
        return frozenset(
            m.strip().lower() for m in self.allowed_upload_mime_types.split(",") if m.strip()
        )

    @property
    def upload_extensions(self) -> frozenset[str]:
        return frozenset(
            e.strip().lower() for e in self.allowed_upload_extensions.split(",") if e.strip()
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @model_validator(mode="after")
    def validate_storage_and_telemetry(self) -> "Settings":
        """Validate storage limits and telemetry sampling."""
        if not self.storage_root.strip():
            raise ValueError("STORAGE_ROOT must not be empty.")
        if self.max_upload_size <= 0:
            raise ValueError(
                f"MAX_UPLOAD_SIZE must be positive, got: {self.max_upload_size}"
            )
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError(
                f"TELEMETRY_SAMPLE_RATE must be within [0, 1], got: {self.telemetry_sample_rate}"
            )
        if self.deadline_service_timeout_seconds <= 0:
            raise ValueError("DEADLINE_SERVICE_TIMEOUT_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
