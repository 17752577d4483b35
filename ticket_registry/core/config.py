from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ticket_registry.tickets.models import BatchPolicy


class Settings(BaseSettings):
    """Registry configuration read from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = Field(default="Ticket Registry")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(levelname)s %(name)s %(message)s")

    # Access control
    admin_identity: str | None = Field(default=None)

    # Issuance rules
    batch_policy: BatchPolicy = Field(default=BatchPolicy.ATOMIC)
    max_batch_size: int = Field(default=50, ge=1)
    max_info_bytes: int = Field(default=128, ge=1)
    min_price: int = Field(default=10, ge=0)

    # Storage; no URL keeps the ledger in memory
    database_url: str | None = Field(default=None)

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="ticket-registry")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the registry settings."""

    return Settings()
