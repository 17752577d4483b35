from contextlib import contextmanager
from typing import Iterator

from opentelemetry.sdk.trace import TracerProvider
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from ticket_registry.core.config import Settings, get_settings
from ticket_registry.core.logging import configure_logging, init_tracer, shutdown_tracer
from ticket_registry.metrics import MetricsRegistry
from ticket_registry.tickets import (
    AdminAuthority,
    InMemoryTicketLedger,
    PriceValidator,
    SqlTicketLedger,
    TicketLedger,
    TicketRegistry,
)


def _create_engine(database_url: str) -> Engine:
    """Build an engine; in-memory SQLite must share one connection across sessions."""

    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


def build_ledger(settings: Settings) -> tuple[TicketLedger, Engine | None]:
    if not settings.database_url:
        return InMemoryTicketLedger(), None
    engine = _create_engine(settings.database_url)
    ledger = SqlTicketLedger(engine)
    ledger.ensure_schema()
    return ledger, engine


def create_registry(
    settings: Settings | None = None,
    *,
    ledger: TicketLedger | None = None,
    metrics: MetricsRegistry | None = None,
    tracer_provider: TracerProvider | None = None,
) -> TicketRegistry:
    """Wire a :class:`TicketRegistry` from settings.

    The administrator is fixed here for the lifetime of the registry.
    """

    settings = settings or get_settings()
    if not settings.admin_identity:
        raise ValueError("ADMIN_IDENTITY must be configured to build a ticket registry")
    if ledger is None:
        ledger, _ = build_ledger(settings)
    return TicketRegistry(
        AdminAuthority(settings.admin_identity),
        ledger,
        batch_policy=settings.batch_policy,
        max_batch_size=settings.max_batch_size,
        max_info_bytes=settings.max_info_bytes,
        price_validator=PriceValidator(min_price=settings.min_price),
        metrics=metrics,
        tracer_provider=tracer_provider,
    )


@contextmanager
def registry_lifespan(settings: Settings | None = None) -> Iterator[TicketRegistry]:
    """Configure logging and tracing, yield a registry and release its resources on exit."""

    settings = settings or get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)
    ledger, engine = build_ledger(settings)
    try:
        registry = create_registry(settings, ledger=ledger, tracer_provider=tracer_provider)
        logger.info(
            "%s started (%s, batch policy %s)",
            settings.app_name,
            settings.environment,
            settings.batch_policy.value,
        )
        yield registry
    finally:
        logger.info("%s shutting down", settings.app_name)
        if engine is not None:
            engine.dispose()
        shutdown_tracer(tracer_provider)
