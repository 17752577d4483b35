import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ticket_registry.tickets import AdminAuthority, InMemoryTicketLedger, SqlTicketLedger, TicketRegistry

ADMIN = "admin"

_SETTINGS_ENV = (
    "ADMIN_IDENTITY",
    "BATCH_POLICY",
    "MAX_BATCH_SIZE",
    "MAX_INFO_BYTES",
    "MIN_PRICE",
    "DATABASE_URL",
    "OTEL_ENABLED",
)


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch):
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sql_engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_ledger(sql_engine):
    ledger = SqlTicketLedger(sql_engine)
    ledger.ensure_schema()
    return ledger


@pytest.fixture
def authority():
    return AdminAuthority(ADMIN)


@pytest.fixture(params=["memory", "sql"])
def ledger(request):
    if request.param == "memory":
        return InMemoryTicketLedger()
    return request.getfixturevalue("sql_ledger")


@pytest.fixture
def registry(authority, ledger):
    return TicketRegistry(authority, ledger)
