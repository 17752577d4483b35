from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from ticket_registry.db.models import TICKET_COUNTER_NAME, CounterTable, TicketTable
from ticket_registry.tickets import AdminAuthority, SqlTicketLedger, TicketRegistry


def test_ensure_schema_creates_tables(sql_engine):
    ledger = SqlTicketLedger(sql_engine)

    ledger.ensure_schema()
    ledger.ensure_schema()

    tables = set(inspect(sql_engine).get_table_names())
    assert {"registry_tickets", "registry_batch_metadata", "registry_counters"} <= tables


def test_state_survives_a_new_ledger_instance(sql_engine, sql_ledger):
    registry = TicketRegistry(AdminAuthority("admin"), sql_ledger)
    registry.issue("admin", "VIP-1")
    registry.transfer("bob", 1, "admin", "bob")

    reopened = SqlTicketLedger(sql_engine)

    assert reopened.last_id() == 1
    assert reopened.get(1).owner == "bob"


def test_counter_row_tracks_allocations(sql_engine, sql_ledger):
    with sql_ledger.transaction():
        for info in ("a", "b"):
            sql_ledger.put(sql_ledger.allocate_id(), info, "admin")

    with Session(sql_engine) as session:
        counter = session.get(CounterTable, TICKET_COUNTER_NAME)
        rows = session.execute(select(TicketTable).order_by(TicketTable.id)).scalars().all()

    assert counter.value == 2
    assert [(row.id, row.info, row.owner) for row in rows] == [(1, "a", "admin"), (2, "b", "admin")]


def test_failed_unit_of_work_writes_nothing(sql_engine, sql_ledger):
    try:
        with sql_ledger.transaction():
            sql_ledger.put(sql_ledger.allocate_id(), "a", "admin")
            raise ValueError("abort")
    except ValueError:
        pass

    with Session(sql_engine) as session:
        assert session.get(CounterTable, TICKET_COUNTER_NAME) is None
        assert session.execute(select(TicketTable)).scalars().all() == []
