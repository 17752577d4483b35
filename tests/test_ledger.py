import pytest

from ticket_registry.tickets import InMemoryTicketLedger


def test_allocate_id_is_sequential_from_one(ledger):
    assert ledger.last_id() == 0
    assert [ledger.allocate_id() for _ in range(3)] == [1, 2, 3]
    assert ledger.last_id() == 3


def test_put_and_get_round_trip(ledger):
    ticket_id = ledger.allocate_id()
    ledger.put(ticket_id, "VIP-1", "admin")

    ticket = ledger.get(ticket_id)
    assert ticket is not None
    assert (ticket.id, ticket.info, ticket.owner, ticket.cancelled) == (1, "VIP-1", "admin", False)
    assert ledger.get(2) is None


def test_put_rejects_unallocated_duplicate_and_empty(ledger):
    with pytest.raises(ValueError):
        ledger.put(1, "not allocated", "admin")

    ticket_id = ledger.allocate_id()
    with pytest.raises(ValueError):
        ledger.put(ticket_id, "", "admin")

    ledger.put(ticket_id, "first", "admin")
    with pytest.raises(ValueError):
        ledger.put(ticket_id, "second", "admin")


def test_set_cancelled_clears_owner(ledger):
    ticket_id = ledger.allocate_id()
    ledger.put(ticket_id, "GA", "admin")

    ledger.set_cancelled(ticket_id, True)
    ticket = ledger.get(ticket_id)
    assert ticket.cancelled
    assert ticket.owner is None
    assert not ledger.exists_active(ticket_id)

    ledger.set_cancelled(ticket_id, False)
    ticket = ledger.get(ticket_id)
    assert not ticket.cancelled
    assert ticket.owner is None
    assert ledger.exists_active(ticket_id)


def test_set_owner_updates_owner(ledger):
    ticket_id = ledger.allocate_id()
    ledger.put(ticket_id, "GA", "admin")

    ledger.set_owner(ticket_id, "bob")

    assert ledger.get(ticket_id).owner == "bob"


def test_batch_metadata_is_independent_of_tickets(ledger):
    ledger.put_batch_metadata(7, "imported")

    assert ledger.get_batch_metadata(7) == "imported"
    assert ledger.get(7) is None
    assert ledger.batch_metadata() == {7: "imported"}


def test_transaction_rolls_back_every_mutation(ledger):
    ticket_id = ledger.allocate_id()
    ledger.put(ticket_id, "kept", "admin")

    with pytest.raises(RuntimeError):
        with ledger.transaction():
            new_id = ledger.allocate_id()
            ledger.put(new_id, "dropped", "admin")
            ledger.set_owner(ticket_id, "bob")
            ledger.put_batch_metadata(new_id, "batch")
            raise RuntimeError("boom")

    assert ledger.last_id() == 1
    assert ledger.get(2) is None
    assert ledger.get(ticket_id).owner == "admin"
    assert ledger.get_batch_metadata(2) is None


def test_transaction_commits_on_success(ledger):
    with ledger.transaction():
        ticket_id = ledger.allocate_id()
        ledger.put(ticket_id, "GA", "admin")

    assert ledger.last_id() == 1
    assert ledger.get(1).info == "GA"


def test_nested_transaction_joins_outer_unit_of_work(ledger):
    with pytest.raises(RuntimeError):
        with ledger.transaction():
            with ledger.transaction():
                ledger.put(ledger.allocate_id(), "inner", "admin")
            raise RuntimeError("outer failure")

    assert ledger.last_id() == 0
    assert ledger.get(1) is None


def test_in_memory_get_returns_a_copy():
    ledger = InMemoryTicketLedger()
    ticket_id = ledger.allocate_id()
    ledger.put(ticket_id, "GA", "admin")

    ticket = ledger.get(ticket_id)
    ticket.owner = "mallory"

    assert ledger.get(ticket_id).owner == "admin"


def test_list_tickets_is_ordered_by_id(ledger):
    for info in ("a", "b", "c"):
        ledger.put(ledger.allocate_id(), info, "admin")

    assert [ticket.info for ticket in ledger.list_tickets()] == ["a", "b", "c"]
