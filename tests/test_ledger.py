from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.ledger import LedgerEntry
from app.services.balance import compute_balances
from app.services.ledger import (
    delete_entry,
    get_member_entries,
    list_member_entries,
    list_period_entries,
    record_entry,
    update_entry,
)
from app.services.period import close_and_rollover


def test_record_entry_stamps_interest(db, open_period, make_member):
    member = make_member()

    entry = record_entry(db, member.id, hulam="1000", hulam_put_up="500", lawas=2)

    assert entry.period_id == open_period.id
    assert entry.interest == Decimal("150.00")
    assert entry.lawas == Decimal("2")
    assert entry.payment == Decimal("0")


def test_record_entry_without_open_period(db, make_member):
    member = make_member()

    with pytest.raises(ConflictError):
        record_entry(db, member.id, payment="100")


def test_record_entry_into_closed_period(db, open_period, make_member):
    member = make_member()
    close_and_rollover(db, open_period.id, "FEB 2026", date(2026, 2, 1))

    with pytest.raises(ConflictError):
        record_entry(db, member.id, open_period.id, payment="100")


def test_record_entry_unknown_member_or_period(db, open_period, make_member):
    with pytest.raises(NotFoundError):
        record_entry(db, 999, hulam="100")

    member = make_member()
    with pytest.raises(NotFoundError):
        record_entry(db, member.id, 999, hulam="100")


@pytest.mark.parametrize("amounts", [
    {"hulam": "1,000"},
    {"payment": "abc"},
    {"penalty": "-5"},
    {"lawas": "2.5"},
    {"payment": "0.004"},
    {"hulam": "100.005"},
    {"hulam": "1e27"},
])
def test_record_entry_rejects_bad_amounts(db, open_period, make_member, amounts):
    member = make_member()

    with pytest.raises(ValidationError):
        record_entry(db, member.id, **amounts)
    assert db.query(LedgerEntry).count() == 0


def test_update_recomputes_interest_from_merged_values(db, open_period, make_member):
    member = make_member()
    entry = record_entry(db, member.id, hulam="1000", hulam_put_up="500")

    updated = update_entry(db, entry.id, hulam="2000")

    # hulam_put_up keeps its stored 500
    assert updated.hulam_put_up == Decimal("500")
    assert updated.interest == Decimal("250.00")


def test_update_without_principal_keeps_interest(db, open_period, make_member):
    member = make_member()
    entry = record_entry(db, member.id, hulam="1000")

    updated = update_entry(db, entry.id, payment="40")

    assert updated.interest == Decimal("100.00")
    assert updated.payment == Decimal("40")


def test_entries_in_closed_period_are_frozen(db, open_period, make_member):
    member = make_member()
    entry = record_entry(db, member.id, hulam="1000")
    close_and_rollover(db, open_period.id, "FEB 2026", date(2026, 2, 1))

    with pytest.raises(ConflictError):
        update_entry(db, entry.id, hulam="10")
    with pytest.raises(ConflictError):
        delete_entry(db, entry.id)


def test_carry_forward_entry_cannot_be_edited(db, open_period, make_member):
    member = make_member()
    record_entry(db, member.id, hulam="1000")
    result = close_and_rollover(db, open_period.id, "FEB 2026", date(2026, 2, 1))
    carried = list_period_entries(db, result.new_period.id)[0]

    with pytest.raises(ConflictError):
        update_entry(db, carried.id, hulam="0")


def test_delete_entry(db, open_period, make_member):
    member = make_member()
    keep = record_entry(db, member.id, lawas=1)
    drop = record_entry(db, member.id, hulam="500")

    delete_entry(db, drop.id)

    assert [e.id for e in get_member_entries(db, member.id)] == [keep.id]
    with pytest.raises(NotFoundError):
        delete_entry(db, drop.id)


def test_listing_is_newest_first(db, open_period, make_member):
    member = make_member()
    first = record_entry(db, member.id, lawas=1)
    second = record_entry(db, member.id, payment="10")

    assert [e.id for e in list_member_entries(db, member.id)] == [second.id, first.id]
    assert [e.id for e in list_period_entries(db, open_period.id)] == [second.id, first.id]
    with pytest.raises(NotFoundError):
        list_member_entries(db, 999)


def test_recorded_payment_flows_through_replay(db, open_period, make_member):
    member = make_member()
    record_entry(db, member.id, hulam="1000")
    record_entry(db, member.id, payment="150")

    summary = compute_balances(get_member_entries(db, member.id))

    assert summary.outstanding_interest == Decimal("0")
    assert summary.outstanding_hulam == Decimal("950")


def test_record_entry_locks_period_before_member(engine, db, open_period, make_member):
    # Same order as close_and_rollover: period row first, then member rows
    member_id = make_member().id
    period_id = open_period.id
    statements = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", capture)
    try:
        record_entry(db, member_id, period_id, hulam="100")
    finally:
        event.remove(engine, "before_cursor_execute", capture)

    first_period = next(i for i, s in enumerate(statements) if "FROM periods" in s)
    first_member = next(i for i, s in enumerate(statements) if "FROM members" in s)
    assert first_period < first_member
