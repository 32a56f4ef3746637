"""Balance replay engine: waterfall, ordering and numeric validation."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.models.ledger import EntryType, LedgerEntry
from app.services.balance import (
    BalanceSummary,
    aggregate,
    calculate_interest,
    compute_balances,
    parse_amount,
    parse_lawas,
    summarize_members,
)

T0 = datetime(2026, 1, 5, 9, 0, 0)


def entry(entry_id, minutes=0, entry_type=EntryType.REGULAR, **amounts):
    values = {name: Decimal("0") for name in ("lawas", "put_up", "hulam_put_up", "hulam", "interest", "payment", "penalty")}
    values.update({name: Decimal(str(value)) for name, value in amounts.items()})
    return LedgerEntry(
        id=entry_id,
        member_id=1,
        period_id=1,
        entry_type=entry_type,
        created_at=T0 + timedelta(minutes=minutes),
        **values
    )


def loan(entry_id, minutes, hulam=0, hulam_put_up=0, **amounts):
    """An entry whose interest is stamped the way record_entry stamps it."""
    interest = calculate_interest(Decimal(str(hulam)) + Decimal(str(hulam_put_up)))
    return entry(entry_id, minutes, hulam=hulam, hulam_put_up=hulam_put_up, interest=interest, **amounts)


def test_single_loan_without_payment():
    summary = compute_balances([entry(1, hulam=1000, interest=100)])

    assert summary.outstanding_interest == Decimal("100")
    assert summary.outstanding_hulam == Decimal("1000")
    assert summary.outstanding_hulam_put_up == Decimal("0")


def test_payment_covers_interest_then_principal():
    summary = compute_balances([
        entry(1, 0, hulam=1000, interest=100),
        entry(2, 5, payment=150),
    ])

    assert summary.outstanding_interest == Decimal("0")
    assert summary.total_interest_paid == Decimal("100")
    assert summary.outstanding_hulam == Decimal("950")


def test_lawas_accumulates_and_sets_required_put_up():
    summary = compute_balances([entry(1, 0, lawas=3), entry(2, 1, lawas=2)])

    assert summary.total_lawas == Decimal("5")
    assert summary.required_put_up() == Decimal("10000")


def test_hulam_put_up_is_paid_before_hulam():
    summary = compute_balances([
        loan(1, 0, hulam=1000, hulam_put_up=500),
        entry(2, 1, payment=650),
    ])

    # 150 interest, then 500 hulam put-up, nothing left for hulam
    assert summary.outstanding_interest == Decimal("0")
    assert summary.outstanding_hulam_put_up == Decimal("0")
    assert summary.outstanding_hulam == Decimal("1000")


def test_payment_settles_interest_from_earlier_entries():
    summary = compute_balances([
        loan(1, 0, hulam=1000),
        loan(2, 1, hulam=500),
        entry(3, 2, payment=120),
    ])

    assert summary.total_interest_charged == Decimal("150.00")
    assert summary.total_interest_paid == Decimal("120")
    assert summary.outstanding_interest == Decimal("30.00")
    assert summary.outstanding_hulam == Decimal("1500")


def test_overpayment_is_discarded():
    summary = compute_balances([
        entry(1, 0, hulam=100, interest=10),
        entry(2, 1, payment=500),
    ])

    assert summary.outstanding_balance == Decimal("0")
    assert summary.total_interest_paid == Decimal("10")
    assert summary.total_payment == Decimal("500")


def test_payment_before_any_loan_is_not_credited():
    summary = compute_balances([
        entry(1, 0, payment=200),
        loan(2, 1, hulam=1000),
    ])

    assert summary.outstanding_interest == Decimal("100.00")
    assert summary.outstanding_hulam == Decimal("1000")


def test_entries_are_sorted_before_replay():
    ordered = [loan(1, 0, hulam=1000), entry(2, 5, payment=150)]

    assert compute_balances(list(reversed(ordered))) == compute_balances(ordered)


def test_same_timestamp_ties_break_by_id():
    # Payment row has the higher id, so it replays after the loan
    loan_row = entry(1, 0, hulam=1000, interest=100)
    payment_row = entry(2, 0, payment=150)

    forward = compute_balances([loan_row, payment_row])
    backward = compute_balances([payment_row, loan_row])

    assert forward == backward
    assert forward.outstanding_hulam == Decimal("950")

    # With the ids swapped the payment lands before the loan exists
    early_payment = compute_balances([entry(2, 0, hulam=1000, interest=100), entry(1, 0, payment=150)])
    assert early_payment.outstanding_interest == Decimal("100")
    assert early_payment.outstanding_hulam == Decimal("1000")


def test_zero_payments_leave_everything_outstanding():
    entries = [
        loan(1, 0, hulam=1000, lawas=2, put_up=4000),
        loan(2, 1, hulam_put_up=2000),
        loan(3, 2, hulam=350.50, penalty=20),
    ]
    summary = compute_balances(entries)

    assert summary.outstanding_interest == summary.total_interest_charged
    assert summary.outstanding_principal == sum(e.hulam + e.hulam_put_up for e in entries)
    assert summary.total_penalty == Decimal("20")


@pytest.mark.parametrize("payments", [[0], [50], [100, 100], [5000], [25, 300, 1200]])
def test_payments_never_increase_balances(payments):
    entries = [loan(1, 0, hulam=1000, hulam_put_up=500)]
    entries += [entry(10 + i, 10 + i, payment=p) for i, p in enumerate(payments)]
    summary = compute_balances(entries)

    issued = summary.total_hulam_issued + summary.total_hulam_put_up_issued
    assert summary.outstanding_balance <= summary.total_interest_charged + issued
    assert summary.outstanding_interest >= 0
    assert summary.outstanding_hulam_put_up >= 0
    assert summary.outstanding_hulam >= 0


def test_compute_balances_is_idempotent():
    entries = [loan(1, 0, hulam=1000), entry(2, 1, payment=75.25), loan(3, 2, hulam_put_up=600)]

    assert compute_balances(entries) == compute_balances(entries)


def test_carry_forward_entry_restates_principal_and_lawas():
    history = [
        loan(1, 0, hulam=1000, lawas=3),
        entry(2, 1, payment=600),  # 100 interest, 500 hulam
        entry(3, 2, entry_type=EntryType.CARRY_FORWARD, lawas=3, hulam=500),
        entry(4, 3, lawas=1),
    ]
    summary = compute_balances(history)

    assert summary.outstanding_hulam == Decimal("500")
    assert summary.total_lawas == Decimal("4")
    assert summary.total_hulam_issued == Decimal("1000")


def test_unpaid_interest_survives_a_carry_forward():
    history = [
        loan(1, 0, hulam=1000),
        entry(2, 1, entry_type=EntryType.CARRY_FORWARD, hulam=1000),
    ]

    assert compute_balances(history).outstanding_interest == Decimal("100.00")


def test_put_up_balance_counts_borrowed_fee():
    summary = compute_balances([entry(1, 0, lawas=2, put_up=1500, hulam_put_up=2000)])

    assert summary.required_put_up() == Decimal("4000")
    assert summary.put_up_balance() == Decimal("500")
    assert summary.put_up_balance(per_lawas=Decimal("500")) == Decimal("0")


def test_empty_history():
    assert compute_balances([]) == BalanceSummary()


def test_aggregate_sums_members():
    first = compute_balances([entry(1, 0, hulam=1000, interest=100)])
    second = compute_balances([entry(2, 0, hulam=2500, interest=250, lawas=1)])
    total = aggregate([first, second])

    assert total.outstanding_interest == Decimal("350")
    assert total.outstanding_hulam == Decimal("3500")
    assert total.total_lawas == Decimal("1")


def test_interest_rounds_half_up():
    assert calculate_interest(Decimal("1.25")) == Decimal("0.13")
    assert calculate_interest("1000") == Decimal("100.00")
    assert calculate_interest(Decimal("333.33"), Decimal("0.10")) == Decimal("33.33")
    # rates are not limited to centavos
    assert calculate_interest("1000", Decimal("0.125")) == Decimal("125.00")


@pytest.mark.parametrize("value", [
    "abc", "12,000", "", "NaN", "Infinity", "-1", True,
    "0.004", "100.005", "1e27", "10000000000",
])
def test_malformed_amounts_are_rejected(value):
    with pytest.raises(ValidationError):
        parse_amount(value, "payment")


def test_amount_parsing_accepts_numbers():
    assert parse_amount(None) == Decimal("0")
    assert parse_amount("  150.50 ") == Decimal("150.50")
    assert parse_amount(7) == Decimal("7")
    assert parse_amount(0.1) == Decimal("0.1")
    assert parse_amount("100.000") == Decimal("100")
    assert parse_amount("9999999999.99") == Decimal("9999999999.99")


def test_lawas_must_be_whole():
    assert parse_lawas("3.00") == Decimal("3.00")
    with pytest.raises(ValidationError):
        parse_lawas("1.5")


def test_malformed_stored_value_fails_fast():
    bad = entry(1, 0)
    bad.payment = "twelve"

    with pytest.raises(ValidationError):
        compute_balances([bad])


def test_summarize_members_keys_by_member():
    summaries = summarize_members({
        7: [entry(1, 0, hulam=1000, interest=100), entry(2, 1, payment=100)],
        9: [],
    })

    assert summaries[7].outstanding_interest == Decimal("0")
    assert summaries[7].outstanding_hulam == Decimal("1000")
    assert summaries[9] == BalanceSummary()
