"""
Balance accrual engine.

Replays a member's ledger entries in chronological order and applies each
payment through a fixed waterfall: unpaid interest first, then borrowed
membership fee (hulam put-up), then cash loan (hulam). Every balance shown
anywhere in the application comes from ``compute_balances``.
"""
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping

from app.core.exceptions import ValidationError
from app.models.ledger import EntryType

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")
# Amount columns are Numeric(12, 2)
MAX_AMOUNT = Decimal("1E10")
DEFAULT_INTEREST_RATE = Decimal("0.10")
DEFAULT_PUT_UP_PER_LAWAS = Decimal("2000")


def _to_decimal(value: Any, field: str) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if text == "":
            raise ValidationError(f"Invalid {field}: empty value")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"Invalid {field}: {value!r} is not a number")
    if not amount.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    if amount < 0:
        raise ValidationError(f"Invalid {field}: must not be negative (got {amount})")
    return amount


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Convert a user or database value to a non-negative Decimal.

    None means "not given" and becomes zero. Anything else must be a finite,
    non-negative number below 10^10 with at most two decimal places, so it
    is stored exactly.
    """
    amount = _to_decimal(value, field)
    if amount >= MAX_AMOUNT:
        raise ValidationError(f"Invalid {field}: {value!r} is out of range")
    if amount != amount.quantize(CENTS):
        raise ValidationError(f"Invalid {field}: {value!r} has more than two decimal places")
    return amount


def parse_lawas(value: Any) -> Decimal:
    """Shares are whole numbers even though they are stored as decimals."""
    amount = parse_amount(value, "lawas")
    if amount != amount.to_integral_value():
        raise ValidationError(f"Invalid lawas: {value!r} is not a whole number")
    return amount


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_interest(principal: Any, rate: Decimal = DEFAULT_INTEREST_RATE) -> Decimal:
    """Interest charged on a principal, rounded half-up to centavos."""
    return round_money(_to_decimal(principal, "principal") * _to_decimal(rate, "rate"))


@dataclass(frozen=True)
class BalanceSummary:
    """Derived balances for one member (or a sum over members)."""
    total_lawas: Decimal = ZERO
    total_put_up: Decimal = ZERO
    outstanding_hulam_put_up: Decimal = ZERO
    outstanding_hulam: Decimal = ZERO
    outstanding_interest: Decimal = ZERO
    total_interest_charged: Decimal = ZERO
    total_interest_paid: Decimal = ZERO
    total_hulam_put_up_issued: Decimal = ZERO
    total_hulam_issued: Decimal = ZERO
    total_payment: Decimal = ZERO
    total_penalty: Decimal = ZERO

    @property
    def outstanding_principal(self) -> Decimal:
        return self.outstanding_hulam_put_up + self.outstanding_hulam

    @property
    def outstanding_balance(self) -> Decimal:
        return self.outstanding_principal + self.outstanding_interest

    def required_put_up(self, per_lawas: Decimal = DEFAULT_PUT_UP_PER_LAWAS) -> Decimal:
        return self.total_lawas * parse_amount(per_lawas, "per_lawas")

    def put_up_balance(self, per_lawas: Decimal = DEFAULT_PUT_UP_PER_LAWAS) -> Decimal:
        # Borrowed put-up satisfies the requirement as much as cash does
        contributed = self.total_put_up + self.total_hulam_put_up_issued
        return max(ZERO, self.required_put_up(per_lawas) - contributed)

    def as_dict(self, per_lawas: Decimal = DEFAULT_PUT_UP_PER_LAWAS) -> Dict[str, Decimal]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["outstanding_principal"] = self.outstanding_principal
        data["outstanding_balance"] = self.outstanding_balance
        data["required_put_up"] = self.required_put_up(per_lawas)
        data["put_up_balance"] = self.put_up_balance(per_lawas)
        return data


def _replay_key(entry):
    # Ties on created_at break by id; unsaved entries (no id / timestamp) go last
    created_at = entry.created_at if entry.created_at is not None else datetime.max
    entry_id = entry.id
    return (created_at, entry_id is None, entry_id if entry_id is not None else 0)


def sort_for_replay(entries: Iterable) -> List:
    return sorted(entries, key=_replay_key)


def compute_balances(entries: Iterable) -> BalanceSummary:
    """
    Replay entries (any order) and return the member's balances.

    A carry-forward entry restates lawas and both principal buckets as of a
    rollover, so replay replaces them rather than adding. Interest
    accumulators run across the whole history.
    """
    total_lawas = ZERO
    total_put_up = ZERO
    remaining_hulam_put_up = ZERO
    remaining_hulam = ZERO
    interest_charged = ZERO
    interest_paid = ZERO
    hulam_put_up_issued = ZERO
    hulam_issued = ZERO
    total_payment = ZERO
    total_penalty = ZERO

    for entry in sort_for_replay(entries):
        lawas = parse_lawas(entry.lawas)
        hulam_put_up = parse_amount(entry.hulam_put_up, "hulam_put_up")
        hulam = parse_amount(entry.hulam, "hulam")

        if entry.entry_type == EntryType.CARRY_FORWARD:
            total_lawas = lawas
            remaining_hulam_put_up = hulam_put_up
            remaining_hulam = hulam
        else:
            total_lawas += lawas
            remaining_hulam_put_up += hulam_put_up
            remaining_hulam += hulam
            hulam_put_up_issued += hulam_put_up
            hulam_issued += hulam

        payment = parse_amount(entry.payment, "payment")
        total_put_up += parse_amount(entry.put_up, "put_up")
        total_payment += payment
        total_penalty += parse_amount(entry.penalty, "penalty")
        interest_charged += parse_amount(entry.interest, "interest")

        # 1. Interest
        unpaid_interest = interest_charged - interest_paid
        if payment > 0 and unpaid_interest > 0:
            applied = min(payment, unpaid_interest)
            interest_paid += applied
            payment -= applied

        # 2. Hulam put-up
        if payment > 0 and remaining_hulam_put_up > 0:
            applied = min(payment, remaining_hulam_put_up)
            remaining_hulam_put_up -= applied
            payment -= applied

        # 3. Hulam
        if payment > 0 and remaining_hulam > 0:
            applied = min(payment, remaining_hulam)
            remaining_hulam -= applied
            payment -= applied

        # Overpayment is dropped, not carried as credit

    return BalanceSummary(
        total_lawas=total_lawas,
        total_put_up=total_put_up,
        outstanding_hulam_put_up=max(ZERO, remaining_hulam_put_up),
        outstanding_hulam=max(ZERO, remaining_hulam),
        outstanding_interest=max(ZERO, interest_charged - interest_paid),
        total_interest_charged=interest_charged,
        total_interest_paid=interest_paid,
        total_hulam_put_up_issued=hulam_put_up_issued,
        total_hulam_issued=hulam_issued,
        total_payment=total_payment,
        total_penalty=total_penalty,
    )


def summarize_members(entries_by_member: Mapping[int, Iterable]) -> Dict[int, BalanceSummary]:
    return {member_id: compute_balances(entries) for member_id, entries in entries_by_member.items()}


def aggregate(summaries: Iterable[BalanceSummary]) -> BalanceSummary:
    """Field-by-field sum, used for dashboard totals."""
    totals = {f.name: ZERO for f in fields(BalanceSummary)}
    for summary in summaries:
        for name in totals:
            totals[name] += getattr(summary, name)
    return BalanceSummary(**totals)
