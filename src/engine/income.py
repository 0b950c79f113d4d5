"""Income ledger: observed rent payments, contract backfill and manual entries.

A month of a contract is either covered by an observed payment record or
backfilled from the rent in effect for that month, never both.

Pure functions. No I/O.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from src.models.rental import (
    Contract,
    ManualIncomeEntry,
    PaymentRecord,
    PaymentStatus,
    RateChangeEvent,
    Scope,
)
from src.models.results import IncomeLine
from src.engine.timeline import (
    group_events_by_contract,
    months_of_year,
    rate_for_contract,
    round2,
)

logger = logging.getLogger(__name__)

RENT = "Miete"
UTILITY_ADVANCE = "Nebenkosten-Vorauszahlung"
OTHER_INCOME = "Sonstige Einnahme"

MonthKey = tuple[str, int, int]  # (contract_id, year, month)


@dataclass(frozen=True)
class IncomeLedger:
    lines: tuple[IncomeLine, ...]
    covered: frozenset[MonthKey]
    backfilled: frozenset[MonthKey]


def split_amount(
    amount: Decimal,
    cold_rent: Decimal,
    utility_advance: Decimal,
) -> tuple[Decimal, Decimal] | None:
    """Proportional (rent, utility) split of a received amount.

    Each part is rounded on its own, so the parts may differ from the
    rounded amount by a cent. Returns None when the composition cannot be
    split (a component missing or a zero total).
    """
    total = cold_rent + utility_advance
    if cold_rent <= 0 or utility_advance <= 0 or total <= 0:
        return None
    rent_part = round2(amount * (cold_rent / total))
    utility_part = round2(amount * (utility_advance / total))
    return rent_part, utility_part


def _contract_info(contract: Contract) -> str:
    return f"Einheit {contract.unit_number}" if contract.unit_number else ""


def _rent_lines(
    line_id: str,
    on: date,
    amount: Decimal,
    cold_rent: Decimal,
    utility_advance: Decimal,
    contract: Contract,
    payment_id: str | None,
    synthesized: bool,
) -> list[IncomeLine]:
    common = dict(
        date=on,
        contract_id=contract.id,
        payment_id=payment_id,
        synthesized=synthesized,
        tenant_name=contract.tenant_name,
        contract_info=_contract_info(contract),
        property_name=contract.property_name,
        unit_number=contract.unit_number,
    )
    parts = split_amount(amount, cold_rent, utility_advance)
    if parts is None:
        # Degenerate composition: attribute everything to rent
        return [IncomeLine(id=line_id, amount=round2(amount), source_type=RENT, **common)]

    rent_part, utility_part = parts
    return [
        IncomeLine(id=f"{line_id}_rent", amount=rent_part, source_type=RENT, **common),
        IncomeLine(id=f"{line_id}_utilities", amount=utility_part, source_type=UTILITY_ADVANCE, **common),
    ]


def payment_lines(
    payment: PaymentRecord,
    contract: Contract,
    history: Sequence[RateChangeEvent],
    year: int,
) -> list[IncomeLine]:
    """Split lines for one payment record, dated inside the target year."""
    if payment.status == PaymentStatus.UNPAID:
        return []
    cold, utility = rate_for_contract(contract, history, payment.due_date)

    if payment.partial_payments:
        lines: list[IncomeLine] = []
        for partial in payment.partial_payments:
            if partial.date.year != year or partial.amount == 0:
                continue
            lines.extend(_rent_lines(
                f"{payment.id}_partial_{partial.date.isoformat()}",
                partial.date, partial.amount, cold, utility,
                contract, payment.id, synthesized=False,
            ))
        return lines

    if payment.effective_date.year != year:
        return []
    received = payment.received_amount
    if received == 0:
        return []
    return _rent_lines(
        payment.id, payment.effective_date, received, cold, utility,
        contract, payment.id, synthesized=False,
    )


def backfill_lines(
    contract: Contract,
    history: Sequence[RateChangeEvent],
    year: int,
    covered: frozenset[MonthKey] | set[MonthKey],
    as_of: date | None = None,
) -> list[IncomeLine]:
    """Synthesize rent lines for active months without an observed payment."""
    lines: list[IncomeLine] = []
    for first_day, last_day in months_of_year(year):
        if as_of is not None and first_day > as_of:
            break
        if not contract.is_active_between(first_day, last_day):
            continue
        if (contract.id, year, first_day.month) in covered:
            continue

        cold, utility = rate_for_contract(contract, history, first_day)
        if cold <= 0 and utility <= 0:
            logger.debug("No rent data for contract %s in %s, skipping", contract.id, first_day)
            continue

        line_id = f"backfill_{contract.id}_{first_day:%Y-%m}"
        common = dict(
            date=first_day,
            contract_id=contract.id,
            payment_id=None,
            synthesized=True,
            tenant_name=contract.tenant_name,
            contract_info=_contract_info(contract),
            property_name=contract.property_name,
            unit_number=contract.unit_number,
        )
        if cold > 0:
            lines.append(IncomeLine(id=f"{line_id}_rent", amount=round2(cold), source_type=RENT, **common))
        if utility > 0:
            lines.append(IncomeLine(
                id=f"{line_id}_utilities", amount=round2(utility), source_type=UTILITY_ADVANCE, **common,
            ))
    return lines


def manual_income_lines(
    entries: Iterable[ManualIncomeEntry],
    year: int,
    scope: Scope,
) -> list[IncomeLine]:
    lines: list[IncomeLine] = []
    for entry in entries:
        if entry.status != "paid" or entry.entry_date.year != year:
            continue
        if not scope.covers(entry.property_id, entry.unit_id):
            continue
        lines.append(IncomeLine(
            id=entry.id,
            date=entry.entry_date,
            amount=round2(entry.amount),
            source_type=entry.description or OTHER_INCOME,
            tenant_name=entry.recipient,
        ))
    return lines


def normalize_income(
    contracts: Iterable[Contract],
    rate_changes: Iterable[RateChangeEvent],
    payments: Iterable[PaymentRecord],
    income_entries: Iterable[ManualIncomeEntry],
    year: int,
    scope: Scope,
    as_of: date | None = None,
) -> IncomeLedger:
    """Merge payments, backfill and manual entries into one income ledger.

    Args:
        contracts: Leases; those outside the scope are ignored
        rate_changes: Rent history rows for any of the contracts
        payments: Payment records; may include other years
        income_entries: Manual income entries; may include other scopes
        year: Target calendar year
        scope: Resolved property or unit
        as_of: Months starting after this date are not backfilled
    """
    in_scope = {c.id: c for c in contracts if scope.covers(c.property_id, c.unit_id)}
    histories = group_events_by_contract(e for e in rate_changes if e.contract_id in in_scope)

    lines: list[IncomeLine] = []
    covered: set[MonthKey] = set()

    for payment in payments:
        contract = in_scope.get(payment.contract_id)
        if contract is None:
            continue
        # A month with any payment record is never backfilled, whatever the amount
        if payment.due_date.year == year:
            covered.add((contract.id, year, payment.due_date.month))
        lines.extend(payment_lines(payment, contract, histories.get(contract.id, []), year))

    backfilled: set[MonthKey] = set()
    for contract in in_scope.values():
        synthesized = backfill_lines(contract, histories.get(contract.id, []), year, covered, as_of)
        lines.extend(synthesized)
        backfilled.update((contract.id, year, line.date.month) for line in synthesized)

    lines.extend(manual_income_lines(income_entries, year, scope))
    lines.sort(key=lambda line: (line.date, line.id))

    return IncomeLedger(
        lines=tuple(lines),
        covered=frozenset(covered),
        backfilled=frozenset(backfilled),
    )
