"""Anlage V composer: income, expenses and AfA into one annual summary.

Every line is scaled by the ownership share and rounded on its own; totals
are sums of those rounded lines.

Pure computation. No I/O. ScopeSnapshot in, AnlageVSummary out.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, TypeVar

from src.models.rental import ScopeSnapshot
from src.models.results import AnlageVSummary, ExpenseLine, IncomeLine
from src.engine.classifier import ANLAGE_V_GROUPS
from src.engine.depreciation import calculate_afa_for_year
from src.engine.expenses import normalize_expenses
from src.engine.income import normalize_income
from src.engine.timeline import round2

logger = logging.getLogger(__name__)

Line = TypeVar("Line", IncomeLine, ExpenseLine)


def scale_lines(lines: Iterable[Line], share_factor: Decimal) -> tuple[Line, ...]:
    return tuple(replace(line, amount=round2(line.amount * share_factor)) for line in lines)


def sum_amounts(lines: Iterable[IncomeLine | ExpenseLine]) -> Decimal:
    return round2(sum((line.amount for line in lines), Decimal("0")))


def income_breakdown(lines: Iterable[IncomeLine]) -> dict[str, Decimal]:
    """Totals per source type, in order of first appearance."""
    totals: dict[str, Decimal] = {}
    for line in lines:
        totals[line.source_type] = totals.get(line.source_type, Decimal("0")) + line.amount
    return {k: round2(v) for k, v in totals.items()}


def expense_breakdown(lines: Iterable[ExpenseLine]) -> dict[str, Decimal]:
    """Totals per Anlage V group, in form order."""
    totals: dict[str, Decimal] = {}
    for line in lines:
        totals[line.anlage_v_group] = totals.get(line.anlage_v_group, Decimal("0")) + line.amount
    return {g: round2(totals[g]) for g in ANLAGE_V_GROUPS if g in totals}


def compose_annual_summary(
    snapshot: ScopeSnapshot,
    year: int,
    ownership_share: Decimal = Decimal("100"),
    as_of: date | None = None,
) -> AnlageVSummary:
    """Build the annual summary for one scope.

    Orchestrates: income ledger → expense ledger → share scaling → totals
    → AfA → breakdowns → missing receipt count.
    """
    scope = snapshot.scope
    share = Decimal(str(ownership_share))
    share_factor = share / Decimal("100")

    ledger = normalize_income(
        contracts=snapshot.contracts,
        rate_changes=snapshot.rate_changes,
        payments=snapshot.payments,
        income_entries=snapshot.income_entries,
        year=year,
        scope=scope,
        as_of=as_of,
    )
    expense_rows = normalize_expenses(snapshot.expenses, snapshot.loans, year, scope)

    incomes = scale_lines(ledger.lines, share_factor)
    expenses = scale_lines(expense_rows, share_factor)

    income_total = sum_amounts(incomes)
    expense_total = sum_amounts(expenses)

    afa = calculate_afa_for_year(snapshot.afa_settings, year)
    afa_total = round2(afa.afa_amount * share_factor)

    result_total = round2(income_total - expense_total - afa_total)
    missing_receipts = sum(1 for e in expenses if e.requires_receipt and not e.document_id)

    logger.info(
        "Anlage V %s %s/%s: income %s, expenses %s, AfA %s, %d backfilled months",
        year, scope.scope_type.value, scope.scope_id,
        income_total, expense_total, afa_total, len(ledger.backfilled),
    )

    return AnlageVSummary(
        year=year,
        scope_type=scope.scope_type,
        scope_id=scope.scope_id,
        scope_label=scope.label,
        ownership_share=share,
        income_total=income_total,
        expense_total=expense_total,
        afa_total=afa_total,
        result_total=result_total,
        incomes=incomes,
        expenses=expenses,
        income_breakdown=income_breakdown(incomes),
        expense_breakdown=expense_breakdown(expenses),
        afa=afa,
        missing_receipts_count=missing_receipts,
        backfilled_months_count=len(ledger.backfilled),
    )
