"""Expense ledger: stored expense records plus synthesized loan interest."""

from typing import Iterable

from src.models.rental import ExpenseRecord, LoanRecord, Scope
from src.models.results import ExpenseLine
from src.engine.classifier import SONSTIGES, classify_expense
from src.engine.loan_interest import synthesize_loan_interest
from src.engine.timeline import round2


def expense_lines(
    records: Iterable[ExpenseRecord],
    year: int,
    scope: Scope,
) -> list[ExpenseLine]:
    lines: list[ExpenseLine] = []
    for rec in records:
        if rec.status != "paid" or rec.expense_date.year != year:
            continue
        if not scope.covers_cost(rec.property_id, rec.unit_id):
            continue
        lines.append(ExpenseLine(
            id=rec.id,
            date=rec.expense_date,
            amount=round2(rec.amount),
            category=rec.category_name or rec.description or SONSTIGES,
            anlage_v_group=classify_expense(rec.category_name),
            vendor=rec.recipient,
            note=rec.notes,
            document_id=rec.document_id,
        ))
    return lines


def normalize_expenses(
    records: Iterable[ExpenseRecord],
    loans: Iterable[LoanRecord],
    year: int,
    scope: Scope,
) -> list[ExpenseLine]:
    """Classified expense records and loan interest, sorted by date."""
    lines = expense_lines(records, year, scope)
    lines.extend(synthesize_loan_interest(loans, year, scope))
    lines.sort(key=lambda line: (line.date, line.id))
    return lines
