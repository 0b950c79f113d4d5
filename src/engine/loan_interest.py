"""Synthesizes monthly Schuldzinsen expense lines from loan records.

Interest is payment minus principal; only the interest part is deductible.
"""

import logging
from decimal import Decimal
from typing import Iterable

from src.models.rental import LoanRecord, Scope
from src.models.results import ExpenseLine
from src.engine.classifier import SCHULDZINSEN
from src.engine.timeline import months_of_year, round2

logger = logging.getLogger(__name__)

LOAN_INTEREST_CATEGORY = "Darlehenszinsen"


def _loan_active(loan: LoanRecord, first_day, last_day) -> bool:
    if loan.start_date > last_day:
        return False
    return loan.end_date is None or loan.end_date >= first_day


def synthesize_loan_interest(
    loans: Iterable[LoanRecord],
    year: int,
    scope: Scope,
) -> list[ExpenseLine]:
    """One interest line per active loan month in the year.

    Loans with no positive interest part contribute nothing. Lines carry no
    document and are not receipt-tracked.
    """
    lines: list[ExpenseLine] = []
    for loan in loans:
        if not scope.covers_cost(loan.property_id, loan.unit_id):
            continue

        interest = round2(loan.monthly_interest)
        if interest <= 0:
            logger.debug("Loan %s has no interest component (%s), skipping", loan.id, interest)
            continue

        for first_day, last_day in months_of_year(year):
            if not _loan_active(loan, first_day, last_day):
                continue
            lines.append(ExpenseLine(
                id=f"loan_{loan.id}_{first_day:%Y-%m}",
                date=first_day,
                amount=interest,
                category=LOAN_INTEREST_CATEGORY,
                anlage_v_group=SCHULDZINSEN,
                vendor=loan.lender,
                note=f"Zinsanteil {loan.interest_rate * Decimal('100'):.2f}% p.a.",
                document_id=None,
                synthesized=True,
                requires_receipt=False,
            ))
    return lines
