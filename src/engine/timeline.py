"""Calendar arithmetic and rent-history lookups shared by the engine.

Pure functions. No I/O.
"""

import calendar
from bisect import bisect_left, bisect_right
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from src.models.rental import Contract, RateChangeEvent

TWO_PLACES = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


def add_months(d: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's end.

    2024-01-31 + 1 month = 2024-02-29.
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_start(year: int, month: int) -> date:
    return date(year, month, 1)


def month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def months_of_year(year: int) -> list[tuple[date, date]]:
    """(first day, last day) for each month of the year."""
    return [(month_start(year, m), month_end(year, m)) for m in range(1, 13)]


def sort_events(events: Iterable[RateChangeEvent]) -> list[RateChangeEvent]:
    """Ascending by effective date; input order breaks ties (later row wins)."""
    return sorted(events, key=lambda e: e.effective_date)


def rate_at(events: Sequence[RateChangeEvent], on_date: date) -> RateChangeEvent | None:
    """Latest event effective at or before on_date.

    Args:
        events: History sorted ascending by effective_date (see sort_events)
        on_date: Lookup date
    """
    dates = [e.effective_date for e in events]
    idx = bisect_right(dates, on_date)
    if idx == 0:
        return None
    return events[idx - 1]


def rate_before(events: Sequence[RateChangeEvent], on_date: date) -> RateChangeEvent | None:
    """Latest event effective strictly before on_date."""
    dates = [e.effective_date for e in events]
    idx = bisect_left(dates, on_date)
    if idx == 0:
        return None
    return events[idx - 1]


def rate_for_contract(
    contract: Contract,
    events: Sequence[RateChangeEvent],
    on_date: date,
) -> tuple[Decimal, Decimal]:
    """(cold_rent, utility_advance) in effect on a date.

    Falls back to the contract's static fields when no history row applies.
    """
    event = rate_at(events, on_date)
    if event is not None:
        return event.cold_rent, event.utility_advance
    return contract.cold_rent or Decimal("0"), contract.utility_advance or Decimal("0")


def group_events_by_contract(
    events: Iterable[RateChangeEvent],
) -> dict[str, list[RateChangeEvent]]:
    """Sorted history per contract id."""
    grouped: dict[str, list[RateChangeEvent]] = {}
    for e in events:
        grouped.setdefault(e.contract_id, []).append(e)
    return {cid: sort_events(evts) for cid, evts in grouped.items()}
