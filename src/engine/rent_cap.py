"""Rent increase compliance under BGB §558.

Two independent checks over a contract's rent history:
- 15-month lock: an increase may take effect at the earliest 15 months
  after the last rent change (or the lease start).
- Kappungsgrenze: within any 36-month window the cold rent may rise by at
  most 20% (15% in designated tight markets).

Index-linked (§557b) and stepped (§557a) leases are exempt from the cap.

Pure functions. No I/O.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from src.config import settings
from src.models.rental import Contract, RateChangeEvent, RateChangeReason, RentRegime
from src.models.results import DeliveryTiming, LockStatus, RentIncreaseHeadroom, TimingStatus
from src.engine.timeline import (
    add_months,
    month_end,
    rate_before,
    rate_for_contract,
    round2,
    sort_events,
)

CAP_EXEMPT_REGIMES = {RentRegime.INDEX, RentRegime.STEPPED}


def last_rent_change_date(
    contract: Contract,
    history: list[RateChangeEvent],
    today: date,
) -> date:
    """Anchor of the 15-month lock: latest non-zero history row at or before
    today, else the contract start date."""
    past = [e for e in history if e.effective_date <= today]
    for event in reversed(past):
        if event.cold_rent != 0 or event.utility_advance != 0:
            return event.effective_date
    return contract.start_date


def cap_baseline(
    history: list[RateChangeEvent],
    today: date,
    current_cold_rent: Decimal,
    lookback_months: int,
) -> Decimal:
    """Cold rent immediately before the earliest increase in the window.

    Without an in-window increase the current rent is the baseline. When no
    row precedes the earliest increase, that increase's own rent is used,
    so the increase itself is not counted against the cap (known edge
    case, kept as-is).
    """
    window_start = add_months(today, -lookback_months)
    increases = [
        e for e in history
        if e.reason == RateChangeReason.INCREASE and window_start < e.effective_date <= today
    ]
    if not increases:
        return current_cold_rent

    earliest = increases[0]
    before = rate_before(history, earliest.effective_date)
    if before is None:
        return earliest.cold_rent
    return before.cold_rent


def compute_rent_increase_headroom(
    contract: Contract,
    history: Iterable[RateChangeEvent],
    today: date | None = None,
    cap_percent: Decimal | None = None,
) -> RentIncreaseHeadroom:
    """Compute the lock window and the remaining increase headroom.

    Args:
        contract: Lease the history belongs to
        history: Rent history rows for this contract, any order
        today: Reference date (defaults to the current date)
        cap_percent: Kappungsgrenze in percent; defaults to settings.rent_cap_percent
    """
    today = today or date.today()
    cap = Decimal(str(settings.rent_cap_percent)) if cap_percent is None else Decimal(str(cap_percent))
    cap = min(max(cap, Decimal("0")), Decimal("20"))
    events = sort_events(e for e in history if e.contract_id == contract.id)

    anchor = last_rent_change_date(contract, events, today)
    possible_since = add_months(anchor, settings.rent_lock_months)
    blocked = possible_since > today

    current_cold, _ = rate_for_contract(contract, events, today)

    headroom = dict(
        lock_status=LockStatus.BLOCKED if blocked else LockStatus.POSSIBLE,
        possible_since=possible_since,
        lock_until_date=possible_since if blocked else None,
        current_cold_rent=current_cold,
    )

    if contract.rent_regime in CAP_EXEMPT_REGIMES:
        return RentIncreaseHeadroom(cap_applies=False, **headroom)

    baseline = cap_baseline(events, today, current_cold, settings.rent_cap_lookback_months)
    if baseline > 0:
        already = (current_cold - baseline) / baseline * Decimal("100")
    else:
        already = Decimal("0")

    remaining = min(max(cap - already, Decimal("0")), cap)
    max_allowed = round2(baseline * (Decimal("1") + cap / Decimal("100")))
    delta = max(Decimal("0"), max_allowed - current_cold)

    return RentIncreaseHeadroom(
        cap_applies=True,
        remaining_percent=round2(remaining),
        max_allowed_rent=max_allowed,
        delta=round2(delta),
        baseline_rent=baseline,
        already_increased_percent=round2(already),
        **headroom,
    )


def compute_delivery_timing(possible_since: date | None, today: date | None = None) -> DeliveryTiming | None:
    """When to serve the increase notice so it takes effect as early as allowed.

    An increase takes effect at the start of the third month after the
    tenant receives the notice, so the optimal service window is the whole
    calendar month two months before the earliest effective date.
    """
    if possible_since is None:
        return None
    today = today or date.today()

    earliest = possible_since.replace(day=1)
    if earliest < possible_since:
        earliest = add_months(earliest, 1)

    window = add_months(earliest, -2)
    window_start = window.replace(day=1)
    window_end = month_end(window.year, window.month)
    if_sent_today = add_months(today.replace(day=1), 2)

    if window_start <= today <= window_end:
        status = TimingStatus.NOW_OPTIMAL
    elif today < window_start:
        status = TimingStatus.BEFORE_WINDOW
    else:
        status = TimingStatus.MISSED_WINDOW

    return DeliveryTiming(
        timing_status=status,
        next_earliest_effective_from=earliest,
        service_window_start=window_start,
        service_window_end=window_end,
        next_effective_if_sent_today=if_sent_today,
    )
