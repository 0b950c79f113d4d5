"""CLI for computing an Anlage V summary from a JSON snapshot.

Usage:
    python -m src.data.anlage_v_cli snapshot.json --scope property --id P1 --year 2024
    python -m src.data.anlage_v_cli snapshot.json --scope unit --id U1 --year 2024 --share 50
    python -m src.data.anlage_v_cli snapshot.json --contract C1 --today 2025-03-01
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from decimal import Decimal

from src.config import settings
from src.data.anlage_v_service import AnlageVService
from src.data.memory import InMemoryDataSource
from src.models.results import AnlageVSummary, DeliveryTiming, RentIncreaseHeadroom


def _eur(amount: Decimal) -> str:
    return f"{amount:>12,.2f} EUR"


def print_summary(summary: AnlageVSummary, verbose: bool = False) -> None:
    print(f"\n{'=' * 60}")
    print(f"  Anlage V {summary.year}: {summary.scope_label}")
    print(f"{'=' * 60}")
    print(f"  Ownership share:  {summary.ownership_share}%")
    print(f"  Income:           {_eur(summary.income_total)}")
    for source, amount in summary.income_breakdown.items():
        print(f"    {source:<30} {_eur(amount)}")
    print(f"  Expenses:         {_eur(summary.expense_total)}")
    for group, amount in summary.expense_breakdown.items():
        print(f"    {group:<30} {_eur(amount)}")
    print(f"  AfA:              {_eur(summary.afa_total)}")
    print(f"  Result:           {_eur(summary.result_total)}")
    print()
    print(f"  Backfilled months:  {summary.backfilled_months_count}")
    print(f"  Missing receipts:   {summary.missing_receipts_count}")

    if verbose:
        print()
        for line in summary.incomes:
            flag = "*" if line.synthesized else " "
            print(f"  {flag} {line.date}  {line.source_type:<28} {_eur(line.amount)}")
        for line in summary.expenses:
            flag = "*" if line.synthesized else " "
            print(f"  {flag} {line.date}  {line.category[:28]:<28} {_eur(-line.amount)}")
    print()


def print_headroom(headroom: RentIncreaseHeadroom, timing: DeliveryTiming | None) -> None:
    print(f"\n{'=' * 60}")
    print("  Rent increase headroom")
    print(f"{'=' * 60}")
    print(f"  Lock status:        {headroom.lock_status.value}")
    print(f"  Possible since:     {headroom.possible_since}")
    print(f"  Current cold rent:  {_eur(headroom.current_cold_rent)}")
    if headroom.cap_applies:
        print(f"  Baseline rent:      {_eur(headroom.baseline_rent)}")
        print(f"  Already increased:  {headroom.already_increased_percent}%")
        print(f"  Remaining:          {headroom.remaining_percent}%")
        print(f"  Max allowed rent:   {_eur(headroom.max_allowed_rent)}")
        print(f"  Possible increase:  {_eur(headroom.delta)}")
    else:
        print("  Cap:                not applicable (index/stepped lease)")
    if timing:
        print(f"  Serve notice:       {timing.service_window_start} - {timing.service_window_end} ({timing.timing_status.value})")
    print()


async def main() -> None:
    parser = argparse.ArgumentParser(description="Anlage V annual summary CLI")
    parser.add_argument("snapshot", help="Path to a JSON snapshot export")
    parser.add_argument("--user", default=None, help="Owner user id (default: owner of the first property)")
    parser.add_argument("--scope", choices=["property", "unit"], default="property", help="Scope type")
    parser.add_argument("--id", dest="scope_id", help="Property or unit id")
    parser.add_argument("--year", type=int, default=date.today().year - 1, help="Tax year (default: last year)")
    parser.add_argument("--share", type=Decimal, default=Decimal("100"), help="Ownership share in percent")
    parser.add_argument("--as-of", type=date.fromisoformat, default=None, help="Backfill cutoff (YYYY-MM-DD)")
    parser.add_argument("--contract", help="Show rent increase headroom for a contract instead")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Reference date for headroom")
    parser.add_argument("-v", "--verbose", action="store_true", help="List every line")

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    source = InMemoryDataSource.from_json(args.snapshot)
    user_id = args.user
    if user_id is None:
        if not source.snapshot.properties:
            parser.error("snapshot contains no properties")
        user_id = source.snapshot.properties[0].user_id

    service = AnlageVService(source)

    if args.contract:
        headroom, timing = await service.compute_rent_increase_headroom(user_id, args.contract, today=args.today)
        print_headroom(headroom, timing)
        return

    if not args.scope_id:
        parser.error("--id is required (unless using --contract)")

    outcome = await service.compute_annual_summary(
        user_id, args.scope, args.scope_id, args.year,
        ownership_share=args.share, as_of=args.as_of,
    )
    if not outcome.ok:
        print(f"Error ({outcome.error.kind.value}): {outcome.error.message}", file=sys.stderr)
        sys.exit(1)
    print_summary(outcome.summary, verbose=args.verbose)


if __name__ == "__main__":
    asyncio.run(main())
