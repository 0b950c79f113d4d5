"""Building depreciation (AfA, §7 Abs. 4 EStG): straight-line, pro rata
temporis from the month of purchase.

Pure functions. Invalid configuration degrades to a zero result.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from src.config import settings
from src.models.afa import (
    AfaCalculationResult,
    AfaSettings,
    AfaSetupStatus,
    BuildingShareType,
    UsageType,
)
from src.models.rental import PropertyInfo, UnitInfo
from src.engine.timeline import round2

logger = logging.getLogger(__name__)

DEFAULT_BUILDING_SHARE_PERCENT = Decimal("80")

PROPERTY_TYPE_USAGE: dict[str, UsageType] = {
    "multi_family": UsageType.RESIDENTIAL,
    "house": UsageType.RESIDENTIAL,
    "apartment": UsageType.RESIDENTIAL,
    "commercial": UsageType.COMMERCIAL,
    "parking": UsageType.COMMERCIAL,
}

EMPTY_RESULT = AfaCalculationResult(
    afa_amount=Decimal("0"),
    annual_afa_full=Decimal("0"),
    months_factor=Decimal("0"),
    building_value_amount=Decimal("0"),
    afa_rate=Decimal("0"),
    ownership_share=Decimal("100"),
    enabled=False,
)


def default_afa_rate(usage_type: UsageType | None) -> Decimal:
    """Statutory default rate: 2% residential/mixed, 3% commercial."""
    key = usage_type.value if usage_type else UsageType.RESIDENTIAL.value
    rate = settings.default_afa_rates.get(key, settings.default_afa_rates["residential"])
    return Decimal(str(rate))


def usage_type_for_property_type(property_type: str | None) -> UsageType | None:
    if not property_type:
        return None
    return PROPERTY_TYPE_USAGE.get(property_type)


def building_value(afa: AfaSettings) -> Decimal:
    """Depreciable building portion of the purchase price."""
    if afa.building_share_type == BuildingShareType.PERCENT:
        return round2(afa.purchase_price_total * (afa.building_share_value / Decimal("100")))
    return round2(afa.building_share_value)


def _is_usable(afa: AfaSettings) -> bool:
    if afa.purchase_date is None:
        return False
    if afa.purchase_price_total <= 0:
        logger.warning("AfA settings ignored: purchase price %s <= 0", afa.purchase_price_total)
        return False
    if afa.building_share_value <= 0:
        logger.warning("AfA settings ignored: building share %s <= 0", afa.building_share_value)
        return False
    if afa.afa_rate <= 0:
        logger.warning("AfA settings ignored: rate %s <= 0", afa.afa_rate)
        return False
    return True


def months_factor(afa: AfaSettings, year: int) -> Decimal:
    """Share of the full annual amount claimable in a year.

    Depreciation starts in the month of purchase, inclusive.
    """
    purchase = afa.purchase_date
    if year < purchase.year:
        return Decimal("0")
    if year == purchase.year:
        return Decimal(12 - purchase.month + 1) / Decimal("12")
    return Decimal("1")


def calculate_afa_for_year(afa: AfaSettings | None, year: int) -> AfaCalculationResult:
    """Compute the AfA amount for one calendar year.

    The result always reports building value, rate, ownership share and the
    enabled flag once the settings are valid, so a zero amount can be
    explained (e.g. target year before the purchase year).
    """
    if afa is None or not afa.enabled:
        return EMPTY_RESULT
    if not _is_usable(afa):
        return EMPTY_RESULT

    value = building_value(afa)
    if value <= 0:
        return EMPTY_RESULT

    factor = months_factor(afa, year)
    if factor <= 0:
        return AfaCalculationResult(
            afa_amount=Decimal("0"),
            annual_afa_full=Decimal("0"),
            months_factor=Decimal("0"),
            building_value_amount=value,
            afa_rate=afa.afa_rate,
            ownership_share=afa.ownership_share,
            enabled=True,
        )

    annual_full = round2(value * afa.afa_rate)
    amount = round2(annual_full * factor * (afa.ownership_share / Decimal("100")))

    return AfaCalculationResult(
        afa_amount=amount,
        annual_afa_full=annual_full,
        months_factor=factor.quantize(Decimal("0.01"), ROUND_HALF_UP),
        building_value_amount=value,
        afa_rate=afa.afa_rate,
        ownership_share=afa.ownership_share,
        enabled=True,
    )


def assess_afa_setup(
    prop: PropertyInfo,
    units: Sequence[UnitInfo],
    existing: AfaSettings | None,
) -> AfaSetupStatus:
    """Report which AfA inputs are still missing and propose defaults.

    Values fall back from stored settings to the property record, then to
    the first unit carrying the value.
    """
    missing: list[str] = []
    current: dict = {}
    proposed: dict = {}

    unit_date = next((u.purchase_date for u in units if u.purchase_date), None)
    unit_price = next(
        (u.purchase_price for u in units if u.purchase_price and u.purchase_price > 0), None
    )
    unit_year = next((u.construction_year for u in units if u.construction_year), None)

    purchase_date = (existing.purchase_date if existing else None) or prop.purchase_date or unit_date
    if purchase_date:
        current["purchase_date"] = purchase_date
    else:
        missing.append("purchase_date")

    price = existing.purchase_price_total if existing and existing.purchase_price_total > 0 else None
    if price is None and prop.purchase_price and prop.purchase_price > 0:
        price = prop.purchase_price
    if price is None:
        price = unit_price
    if price is not None:
        current["purchase_price_total"] = price
    else:
        missing.append("purchase_price_total")

    if existing and existing.building_share_value > 0:
        current["building_share_type"] = existing.building_share_type
        current["building_share_value"] = existing.building_share_value
    else:
        missing.append("building_share")
        proposed["building_share_type"] = BuildingShareType.PERCENT
        proposed["building_share_value"] = DEFAULT_BUILDING_SHARE_PERCENT

    construction_year = (existing.construction_year if existing else None) or prop.construction_year or unit_year
    if construction_year:
        current["construction_year"] = construction_year

    usage = (existing.usage_type if existing else None) or usage_type_for_property_type(prop.property_type)
    if usage:
        current["usage_type"] = usage
    else:
        missing.append("usage_type")
        proposed["usage_type"] = UsageType.RESIDENTIAL

    if existing and existing.afa_rate > 0:
        current["afa_rate"] = existing.afa_rate
    else:
        rate = default_afa_rate(usage)
        current["afa_rate"] = rate
        proposed["afa_rate"] = rate

    current["ownership_share"] = existing.ownership_share if existing else Decimal("100")
    current["enabled"] = existing.enabled if existing else True

    return AfaSetupStatus(
        property_id=prop.id,
        missing_fields=tuple(missing),
        current_values=current,
        proposed_defaults=proposed,
    )
