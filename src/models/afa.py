from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class BuildingShareType(Enum):
    PERCENT = "percent"
    AMOUNT = "amount"


class UsageType(Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED = "mixed"


@dataclass(frozen=True)
class AfaSettings:
    """Per-property depreciation configuration. Land is never depreciable."""
    enabled: bool
    purchase_date: date | None
    purchase_price_total: Decimal
    building_share_type: BuildingShareType
    building_share_value: Decimal  # Percent (e.g. 80) or absolute EUR amount
    usage_type: UsageType = UsageType.RESIDENTIAL
    afa_rate: Decimal = Decimal("0.02")
    ownership_share: Decimal = Decimal("100")
    construction_year: int | None = None


@dataclass(frozen=True)
class AfaCalculationResult:
    afa_amount: Decimal
    annual_afa_full: Decimal
    months_factor: Decimal
    building_value_amount: Decimal
    afa_rate: Decimal
    ownership_share: Decimal
    enabled: bool


@dataclass(frozen=True)
class AfaSetupStatus:
    """What is still missing before depreciation can be computed."""
    property_id: str
    missing_fields: tuple[str, ...]
    current_values: dict = field(default_factory=dict)
    proposed_defaults: dict = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields
