"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from src.models.afa import BuildingShareType, UsageType
from src.models.rental import RateChangeReason, RentRegime


# ---- Request schemas ----

class RentHistoryEntry(BaseModel):
    id: str
    effective_date: date
    cold_rent: Decimal
    utility_advance: Decimal = Decimal("0")
    reason: RateChangeReason = RateChangeReason.INITIAL


class HeadroomRequest(BaseModel):
    """Contract and history supplied inline; nothing is read from storage."""
    contract_id: str = "inline"
    start_date: date
    cold_rent: Decimal
    utility_advance: Decimal = Decimal("0")
    rent_regime: RentRegime = RentRegime.STANDARD
    history: list[RentHistoryEntry] = Field(default_factory=list)
    today: date | None = None
    cap_percent: Decimal | None = Field(None, ge=0, le=100, description="Kappungsgrenze, clamped to 20")


class AfaCalculateRequest(BaseModel):
    year: int
    enabled: bool = True
    purchase_date: date | None = None
    purchase_price_total: Decimal
    building_share_type: BuildingShareType = BuildingShareType.PERCENT
    building_share_value: Decimal
    usage_type: UsageType = UsageType.RESIDENTIAL
    afa_rate: Decimal | None = Field(None, description="Defaults to the rate for the usage type")
    ownership_share: Decimal = Field(Decimal("100"), ge=0, le=100)
    construction_year: int | None = None


# ---- Response schemas ----

class IncomeLineResponse(BaseModel):
    id: str
    date: date
    amount: Decimal
    source_type: str
    contract_id: str | None
    payment_id: str | None
    synthesized: bool
    tenant_name: str
    contract_info: str
    property_name: str
    unit_number: str


class ExpenseLineResponse(BaseModel):
    id: str
    date: date
    amount: Decimal
    category: str
    anlage_v_group: str
    vendor: str
    note: str
    property_name: str
    unit_number: str
    document_id: str | None
    synthesized: bool
    requires_receipt: bool


class AfaResponse(BaseModel):
    afa_amount: Decimal
    annual_afa_full: Decimal
    months_factor: Decimal
    building_value_amount: Decimal
    afa_rate: Decimal
    ownership_share: Decimal
    enabled: bool


class AnlageVResponse(BaseModel):
    year: int
    scope_type: str
    scope_id: str
    scope_label: str
    ownership_share: Decimal

    income_total: Decimal
    expense_total: Decimal
    afa_total: Decimal
    result_total: Decimal

    income_breakdown: dict[str, Decimal]
    expense_breakdown: dict[str, Decimal]
    incomes: list[IncomeLineResponse]
    expenses: list[ExpenseLineResponse]
    afa: AfaResponse

    missing_receipts_count: int
    backfilled_months_count: int


class DeliveryTimingResponse(BaseModel):
    timing_status: str
    next_earliest_effective_from: date
    service_window_start: date
    service_window_end: date
    next_effective_if_sent_today: date


class HeadroomResponse(BaseModel):
    lock_status: str
    possible_since: date
    lock_until_date: date | None
    current_cold_rent: Decimal
    cap_applies: bool
    remaining_percent: Decimal | None
    max_allowed_rent: Decimal | None
    delta: Decimal | None
    baseline_rent: Decimal | None
    already_increased_percent: Decimal | None
    delivery_timing: DeliveryTimingResponse | None = None
