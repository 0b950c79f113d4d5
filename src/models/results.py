from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from src.models.afa import AfaCalculationResult
from src.models.rental import ScopeType


@dataclass(frozen=True)
class IncomeLine:
    id: str
    date: date
    amount: Decimal
    source_type: str  # "Miete", "Nebenkosten-Vorauszahlung" or the entry description
    contract_id: str | None = None
    payment_id: str | None = None
    synthesized: bool = False  # Backfilled from contract/rate data
    tenant_name: str = ""
    contract_info: str = ""
    property_name: str = ""
    unit_number: str = ""


@dataclass(frozen=True)
class ExpenseLine:
    id: str
    date: date
    amount: Decimal
    category: str
    anlage_v_group: str
    vendor: str = ""
    note: str = ""
    property_name: str = ""
    unit_number: str = ""
    document_id: str | None = None
    synthesized: bool = False
    requires_receipt: bool = True  # False for synthesized loan interest


@dataclass(frozen=True)
class AnlageVSummary:
    """Annual rental income summary. Never mutated after construction."""
    year: int
    scope_type: ScopeType
    scope_id: str
    scope_label: str
    ownership_share: Decimal

    income_total: Decimal
    expense_total: Decimal
    afa_total: Decimal
    result_total: Decimal  # income - expenses - AfA

    incomes: tuple[IncomeLine, ...]
    expenses: tuple[ExpenseLine, ...]
    income_breakdown: Mapping[str, Decimal]  # By source_type
    expense_breakdown: Mapping[str, Decimal]  # By Anlage V group
    afa: AfaCalculationResult

    missing_receipts_count: int = 0
    backfilled_months_count: int = 0

    def __post_init__(self):
        # Breakdowns are read-only views
        object.__setattr__(self, "income_breakdown", MappingProxyType(dict(self.income_breakdown)))
        object.__setattr__(self, "expense_breakdown", MappingProxyType(dict(self.expense_breakdown)))


class SummaryErrorKind(Enum):
    NOT_FOUND = "not_found"
    LOAD_FAILED = "load_failed"


@dataclass(frozen=True)
class SummaryError:
    kind: SummaryErrorKind
    message: str


@dataclass(frozen=True)
class AnnualSummaryOutcome:
    """Either a complete summary or an error, never both."""
    summary: AnlageVSummary | None = None
    error: SummaryError | None = None

    @property
    def ok(self) -> bool:
        return self.summary is not None


class LockStatus(Enum):
    BLOCKED = "blocked"
    POSSIBLE = "possible"


@dataclass(frozen=True)
class RentIncreaseHeadroom:
    lock_status: LockStatus
    possible_since: date  # Earliest effective date for the next increase
    lock_until_date: date | None  # Set only while blocked
    current_cold_rent: Decimal
    cap_applies: bool

    # Kappungsgrenze; None when the contract's rent regime is exempt
    remaining_percent: Decimal | None = None
    max_allowed_rent: Decimal | None = None
    delta: Decimal | None = None
    baseline_rent: Decimal | None = None
    already_increased_percent: Decimal | None = None


class TimingStatus(Enum):
    NOW_OPTIMAL = "NOW_OPTIMAL"
    BEFORE_WINDOW = "BEFORE_WINDOW"
    MISSED_WINDOW = "MISSED_WINDOW"


@dataclass(frozen=True)
class DeliveryTiming:
    timing_status: TimingStatus
    next_earliest_effective_from: date
    service_window_start: date
    service_window_end: date
    next_effective_if_sent_today: date
