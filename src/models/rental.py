from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from src.models.afa import AfaSettings


class ScopeType(Enum):
    PROPERTY = "property"
    UNIT = "unit"


class ContractStatus(Enum):
    ACTIVE = "active"
    TERMINATED = "terminated"


class RentRegime(Enum):
    STANDARD = "standard"
    INDEX = "index"  # Indexmiete, §557b
    STEPPED = "stepped"  # Staffelmiete, §557a


class RateChangeReason(Enum):
    INITIAL = "initial"
    INCREASE = "increase"
    INDEX = "index"
    STEPPED = "stepped"
    MIGRATION = "migration"
    MANUAL = "manual"
    IMPORT = "import"


class PaymentStatus(Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class PropertyInfo:
    id: str
    user_id: str
    name: str
    address: str = ""
    property_type: str | None = None  # multi_family, house, apartment, commercial, parking
    construction_year: int | None = None
    purchase_date: date | None = None
    purchase_price: Decimal | None = None


@dataclass(frozen=True)
class UnitInfo:
    id: str
    user_id: str
    property_id: str
    unit_number: str
    construction_year: int | None = None
    purchase_date: date | None = None
    purchase_price: Decimal | None = None


@dataclass(frozen=True)
class Contract:
    """A lease. Static rent fields mirror the rate in effect at creation."""
    id: str
    property_id: str
    unit_id: str | None
    tenant_id: str | None
    cold_rent: Decimal
    utility_advance: Decimal
    start_date: date
    end_date: date | None = None
    status: ContractStatus = ContractStatus.ACTIVE
    rent_regime: RentRegime = RentRegime.STANDARD

    # Display only
    tenant_name: str = ""
    unit_number: str = ""
    property_name: str = ""

    @property
    def total(self) -> Decimal:
        return self.cold_rent + self.utility_advance

    def is_active_between(self, first_day: date, last_day: date) -> bool:
        """True if the lease overlaps the closed interval [first_day, last_day]."""
        if self.start_date > last_day:
            return False
        return self.end_date is None or self.end_date >= first_day


@dataclass(frozen=True)
class RateChangeEvent:
    """Append-only rent history row."""
    id: str
    contract_id: str
    effective_date: date
    cold_rent: Decimal
    utility_advance: Decimal
    reason: RateChangeReason = RateChangeReason.INITIAL

    @property
    def total(self) -> Decimal:
        return self.cold_rent + self.utility_advance


@dataclass(frozen=True)
class PartialPayment:
    date: date
    amount: Decimal


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    contract_id: str
    due_date: date
    amount: Decimal  # Amount due for the period
    paid_date: date | None = None
    status: PaymentStatus = PaymentStatus.PAID
    paid_amount: Decimal | None = None
    partial_payments: tuple[PartialPayment, ...] = ()

    @property
    def effective_date(self) -> date:
        return self.paid_date or self.due_date

    @property
    def received_amount(self) -> Decimal:
        """Cash actually received for this period."""
        if self.status == PaymentStatus.UNPAID:
            return Decimal("0")
        if self.status == PaymentStatus.PAID:
            return self.amount
        return self.paid_amount or Decimal("0")


@dataclass(frozen=True)
class ManualIncomeEntry:
    id: str
    property_id: str
    unit_id: str | None
    entry_date: date
    amount: Decimal
    description: str = ""
    recipient: str = ""
    status: str = "paid"
    document_id: str | None = None


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    property_id: str
    unit_id: str | None
    expense_date: date
    amount: Decimal
    category_name: str | None = None
    description: str = ""
    recipient: str = ""
    notes: str = ""
    status: str = "paid"
    document_id: str | None = None


@dataclass(frozen=True)
class LoanRecord:
    id: str
    property_id: str
    unit_id: str | None
    monthly_payment: Decimal
    monthly_principal: Decimal
    interest_rate: Decimal  # Annual, e.g. Decimal("0.035")
    start_date: date
    end_date: date | None = None
    lender: str = ""

    @property
    def monthly_interest(self) -> Decimal:
        return self.monthly_payment - self.monthly_principal


@dataclass(frozen=True)
class Scope:
    """A resolved property or unit the summary is computed for."""
    scope_type: ScopeType
    scope_id: str
    property_id: str
    label: str = ""
    unit_ids: tuple[str, ...] = ()

    def covers(self, property_id: str, unit_id: str | None) -> bool:
        """Contracts and income entries: strict unit match in unit scope."""
        if self.scope_type == ScopeType.PROPERTY:
            return property_id == self.property_id
        return unit_id == self.scope_id

    def covers_cost(self, property_id: str, unit_id: str | None) -> bool:
        """Expenses and loans: unit scope also takes property-level costs."""
        if self.scope_type == ScopeType.PROPERTY:
            return property_id == self.property_id
        if unit_id is None:
            return property_id == self.property_id
        return unit_id == self.scope_id


@dataclass(frozen=True)
class RentalSnapshot:
    """Read-only bundle of every record the data source can answer from."""
    properties: tuple[PropertyInfo, ...] = ()
    units: tuple[UnitInfo, ...] = ()
    contracts: tuple[Contract, ...] = ()
    rate_changes: tuple[RateChangeEvent, ...] = ()
    payments: tuple[PaymentRecord, ...] = ()
    income_entries: tuple[ManualIncomeEntry, ...] = ()
    expenses: tuple[ExpenseRecord, ...] = ()
    loans: tuple[LoanRecord, ...] = ()
    afa_settings: dict[str, AfaSettings] = field(default_factory=dict)


@dataclass(frozen=True)
class ScopeSnapshot:
    """Everything fetched for one summary computation."""
    scope: Scope
    contracts: tuple[Contract, ...] = ()
    rate_changes: tuple[RateChangeEvent, ...] = ()
    payments: tuple[PaymentRecord, ...] = ()
    income_entries: tuple[ManualIncomeEntry, ...] = ()
    expenses: tuple[ExpenseRecord, ...] = ()
    loans: tuple[LoanRecord, ...] = ()
    afa_settings: AfaSettings | None = None
