"""Protocol definitions for the read-only rental data source.

Queries may return supersets (other years, other units); the engine does
the final year and scope filtering.
"""

from typing import Protocol, Sequence, runtime_checkable

from src.models.afa import AfaSettings
from src.models.rental import (
    Contract,
    ExpenseRecord,
    LoanRecord,
    ManualIncomeEntry,
    PaymentRecord,
    PropertyInfo,
    RateChangeEvent,
    UnitInfo,
)


class ScopeNotFoundError(LookupError):
    """Property or unit does not exist or is not owned by the user."""


class ContractNotFoundError(LookupError):
    """Contract does not exist or is not owned by the user."""


@runtime_checkable
class RentalDataSource(Protocol):
    async def get_property(self, user_id: str, property_id: str) -> PropertyInfo | None:
        """Fetch a property owned by the user."""
        ...

    async def get_unit(self, user_id: str, unit_id: str) -> UnitInfo | None:
        """Fetch a unit owned by the user."""
        ...

    async def list_units(self, user_id: str, property_id: str) -> list[UnitInfo]:
        """All units of a property."""
        ...

    async def list_contracts(self, user_id: str, property_id: str) -> list[Contract]:
        """All leases of a property, any status."""
        ...

    async def get_contract(self, user_id: str, contract_id: str) -> Contract | None:
        """Fetch a single lease."""
        ...

    async def list_rate_changes(self, contract_ids: Sequence[str]) -> list[RateChangeEvent]:
        """Rent history rows for the given leases."""
        ...

    async def list_payments(self, user_id: str, contract_ids: Sequence[str], year: int) -> list[PaymentRecord]:
        """Payment records due or paid in the year."""
        ...

    async def list_income_entries(self, user_id: str, property_id: str, year: int) -> list[ManualIncomeEntry]:
        """Manual income entries of a property dated in the year."""
        ...

    async def list_expenses(self, user_id: str, property_id: str, year: int) -> list[ExpenseRecord]:
        """Expense records of a property dated in the year."""
        ...

    async def list_loans(self, user_id: str, property_id: str) -> list[LoanRecord]:
        """Loans attached to a property or its units."""
        ...

    async def get_afa_settings(self, user_id: str, property_id: str) -> AfaSettings | None:
        """Stored depreciation settings of a property."""
        ...
