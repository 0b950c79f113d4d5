"""In-memory data source over a RentalSnapshot.

Used by the CLI (JSON snapshot files) and by tests.
"""

import json
import logging
from pathlib import Path
from typing import Sequence

from pydantic import TypeAdapter

from src.models.afa import AfaSettings
from src.models.rental import (
    Contract,
    ExpenseRecord,
    LoanRecord,
    ManualIncomeEntry,
    PaymentRecord,
    PropertyInfo,
    RateChangeEvent,
    RentalSnapshot,
    UnitInfo,
)

logger = logging.getLogger(__name__)

_snapshot_adapter = TypeAdapter(RentalSnapshot)


def load_snapshot(path: str | Path) -> RentalSnapshot:
    """Parse a JSON export into a RentalSnapshot."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    snapshot = _snapshot_adapter.validate_python(raw)
    logger.info(
        "Loaded snapshot %s: %d contracts, %d payments, %d expenses",
        path, len(snapshot.contracts), len(snapshot.payments), len(snapshot.expenses),
    )
    return snapshot


class InMemoryDataSource:
    def __init__(self, snapshot: RentalSnapshot):
        self.snapshot = snapshot

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryDataSource":
        return cls(load_snapshot(path))

    def _owns_property(self, user_id: str, property_id: str) -> bool:
        return any(p.id == property_id and p.user_id == user_id for p in self.snapshot.properties)

    async def get_property(self, user_id: str, property_id: str) -> PropertyInfo | None:
        return next(
            (p for p in self.snapshot.properties if p.id == property_id and p.user_id == user_id),
            None,
        )

    async def get_unit(self, user_id: str, unit_id: str) -> UnitInfo | None:
        return next(
            (u for u in self.snapshot.units if u.id == unit_id and u.user_id == user_id),
            None,
        )

    async def list_units(self, user_id: str, property_id: str) -> list[UnitInfo]:
        return [
            u for u in self.snapshot.units
            if u.property_id == property_id and u.user_id == user_id
        ]

    async def list_contracts(self, user_id: str, property_id: str) -> list[Contract]:
        if not self._owns_property(user_id, property_id):
            return []
        return [c for c in self.snapshot.contracts if c.property_id == property_id]

    async def get_contract(self, user_id: str, contract_id: str) -> Contract | None:
        contract = next((c for c in self.snapshot.contracts if c.id == contract_id), None)
        if contract is None or not self._owns_property(user_id, contract.property_id):
            return None
        return contract

    async def list_rate_changes(self, contract_ids: Sequence[str]) -> list[RateChangeEvent]:
        wanted = set(contract_ids)
        return [e for e in self.snapshot.rate_changes if e.contract_id in wanted]

    async def list_payments(self, user_id: str, contract_ids: Sequence[str], year: int) -> list[PaymentRecord]:
        wanted = set(contract_ids)
        return [
            p for p in self.snapshot.payments
            if p.contract_id in wanted
            and (p.due_date.year == year or p.effective_date.year == year
                 or any(pp.date.year == year for pp in p.partial_payments))
        ]

    async def list_income_entries(self, user_id: str, property_id: str, year: int) -> list[ManualIncomeEntry]:
        if not self._owns_property(user_id, property_id):
            return []
        return [
            e for e in self.snapshot.income_entries
            if e.property_id == property_id and e.entry_date.year == year
        ]

    async def list_expenses(self, user_id: str, property_id: str, year: int) -> list[ExpenseRecord]:
        if not self._owns_property(user_id, property_id):
            return []
        return [
            e for e in self.snapshot.expenses
            if e.property_id == property_id and e.expense_date.year == year
        ]

    async def list_loans(self, user_id: str, property_id: str) -> list[LoanRecord]:
        if not self._owns_property(user_id, property_id):
            return []
        return [l for l in self.snapshot.loans if l.property_id == property_id]

    async def get_afa_settings(self, user_id: str, property_id: str) -> AfaSettings | None:
        if not self._owns_property(user_id, property_id):
            return None
        return self.snapshot.afa_settings.get(property_id)
