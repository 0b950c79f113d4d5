"""Anlage V service: loads a scope's records and hands them to the engine.

Flow: resolve scope → contracts → rent history, payments, income entries
and expenses (concurrently) → optional loans and AfA settings → compose.
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal

from src.data.base import ContractNotFoundError, RentalDataSource, ScopeNotFoundError
from src.data.cache import AfaSettingsCache
from src.engine.anlage_v import compose_annual_summary
from src.engine.depreciation import assess_afa_setup
from src.engine.rent_cap import compute_delivery_timing, compute_rent_increase_headroom
from src.models.afa import AfaSettings, AfaSetupStatus
from src.models.rental import LoanRecord, Scope, ScopeSnapshot, ScopeType
from src.models.results import (
    AnnualSummaryOutcome,
    DeliveryTiming,
    RentIncreaseHeadroom,
    SummaryError,
    SummaryErrorKind,
)

logger = logging.getLogger(__name__)


class AnlageVService:
    def __init__(self, source: RentalDataSource, afa_cache: AfaSettingsCache | None = None):
        self.source = source
        self.afa_cache = afa_cache or AfaSettingsCache()

    async def resolve_scope(self, user_id: str, scope_type: ScopeType, scope_id: str) -> Scope:
        """Look up the property or unit and build its label.

        Raises ScopeNotFoundError when it does not exist for this user.
        """
        if scope_type == ScopeType.PROPERTY:
            prop = await self.source.get_property(user_id, scope_id)
            if prop is None:
                raise ScopeNotFoundError(f"Property {scope_id} not found")
            units = await self.source.list_units(user_id, prop.id)
            label = f"{prop.name} ({prop.address})" if prop.address else prop.name
            return Scope(
                scope_type=scope_type,
                scope_id=prop.id,
                property_id=prop.id,
                label=label,
                unit_ids=tuple(u.id for u in units),
            )

        unit = await self.source.get_unit(user_id, scope_id)
        if unit is None:
            raise ScopeNotFoundError(f"Unit {scope_id} not found")
        prop = await self.source.get_property(user_id, unit.property_id)
        if prop is None:
            raise ScopeNotFoundError(f"Property {unit.property_id} of unit {scope_id} not found")
        return Scope(
            scope_type=scope_type,
            scope_id=unit.id,
            property_id=prop.id,
            label=f"{prop.name} - Einheit {unit.unit_number}",
            unit_ids=(unit.id,),
        )

    async def _optional_loans(self, user_id: str, property_id: str) -> list[LoanRecord]:
        try:
            return await self.source.list_loans(user_id, property_id)
        except Exception as e:
            logger.warning("Loan lookup failed for property %s, continuing without interest: %s", property_id, e)
            return []

    async def _optional_afa(self, user_id: str, property_id: str) -> AfaSettings | None:
        try:
            return await self.afa_cache.get_or_load(
                user_id, property_id, lambda: self.source.get_afa_settings(user_id, property_id)
            )
        except Exception as e:
            logger.warning("AfA settings lookup failed for property %s, continuing without AfA: %s", property_id, e)
            return None

    async def load_scope_snapshot(self, user_id: str, scope: Scope, year: int) -> ScopeSnapshot:
        contracts = await self.source.list_contracts(user_id, scope.property_id)
        contract_ids = [c.id for c in contracts]

        rate_changes, payments, income_entries, expenses = await asyncio.gather(
            self.source.list_rate_changes(contract_ids),
            self.source.list_payments(user_id, contract_ids, year),
            self.source.list_income_entries(user_id, scope.property_id, year),
            self.source.list_expenses(user_id, scope.property_id, year),
        )
        loans, afa_settings = await asyncio.gather(
            self._optional_loans(user_id, scope.property_id),
            self._optional_afa(user_id, scope.property_id),
        )

        return ScopeSnapshot(
            scope=scope,
            contracts=tuple(contracts),
            rate_changes=tuple(rate_changes),
            payments=tuple(payments),
            income_entries=tuple(income_entries),
            expenses=tuple(expenses),
            loans=tuple(loans),
            afa_settings=afa_settings,
        )

    async def compute_annual_summary(
        self,
        user_id: str,
        scope_type: ScopeType | str,
        scope_id: str,
        year: int,
        ownership_share: Decimal = Decimal("100"),
        as_of: date | None = None,
    ) -> AnnualSummaryOutcome:
        """Compute the Anlage V summary for a property or unit.

        Never raises for data problems: a missing scope or a failed required
        query comes back as a SummaryError instead of a partial summary.
        """
        scope_type = ScopeType(scope_type)
        try:
            scope = await self.resolve_scope(user_id, scope_type, scope_id)
        except ScopeNotFoundError as e:
            logger.info("Anlage V scope not found: %s", e)
            return AnnualSummaryOutcome(error=SummaryError(SummaryErrorKind.NOT_FOUND, str(e)))
        except Exception as e:
            logger.exception("Scope lookup failed for %s %s", scope_type.value, scope_id)
            return AnnualSummaryOutcome(error=SummaryError(SummaryErrorKind.LOAD_FAILED, str(e)))

        try:
            snapshot = await self.load_scope_snapshot(user_id, scope, year)
        except Exception as e:
            logger.exception("Loading Anlage V data failed for %s %s", scope_type.value, scope_id)
            return AnnualSummaryOutcome(error=SummaryError(SummaryErrorKind.LOAD_FAILED, str(e)))

        summary = compose_annual_summary(
            snapshot,
            year,
            ownership_share=Decimal(str(ownership_share)),
            as_of=as_of,
        )
        return AnnualSummaryOutcome(summary=summary)

    async def compute_rent_increase_headroom(
        self,
        user_id: str,
        contract_id: str,
        today: date | None = None,
        cap_percent: Decimal | None = None,
    ) -> tuple[RentIncreaseHeadroom, DeliveryTiming | None]:
        """Headroom for a stored contract plus the notice delivery timing."""
        contract = await self.source.get_contract(user_id, contract_id)
        if contract is None:
            raise ContractNotFoundError(f"Contract {contract_id} not found")
        history = await self.source.list_rate_changes([contract.id])
        today = today or date.today()
        headroom = compute_rent_increase_headroom(contract, history, today=today, cap_percent=cap_percent)
        return headroom, compute_delivery_timing(headroom.possible_since, today=today)

    async def afa_setup_status(self, user_id: str, property_id: str) -> AfaSetupStatus:
        prop = await self.source.get_property(user_id, property_id)
        if prop is None:
            raise ScopeNotFoundError(f"Property {property_id} not found")
        units, existing = await asyncio.gather(
            self.source.list_units(user_id, property_id),
            self._optional_afa(user_id, property_id),
        )
        return assess_afa_setup(prop, units, existing)
