"""SQLAlchemy-backed data source: ORM rows in, engine dataclasses out."""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.models.afa import AfaSettings
from src.models.db import (
    ContractRecord,
    ExpenseEntryRecord,
    IncomeEntryRecord,
    LoanEntryRecord,
    PropertyRecord,
    RentHistoryRecord,
    RentPaymentRecord,
    UnitRecord,
)
from src.models.rental import (
    Contract,
    ContractStatus,
    ExpenseRecord,
    LoanRecord,
    ManualIncomeEntry,
    PartialPayment,
    PaymentRecord,
    PaymentStatus,
    PropertyInfo,
    RateChangeEvent,
    RateChangeReason,
    RentRegime,
    UnitInfo,
)

logger = logging.getLogger(__name__)

_afa_adapter = TypeAdapter(AfaSettings)

RENT_REGIMES = {"staffel": RentRegime.STEPPED, "index": RentRegime.INDEX}


def _uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _str_or_none(value) -> str | None:
    return str(value) if value is not None else None


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def _to_contract(row: ContractRecord) -> Contract:
    tenant = row.tenant
    tenant_name = " ".join(p for p in (tenant.first_name, tenant.last_name) if p) if tenant else ""
    try:
        status = ContractStatus(row.status)
    except ValueError:
        status = ContractStatus.ACTIVE
    return Contract(
        id=str(row.id),
        property_id=str(row.property_id),
        unit_id=_str_or_none(row.unit_id),
        tenant_id=_str_or_none(row.tenant_id),
        cold_rent=_dec(row.cold_rent),
        utility_advance=_dec(row.additional_costs),
        start_date=row.contract_start,
        end_date=row.contract_end,
        status=status,
        rent_regime=RENT_REGIMES.get(row.rent_increase_type, RentRegime.STANDARD),
        tenant_name=tenant_name,
        unit_number=row.unit.unit_number if row.unit else "",
        property_name=row.property.name if row.property else "",
    )


def _to_rate_change(row: RentHistoryRecord) -> RateChangeEvent:
    try:
        reason = RateChangeReason(row.reason)
    except ValueError:
        logger.debug("Unknown rent history reason %r on %s", row.reason, row.id)
        reason = RateChangeReason.MANUAL
    return RateChangeEvent(
        id=str(row.id),
        contract_id=str(row.contract_id),
        effective_date=row.effective_date,
        cold_rent=_dec(row.cold_rent),
        utility_advance=_dec(row.utilities),
        reason=reason,
    )


def _to_payment(row: RentPaymentRecord) -> PaymentRecord:
    try:
        status = PaymentStatus(row.payment_status)
    except ValueError:
        status = PaymentStatus.UNPAID
    partials = tuple(
        PartialPayment(date=date.fromisoformat(p["date"]), amount=_dec(p.get("amount")))
        for p in (row.partial_payments or [])
        if p.get("date")
    )
    return PaymentRecord(
        id=str(row.id),
        contract_id=str(row.contract_id),
        due_date=row.due_date,
        amount=_dec(row.amount),
        paid_date=row.paid_date,
        status=status,
        paid_amount=_dec(row.paid_amount) if row.paid_amount is not None else None,
        partial_payments=partials,
    )


class SqlAlchemyDataSource:
    """Each query runs in its own short session so the service can gather them."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _scalar(self, stmt):
        async with self.session_factory() as session:
            return await session.scalar(stmt)

    async def _scalars(self, stmt) -> list:
        async with self.session_factory() as session:
            return list(await session.scalars(stmt))

    async def get_property(self, user_id: str, property_id: str) -> PropertyInfo | None:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return None
        row = await self._scalar(
            select(PropertyRecord).where(PropertyRecord.id == pid, PropertyRecord.user_id == uid)
        )
        if row is None:
            return None
        return PropertyInfo(
            id=str(row.id),
            user_id=str(row.user_id),
            name=row.name,
            address=row.address or "",
            property_type=row.property_type,
            construction_year=row.construction_year,
            purchase_date=row.purchase_date,
            purchase_price=row.purchase_price,
        )

    async def get_unit(self, user_id: str, unit_id: str) -> UnitInfo | None:
        uid, unit = _uuid(user_id), _uuid(unit_id)
        if uid is None or unit is None:
            return None
        row = await self._scalar(
            select(UnitRecord).where(UnitRecord.id == unit, UnitRecord.user_id == uid)
        )
        return self._to_unit(row) if row is not None else None

    async def list_units(self, user_id: str, property_id: str) -> list[UnitInfo]:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return []
        rows = await self._scalars(
            select(UnitRecord).where(UnitRecord.property_id == pid, UnitRecord.user_id == uid)
        )
        return [self._to_unit(r) for r in rows]

    @staticmethod
    def _to_unit(row: UnitRecord) -> UnitInfo:
        return UnitInfo(
            id=str(row.id),
            user_id=str(row.user_id),
            property_id=str(row.property_id),
            unit_number=row.unit_number,
            construction_year=row.construction_year,
            purchase_date=row.purchase_date,
            purchase_price=row.purchase_price,
        )

    def _contract_query(self):
        return select(ContractRecord).options(
            selectinload(ContractRecord.unit),
            selectinload(ContractRecord.tenant),
            selectinload(ContractRecord.property),
        )

    async def list_contracts(self, user_id: str, property_id: str) -> list[Contract]:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return []
        rows = await self._scalars(
            self._contract_query().where(
                ContractRecord.property_id == pid, ContractRecord.user_id == uid
            )
        )
        return [_to_contract(r) for r in rows]

    async def get_contract(self, user_id: str, contract_id: str) -> Contract | None:
        uid, cid = _uuid(user_id), _uuid(contract_id)
        if uid is None or cid is None:
            return None
        row = await self._scalar(
            self._contract_query().where(ContractRecord.id == cid, ContractRecord.user_id == uid)
        )
        return _to_contract(row) if row is not None else None

    async def list_rate_changes(self, contract_ids: Sequence[str]) -> list[RateChangeEvent]:
        ids = [i for i in (_uuid(c) for c in contract_ids) if i is not None]
        if not ids:
            return []
        rows = await self._scalars(
            select(RentHistoryRecord)
            .where(RentHistoryRecord.contract_id.in_(ids), RentHistoryRecord.status == "active")
            .order_by(RentHistoryRecord.effective_date, RentHistoryRecord.created_at)
        )
        return [_to_rate_change(r) for r in rows]

    async def list_payments(self, user_id: str, contract_ids: Sequence[str], year: int) -> list[PaymentRecord]:
        uid = _uuid(user_id)
        ids = [i for i in (_uuid(c) for c in contract_ids) if i is not None]
        if uid is None or not ids:
            return []
        start, end = _year_bounds(year)
        # Installments of neighbouring years can land in this one; the engine filters by date
        prev_start, next_end = date(year - 1, 1, 1), date(year + 1, 12, 31)
        rows = await self._scalars(
            select(RentPaymentRecord).where(
                RentPaymentRecord.user_id == uid,
                RentPaymentRecord.contract_id.in_(ids),
                or_(
                    RentPaymentRecord.due_date.between(start, end),
                    RentPaymentRecord.paid_date.between(start, end),
                    and_(
                        RentPaymentRecord.partial_payments.is_not(None),
                        RentPaymentRecord.due_date.between(prev_start, next_end),
                    ),
                ),
            )
        )
        return [_to_payment(r) for r in rows]

    async def list_income_entries(self, user_id: str, property_id: str, year: int) -> list[ManualIncomeEntry]:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return []
        start, end = _year_bounds(year)
        rows = await self._scalars(
            select(IncomeEntryRecord).where(
                IncomeEntryRecord.user_id == uid,
                IncomeEntryRecord.property_id == pid,
                IncomeEntryRecord.entry_date.between(start, end),
            )
        )
        return [
            ManualIncomeEntry(
                id=str(r.id),
                property_id=str(r.property_id),
                unit_id=_str_or_none(r.unit_id),
                entry_date=r.entry_date,
                amount=_dec(r.amount),
                description=r.description or "",
                recipient=r.recipient or "",
                status=r.status,
                document_id=_str_or_none(r.document_id),
            )
            for r in rows
        ]

    async def list_expenses(self, user_id: str, property_id: str, year: int) -> list[ExpenseRecord]:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return []
        start, end = _year_bounds(year)
        rows = await self._scalars(
            select(ExpenseEntryRecord)
            .options(selectinload(ExpenseEntryRecord.category))
            .where(
                ExpenseEntryRecord.user_id == uid,
                ExpenseEntryRecord.property_id == pid,
                ExpenseEntryRecord.expense_date.between(start, end),
            )
        )
        return [
            ExpenseRecord(
                id=str(r.id),
                property_id=str(r.property_id),
                unit_id=_str_or_none(r.unit_id),
                expense_date=r.expense_date,
                amount=_dec(r.amount),
                category_name=r.category.name if r.category else None,
                description=r.description or "",
                recipient=r.recipient or "",
                notes=r.notes or "",
                status=r.status,
                document_id=_str_or_none(r.document_id),
            )
            for r in rows
        ]

    async def list_loans(self, user_id: str, property_id: str) -> list[LoanRecord]:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return []
        rows = await self._scalars(
            select(LoanEntryRecord).where(
                LoanEntryRecord.user_id == uid, LoanEntryRecord.property_id == pid
            )
        )
        return [
            LoanRecord(
                id=str(r.id),
                property_id=str(r.property_id),
                unit_id=_str_or_none(r.unit_id),
                monthly_payment=_dec(r.monthly_payment),
                monthly_principal=_dec(r.monthly_principal),
                interest_rate=_dec(r.interest_rate) / Decimal("100"),
                start_date=r.start_date,
                end_date=r.end_date,
                lender=r.lender_name or "",
            )
            for r in rows
        ]

    async def get_afa_settings(self, user_id: str, property_id: str) -> AfaSettings | None:
        uid, pid = _uuid(user_id), _uuid(property_id)
        if uid is None or pid is None:
            return None
        raw = await self._scalar(
            select(PropertyRecord.afa_settings).where(
                PropertyRecord.id == pid, PropertyRecord.user_id == uid
            )
        )
        if not raw:
            return None
        try:
            return _afa_adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning("Invalid AfA settings on property %s: %s", property_id, e)
            return None
