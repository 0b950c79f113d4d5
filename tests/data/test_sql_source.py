"""Tests for mapping ORM rows to engine records, without a database."""

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.data.sql_source import SqlAlchemyDataSource, _to_contract, _to_payment, _to_rate_change
from src.models.afa import BuildingShareType
from src.models.db import (
    ContractRecord,
    LoanEntryRecord,
    PropertyRecord,
    RentHistoryRecord,
    RentPaymentRecord,
    TenantRecord,
    UnitRecord,
)
from src.models.rental import PaymentStatus, RateChangeReason, RentRegime

USER = uuid.uuid4()
PROPERTY = uuid.uuid4()


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def source(session) -> SqlAlchemyDataSource:
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    return SqlAlchemyDataSource(factory)


class TestRowMapping:
    def test_contract(self):
        row = ContractRecord(
            id=uuid.uuid4(),
            user_id=USER,
            property_id=PROPERTY,
            unit_id=None,
            tenant_id=None,
            cold_rent=Decimal("800.00"),
            additional_costs=None,
            contract_start=date(2022, 1, 1),
            contract_end=None,
            status="active",
            rent_increase_type="staffel",
        )
        row.tenant = TenantRecord(first_name="Erika", last_name="Mustermann")
        row.unit = UnitRecord(unit_number="3a")
        row.property = PropertyRecord(name="Haus Am See")
        contract = _to_contract(row)
        assert contract.property_id == str(PROPERTY)
        assert contract.utility_advance == Decimal("0")
        assert contract.rent_regime == RentRegime.STEPPED
        assert contract.tenant_name == "Erika Mustermann"
        assert contract.unit_number == "3a"

    def test_unknown_history_reason_is_manual(self):
        row = RentHistoryRecord(
            id=uuid.uuid4(), contract_id=uuid.uuid4(), effective_date=date(2024, 1, 1),
            cold_rent=Decimal("900"), utilities=Decimal("150"), reason="legacy",
        )
        assert _to_rate_change(row).reason == RateChangeReason.MANUAL

    def test_payment_with_installments(self):
        row = RentPaymentRecord(
            id=uuid.uuid4(), contract_id=uuid.uuid4(), due_date=date(2024, 3, 1),
            paid_date=None, amount=Decimal("1000"), paid_amount=Decimal("600"),
            payment_status="partial",
            partial_payments=[{"date": "2024-03-05", "amount": 600}],
        )
        payment = _to_payment(row)
        assert payment.status == PaymentStatus.PARTIAL
        assert payment.partial_payments[0].amount == Decimal("600")
        assert payment.received_amount == Decimal("600")


class TestQueries:
    async def test_invalid_ids_skip_the_database(self, source, session):
        assert await source.get_property("not-a-uuid", "P1") is None
        assert await source.list_contracts(str(USER), "P1") == []
        session.scalar.assert_not_awaited()
        session.scalars.assert_not_awaited()

    async def test_installment_payments_limited_to_neighbouring_years(self, source, session):
        session.scalars.return_value = []
        await source.list_payments(str(USER), [str(uuid.uuid4())], 2024)
        stmt = session.scalars.await_args.args[0]
        bounds = list(stmt.compile().params.values())
        for day in (date(2024, 1, 1), date(2024, 12, 31), date(2023, 1, 1), date(2025, 12, 31)):
            assert day in bounds

    async def test_loan_rate_percent_to_fraction(self, source, session):
        session.scalars.return_value = [LoanEntryRecord(
            id=uuid.uuid4(), property_id=PROPERTY, unit_id=None, lender_name="Sparkasse",
            monthly_payment=Decimal("1000"), monthly_principal=Decimal("600"),
            interest_rate=Decimal("3.5"), start_date=date(2020, 7, 1), end_date=None,
        )]
        loans = await source.list_loans(str(USER), str(PROPERTY))
        assert loans[0].interest_rate == Decimal("0.035")
        assert loans[0].monthly_interest == Decimal("400")

    async def test_afa_settings_parsed(self, source, session):
        session.scalar.return_value = {
            "enabled": True,
            "purchase_date": "2020-07-15",
            "purchase_price_total": "300000",
            "building_share_type": "percent",
            "building_share_value": 80,
        }
        afa = await source.get_afa_settings(str(USER), str(PROPERTY))
        assert afa.building_share_type == BuildingShareType.PERCENT
        assert afa.purchase_date == date(2020, 7, 15)

    async def test_invalid_afa_settings_are_none(self, source, session):
        session.scalar.return_value = {"enabled": "maybe"}
        assert await source.get_afa_settings(str(USER), str(PROPERTY)) is None
