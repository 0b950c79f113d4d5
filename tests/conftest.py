"""Canonical test fixtures shared across engine, data and API tests.

Fixture: one property "Haus Am See" (P1) with two units, owned by user U-1.
Lease C1 on unit W1: 800 cold rent + 200 utility advance since 2022-01-01.
AfA: 300K purchase in July 2020, 80% building share, 2% rate.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.models.afa import AfaSettings, BuildingShareType
from src.models.rental import (
    Contract,
    ExpenseRecord,
    LoanRecord,
    ManualIncomeEntry,
    PaymentRecord,
    PaymentStatus,
    PropertyInfo,
    RateChangeEvent,
    RateChangeReason,
    RentalSnapshot,
    Scope,
    ScopeSnapshot,
    ScopeType,
    UnitInfo,
)

USER_ID = "U-1"


@pytest.fixture
def property_info() -> PropertyInfo:
    return PropertyInfo(
        id="P1",
        user_id=USER_ID,
        name="Haus Am See",
        address="Seestraße 1, Berlin",
        property_type="multi_family",
        construction_year=1965,
        purchase_date=date(2020, 7, 15),
        purchase_price=Decimal("300000"),
    )


@pytest.fixture
def units() -> list[UnitInfo]:
    return [
        UnitInfo(id="W1", user_id=USER_ID, property_id="P1", unit_number="1"),
        UnitInfo(id="W2", user_id=USER_ID, property_id="P1", unit_number="2"),
    ]


@pytest.fixture
def contract() -> Contract:
    """800 cold + 200 utilities on unit W1 since 2022."""
    return Contract(
        id="C1",
        property_id="P1",
        unit_id="W1",
        tenant_id="T1",
        cold_rent=Decimal("800"),
        utility_advance=Decimal("200"),
        start_date=date(2022, 1, 1),
        tenant_name="Erika Mustermann",
        unit_number="1",
        property_name="Haus Am See",
    )


@pytest.fixture
def initial_rate(contract) -> RateChangeEvent:
    return RateChangeEvent(
        id="R1",
        contract_id=contract.id,
        effective_date=contract.start_date,
        cold_rent=Decimal("800"),
        utility_advance=Decimal("200"),
        reason=RateChangeReason.INITIAL,
    )


@pytest.fixture
def march_payment(contract) -> PaymentRecord:
    return PaymentRecord(
        id="PAY-03",
        contract_id=contract.id,
        due_date=date(2024, 3, 1),
        amount=Decimal("1000"),
        paid_date=date(2024, 3, 3),
        status=PaymentStatus.PAID,
    )


@pytest.fixture
def afa_settings() -> AfaSettings:
    return AfaSettings(
        enabled=True,
        purchase_date=date(2020, 7, 15),
        purchase_price_total=Decimal("300000"),
        building_share_type=BuildingShareType.PERCENT,
        building_share_value=Decimal("80"),
        afa_rate=Decimal("0.02"),
    )


@pytest.fixture
def property_scope() -> Scope:
    return Scope(
        scope_type=ScopeType.PROPERTY,
        scope_id="P1",
        property_id="P1",
        label="Haus Am See (Seestraße 1, Berlin)",
        unit_ids=("W1", "W2"),
    )


@pytest.fixture
def unit_scope() -> Scope:
    return Scope(
        scope_type=ScopeType.UNIT,
        scope_id="W1",
        property_id="P1",
        label="Haus Am See - Einheit 1",
        unit_ids=("W1",),
    )


@pytest.fixture
def expenses() -> list[ExpenseRecord]:
    return [
        ExpenseRecord(
            id="E1", property_id="P1", unit_id=None, expense_date=date(2024, 2, 15),
            amount=Decimal("480.00"), category_name="Grundsteuer", document_id="DOC-1",
        ),
        ExpenseRecord(
            id="E2", property_id="P1", unit_id="W1", expense_date=date(2024, 5, 10),
            amount=Decimal("350.00"), category_name="Reparaturen Heizung", recipient="Klempner GmbH",
        ),
        ExpenseRecord(
            id="E3", property_id="P1", unit_id="W2", expense_date=date(2024, 6, 1),
            amount=Decimal("120.00"), category_name="Wasser",
        ),
    ]


@pytest.fixture
def loan() -> LoanRecord:
    """1,000/month, 600 principal → 400 interest."""
    return LoanRecord(
        id="L1",
        property_id="P1",
        unit_id=None,
        monthly_payment=Decimal("1000"),
        monthly_principal=Decimal("600"),
        interest_rate=Decimal("0.035"),
        start_date=date(2020, 7, 1),
        lender="Sparkasse",
    )


@pytest.fixture
def income_entry() -> ManualIncomeEntry:
    return ManualIncomeEntry(
        id="I1",
        property_id="P1",
        unit_id=None,
        entry_date=date(2024, 8, 20),
        amount=Decimal("150"),
        description="Stellplatzmiete",
    )


@pytest.fixture
def scope_snapshot(
    unit_scope, contract, initial_rate, march_payment, expenses, loan, afa_settings,
) -> ScopeSnapshot:
    return ScopeSnapshot(
        scope=unit_scope,
        contracts=(contract,),
        rate_changes=(initial_rate,),
        payments=(march_payment,),
        expenses=tuple(expenses),
        loans=(loan,),
        afa_settings=afa_settings,
    )


@pytest.fixture
def rental_snapshot(
    property_info, units, contract, initial_rate, march_payment, expenses, loan, income_entry, afa_settings,
) -> RentalSnapshot:
    return RentalSnapshot(
        properties=(property_info,),
        units=tuple(units),
        contracts=(contract,),
        rate_changes=(initial_rate,),
        payments=(march_payment,),
        income_entries=(income_entry,),
        expenses=tuple(expenses),
        loans=(loan,),
        afa_settings={"P1": afa_settings},
    )
