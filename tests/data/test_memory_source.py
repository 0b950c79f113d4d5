"""Tests for the in-memory data source and JSON snapshot loading."""

import json
from datetime import date
from decimal import Decimal

import pytest

from src.data.base import RentalDataSource
from src.data.memory import InMemoryDataSource, load_snapshot
from src.models.afa import BuildingShareType
from src.models.rental import PaymentStatus, RentRegime

SNAPSHOT = {
    "properties": [
        {"id": "P1", "user_id": "U-1", "name": "Haus Am See", "address": "Seestraße 1"},
    ],
    "units": [{"id": "W1", "user_id": "U-1", "property_id": "P1", "unit_number": "1"}],
    "contracts": [
        {
            "id": "C1", "property_id": "P1", "unit_id": "W1", "tenant_id": None,
            "cold_rent": "800.00", "utility_advance": "200.00", "start_date": "2022-01-01",
            "rent_regime": "index",
        },
    ],
    "rate_changes": [
        {"id": "R1", "contract_id": "C1", "effective_date": "2022-01-01",
         "cold_rent": "800", "utility_advance": "200", "reason": "initial"},
    ],
    "payments": [
        {"id": "PAY-1", "contract_id": "C1", "due_date": "2024-03-01", "amount": "1000",
         "status": "partial", "paid_amount": "600",
         "partial_payments": [{"date": "2024-03-05", "amount": "600"}]},
    ],
    "afa_settings": {
        "P1": {"enabled": True, "purchase_date": "2020-07-15", "purchase_price_total": "300000",
               "building_share_type": "percent", "building_share_value": "80"},
    },
}


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return path


@pytest.fixture
def source(rental_snapshot) -> InMemoryDataSource:
    return InMemoryDataSource(rental_snapshot)


class TestLoadSnapshot:
    def test_parses_types(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        contract = snapshot.contracts[0]
        assert contract.cold_rent == Decimal("800.00")
        assert contract.start_date == date(2022, 1, 1)
        assert contract.rent_regime == RentRegime.INDEX
        payment = snapshot.payments[0]
        assert payment.status == PaymentStatus.PARTIAL
        assert payment.partial_payments[0].date == date(2024, 3, 5)
        afa = snapshot.afa_settings["P1"]
        assert afa.building_share_type == BuildingShareType.PERCENT
        assert afa.afa_rate == Decimal("0.02")
        assert snapshot.expenses == ()

    def test_from_json(self, snapshot_file):
        source = InMemoryDataSource.from_json(snapshot_file)
        assert isinstance(source, RentalDataSource)
        assert source.snapshot.properties[0].name == "Haus Am See"


class TestInMemoryDataSource:
    async def test_ownership_enforced(self, source):
        assert (await source.get_property("U-1", "P1")).name == "Haus Am See"
        assert await source.get_property("intruder", "P1") is None
        assert await source.list_contracts("intruder", "P1") == []
        assert await source.get_contract("intruder", "C1") is None
        assert await source.get_afa_settings("intruder", "P1") is None

    async def test_units(self, source):
        units = await source.list_units("U-1", "P1")
        assert [u.id for u in units] == ["W1", "W2"]
        assert (await source.get_unit("U-1", "W2")).unit_number == "2"

    async def test_year_filters(self, source):
        assert len(await source.list_payments("U-1", ["C1"], 2024)) == 1
        assert await source.list_payments("U-1", ["C1"], 2023) == []
        assert len(await source.list_expenses("U-1", "P1", 2024)) == 3
        assert await source.list_income_entries("U-1", "P1", 2023) == []

    async def test_rate_changes_by_contract(self, source):
        assert [e.id for e in await source.list_rate_changes(["C1"])] == ["R1"]
        assert await source.list_rate_changes(["C2"]) == []
