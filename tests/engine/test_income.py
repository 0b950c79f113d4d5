"""Tests for the income ledger: payments, backfill and manual entries."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from src.engine.income import (
    OTHER_INCOME,
    RENT,
    UTILITY_ADVANCE,
    backfill_lines,
    normalize_income,
    payment_lines,
    split_amount,
)
from src.models.rental import (
    PartialPayment,
    PaymentRecord,
    PaymentStatus,
    RateChangeEvent,
    RateChangeReason,
)

YEAR_END = date(2024, 12, 31)


def _months(lines):
    return sorted({line.date.month for line in lines})


class TestSplitAmount:
    def test_proportional(self):
        assert split_amount(Decimal("1000"), Decimal("800"), Decimal("200")) == (Decimal("800.00"), Decimal("200.00"))

    def test_independent_rounding_may_drift(self):
        """Each half rounds up on its own: parts sum to one cent more."""
        rent, utilities = split_amount(Decimal("1000.01"), Decimal("500"), Decimal("500"))
        assert rent == Decimal("500.01")
        assert utilities == Decimal("500.01")
        assert rent + utilities == Decimal("1000.02")

    def test_degenerate_composition(self):
        assert split_amount(Decimal("500"), Decimal("500"), Decimal("0")) is None
        assert split_amount(Decimal("500"), Decimal("0"), Decimal("0")) is None


class TestPaymentLines:
    def test_paid_payment_split(self, contract, initial_rate, march_payment):
        """1000 paid for March on an 800/200 lease → 800 Miete + 200 NK."""
        lines = payment_lines(march_payment, contract, [initial_rate], 2024)
        assert [(line.source_type, line.amount) for line in lines] == [
            (RENT, Decimal("800.00")),
            (UTILITY_ADVANCE, Decimal("200.00")),
        ]
        assert all(line.date == date(2024, 3, 3) for line in lines)
        assert all(line.payment_id == "PAY-03" and not line.synthesized for line in lines)
        assert lines[0].id == "PAY-03_rent"
        assert lines[0].tenant_name == "Erika Mustermann"
        assert lines[0].contract_info == "Einheit 1"

    def test_partial_uses_paid_amount(self, contract, initial_rate, march_payment):
        partial = replace(march_payment, status=PaymentStatus.PARTIAL, paid_amount=Decimal("500"))
        lines = payment_lines(partial, contract, [initial_rate], 2024)
        assert [line.amount for line in lines] == [Decimal("400.00"), Decimal("100.00")]

    def test_unpaid_gives_nothing(self, contract, initial_rate, march_payment):
        unpaid = replace(march_payment, status=PaymentStatus.UNPAID, paid_date=None)
        assert payment_lines(unpaid, contract, [initial_rate], 2024) == []

    def test_unpaid_with_installments_gives_nothing(self, contract, initial_rate, march_payment):
        unpaid = replace(
            march_payment,
            status=PaymentStatus.UNPAID,
            paid_date=None,
            partial_payments=(PartialPayment(date=date(2024, 3, 5), amount=Decimal("300")),),
        )
        assert payment_lines(unpaid, contract, [initial_rate], 2024) == []

    def test_installments_dated_individually(self, contract, initial_rate, march_payment):
        installments = replace(
            march_payment,
            status=PaymentStatus.PARTIAL,
            partial_payments=(
                PartialPayment(date=date(2024, 3, 5), amount=Decimal("300")),
                PartialPayment(date=date(2024, 4, 2), amount=Decimal("700")),
            ),
        )
        lines = payment_lines(installments, contract, [initial_rate], 2024)
        assert len(lines) == 4
        assert lines[0].id == "PAY-03_partial_2024-03-05_rent"
        assert sum(line.amount for line in lines) == Decimal("1000.00")

    def test_installments_outside_year_skipped(self, contract, initial_rate, march_payment):
        installments = replace(
            march_payment,
            due_date=date(2023, 12, 1),
            partial_payments=(
                PartialPayment(date=date(2023, 12, 20), amount=Decimal("500")),
                PartialPayment(date=date(2024, 1, 10), amount=Decimal("500")),
            ),
        )
        lines = payment_lines(installments, contract, [initial_rate], 2024)
        assert {line.date for line in lines} == {date(2024, 1, 10)}

    def test_single_line_without_utility_advance(self, contract, march_payment):
        cold_only = replace(contract, utility_advance=Decimal("0"))
        lines = payment_lines(march_payment, cold_only, [], 2024)
        assert len(lines) == 1
        assert lines[0].id == "PAY-03"
        assert lines[0].source_type == RENT
        assert lines[0].amount == Decimal("1000.00")

    def test_split_uses_rate_at_due_date(self, contract, initial_rate, march_payment):
        raised = RateChangeEvent(
            id="R2", contract_id="C1", effective_date=date(2024, 3, 1),
            cold_rent=Decimal("900"), utility_advance=Decimal("100"), reason=RateChangeReason.INCREASE,
        )
        lines = payment_lines(march_payment, contract, [initial_rate, raised], 2024)
        assert [line.amount for line in lines] == [Decimal("900.00"), Decimal("100.00")]


class TestBackfill:
    def test_uncovered_month_synthesized(self, contract, initial_rate):
        lines = backfill_lines(contract, [initial_rate], 2024, covered={("C1", 2024, 3)}, as_of=YEAR_END)
        assert _months(lines) == [1, 2, 4, 5, 6, 7, 8, 9, 10, 11, 12]
        april = [line for line in lines if line.date == date(2024, 4, 1)]
        assert [(line.source_type, line.amount) for line in april] == [
            (RENT, Decimal("800.00")),
            (UTILITY_ADVANCE, Decimal("200.00")),
        ]
        assert all(line.synthesized and line.payment_id is None for line in april)
        assert april[0].id == "backfill_C1_2024-04_rent"

    def test_rate_in_effect_each_month(self, contract, initial_rate):
        raised = RateChangeEvent(
            id="R2", contract_id="C1", effective_date=date(2024, 7, 1),
            cold_rent=Decimal("850"), utility_advance=Decimal("200"), reason=RateChangeReason.INCREASE,
        )
        lines = backfill_lines(contract, [initial_rate, raised], 2024, covered=set(), as_of=YEAR_END)
        rent = {line.date.month: line.amount for line in lines if line.source_type == RENT}
        assert rent[6] == Decimal("800.00")
        assert rent[7] == Decimal("850.00")

    def test_as_of_stops_backfill(self, contract, initial_rate):
        lines = backfill_lines(contract, [initial_rate], 2024, covered=set(), as_of=date(2024, 6, 15))
        assert _months(lines) == [1, 2, 3, 4, 5, 6]

    def test_contract_window(self, contract, initial_rate):
        short = replace(contract, start_date=date(2024, 3, 15), end_date=date(2024, 5, 10))
        lines = backfill_lines(short, [], 2024, covered=set(), as_of=YEAR_END)
        assert _months(lines) == [3, 4, 5]

    def test_no_rent_data_skipped(self, contract):
        empty = replace(contract, cold_rent=Decimal("0"), utility_advance=Decimal("0"))
        assert backfill_lines(empty, [], 2024, covered=set(), as_of=YEAR_END) == []


class TestNormalizeIncome:
    def test_no_double_counting(self, contract, initial_rate, march_payment, unit_scope):
        ledger = normalize_income([contract], [initial_rate], [march_payment], [], 2024, unit_scope, YEAR_END)
        march = [line for line in ledger.lines if line.date.month == 3]
        assert all(not line.synthesized for line in march)
        assert ledger.covered == frozenset({("C1", 2024, 3)})
        assert len(ledger.backfilled) == 11
        assert not ledger.covered & ledger.backfilled
        assert sum(line.amount for line in ledger.lines) == Decimal("12000.00")

    def test_unpaid_record_still_covers_month(self, contract, initial_rate, march_payment, unit_scope):
        unpaid = replace(march_payment, status=PaymentStatus.UNPAID, paid_date=None)
        ledger = normalize_income([contract], [initial_rate], [unpaid], [], 2024, unit_scope, YEAR_END)
        assert ("C1", 2024, 3) not in ledger.backfilled
        assert sum(line.amount for line in ledger.lines) == Decimal("11000.00")

    def test_lines_sorted_by_date(self, contract, initial_rate, march_payment, unit_scope):
        ledger = normalize_income([contract], [initial_rate], [march_payment], [], 2024, unit_scope, YEAR_END)
        keys = [(line.date, line.id) for line in ledger.lines]
        assert keys == sorted(keys)

    def test_out_of_scope_contract_ignored(self, contract, march_payment, unit_scope):
        other = replace(contract, id="C2", unit_id="W2")
        other_payment = replace(march_payment, id="PAY-X", contract_id="C2")
        ledger = normalize_income([other], [], [other_payment], [], 2024, unit_scope, YEAR_END)
        assert ledger.lines == ()

    def test_manual_entries(self, income_entry, property_scope, unit_scope):
        unnamed = replace(income_entry, id="I2", description="")
        pending = replace(income_entry, id="I3", status="open")
        ledger = normalize_income([], [], [], [income_entry, unnamed, pending], 2024, property_scope, YEAR_END)
        assert [(line.id, line.source_type) for line in ledger.lines] == [
            ("I1", "Stellplatzmiete"),
            ("I2", OTHER_INCOME),
        ]
        # Property-level entries do not belong to a single unit
        unit_ledger = normalize_income([], [], [], [income_entry], 2024, unit_scope, YEAR_END)
        assert unit_ledger.lines == ()
