"""Tests for synthesized Schuldzinsen lines."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from src.engine.classifier import SCHULDZINSEN
from src.engine.loan_interest import LOAN_INTEREST_CATEGORY, synthesize_loan_interest


class TestLoanInterest:
    def test_full_year(self, loan, property_scope):
        lines = synthesize_loan_interest([loan], 2024, property_scope)
        assert len(lines) == 12
        assert all(line.amount == Decimal("400.00") for line in lines)
        first = lines[0]
        assert first.id == "loan_L1_2024-01"
        assert first.date == date(2024, 1, 1)
        assert first.category == LOAN_INTEREST_CATEGORY
        assert first.anlage_v_group == SCHULDZINSEN
        assert first.vendor == "Sparkasse"
        assert first.note == "Zinsanteil 3.50% p.a."
        assert first.synthesized is True
        assert first.requires_receipt is False
        assert first.document_id is None

    def test_loan_starting_mid_year(self, loan, property_scope):
        lines = synthesize_loan_interest([replace(loan, start_date=date(2024, 4, 15))], 2024, property_scope)
        assert len(lines) == 9
        assert lines[0].date == date(2024, 4, 1)

    def test_loan_ending_mid_year(self, loan, property_scope):
        lines = synthesize_loan_interest([replace(loan, end_date=date(2024, 6, 30))], 2024, property_scope)
        assert len(lines) == 6

    def test_no_interest_part(self, loan, property_scope):
        paid_off = replace(loan, monthly_principal=Decimal("1000"))
        assert synthesize_loan_interest([paid_off], 2024, property_scope) == []

    def test_unit_scope(self, loan, unit_scope):
        other_unit = replace(loan, id="L2", unit_id="W2")
        own_unit = replace(loan, id="L3", unit_id="W1")
        lines = synthesize_loan_interest([loan, other_unit, own_unit], 2024, unit_scope)
        assert {line.id.split("_")[1] for line in lines} == {"L1", "L3"}
