"""Tests for result summaries and scenario comparison."""

from decimal import Decimal

from taxgraph.scenarios.calculator import (
    BASELINE_ID,
    calculate_scenario,
    calculate_taxes,
    compare_scenarios,
)
from taxgraph.scenarios.models import Modification, ModificationType, Scenario
from taxgraph.scenarios.quick import max_401k_scenario


class TestCalculateTaxes:
    def test_single_summary(self, single_info) -> None:
        result = calculate_taxes(single_info, BASELINE_ID, "Current", is_baseline=True)

        assert result.calculated_successfully is True
        assert result.is_baseline is True
        assert result.tax_year == 2025
        assert result.wages_income == Decimal("50000")
        assert result.other_income == Decimal("0")
        assert result.agi == Decimal("50000")
        assert result.standard_deduction == Decimal("15750")
        assert result.itemized_deduction == Decimal("0")
        assert result.deduction_used == Decimal("15750")
        assert result.taxable_income == Decimal("34250")
        assert result.tax_before_credits == Decimal("3871.50")
        assert result.total_tax == Decimal("3871.50")
        assert result.withholdings == Decimal("5000")
        assert result.refund_amount == Decimal("1128.50")
        assert result.amount_owed == Decimal("0")
        assert result.effective_tax_rate == Decimal("7.74")
        assert result.marginal_tax_rate == Decimal("12")
        assert result.filed_forms == ["f1040"]

    def test_family_credits(self, family_info) -> None:
        result = calculate_taxes(family_info, "s1", "Family")
        assert result.total_credits == Decimal("4400")
        assert result.total_tax == Decimal("5743.00")
        assert result.refund_amount == Decimal("8257.00")
        assert result.filed_forms == ["f1040", "f1040s8812"]

    def test_itemized_amount_reported(self, rich_info) -> None:
        result = calculate_taxes(rich_info, "s1", "Rich")
        assert result.itemized_deduction == Decimal("34000")
        assert result.deduction_used == Decimal("34000")
        assert result.estimated_payments == Decimal("1000")

    def test_unsupported_year_fails_softly(self, single_info) -> None:
        info = single_info.model_copy(update={"tax_year": 2019})
        result = calculate_taxes(info, "s1", "Old")
        assert result.calculated_successfully is False
        assert "2019" in result.errors[0]
        assert result.total_tax == Decimal("0")


class TestCalculateScenario:
    def test_401k_lowers_tax(self, single_info) -> None:
        result = calculate_scenario(single_info, max_401k_scenario())
        assert result.wages_income == Decimal("26500")
        assert result.taxable_income == Decimal("10750")
        assert result.total_tax == Decimal("1075.00")

    def test_bad_modification_is_recorded(self, single_info) -> None:
        scenario = Scenario(
            name="Broken",
            modifications=[
                Modification(kind=ModificationType.SET_FIELD, value=1, field_path="w2s.9.income")
            ],
        )
        result = calculate_scenario(single_info, scenario)
        assert result.calculated_successfully is False
        assert result.scenario_id == scenario.id
        assert "w2s.9.income" in result.errors[0]

    def test_year_override(self, single_info) -> None:
        result = calculate_scenario(single_info, Scenario(name="2024", tax_year=2024))
        assert result.tax_year == 2024
        assert result.standard_deduction == Decimal("14600")


class TestCompareScenarios:
    def test_differences_against_baseline(self, single_info) -> None:
        comparison = compare_scenarios(single_info, [max_401k_scenario()])

        assert comparison.baseline.is_baseline is True
        assert len(comparison.scenarios) == 1
        diff = comparison.differences[0]
        assert diff.agi_diff == Decimal("-23500")
        assert diff.total_tax_diff == Decimal("-2796.50")
        assert diff.refund_diff == Decimal("2796.50")
        assert diff.amount_owed_diff == Decimal("0")

    def test_input_order_kept(self, single_info) -> None:
        first = Scenario(name="First")
        second = Scenario(name="Second")
        comparison = compare_scenarios(single_info, [first, second])
        assert [r.scenario_name for r in comparison.scenarios] == ["First", "Second"]
