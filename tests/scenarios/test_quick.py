"""Tests for the ready-made scenarios."""

from datetime import date
from decimal import Decimal

from taxgraph.models.information import FilingStatus, HsaCoverage
from taxgraph.scenarios.calculator import calculate_scenario
from taxgraph.scenarios.models import ModificationType
from taxgraph.scenarios.quick import (
    add_child_scenario,
    max_401k_scenario,
    max_hsa_scenario,
    spouse_works_scenario,
)


class TestMax401k:
    def test_fills_remaining_room(self) -> None:
        scenario = max_401k_scenario(Decimal("5000"), tax_year=2025)
        mod = scenario.modifications[0]
        assert mod.kind == ModificationType.ADD_401K_CONTRIBUTION
        assert mod.value == Decimal("18500")
        assert scenario.description == "Add $18,500 to reach 401(k) max"

    def test_prior_year_limit(self) -> None:
        assert max_401k_scenario(tax_year=2024).modifications[0].value == Decimal("23000")

    def test_already_maxed(self) -> None:
        assert max_401k_scenario(Decimal("30000")).modifications[0].value == Decimal("0")


class TestAddChild:
    def test_child_is_five(self, single_info) -> None:
        scenario = add_child_scenario(tax_year=2025)
        assert scenario.modifications[0].value["date_of_birth"] == date(2020, 1, 1)

        result = calculate_scenario(single_info, scenario)
        assert result.filed_forms == ["f1040", "f1040s8812"]
        assert result.total_credits == Decimal("2200")


class TestMaxHsa:
    def test_self_only(self, single_info) -> None:
        scenario = max_hsa_scenario(tax_year=2025)
        value = scenario.modifications[0].value
        assert value == {"amount": Decimal("4300"), "coverage_type": HsaCoverage.SELF_ONLY}

        result = calculate_scenario(single_info, scenario)
        assert result.agi == Decimal("45700")
        assert result.total_tax == Decimal("3355.50")

    def test_family_less_current(self) -> None:
        scenario = max_hsa_scenario(Decimal("1000"), family_coverage=True, tax_year=2025)
        assert scenario.modifications[0].value["amount"] == Decimal("7550")


class TestSpouseWorks:
    def test_joint_return(self, single_info) -> None:
        scenario = spouse_works_scenario()
        assert [m.kind for m in scenario.modifications] == [
            ModificationType.ADD_SPOUSE,
            ModificationType.CHANGE_FILING_STATUS,
        ]
        assert scenario.modifications[1].value == FilingStatus.MFJ

        result = calculate_scenario(single_info, scenario)
        assert result.wages_income == Decimal("100000")
        assert result.taxable_income == Decimal("68500")
        assert result.total_tax == Decimal("7743.00")
        assert result.withholdings == Decimal("12500")
        assert result.refund_amount == Decimal("4757.00")
