"""Summarize a computed return into a TaxCalculationResult.

This module is the seam between the form graph and the scenario engine:
- calculate_taxes: build the return for one snapshot and read its totals
- compare_scenarios: baseline plus each scenario, with differences
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

import structlog

from taxgraph.core.exceptions import InvalidModificationError
from taxgraph.forms import create_f1040
from taxgraph.graph.sequencing import assemble_filing_set
from taxgraph.models.information import ValidatedInformation
from taxgraph.scenarios.models import (
    Scenario,
    ScenarioComparison,
    ScenarioDifference,
    TaxCalculationResult,
)
from taxgraph.scenarios.modifications import apply_modifications
from taxgraph.tax.tax_table import marginal_rate
from taxgraph.tax.year_config import get_tax_year_config

logger = structlog.get_logger()

BASELINE_ID = "baseline"
BASELINE_NAME = "Current"
RATE_PLACES = Decimal("0.01")


def _effective_rate(total_tax: Decimal, agi: Decimal) -> Decimal:
    if agi <= 0:
        return Decimal("0")
    return (total_tax / agi * 100).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def failed_result(
    scenario_id: str,
    scenario_name: str,
    error: str,
    *,
    is_baseline: bool = False,
    tax_year: int | None = None,
) -> TaxCalculationResult:
    """Result recorded when a snapshot cannot be computed."""
    return TaxCalculationResult(
        scenario_id=scenario_id,
        scenario_name=scenario_name,
        is_baseline=is_baseline,
        tax_year=tax_year,
        errors=[error],
        calculated_successfully=False,
    )


def calculate_taxes(
    info: ValidatedInformation,
    scenario_id: str,
    scenario_name: str,
    is_baseline: bool = False,
) -> TaxCalculationResult:
    """Build the return for ``info`` and summarize its totals.

    Args:
        info: Snapshot to compute.
        scenario_id: Id recorded on the result.
        scenario_name: Name recorded on the result.
        is_baseline: Whether this is the unmodified base snapshot.

    Returns:
        The summary. An unsupported tax year yields a failed result rather
        than an exception.

    Raises:
        ConstructionError: If the form graph is wired incorrectly.
    """
    try:
        config = get_tax_year_config(info.tax_year)
    except ValueError as exc:
        logger.warning(
            "tax_calculation_failed",
            scenario_id=scenario_id,
            tax_year=info.tax_year,
            error=str(exc),
        )
        return failed_result(
            scenario_id,
            scenario_name,
            str(exc),
            is_baseline=is_baseline,
            tax_year=info.tax_year,
        )

    f1040 = create_f1040(info)
    filing_set = assemble_filing_set(f1040)

    wages = f1040.l1z()
    total_income = f1040.l9()
    agi = f1040.l11()
    taxable_income = f1040.l15()
    total_tax = f1040.l24()

    itemized = Decimal("0")
    if info.itemized_deductions is not None:
        itemized = f1040.schedule_a.deductions()

    result = TaxCalculationResult(
        scenario_id=scenario_id,
        scenario_name=scenario_name,
        is_baseline=is_baseline,
        tax_year=info.tax_year,
        total_income=total_income,
        wages_income=wages,
        other_income=total_income - wages,
        agi=agi,
        standard_deduction=f1040.standard_deduction(),
        itemized_deduction=itemized,
        deduction_used=f1040.l12(),
        taxable_income=taxable_income,
        tax_before_credits=f1040.l16(),
        total_credits=f1040.l21(),
        total_tax=total_tax,
        withholdings=f1040.l25d(),
        estimated_payments=f1040.l26(),
        total_payments=f1040.l33(),
        refund_amount=f1040.l35a(),
        amount_owed=f1040.l37(),
        effective_tax_rate=_effective_rate(total_tax, agi),
        marginal_tax_rate=marginal_rate(config, info.filing_status, taxable_income),
        filed_forms=filing_set.tags(),
    )

    logger.info(
        "tax_calculated",
        scenario_id=scenario_id,
        agi=agi,
        total_tax=total_tax,
        refund=result.refund_amount,
        owed=result.amount_owed,
        form_count=len(filing_set),
    )
    return result


def calculate_scenario(
    base: ValidatedInformation, scenario: Scenario
) -> TaxCalculationResult:
    """Derive the scenario's snapshot from ``base`` and compute it.

    A modification that cannot be applied is recorded on a failed result.
    """
    try:
        info = apply_modifications(base, scenario.modifications, tax_year=scenario.tax_year)
    except InvalidModificationError as exc:
        logger.warning(
            "scenario_modification_invalid",
            scenario_id=scenario.id,
            modification_id=exc.modification_id,
            error=exc.message,
        )
        return failed_result(
            scenario.id,
            scenario.name,
            exc.message,
            tax_year=scenario.tax_year or base.tax_year,
        )
    return calculate_taxes(info, scenario.id, scenario.name)


def difference(
    baseline: TaxCalculationResult, result: TaxCalculationResult
) -> ScenarioDifference:
    """Scenario minus baseline for the headline figures."""
    return ScenarioDifference(
        scenario_id=result.scenario_id,
        scenario_name=result.scenario_name,
        agi_diff=result.agi - baseline.agi,
        taxable_income_diff=result.taxable_income - baseline.taxable_income,
        total_tax_diff=result.total_tax - baseline.total_tax,
        refund_diff=result.refund_amount - baseline.refund_amount,
        amount_owed_diff=result.amount_owed - baseline.amount_owed,
        effective_rate_diff=result.effective_tax_rate - baseline.effective_tax_rate,
    )


def build_comparison(
    baseline: TaxCalculationResult, results: Sequence[TaxCalculationResult]
) -> ScenarioComparison:
    return ScenarioComparison(
        baseline=baseline,
        scenarios=list(results),
        differences=[difference(baseline, result) for result in results],
    )


def compare_scenarios(
    base: ValidatedInformation, scenarios: Sequence[Scenario]
) -> ScenarioComparison:
    """Compute the baseline and every scenario, then compare them.

    Args:
        base: Unmodified snapshot.
        scenarios: Scenarios to compute against ``base``.

    Returns:
        Baseline result, one result per scenario in input order, and the
        per-scenario differences from baseline.
    """
    baseline = calculate_taxes(base, BASELINE_ID, BASELINE_NAME, is_baseline=True)
    results = [calculate_scenario(base, scenario) for scenario in scenarios]
    return build_comparison(baseline, results)
