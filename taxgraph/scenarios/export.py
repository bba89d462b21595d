"""Excel export of a scenario comparison.

Writes a workbook with two sheets:
- Summary: one row per figure, one column per scenario (baseline first)
- Differences: one row per scenario, change from baseline per figure
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

import structlog
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from taxgraph.core.config import settings
from taxgraph.scenarios.models import ScenarioComparison

logger = structlog.get_logger()

CURRENCY_FORMAT = '"$"#,##0.00'
PERCENT_FORMAT = '0.00"%"'
HEADER_FILL = PatternFill(start_color="DAEEF3", end_color="DAEEF3", fill_type="solid")

SUMMARY_ROWS: list[tuple[str, str, str]] = [
    ("Total Income", "total_income", CURRENCY_FORMAT),
    ("Wages", "wages_income", CURRENCY_FORMAT),
    ("Other Income", "other_income", CURRENCY_FORMAT),
    ("Adjusted Gross Income", "agi", CURRENCY_FORMAT),
    ("Standard Deduction", "standard_deduction", CURRENCY_FORMAT),
    ("Itemized Deductions", "itemized_deduction", CURRENCY_FORMAT),
    ("Deduction Used", "deduction_used", CURRENCY_FORMAT),
    ("Taxable Income", "taxable_income", CURRENCY_FORMAT),
    ("Tax Before Credits", "tax_before_credits", CURRENCY_FORMAT),
    ("Total Credits", "total_credits", CURRENCY_FORMAT),
    ("Total Tax", "total_tax", CURRENCY_FORMAT),
    ("Withholdings", "withholdings", CURRENCY_FORMAT),
    ("Estimated Payments", "estimated_payments", CURRENCY_FORMAT),
    ("Total Payments", "total_payments", CURRENCY_FORMAT),
    ("Refund", "refund_amount", CURRENCY_FORMAT),
    ("Amount Owed", "amount_owed", CURRENCY_FORMAT),
    ("Effective Tax Rate", "effective_tax_rate", PERCENT_FORMAT),
    ("Marginal Tax Rate", "marginal_tax_rate", PERCENT_FORMAT),
]

DIFFERENCE_COLUMNS: list[tuple[str, str, str]] = [
    ("AGI", "agi_diff", CURRENCY_FORMAT),
    ("Taxable Income", "taxable_income_diff", CURRENCY_FORMAT),
    ("Total Tax", "total_tax_diff", CURRENCY_FORMAT),
    ("Refund", "refund_diff", CURRENCY_FORMAT),
    ("Amount Owed", "amount_owed_diff", CURRENCY_FORMAT),
    ("Effective Rate", "effective_rate_diff", PERCENT_FORMAT),
]


def _format_decimal(value: Decimal | None) -> float | None:
    """Convert Decimal to float for Excel."""
    if value is None:
        return None
    return float(value)


def _header(cell) -> None:
    cell.font = Font(bold=True)
    cell.fill = HEADER_FILL
    cell.alignment = Alignment(horizontal="center", wrap_text=True)


def _add_summary_sheet(workbook: Workbook, comparison: ScenarioComparison) -> None:
    """Add Summary sheet: figures down, scenarios across."""
    ws = workbook.active
    ws.title = "Summary"

    results = [comparison.baseline, *comparison.scenarios]
    ws.cell(row=1, column=1, value="Figure")
    _header(ws.cell(row=1, column=1))
    for col, result in enumerate(results, start=2):
        cell = ws.cell(row=1, column=col, value=result.scenario_name)
        _header(cell)

    for row, (label, attr, number_format) in enumerate(SUMMARY_ROWS, start=2):
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        for col, result in enumerate(results, start=2):
            cell = ws.cell(row=row, column=col, value=_format_decimal(getattr(result, attr)))
            cell.number_format = number_format

    errors_row = len(SUMMARY_ROWS) + 2
    ws.cell(row=errors_row, column=1, value="Errors").font = Font(bold=True)
    for col, result in enumerate(results, start=2):
        ws.cell(row=errors_row, column=col, value="; ".join(result.errors) or None)

    ws.column_dimensions["A"].width = 24
    for col in range(2, len(results) + 2):
        ws.column_dimensions[get_column_letter(col)].width = 18
    ws.freeze_panes = "B2"


def _add_differences_sheet(workbook: Workbook, comparison: ScenarioComparison) -> None:
    """Add Differences sheet: one row per scenario, change from baseline."""
    ws = workbook.create_sheet("Differences")

    headers = ["Scenario", *(label for label, _, _ in DIFFERENCE_COLUMNS)]
    for col, header in enumerate(headers, start=1):
        _header(ws.cell(row=1, column=col, value=header))

    for row, diff in enumerate(comparison.differences, start=2):
        ws.cell(row=row, column=1, value=diff.scenario_name)
        for col, (_, attr, number_format) in enumerate(DIFFERENCE_COLUMNS, start=2):
            cell = ws.cell(row=row, column=col, value=_format_decimal(getattr(diff, attr)))
            cell.number_format = number_format

    ws.column_dimensions["A"].width = 24
    for col in range(2, len(headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 16
    ws.freeze_panes = "A2"


def generate_comparison_workbook(
    comparison: ScenarioComparison, output_path: Path | None = None
) -> Path:
    """Generate an Excel workbook comparing scenarios with the baseline.

    Args:
        comparison: Baseline, scenario results and differences.
        output_path: Where to save the xlsx file. Defaults to a timestamped
            file under ``settings.output_dir``.

    Returns:
        Path to generated file.

    Example:
        >>> path = generate_comparison_workbook(engine.compare_selected())
    """
    if output_path is None:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path(settings.output_dir) / f"scenario_comparison_{stamp}.xlsx"

    workbook = Workbook()
    _add_summary_sheet(workbook, comparison)
    _add_differences_sheet(workbook, comparison)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output_path)

    logger.info(
        "comparison_workbook_generated",
        path=str(output_path),
        scenario_count=len(comparison.scenarios),
    )
    return output_path
