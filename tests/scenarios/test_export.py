"""Tests for the comparison workbook."""

from openpyxl import load_workbook

from taxgraph.core.config import settings
from taxgraph.scenarios.calculator import compare_scenarios
from taxgraph.scenarios.export import (
    DIFFERENCE_COLUMNS,
    SUMMARY_ROWS,
    generate_comparison_workbook,
)
from taxgraph.scenarios.models import Modification, ModificationType, Scenario
from taxgraph.scenarios.quick import max_401k_scenario


def _comparison(info):
    broken = Scenario(
        name="Broken",
        modifications=[Modification(kind=ModificationType.SET_FIELD, value=1, field_path="nope")],
    )
    return compare_scenarios(info, [max_401k_scenario(), broken])


class TestComparisonWorkbook:
    def test_summary_sheet(self, single_info, tmp_path) -> None:
        path = generate_comparison_workbook(_comparison(single_info), tmp_path / "out.xlsx")

        sheet = load_workbook(path)["Summary"]
        assert [cell.value for cell in sheet[1]] == [
            "Figure",
            "Current",
            "Max Out 401(k)",
            "Broken",
        ]
        labels = [sheet.cell(row=row, column=1).value for row in range(2, len(SUMMARY_ROWS) + 3)]
        assert labels == [label for label, _, _ in SUMMARY_ROWS] + ["Errors"]
        total_tax_row = 2 + [attr for _, attr, _ in SUMMARY_ROWS].index("total_tax")
        assert sheet.cell(row=total_tax_row, column=2).value == 3871.5
        assert sheet.cell(row=total_tax_row, column=3).value == 1075.0

    def test_errors_row(self, single_info, tmp_path) -> None:
        path = generate_comparison_workbook(_comparison(single_info), tmp_path / "out.xlsx")
        sheet = load_workbook(path)["Summary"]
        errors_row = len(SUMMARY_ROWS) + 2
        assert sheet.cell(row=errors_row, column=3).value is None
        assert "nope" in sheet.cell(row=errors_row, column=4).value

    def test_differences_sheet(self, single_info, tmp_path) -> None:
        path = generate_comparison_workbook(_comparison(single_info), tmp_path / "out.xlsx")
        sheet = load_workbook(path)["Differences"]
        assert sheet.cell(row=1, column=1).value == "Scenario"
        assert sheet.max_column == len(DIFFERENCE_COLUMNS) + 1
        assert sheet.cell(row=2, column=1).value == "Max Out 401(k)"
        assert sheet.cell(row=2, column=4).value == -2796.5

    def test_default_path(self, single_info, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(settings, "output_dir", str(tmp_path / "nested"))
        path = generate_comparison_workbook(_comparison(single_info))
        assert path.parent == tmp_path / "nested"
        assert path.name.startswith("scenario_comparison_")
        assert path.exists()
