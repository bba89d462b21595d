"""Qualified Dividends and Capital Gain Tax Worksheet (Form 1040 line 16).

The worksheet is part of the graph but is never filed: it is not in the
root's catalog, so the assembly step never sees it.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.tax.tax_table import compute_ordinary_tax, to_cents

RATE_15 = Decimal("0.15")
RATE_20 = Decimal("0.20")


class QualifiedDividendsWorksheet(F1040Attachment):
    tag = "f1040qdcgtw"
    sequence_index = 0
    FIELD_COUNT = 25
    depends_on = ("schedule_d",)

    def is_needed(self) -> bool:
        return False

    def _ordinary_tax(self, amount: Decimal) -> Decimal:
        return compute_ordinary_tax(self.year_config, self.info.filing_status, amount)

    @line
    def l1(self) -> Decimal:
        return self.f1040.l15()

    @line
    def l2(self) -> Decimal:
        return self.f1040.l3a() or ZERO

    @line
    def l3(self) -> Decimal:
        schedule_d = self.f1040.schedule_d
        if schedule_d.is_needed():
            return max(ZERO, min(schedule_d.l15(), schedule_d.l16()))
        return max(ZERO, self.f1040.l7() or ZERO)

    @line
    def l4(self) -> Decimal:
        return self.l2() + self.l3()

    @line
    def l5(self) -> Decimal:
        return max(ZERO, self.l1() - self.l4())

    @line
    def l6(self) -> Decimal:
        return self.year_config.ltcg_0_thresholds[self.info.filing_status]

    @line
    def l7(self) -> Decimal:
        return min(self.l1(), self.l6())

    @line
    def l8(self) -> Decimal:
        return min(self.l5(), self.l7())

    @line
    def l9(self) -> Decimal:
        """Amount taxed at 0%."""
        return self.l7() - self.l8()

    @line
    def l10(self) -> Decimal:
        return min(self.l1(), self.l4())

    @line
    def l11(self) -> Decimal:
        return self.l9()

    @line
    def l12(self) -> Decimal:
        return self.l10() - self.l11()

    @line
    def l13(self) -> Decimal:
        return self.year_config.ltcg_15_thresholds[self.info.filing_status]

    @line
    def l14(self) -> Decimal:
        return min(self.l1(), self.l13())

    @line
    def l15(self) -> Decimal:
        return self.l5() + self.l9()

    @line
    def l16(self) -> Decimal:
        return max(ZERO, self.l14() - self.l15())

    @line
    def l17(self) -> Decimal:
        """Amount taxed at 15%."""
        return min(self.l12(), self.l16())

    @line
    def l18(self) -> Decimal:
        return to_cents(self.l17() * RATE_15)

    @line
    def l19(self) -> Decimal:
        return self.l9() + self.l17()

    @line
    def l20(self) -> Decimal:
        """Amount taxed at 20%."""
        return self.l10() - self.l19()

    @line
    def l21(self) -> Decimal:
        return to_cents(self.l20() * RATE_20)

    @line
    def l22(self) -> Decimal:
        return self._ordinary_tax(self.l5())

    @line
    def l23(self) -> Decimal:
        return sum_fields([self.l18(), self.l21(), self.l22()])

    @line
    def l24(self) -> Decimal:
        return self._ordinary_tax(self.l1())

    @line
    def l25(self) -> Decimal:
        return min(self.l23(), self.l24())

    def tax(self) -> Decimal:
        """Tax on all taxable income, carried to Form 1040 line 16."""
        return self.l25()

    def fields(self) -> Sequence[FieldValue]:
        return [getattr(self, f"l{number}")() for number in range(1, 26)]
