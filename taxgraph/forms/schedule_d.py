"""Schedule D, Capital Gains and Losses."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue


class ScheduleD(F1040Attachment):
    """Schedule D (Form 1040).

    Short- and long-term totals come from every Form 8949 page. Capital gain
    distributions from 1099-DIVs flow to line 13.
    """

    tag = "f1040sd"
    sequence_index = 12
    FIELD_COUNT = 23
    depends_on = ("f8949",)

    def is_needed(self) -> bool:
        return len(self.info.capital_transactions) > 0 or self.l13() > 0

    # Part I - short term

    @line
    def l1b_proceeds(self) -> Decimal:
        return sum_fields(p.short_term_proceeds() for p in self.f1040.f8949.pages())

    @line
    def l1b_cost(self) -> Decimal:
        return sum_fields(p.short_term_cost() for p in self.f1040.f8949.pages())

    @line
    def l1b_adjustment(self) -> Decimal:
        return sum_fields(p.short_term_adjustment() for p in self.f1040.f8949.pages())

    @line
    def l1b_gain(self) -> Decimal:
        return sum_fields(p.short_term_gain() for p in self.f1040.f8949.pages())

    @line
    def l7(self) -> Decimal:
        """Net short-term capital gain or (loss)."""
        return self.l1b_gain()

    # Part II - long term

    @line
    def l8b_proceeds(self) -> Decimal:
        return sum_fields(p.long_term_proceeds() for p in self.f1040.f8949.pages())

    @line
    def l8b_cost(self) -> Decimal:
        return sum_fields(p.long_term_cost() for p in self.f1040.f8949.pages())

    @line
    def l8b_adjustment(self) -> Decimal:
        return sum_fields(p.long_term_adjustment() for p in self.f1040.f8949.pages())

    @line
    def l8b_gain(self) -> Decimal:
        return sum_fields(p.long_term_gain() for p in self.f1040.f8949.pages())

    @line
    def l13(self) -> Decimal:
        return sum_fields(
            f.total_capital_gains_distributions for f in self.info.f1099_divs
        )

    @line
    def l15(self) -> Decimal:
        """Net long-term capital gain or (loss)."""
        return sum_fields([self.l8b_gain(), self.l13()])

    # Part III - summary

    @line
    def l16(self) -> Decimal:
        return self.l7() + self.l15()

    @line
    def l17(self) -> bool:
        return self.l15() > 0 and self.l16() > 0

    @line
    def l18(self) -> Decimal | None:
        return None

    @line
    def l19(self) -> Decimal | None:
        return None

    @line
    def l20(self) -> bool | None:
        if not self.l17():
            return None
        return (self.l18() or ZERO) == 0 and (self.l19() or ZERO) == 0

    @line
    def l21(self) -> Decimal | None:
        """Deductible loss, entered as a negative amount."""
        if self.l16() >= 0:
            return None
        cap = self.year_config.capital_loss_cap(self.info.filing_status)
        return -min(-self.l16(), cap)

    @line
    def l22(self) -> bool | None:
        if self.l16() > 0:
            return None
        return (self.f1040.l3a() or ZERO) > 0

    def to_1040(self) -> Decimal | None:
        """Amount for Form 1040 line 7; ``None`` when Schedule D is not filed."""
        if not self.is_needed():
            return None
        if self.l16() > 0:
            return self.l16()
        if self.l16() < 0:
            return self.l21()
        return ZERO

    def compute_tax_on_qd_worksheet(self) -> bool:
        """Whether line 16 tax uses the qualified dividends worksheet."""
        return self.is_needed() and bool(self.l20())

    def _yes_no(self, answer: bool | None) -> list[FieldValue]:
        if answer is None:
            return [False, False]
        return [answer, not answer]

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            self.l1b_proceeds(),
            self.l1b_cost(),
            self.l1b_adjustment(),
            self.l1b_gain(),
            self.l7(),
            self.l8b_proceeds(),
            self.l8b_cost(),
            self.l8b_adjustment(),
            self.l8b_gain(),
            self.l13(),
            self.l15(),
            self.l16(),
            *self._yes_no(self.l17()),
            self.l18(),
            self.l19(),
            *self._yes_no(self.l20()),
            self.l21(),
            *self._yes_no(self.l22()),
        ]
