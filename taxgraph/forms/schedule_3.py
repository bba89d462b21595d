"""Schedule 3, Additional Credits and Payments."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields, sum_optional
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import PersonRole


class Schedule3(F1040Attachment):
    """Schedule 3 (Form 1040).

    Part I: foreign tax credit from 1099-DIV and the clean vehicle credit.
    Part II: Social Security tax withheld in excess of the wage base when a
    person had more than one employer.
    """

    tag = "f1040s3"
    sequence_index = 3
    FIELD_COUNT = 10
    depends_on = ("f8936",)

    def is_needed(self) -> bool:
        return self.l8() > 0 or (self.l15() or ZERO) > 0

    # Part I - nonrefundable credits

    @line
    def l1(self) -> Decimal | None:
        """Foreign tax credit, limited to tax after the child tax credit."""
        paid = sum_optional(
            f.foreign_tax_paid for f in self.info.f1099_divs if f.foreign_tax_paid > 0
        )
        if paid is None:
            return None
        limit = max(ZERO, self.f1040.l18() - sum_fields([self.f1040.l19()]))
        return min(paid, limit)

    @line
    def l6f(self) -> Decimal | None:
        f8936 = self.f1040.f8936
        if not f8936.is_needed():
            return None
        return f8936.allowed_credit()

    @line
    def l7(self) -> Decimal | None:
        return sum_optional([self.l6f()])

    @line
    def l8(self) -> Decimal:
        """Nonrefundable credits, carried to Form 1040 line 20."""
        return sum_fields([self.l1(), self.l7()])

    # Part II - other payments and refundable credits

    def _excess_ss_for(self, role: PersonRole) -> Decimal:
        w2s = self.f1040.w2s_for(role)
        if len(w2s) < 2:
            return ZERO
        config = self.year_config
        max_withholding = config.ss_wage_base * config.ss_rate_employee
        withheld = sum_fields(w2.ss_withholding for w2 in w2s)
        return max(ZERO, withheld - max_withholding)

    @line
    def l11(self) -> Decimal | None:
        excess = self._excess_ss_for(PersonRole.PRIMARY)
        if self.f1040.includes_spouse():
            excess += self._excess_ss_for(PersonRole.SPOUSE)
        return excess if excess > 0 else None

    @line
    def l15(self) -> Decimal | None:
        """Other payments, carried to Form 1040 line 31."""
        return sum_optional([self.l11()])

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            self.l1(),
            None,  # 2 child and dependent care credit
            None,  # 3 education credits
            self.l6f(),
            self.l7(),
            self.l8(),
            self.l11(),
            self.l15(),
        ]
