"""Schedule 1, Additional Income and Adjustments to Income."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import line, sum_fields, sum_optional
from taxgraph.graph.node import FieldValue


class Schedule1(F1040Attachment):
    """Schedule 1 (Form 1040).

    Part I carries Schedule E income to Form 1040 line 8. Part II collects
    the HSA deduction and the deductible half of self-employment tax for
    Form 1040 line 10.
    """

    tag = "f1040s1"
    sequence_index = 1
    FIELD_COUNT = 16
    depends_on = (
        "schedule_e",
        "schedule_se",
        "schedule_se_spouse",
        "f8889",
        "f8889_spouse",
    )

    def is_needed(self) -> bool:
        return self.l10() != 0 or self.l26() != 0

    # Part I - additional income

    @line
    def l1(self) -> Decimal | None:
        return None

    @line
    def l3(self) -> Decimal | None:
        return None

    @line
    def l5(self) -> Decimal | None:
        schedule_e = self.f1040.schedule_e
        if not schedule_e.is_needed():
            return None
        return schedule_e.l41()

    @line
    def l7(self) -> Decimal | None:
        return None

    @line
    def l9(self) -> Decimal | None:
        return None

    @line
    def l10(self) -> Decimal:
        """Additional income, carried to Form 1040 line 8."""
        return sum_fields([self.l1(), self.l3(), self.l5(), self.l7(), self.l9()])

    # Part II - adjustments

    @line
    def l13(self) -> Decimal | None:
        forms = (self.f1040.f8889, self.f1040.f8889_spouse)
        return sum_optional(f.l13() for f in forms if f.is_needed())

    @line
    def l15(self) -> Decimal | None:
        forms = (self.f1040.schedule_se, self.f1040.schedule_se_spouse)
        return sum_optional(f.l13() for f in forms if f.is_needed())

    @line
    def l16(self) -> Decimal | None:
        return None

    @line
    def l20(self) -> Decimal | None:
        # IRA deduction is not collected
        return None

    @line
    def l26(self) -> Decimal:
        """Adjustments to income, carried to Form 1040 line 10."""
        return sum_fields([self.l13(), self.l15(), self.l16(), self.l20()])

    def to_1040_l10(self) -> Decimal:
        return self.l26()

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            self.l1(),
            None,  # 2a alimony received
            self.l3(),
            None,  # 4 other gains
            self.l5(),
            None,  # 6 farm income
            self.l7(),
            self.l9(),
            self.l10(),
            self.l13(),
            self.l15(),
            self.l16(),
            self.l20(),
            self.l26(),
        ]
