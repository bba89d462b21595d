"""Schedule 2, Additional Taxes."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields, sum_optional
from taxgraph.graph.node import FieldValue


class Schedule2(F1040Attachment):
    """Schedule 2 (Form 1040): self-employment tax and HSA additional tax."""

    tag = "f1040s2"
    sequence_index = 2
    FIELD_COUNT = 10
    depends_on = ("schedule_se", "schedule_se_spouse", "f8889", "f8889_spouse")

    def is_needed(self) -> bool:
        return (self.l3() or ZERO) > 0 or self.l21() > 0

    # Part I - tax

    @line
    def l1z(self) -> Decimal | None:
        return None

    @line
    def l2(self) -> Decimal | None:
        # Alternative minimum tax is not computed
        return None

    @line
    def l3(self) -> Decimal | None:
        """Carried to Form 1040 line 17."""
        return sum_optional([self.l1z(), self.l2()])

    # Part II - other taxes

    @line
    def l4(self) -> Decimal | None:
        forms = (self.f1040.schedule_se, self.f1040.schedule_se_spouse)
        return sum_optional(f.l12() for f in forms if f.is_needed())

    @line
    def l11(self) -> Decimal | None:
        return None

    @line
    def l17c(self) -> Decimal | None:
        forms = (self.f1040.f8889, self.f1040.f8889_spouse)
        amounts = [f.l17b() for f in forms if f.is_needed()]
        return sum_optional(a for a in amounts if a > 0)

    @line
    def l18(self) -> Decimal | None:
        return sum_optional([self.l17c()])

    @line
    def l21(self) -> Decimal:
        """Total other taxes, carried to Form 1040 line 23."""
        return sum_fields([self.l4(), self.l11(), self.l18()])

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            self.l1z(),
            self.l2(),
            self.l3(),
            self.l4(),
            self.l11(),
            self.l17c(),
            self.l18(),
            self.l21(),
        ]
