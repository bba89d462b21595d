"""Schedule SE, Self-Employment Tax. One instance per person."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import PersonRole
from taxgraph.tax.tax_table import to_cents

if TYPE_CHECKING:
    from taxgraph.forms.f1040 import F1040


class ScheduleSE(F1040Attachment):
    """Schedule SE (Form 1040) for the primary taxpayer or the spouse.

    Net earnings come from partnership K-1 self-employment earnings. Social
    Security wages on the same person's W-2s reduce the room left under the
    wage base.

    Attributes:
        person_role: Whose self-employment tax this form computes.
    """

    tag = "f1040sse"
    sequence_index = 17
    FIELD_COUNT = 20

    def __init__(
        self,
        f1040: F1040,
        copy_index: int = 0,
        person_role: PersonRole = PersonRole.PRIMARY,
    ) -> None:
        super().__init__(f1040, copy_index)
        self.person_role = person_role

    def is_needed(self) -> bool:
        if not self.f1040.person_applies(self.person_role):
            return False
        return self.l4a() >= self.year_config.se_minimum_net_earnings

    @line
    def l2(self) -> Decimal:
        return sum_fields(
            k1.self_employment_earnings
            for k1 in self.info.schedule_k1s
            if k1.person_role == self.person_role
        )

    @line
    def l3(self) -> Decimal:
        return self.l2()

    @line
    def l4a(self) -> Decimal:
        if self.l3() <= 0:
            return self.l3()
        return to_cents(self.l3() * self.year_config.se_net_earnings_factor)

    @line
    def l4c(self) -> Decimal:
        if self.l4a() < self.year_config.se_minimum_net_earnings:
            return ZERO
        return self.l4a()

    @line
    def l6(self) -> Decimal:
        return self.l4c()

    @line
    def l7(self) -> Decimal:
        return self.year_config.ss_wage_base

    @line
    def l8a(self) -> Decimal:
        return sum_fields(w2.ss_wages for w2 in self.f1040.w2s_for(self.person_role))

    @line
    def l8d(self) -> Decimal:
        return self.l8a()

    @line
    def l9(self) -> Decimal:
        return max(ZERO, self.l7() - self.l8d())

    @line
    def l10(self) -> Decimal:
        return to_cents(min(self.l6(), self.l9()) * self.year_config.se_ss_rate)

    @line
    def l11(self) -> Decimal:
        return to_cents(self.l6() * self.year_config.se_medicare_rate)

    @line
    def l12(self) -> Decimal:
        """Self-employment tax, carried to Schedule 2 line 4."""
        return self.l10() + self.l11()

    @line
    def l13(self) -> Decimal:
        """Deduction for half of SE tax, carried to Schedule 1 line 15."""
        return to_cents(self.l12() / 2)

    def fields(self) -> Sequence[FieldValue]:
        person = self.f1040.person(self.person_role)
        return [
            person.full_name() if person else None,
            person.ssid if person else None,
            self.l2(),
            self.l3(),
            self.l4a(),
            None,  # 4b optional method
            self.l4c(),
            None,  # 5a church employee income
            None,  # 5b
            self.l6(),
            self.l7(),
            self.l8a(),
            None,  # 8b unreported tips
            None,  # 8c wages subject to SS on Form 8919
            self.l8d(),
            self.l9(),
            self.l10(),
            self.l11(),
            self.l12(),
            self.l13(),
        ]
