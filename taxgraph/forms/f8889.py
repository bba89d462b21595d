"""Form 8889, Health Savings Accounts. One instance per person."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import HealthSavingsAccount, HsaCoverage, PersonRole
from taxgraph.tax.tax_table import to_cents

if TYPE_CHECKING:
    from taxgraph.forms.f1040 import F1040


class F8889(F1040Attachment):
    """Form 8889 for the primary taxpayer or the spouse.

    Employer contributions are read from W-2 box 12 code W.
    """

    tag = "f8889"
    sequence_index = 52
    FIELD_COUNT = 23

    def __init__(
        self,
        f1040: F1040,
        copy_index: int = 0,
        person_role: PersonRole = PersonRole.PRIMARY,
    ) -> None:
        super().__init__(f1040, copy_index)
        self.person_role = person_role

    def accounts(self) -> list[HealthSavingsAccount]:
        return [
            hsa
            for hsa in self.info.health_savings_accounts
            if hsa.person_role == self.person_role
        ]

    def coverage(self) -> HsaCoverage:
        """Family coverage if any account had it during the year."""
        if any(hsa.coverage_type == HsaCoverage.FAMILY for hsa in self.accounts()):
            return HsaCoverage.FAMILY
        return HsaCoverage.SELF_ONLY

    def is_needed(self) -> bool:
        if not self.f1040.person_applies(self.person_role):
            return False
        return len(self.accounts()) > 0 or self.l9() > 0

    # Part I - contributions and deduction

    @line
    def l2(self) -> Decimal:
        return sum_fields(hsa.contributions for hsa in self.accounts())

    @line
    def l3(self) -> Decimal:
        return self.year_config.hsa_limit(self.coverage())

    @line
    def l4(self) -> Decimal | None:
        # Archer MSA contributions are not collected
        return None

    @line
    def l5(self) -> Decimal:
        return max(ZERO, self.l3() - sum_fields([self.l4()]))

    @line
    def l6(self) -> Decimal:
        return self.l5()

    @line
    def l7(self) -> Decimal:
        """Additional contribution for account holders 55 and older."""
        person = self.f1040.person(self.person_role)
        if person is None:
            return ZERO
        if person.age_at_end_of(self.info.tax_year) >= self.year_config.hsa_catch_up_age:
            return self.year_config.hsa_catch_up
        return ZERO

    @line
    def l8(self) -> Decimal:
        return self.l6() + self.l7()

    @line
    def l9(self) -> Decimal:
        return sum_fields(
            w2.box12_amount("W") for w2 in self.f1040.w2s_for(self.person_role)
        )

    @line
    def l10(self) -> Decimal | None:
        return None

    @line
    def l11(self) -> Decimal:
        return sum_fields([self.l9(), self.l10()])

    @line
    def l12(self) -> Decimal:
        return max(ZERO, self.l8() - self.l11())

    @line
    def l13(self) -> Decimal:
        """HSA deduction, carried to Schedule 1 line 13."""
        return min(self.l2(), self.l12())

    # Part II - distributions

    @line
    def l14a(self) -> Decimal:
        return sum_fields(hsa.total_distributions for hsa in self.accounts())

    @line
    def l14b(self) -> Decimal | None:
        return None

    @line
    def l14c(self) -> Decimal:
        return self.l14a() - sum_fields([self.l14b()])

    @line
    def l15(self) -> Decimal:
        return sum_fields(hsa.qualified_distributions for hsa in self.accounts())

    @line
    def l16(self) -> Decimal:
        """Taxable HSA distributions."""
        return max(ZERO, self.l14c() - self.l15())

    @line
    def l17b(self) -> Decimal:
        """Additional 20% tax, carried to Schedule 2 line 17c."""
        return to_cents(self.l16() * self.year_config.hsa_additional_tax_rate)

    def fields(self) -> Sequence[FieldValue]:
        person = self.f1040.person(self.person_role)
        coverage = self.coverage()
        return [
            person.full_name() if person else None,
            person.ssid if person else None,
            coverage == HsaCoverage.SELF_ONLY,
            coverage == HsaCoverage.FAMILY,
            self.l2(),
            self.l3(),
            self.l4(),
            self.l5(),
            self.l6(),
            self.l7(),
            self.l8(),
            self.l9(),
            self.l10(),
            self.l11(),
            self.l12(),
            self.l13(),
            self.l14a(),
            self.l14b(),
            self.l14c(),
            self.l15(),
            self.l16(),
            False,  # 17a exception applies
            self.l17b(),
        ]
