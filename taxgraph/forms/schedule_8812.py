"""Schedule 8812, Credits for Qualifying Children and Other Dependents."""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import Dependent, FilingStatus
from taxgraph.tax.tax_table import to_cents


class Schedule8812(F1040Attachment):
    """Schedule 8812 (Form 1040).

    Part I computes the nonrefundable child tax credit and credit for other
    dependents. Part II-A computes the refundable additional child tax
    credit from earned income.
    """

    tag = "f1040s8812"
    sequence_index = 47
    FIELD_COUNT = 22

    def qualifying_children(self) -> list[Dependent]:
        limit = self.year_config.ctc_age_limit
        return [
            dep
            for dep in self.info.taxpayer.dependents
            if dep.age_at_end_of(self.info.tax_year) < limit
        ]

    def other_dependents(self) -> list[Dependent]:
        children = self.qualifying_children()
        return [dep for dep in self.info.taxpayer.dependents if dep not in children]

    def is_needed(self) -> bool:
        return self.l4() + self.l6() > 0

    # Part I

    @line
    def l1(self) -> Decimal:
        return self.f1040.l11()

    @line
    def l3(self) -> Decimal:
        return self.l1()

    @line
    def l4(self) -> int:
        return len(self.qualifying_children())

    @line
    def l5(self) -> Decimal:
        return self.l4() * self.year_config.ctc_per_child

    @line
    def l6(self) -> int:
        return len(self.other_dependents())

    @line
    def l7(self) -> Decimal:
        return self.l6() * self.year_config.odc_per_dependent

    @line
    def l8(self) -> Decimal:
        return self.l5() + self.l7()

    @line
    def l9(self) -> Decimal:
        config = self.year_config
        if self.info.filing_status == FilingStatus.MFJ:
            return config.ctc_phaseout_mfj
        return config.ctc_phaseout_other

    @line
    def l10(self) -> Decimal:
        """Excess over the threshold, rounded up to the next multiple of 1,000."""
        excess = self.l3() - self.l9()
        if excess <= 0:
            return ZERO
        step = self.year_config.ctc_phaseout_step
        return Decimal(math.ceil(excess / step)) * step

    @line
    def l11(self) -> Decimal:
        config = self.year_config
        return self.l10() / config.ctc_phaseout_step * config.ctc_phaseout_per_step

    @line
    def l12(self) -> Decimal:
        return max(ZERO, self.l8() - self.l11())

    @line
    def l13(self) -> Decimal:
        """Credit limit based on tax liability."""
        return self.f1040.l18()

    @line
    def l14(self) -> Decimal:
        return min(self.l12(), self.l13())

    # Part II-A

    @line
    def l16a(self) -> Decimal:
        return max(ZERO, self.l12() - self.l14())

    @line
    def l16b(self) -> Decimal:
        return self.l4() * self.year_config.actc_max_per_child

    @line
    def l17(self) -> Decimal:
        return min(self.l16a(), self.l16b())

    @line
    def l18a(self) -> Decimal:
        return self.f1040.earned_income()

    @line
    def l19(self) -> Decimal:
        return max(ZERO, self.l18a() - self.year_config.actc_earned_income_floor)

    @line
    def l20(self) -> Decimal:
        return to_cents(self.l19() * self.year_config.actc_rate)

    @line
    def l27(self) -> Decimal:
        """Additional child tax credit."""
        return min(self.l17(), self.l20())

    def to_1040_l19(self) -> Decimal:
        return self.l14()

    def to_1040_l28(self) -> Decimal | None:
        if self.l27() <= 0:
            return None
        return self.l27()

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            self.l1(),
            self.l3(),
            Decimal(self.l4()),
            self.l5(),
            Decimal(self.l6()),
            self.l7(),
            self.l8(),
            self.l9(),
            self.l10(),
            self.l11(),
            self.l12(),
            self.l13(),
            self.l14(),
            self.l16a(),
            self.l16b(),
            self.l17(),
            self.l18a(),
            self.l19(),
            self.l20(),
            self.l27(),
        ]
