"""Schedule A, Itemized Deductions."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import FilingStatus, ItemizedDeductions
from taxgraph.tax.tax_table import to_cents


class ScheduleA(F1040Attachment):
    """Schedule A (Form 1040).

    Filed only when itemized deductions were supplied and either the
    taxpayer elected to itemize or the itemized total exceeds the standard
    deduction.
    """

    tag = "f1040sa"
    sequence_index = 7
    FIELD_COUNT = 27

    @property
    def deductions_input(self) -> ItemizedDeductions:
        return self.info.itemized_deductions or ItemizedDeductions()

    def is_needed(self) -> bool:
        if self.info.itemized_deductions is None:
            return False
        if self.info.elect_itemized_deductions:
            return True
        return self.l17() > self.f1040.standard_deduction()

    def deductions(self) -> Decimal:
        """Total itemized deductions, carried to Form 1040 line 12."""
        return self.l17()

    # Medical and dental

    @line
    def l1(self) -> Decimal:
        return self.deductions_input.medical_and_dental

    @line
    def l2(self) -> Decimal:
        return self.f1040.l11()

    @line
    def l3(self) -> Decimal:
        return to_cents(self.l2() * self.year_config.medical_floor_rate)

    @line
    def l4(self) -> Decimal:
        return max(ZERO, self.l1() - self.l3())

    # Taxes you paid

    @line
    def l5a(self) -> Decimal:
        return self.deductions_input.state_and_local_taxes

    @line
    def l5b(self) -> Decimal:
        return self.deductions_input.state_and_local_real_estate_taxes

    @line
    def l5c(self) -> Decimal:
        return self.deductions_input.state_and_local_property_taxes

    @line
    def l5d(self) -> Decimal:
        return sum_fields([self.l5a(), self.l5b(), self.l5c()])

    def salt_cap(self) -> Decimal:
        """State and local tax cap after the high-income phase-down.

        Every amount is halved for married filing separately.
        """
        config = self.year_config
        divisor = 2 if self.info.filing_status == FilingStatus.MFS else 1
        cap = config.salt_cap / divisor
        if config.salt_phasedown_threshold is None:
            return cap
        threshold = config.salt_phasedown_threshold / divisor
        floor = config.salt_floor / divisor
        excess = self.f1040.l11() - threshold
        if excess <= 0:
            return cap
        return max(floor, cap - to_cents(excess * config.salt_phasedown_rate))

    @line
    def l5e(self) -> Decimal:
        return min(self.l5d(), self.salt_cap())

    @line
    def l6(self) -> Decimal | None:
        return None

    @line
    def l7(self) -> Decimal:
        return sum_fields([self.l5e(), self.l6()])

    # Interest you paid

    @line
    def l8a(self) -> Decimal:
        return self.deductions_input.interest_8a

    @line
    def l8b(self) -> Decimal:
        return self.deductions_input.interest_8b

    @line
    def l8c(self) -> Decimal:
        return self.deductions_input.interest_8c

    @line
    def l8d(self) -> Decimal:
        return self.deductions_input.interest_8d

    @line
    def l8e(self) -> Decimal:
        return sum_fields([self.l8a(), self.l8b(), self.l8c(), self.l8d()])

    @line
    def l9(self) -> Decimal:
        return self.deductions_input.investment_interest

    @line
    def l10(self) -> Decimal:
        return self.l8e() + self.l9()

    # Gifts to charity

    @line
    def l11(self) -> Decimal:
        return self.deductions_input.charity_cash_check

    @line
    def l12(self) -> Decimal:
        return self.deductions_input.charity_other

    @line
    def l13(self) -> Decimal | None:
        return None

    @line
    def l14(self) -> Decimal:
        return sum_fields([self.l11(), self.l12(), self.l13()])

    @line
    def l15(self) -> Decimal | None:
        return None

    @line
    def l16(self) -> Decimal | None:
        return None

    @line
    def l17(self) -> Decimal:
        return sum_fields(
            [self.l4(), self.l7(), self.l10(), self.l14(), self.l15(), self.l16()]
        )

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            self.l1(),
            self.l2(),
            self.l3(),
            self.l4(),
            self.deductions_input.is_sales_tax,
            self.l5a(),
            self.l5b(),
            self.l5c(),
            self.l5d(),
            self.l5e(),
            self.l6(),
            self.l7(),
            self.l8a(),
            self.l8b(),
            self.l8c(),
            self.l8d(),
            self.l8e(),
            self.l9(),
            self.l10(),
            self.l11(),
            self.l12(),
            self.l13(),
            self.l14(),
            self.l17(),
            self.info.elect_itemized_deductions,
        ]
