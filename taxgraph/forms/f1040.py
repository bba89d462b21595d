"""Form 1040, the root of the form graph.

Constructing an ``F1040`` builds every attachment in ``BUILD_ORDER``. Each
attachment declares the siblings it reads through ``depends_on`` and is
checked against what has been built so far, so a misordered catalog fails
at construction instead of on first read.

Example:
    >>> f1040 = F1040(info)
    >>> f1040.l11()
    Decimal('50000')
    >>> [form.tag for form in f1040.attachments() if form.is_needed()]
    []
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar

import structlog

from taxgraph.forms.f1040v import F1040V
from taxgraph.forms.f8889 import F8889
from taxgraph.forms.f8936 import F8936
from taxgraph.forms.f8949 import F8949
from taxgraph.forms.qualified_dividends_worksheet import QualifiedDividendsWorksheet
from taxgraph.forms.schedule_1 import Schedule1
from taxgraph.forms.schedule_2 import Schedule2
from taxgraph.forms.schedule_3 import Schedule3
from taxgraph.forms.schedule_8812 import Schedule8812
from taxgraph.forms.schedule_a import ScheduleA
from taxgraph.forms.schedule_b import ScheduleB
from taxgraph.forms.schedule_d import ScheduleD
from taxgraph.forms.schedule_e import ScheduleE
from taxgraph.forms.schedule_se import ScheduleSE
from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, positive, sum_fields
from taxgraph.graph.node import FieldValue, FormNode
from taxgraph.models.information import (
    AccountType,
    FilingStatus,
    IncomeW2,
    Person,
    PersonRole,
    ValidatedInformation,
)
from taxgraph.tax.tax_table import compute_ordinary_tax

logger = structlog.get_logger()

DEPENDENT_ROWS = 4


@dataclass(frozen=True)
class Construct:
    """One step of the root's build order.

    Attributes:
        attr: Attribute on the root that receives the built form.
        form: Attachment class to instantiate.
        options: Extra keyword arguments for the constructor.
    """

    attr: str
    form: type[F1040Attachment]
    options: Mapping[str, Any] = field(default_factory=dict)


class F1040(FormNode):
    """U.S. Individual Income Tax Return."""

    tag = "f1040"
    sequence_index = 0
    FIELD_COUNT = 89

    # Topological order; every form's depends_on appears earlier
    BUILD_ORDER: ClassVar[tuple[Construct, ...]] = (
        Construct("f8949", F8949),
        Construct("schedule_d", ScheduleD),
        Construct("schedule_b", ScheduleB),
        Construct("schedule_e", ScheduleE),
        Construct("schedule_se", ScheduleSE, {"person_role": PersonRole.PRIMARY}),
        Construct("schedule_se_spouse", ScheduleSE, {"person_role": PersonRole.SPOUSE}),
        Construct("f8889", F8889, {"person_role": PersonRole.PRIMARY}),
        Construct("f8889_spouse", F8889, {"person_role": PersonRole.SPOUSE}),
        Construct("schedule_1", Schedule1),
        Construct("schedule_2", Schedule2),
        Construct("schedule_a", ScheduleA),
        Construct("schedule_8812", Schedule8812),
        Construct("f8936", F8936),
        Construct("schedule_3", Schedule3),
        Construct("qualified_dividends_worksheet", QualifiedDividendsWorksheet),
    )

    # Filing catalog order; ties on sequence index keep this order
    CATALOG: ClassVar[tuple[str, ...]] = (
        "schedule_1",
        "schedule_2",
        "schedule_3",
        "schedule_a",
        "schedule_b",
        "schedule_d",
        "f8949",
        "schedule_e",
        "schedule_se",
        "schedule_se_spouse",
        "schedule_8812",
        "f8889",
        "f8889_spouse",
        "f8936",
    )

    f8949: F8949
    schedule_d: ScheduleD
    schedule_b: ScheduleB
    schedule_e: ScheduleE
    schedule_se: ScheduleSE
    schedule_se_spouse: ScheduleSE
    f8889: F8889
    f8889_spouse: F8889
    schedule_1: Schedule1
    schedule_2: Schedule2
    schedule_a: ScheduleA
    schedule_8812: Schedule8812
    f8936: F8936
    schedule_3: Schedule3
    qualified_dividends_worksheet: QualifiedDividendsWorksheet

    def __init__(self, info: ValidatedInformation) -> None:
        super().__init__(info)
        for step in self.BUILD_ORDER:
            setattr(self, step.attr, step.form(self, **step.options))
        self._voucher: F1040V | None = None
        logger.debug(
            "f1040_constructed",
            tax_year=info.tax_year,
            filing_status=info.filing_status.value,
            sibling_count=len(self.BUILD_ORDER),
        )

    # =========================================================================
    # Graph surface
    # =========================================================================

    def attachments(self) -> list[FormNode]:
        """Every attachment in catalog order, needed or not."""
        return [getattr(self, attr) for attr in self.CATALOG]

    def balance_due(self) -> Decimal:
        """Amount you owe (line 37)."""
        return self.l37()

    def payment_voucher(self) -> F1040V:
        """Form 1040-V for this return, built on first request."""
        if self._voucher is None:
            self._voucher = F1040V(self)
        return self._voucher

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def filing_status(self) -> FilingStatus:
        return self.info.filing_status

    def includes_spouse(self) -> bool:
        """Whether the spouse's items belong on this return."""
        return (
            self.filing_status == FilingStatus.MFJ
            and self.info.taxpayer.spouse is not None
        )

    def person(self, role: PersonRole) -> Person | None:
        """The primary taxpayer or the spouse, ``None`` if absent."""
        if role == PersonRole.PRIMARY:
            return self.info.taxpayer.primary_person
        if role == PersonRole.SPOUSE:
            return self.info.taxpayer.spouse
        return None

    def person_applies(self, role: PersonRole) -> bool:
        """Whether a person's own forms (SE, 8889) are part of this return."""
        if role == PersonRole.PRIMARY:
            return True
        return role == PersonRole.SPOUSE and self.includes_spouse()

    def valid_w2s(self) -> list[IncomeW2]:
        """W-2s reported on this return; a separate return excludes the spouse's."""
        if self.filing_status == FilingStatus.MFS:
            return [w2 for w2 in self.info.w2s if w2.person_role == PersonRole.PRIMARY]
        return list(self.info.w2s)

    def w2s_for(self, role: PersonRole) -> list[IncomeW2]:
        return [w2 for w2 in self.valid_w2s() if w2.person_role == role]

    def wages(self) -> Decimal:
        return sum_fields(w2.income for w2 in self.valid_w2s())

    def qualified_dividends(self) -> Decimal | None:
        if not self.info.f1099_divs:
            return None
        return sum_fields(f.qualified_dividends for f in self.info.f1099_divs)

    def ordinary_dividends(self) -> Decimal | None:
        if not self.info.f1099_divs:
            return None
        return sum_fields(f.dividends for f in self.info.f1099_divs)

    def earned_income(self) -> Decimal:
        """Wages plus net self-employment earnings, less the deductible half of SE tax."""
        se_net = sum_fields(
            se.l4c() - se.l13()
            for se in (self.schedule_se, self.schedule_se_spouse)
            if se.is_needed()
        )
        return self.l1z() + se_net

    def _allowances(self) -> int:
        """Count of age 65+ and blindness boxes checked on the return."""
        year = self.info.tax_year
        people = [self.info.taxpayer.primary_person]
        if self.info.taxpayer.spouse is not None:
            people.append(self.info.taxpayer.spouse)
        count = 0
        for person in people:
            if person.age_at_end_of(year) >= 65:
                count += 1
            if person.is_blind:
                count += 1
        return count

    def standard_deduction(self) -> Decimal:
        """Standard deduction including age and blindness allowances.

        A taxpayer who can be claimed as someone else's dependent is limited
        to the greater of the dependent floor or earned income plus the
        add-on, capped at the basic amount.
        """
        config = self.year_config
        basic = config.standard_deduction(self.filing_status)
        extra = config.additional_deduction(self.filing_status) * self._allowances()

        taxpayer = self.info.taxpayer
        claimed_elsewhere = taxpayer.primary_person.is_taxpayer_dependent or (
            taxpayer.spouse is not None and taxpayer.spouse.is_taxpayer_dependent
        )
        if claimed_elsewhere:
            limited = min(
                basic,
                max(
                    config.dependent_deduction_floor,
                    self.wages() + config.dependent_earned_income_addon,
                ),
            )
            return limited + extra
        return basic + extra

    def uses_qualified_dividends_worksheet(self) -> bool:
        return (
            self.schedule_d.compute_tax_on_qd_worksheet()
            or (self.l3a() or ZERO) > 0
        )

    # =========================================================================
    # Income
    # =========================================================================

    @line
    def l1a(self) -> Decimal:
        return self.wages()

    @line
    def l1b(self) -> Decimal | None:
        return None

    @line
    def l1c(self) -> Decimal | None:
        return None

    @line
    def l1d(self) -> Decimal | None:
        return None

    @line
    def l1e(self) -> Decimal | None:
        return None

    @line
    def l1f(self) -> Decimal | None:
        return None

    @line
    def l1g(self) -> Decimal | None:
        return None

    @line
    def l1h(self) -> Decimal | None:
        return None

    @line
    def l1z(self) -> Decimal:
        return sum_fields(
            [
                self.l1a(),
                self.l1b(),
                self.l1c(),
                self.l1d(),
                self.l1e(),
                self.l1f(),
                self.l1g(),
                self.l1h(),
            ]
        )

    @line
    def l2a(self) -> Decimal | None:
        # Tax-exempt interest is not collected
        return None

    @line
    def l2b(self) -> Decimal | None:
        return self.schedule_b.to_1040_l2b()

    @line
    def l3a(self) -> Decimal | None:
        return self.qualified_dividends()

    @line
    def l3b(self) -> Decimal | None:
        return self.schedule_b.to_1040_l3b()

    @line
    def l7(self) -> Decimal | None:
        return self.schedule_d.to_1040()

    @line
    def l8(self) -> Decimal | None:
        if not self.schedule_1.is_needed():
            return None
        return self.schedule_1.l10()

    @line
    def l9(self) -> Decimal:
        """Total income."""
        return sum_fields(
            [self.l1z(), self.l2b(), self.l3b(), self.l7(), self.l8()]
        )

    @line
    def l10(self) -> Decimal | None:
        if not self.schedule_1.is_needed():
            return None
        return self.schedule_1.l26()

    @line
    def l11(self) -> Decimal:
        """Adjusted gross income."""
        return max(ZERO, self.l9() - (self.l10() or ZERO))

    # =========================================================================
    # Deductions and tax
    # =========================================================================

    @line
    def l12(self) -> Decimal:
        if self.schedule_a.is_needed():
            return self.schedule_a.deductions()
        return self.standard_deduction()

    @line
    def l13(self) -> Decimal | None:
        return None

    @line
    def l14(self) -> Decimal:
        return sum_fields([self.l12(), self.l13()])

    @line
    def l15(self) -> Decimal:
        """Taxable income."""
        return max(ZERO, self.l11() - self.l14())

    @line
    def l16(self) -> Decimal:
        if self.uses_qualified_dividends_worksheet():
            return self.qualified_dividends_worksheet.tax()
        return compute_ordinary_tax(self.year_config, self.filing_status, self.l15())

    @line
    def l17(self) -> Decimal | None:
        if not self.schedule_2.is_needed():
            return None
        return self.schedule_2.l3()

    @line
    def l18(self) -> Decimal:
        return sum_fields([self.l16(), self.l17()])

    @line
    def l19(self) -> Decimal | None:
        if not self.schedule_8812.is_needed():
            return None
        return self.schedule_8812.to_1040_l19()

    @line
    def l20(self) -> Decimal | None:
        if not self.schedule_3.is_needed():
            return None
        return self.schedule_3.l8()

    @line
    def l21(self) -> Decimal:
        return sum_fields([self.l19(), self.l20()])

    @line
    def l22(self) -> Decimal:
        return max(ZERO, self.l18() - self.l21())

    @line
    def l23(self) -> Decimal | None:
        if not self.schedule_2.is_needed():
            return None
        return self.schedule_2.l21()

    @line
    def l24(self) -> Decimal:
        """Total tax."""
        return sum_fields([self.l22(), self.l23()])

    # =========================================================================
    # Payments, refund, amount owed
    # =========================================================================

    @line
    def l25a(self) -> Decimal:
        return sum_fields(w2.fed_withholding for w2 in self.valid_w2s())

    @line
    def l25b(self) -> Decimal | None:
        return None

    @line
    def l25c(self) -> Decimal | None:
        return None

    @line
    def l25d(self) -> Decimal:
        return sum_fields([self.l25a(), self.l25b(), self.l25c()])

    @line
    def l26(self) -> Decimal:
        return sum_fields(et.payment for et in self.info.estimated_taxes)

    @line
    def l27(self) -> Decimal | None:
        return None

    @line
    def l28(self) -> Decimal | None:
        if not self.schedule_8812.is_needed():
            return None
        return self.schedule_8812.to_1040_l28()

    @line
    def l29(self) -> Decimal | None:
        return None

    @line
    def l31(self) -> Decimal | None:
        if not self.schedule_3.is_needed():
            return None
        return self.schedule_3.l15()

    @line
    def l32(self) -> Decimal:
        return sum_fields([self.l27(), self.l28(), self.l29(), self.l31()])

    @line
    def l33(self) -> Decimal:
        """Total payments."""
        return sum_fields([self.l25d(), self.l26(), self.l32()])

    @line
    def l34(self) -> Decimal:
        return max(ZERO, self.l33() - self.l24())

    @line
    def l35a(self) -> Decimal:
        # Overpayment is refunded in full
        return self.l34()

    @line
    def l36(self) -> Decimal:
        return max(ZERO, self.l34() - self.l35a())

    @line
    def l37(self) -> Decimal:
        """Amount you owe."""
        return positive(self.l24() - self.l33())

    @line
    def l38(self) -> Decimal | None:
        return None

    # =========================================================================
    # Field layout
    # =========================================================================

    def _dependent_fields(self) -> list[FieldValue]:
        dependents = self.info.taxpayer.dependents
        age_limit = self.year_config.ctc_age_limit
        values: list[FieldValue] = []
        for row in range(DEPENDENT_ROWS):
            if row < len(dependents):
                dep = dependents[row]
                child = dep.age_at_end_of(self.info.tax_year) < age_limit
                values.extend(
                    [dep.full_name(), dep.ssid, dep.relationship, child, not child]
                )
            else:
                values.extend(["", "", "", False, False])
        return values

    def fields(self) -> Sequence[FieldValue]:
        taxpayer = self.info.taxpayer
        primary = taxpayer.primary_person
        spouse = taxpayer.spouse
        address = taxpayer.address
        refund = self.info.refund
        status = self.filing_status

        return [
            primary.first_name,
            primary.last_name,
            primary.ssid,
            spouse.first_name if spouse else None,
            spouse.last_name if spouse else None,
            spouse.ssid if spouse else None,
            address.address,
            address.apartment,
            address.city,
            address.state,
            address.zip,
            status == FilingStatus.SINGLE,
            status == FilingStatus.MFJ,
            status == FilingStatus.MFS,
            status == FilingStatus.HOH,
            status == FilingStatus.QW,
            self.info.digital_assets,
            not self.info.digital_assets,
            *self._dependent_fields(),
            self.l1a(),
            self.l1b(),
            self.l1c(),
            self.l1d(),
            self.l1e(),
            self.l1f(),
            self.l1g(),
            self.l1h(),
            self.l1z(),
            self.l2a(),
            self.l2b(),
            self.l3a(),
            self.l3b(),
            self.l7(),
            self.l8(),
            self.l9(),
            self.l10(),
            self.l11(),
            self.l12(),
            self.l13(),
            self.l14(),
            self.l15(),
            self.l16(),
            self.l17(),
            self.l18(),
            self.l19(),
            self.l20(),
            self.l21(),
            self.l22(),
            self.l23(),
            self.l24(),
            self.l25a(),
            self.l25b(),
            self.l25c(),
            self.l25d(),
            self.l26(),
            self.l27(),
            self.l28(),
            self.l29(),
            self.l31(),
            self.l32(),
            self.l33(),
            self.l34(),
            self.l35a(),
            self.l36(),
            self.l37(),
            self.l38(),
            refund.routing_number if refund else None,
            refund is not None and refund.account_type == AccountType.CHECKING,
            refund is not None and refund.account_type == AccountType.SAVINGS,
            refund.account_number if refund else None,
        ]
