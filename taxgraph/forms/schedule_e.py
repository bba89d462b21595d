"""Schedule E, Supplemental Income and Loss.

A page holds three rental properties (Part I) and four partnership K-1s
(Part II). Page ``n`` is copy ``n``. Summary lines that total every
property and partnership are only filled on the first page; continuation
pages leave them blank.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import RentalProperty, ScheduleK1

if TYPE_CHECKING:
    from taxgraph.forms.f1040 import F1040

PROPERTIES_PER_PAGE = 3
PARTNERSHIPS_PER_PAGE = 4
EXPENSE_LINES = 15


def _property_income(prop: RentalProperty) -> Decimal:
    return prop.rent_received - sum_fields(prop.expense_lines())


def _k1_amount(k1: ScheduleK1) -> Decimal:
    return k1.ordinary_business_income + k1.guaranteed_payments


class ScheduleE(F1040Attachment):
    """One page of Schedule E (Form 1040)."""

    tag = "f1040se"
    sequence_index = 13
    FIELD_COUNT = 115

    def __init__(self, f1040: F1040, copy_index: int = 0) -> None:
        super().__init__(f1040, copy_index)
        prop_start = copy_index * PROPERTIES_PER_PAGE
        k1_start = copy_index * PARTNERSHIPS_PER_PAGE
        self.properties = list(
            self.info.real_estate[prop_start : prop_start + PROPERTIES_PER_PAGE]
        )
        self.partnerships = list(
            self.info.schedule_k1s[k1_start : k1_start + PARTNERSHIPS_PER_PAGE]
        )

    def page_count(self) -> int:
        return max(
            1,
            math.ceil(len(self.info.real_estate) / PROPERTIES_PER_PAGE),
            math.ceil(len(self.info.schedule_k1s) / PARTNERSHIPS_PER_PAGE),
        )

    def is_needed(self) -> bool:
        return len(self.info.real_estate) > 0 or len(self.info.schedule_k1s) > 0

    def _build_copies(self) -> list[ScheduleE]:
        if self.copy_index != 0:
            return []
        return [ScheduleE(self.f1040, page) for page in range(1, self.page_count())]

    @property
    def is_first_page(self) -> bool:
        return self.copy_index == 0

    # =========================================================================
    # Part I - rental real estate (all properties, first page only)
    # =========================================================================

    @line
    def l23a(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields(p.rent_received for p in self.info.real_estate)

    @line
    def l23c(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields(p.mortgage_interest for p in self.info.real_estate)

    @line
    def l23d(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields(p.depreciation for p in self.info.real_estate)

    @line
    def l23e(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields(
            sum_fields(p.expense_lines()) for p in self.info.real_estate
        )

    @line
    def l24(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields(
            max(ZERO, _property_income(p)) for p in self.info.real_estate
        )

    @line
    def l25(self) -> Decimal | None:
        """Total rental losses, as a negative amount."""
        if not self.is_first_page:
            return None
        return sum_fields(
            min(ZERO, _property_income(p)) for p in self.info.real_estate
        )

    @line
    def l26(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields([self.l24(), self.l25()])

    # =========================================================================
    # Part II - partnerships (all K-1s, first page only)
    # =========================================================================

    def _k1_column(self, passive: bool, income: bool) -> Decimal | None:
        if not self.is_first_page:
            return None
        amounts = [
            _k1_amount(k1) for k1 in self.info.schedule_k1s if k1.is_passive == passive
        ]
        if income:
            return sum_fields(a for a in amounts if a > 0)
        return sum_fields(-a for a in amounts if a < 0)

    @line
    def l29a_passive(self) -> Decimal | None:
        return self._k1_column(passive=True, income=True)

    @line
    def l29a_nonpassive(self) -> Decimal | None:
        return self._k1_column(passive=False, income=True)

    @line
    def l29b_passive(self) -> Decimal | None:
        return self._k1_column(passive=True, income=False)

    @line
    def l29b_nonpassive(self) -> Decimal | None:
        return self._k1_column(passive=False, income=False)

    @line
    def l30(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields([self.l29a_passive(), self.l29a_nonpassive()])

    @line
    def l31(self) -> Decimal | None:
        """Total partnership losses, as a negative amount."""
        if not self.is_first_page:
            return None
        return ZERO - sum_fields([self.l29b_passive(), self.l29b_nonpassive()])

    @line
    def l32(self) -> Decimal | None:
        if not self.is_first_page:
            return None
        return sum_fields([self.l30(), self.l31()])

    @line
    def l41(self) -> Decimal | None:
        """Total supplemental income or (loss), carried to Schedule 1 line 5."""
        if not self.is_first_page:
            return None
        return sum_fields([self.l26(), self.l32()])

    # =========================================================================
    # Field layout
    # =========================================================================

    def _property_columns(self) -> list[FieldValue]:
        slots: list[RentalProperty | None] = list(self.properties)
        slots.extend([None] * (PROPERTIES_PER_PAGE - len(slots)))

        values: list[FieldValue] = []
        for prop in slots:
            values.append(prop.address.address if prop else None)
            values.append(prop.property_type if prop else None)
        for prop in slots:
            values.append(prop.fair_rental_days if prop else None)
            values.append(prop.personal_use_days if prop else None)
        values.extend(prop.rent_received if prop else None for prop in slots)
        values.extend([None] * PROPERTIES_PER_PAGE)  # line 4 royalties
        for index in range(EXPENSE_LINES):
            values.extend(
                (prop.expense_lines()[index] or None) if prop else None for prop in slots
            )
        values.extend(sum_fields(prop.expense_lines()) if prop else None for prop in slots)
        values.extend(_property_income(prop) if prop else None for prop in slots)
        return values

    def _partnership_rows(self) -> list[FieldValue]:
        values: list[FieldValue] = []
        for row in range(PARTNERSHIPS_PER_PAGE):
            if row >= len(self.partnerships):
                values.extend([None, False, None, None, None, None, None])
                continue
            k1 = self.partnerships[row]
            amount = _k1_amount(k1)
            loss = -amount if amount < 0 else None
            income = amount if amount > 0 else None
            values.extend(
                [
                    k1.partnership_name,
                    k1.is_passive,
                    k1.partnership_ein,
                    loss if k1.is_passive else None,
                    income if k1.is_passive else None,
                    loss if not k1.is_passive else None,
                    income if not k1.is_passive else None,
                ]
            )
        return values

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            *self._property_columns(),
            self.l23a(),
            None,  # 23b royalties
            self.l23c(),
            self.l23d(),
            self.l23e(),
            self.l24(),
            self.l25(),
            self.l26(),
            *self._partnership_rows(),
            self.l29a_passive(),
            self.l29a_nonpassive(),
            self.l29b_passive(),
            self.l29b_nonpassive(),
            self.l30(),
            self.l31(),
            self.l32(),
            self.l41(),
        ]
