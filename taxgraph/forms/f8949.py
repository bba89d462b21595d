"""Form 8949, Sales and Other Dispositions of Capital Assets.

Each page lists up to 14 short-term sales in Part I and 14 long-term sales in
Part II. Page ``n`` is copy ``n``; the primary instance is page 0.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import CapitalTransaction

if TYPE_CHECKING:
    from taxgraph.forms.f1040 import F1040

SALES_PER_PART = 14


def _date_text(value) -> str:
    return value.strftime("%m/%d/%Y") if value is not None else "VARIOUS"


def _sale_row(sale: CapitalTransaction | None) -> list[FieldValue]:
    if sale is None:
        return [None] * 8
    adjustment = sale.adjustment if sale.adjustment != 0 else None
    return [
        sale.description,
        _date_text(sale.date_acquired),
        _date_text(sale.date_sold),
        sale.proceeds,
        sale.cost_basis,
        "W" if adjustment is not None else None,
        adjustment,
        sale.gain,
    ]


class F8949(F1040Attachment):
    """One page of Form 8949."""

    tag = "f8949"
    sequence_index = 12
    FIELD_COUNT = 240

    def __init__(self, f1040: F1040, copy_index: int = 0) -> None:
        super().__init__(f1040, copy_index)
        start = copy_index * SALES_PER_PART
        end = start + SALES_PER_PART
        self.short_term_sales = self.all_short_term()[start:end]
        self.long_term_sales = self.all_long_term()[start:end]

    def all_short_term(self) -> list[CapitalTransaction]:
        return [t for t in self.info.capital_transactions if not t.long_term]

    def all_long_term(self) -> list[CapitalTransaction]:
        return [t for t in self.info.capital_transactions if t.long_term]

    def page_count(self) -> int:
        """Pages required to list every sale, at least one."""
        per_part = max(len(self.all_short_term()), len(self.all_long_term()))
        return max(1, math.ceil(per_part / SALES_PER_PART))

    def is_needed(self) -> bool:
        return len(self.info.capital_transactions) > 0

    def _build_copies(self) -> list[F8949]:
        if self.copy_index != 0:
            return []
        return [F8949(self.f1040, page) for page in range(1, self.page_count())]

    def pages(self) -> list[F8949]:
        """This page followed by every continuation page."""
        return [self, *self.copies()]

    # Part I totals (line 2)

    @line
    def short_term_proceeds(self) -> Decimal:
        return sum_fields(s.proceeds for s in self.short_term_sales)

    @line
    def short_term_cost(self) -> Decimal:
        return sum_fields(s.cost_basis for s in self.short_term_sales)

    @line
    def short_term_adjustment(self) -> Decimal:
        return sum_fields(s.adjustment for s in self.short_term_sales)

    @line
    def short_term_gain(self) -> Decimal:
        return sum_fields(s.gain for s in self.short_term_sales)

    # Part II totals (line 2)

    @line
    def long_term_proceeds(self) -> Decimal:
        return sum_fields(s.proceeds for s in self.long_term_sales)

    @line
    def long_term_cost(self) -> Decimal:
        return sum_fields(s.cost_basis for s in self.long_term_sales)

    @line
    def long_term_adjustment(self) -> Decimal:
        return sum_fields(s.adjustment for s in self.long_term_sales)

    @line
    def long_term_gain(self) -> Decimal:
        return sum_fields(s.gain for s in self.long_term_sales)

    def _part(self, sales: list[CapitalTransaction]) -> list[FieldValue]:
        reported = all(s.basis_reported for s in sales)
        values: list[FieldValue] = [bool(sales) and reported, bool(sales) and not reported, False]
        for row in range(SALES_PER_PART):
            values.extend(_sale_row(sales[row] if row < len(sales) else None))
        return values

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            *self._part(self.short_term_sales),
            self.short_term_proceeds(),
            self.short_term_cost(),
            self.short_term_adjustment(),
            self.short_term_gain(),
            *self._part(self.long_term_sales),
            self.long_term_proceeds(),
            self.long_term_cost(),
            self.long_term_adjustment(),
            self.long_term_gain(),
        ]
