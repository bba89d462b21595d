"""Schedule B, Interest and Ordinary Dividends."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import line, sum_fields, sum_optional
from taxgraph.graph.node import FieldValue

INTEREST_ROWS = 14
DIVIDEND_ROWS = 16


class ScheduleB(F1040Attachment):
    """Schedule B (Form 1040).

    Interest payers include partnerships reporting interest on a K-1.
    Required once either total exceeds the year's threshold.
    """

    tag = "f1040sb"
    sequence_index = 8
    FIELD_COUNT = 70

    def interest_payers(self) -> list[tuple[str, Decimal]]:
        payers = [(f.payer, f.income) for f in self.info.f1099_ints]
        payers.extend(
            (k1.partnership_name, k1.interest_income)
            for k1 in self.info.schedule_k1s
            if k1.interest_income > 0
        )
        return payers

    def dividend_payers(self) -> list[tuple[str, Decimal]]:
        return [(f.payer, f.dividends) for f in self.info.f1099_divs]

    def is_needed(self) -> bool:
        threshold = self.year_config.schedule_b_threshold
        return (self.l4() or 0) > threshold or (self.l6() or 0) > threshold

    @line
    def l2(self) -> Decimal | None:
        return sum_optional(amount for _, amount in self.interest_payers())

    @line
    def l3(self) -> Decimal | None:
        # Excludable savings bond interest (Form 8815) is not collected
        return None

    @line
    def l4(self) -> Decimal | None:
        if self.l2() is None:
            return None
        return self.l2() - sum_fields([self.l3()])

    @line
    def l6(self) -> Decimal | None:
        return sum_optional(amount for _, amount in self.dividend_payers())

    def to_1040_l2b(self) -> Decimal | None:
        return self.l4()

    def to_1040_l3b(self) -> Decimal | None:
        return self.l6()

    def _rows(self, payers: list[tuple[str, Decimal]], rows: int) -> list[FieldValue]:
        values: list[FieldValue] = []
        for index in range(rows):
            if index < len(payers):
                values.extend(payers[index])
            else:
                values.extend([None, None])
        return values

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        return [
            primary.full_name(),
            primary.ssid,
            *self._rows(self.interest_payers(), INTEREST_ROWS),
            self.l2(),
            self.l3(),
            self.l4(),
            *self._rows(self.dividend_payers(), DIVIDEND_ROWS),
            self.l6(),
            # Part III foreign accounts and trusts: answered "no"
            False,
            True,
            False,
            True,
        ]
