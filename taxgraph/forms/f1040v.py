"""Form 1040-V, Payment Voucher."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import line
from taxgraph.graph.node import FieldValue


class F1040V(F1040Attachment):
    """Payment voucher, appended after the sorted filing set when tax is owed."""

    tag = "f1040v"
    sequence_index = 1000
    FIELD_COUNT = 10

    def is_needed(self) -> bool:
        return self.l1() > 0

    @line
    def l1(self) -> Decimal:
        return self.f1040.l37()

    def fields(self) -> Sequence[FieldValue]:
        taxpayer = self.info.taxpayer
        spouse = taxpayer.spouse if self.f1040.includes_spouse() else None
        address = taxpayer.address
        return [
            taxpayer.primary_person.ssid,
            spouse.ssid if spouse else None,
            self.l1(),
            taxpayer.primary_person.full_name(),
            spouse.full_name() if spouse else None,
            address.address,
            address.apartment,
            address.city,
            address.state,
            address.zip,
        ]
