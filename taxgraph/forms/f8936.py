"""Form 8936, Clean Vehicle Credits. One instance per vehicle."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import ZERO, line, sum_fields
from taxgraph.graph.node import FieldValue
from taxgraph.models.information import CleanVehicle
from taxgraph.tax.tax_table import to_cents

if TYPE_CHECKING:
    from taxgraph.forms.f1040 import F1040


class F8936(F1040Attachment):
    """Form 8936 for a single clean vehicle.

    Copy ``n`` reports the ``n``th vehicle. The personal-use credit from
    every vehicle is totalled on the primary instance and limited by the
    tax left after earlier credits.
    """

    tag = "f8936"
    sequence_index = 69
    FIELD_COUNT = 12

    def __init__(self, f1040: F1040, copy_index: int = 0) -> None:
        super().__init__(f1040, copy_index)
        vehicles = self.info.clean_vehicles
        self.vehicle: CleanVehicle | None = (
            vehicles[copy_index] if copy_index < len(vehicles) else None
        )

    def is_needed(self) -> bool:
        return self.vehicle is not None

    def _build_copies(self) -> list[F8936]:
        if self.copy_index != 0:
            return []
        return [
            F8936(self.f1040, index)
            for index in range(1, len(self.info.clean_vehicles))
        ]

    @line
    def magi(self) -> Decimal:
        return self.f1040.l11()

    @line
    def magi_limit(self) -> Decimal:
        config = self.year_config
        status = self.info.filing_status
        if self.vehicle is not None and not self.vehicle.is_new:
            return config.clean_vehicle_magi_used[status]
        return config.clean_vehicle_magi_new[status]

    @line
    def tentative_credit(self) -> Decimal:
        if self.vehicle is None or self.magi() > self.magi_limit():
            return ZERO
        config = self.year_config
        cap = config.clean_vehicle_new_max if self.vehicle.is_new else config.clean_vehicle_used_max
        return min(self.vehicle.tentative_credit, cap)

    @line
    def business_portion(self) -> Decimal:
        if self.vehicle is None:
            return ZERO
        return to_cents(self.tentative_credit() * self.vehicle.business_use_pct / 100)

    @line
    def personal_credit(self) -> Decimal:
        return self.tentative_credit() - self.business_portion()

    def total_credit(self) -> Decimal:
        """Personal-use credit across this vehicle and every copy."""
        return sum_fields(form.personal_credit() for form in [self, *self.copies()])

    @line
    def allowed_credit(self) -> Decimal:
        """Credit after the tax liability limit, carried to Schedule 3 line 6f."""
        f1040 = self.f1040
        limit = f1040.l18() - sum_fields([f1040.l19(), f1040.schedule_3.l1()])
        return max(ZERO, min(self.total_credit(), limit))

    def fields(self) -> Sequence[FieldValue]:
        primary = self.info.taxpayer.primary_person
        vehicle = self.vehicle
        placed = vehicle.placed_in_service if vehicle else None
        return [
            primary.full_name(),
            primary.ssid,
            vehicle.vin if vehicle else None,
            vehicle.year_make_model if vehicle else None,
            placed.strftime("%m/%d/%Y") if placed else None,
            vehicle.is_new if vehicle else None,
            self.magi(),
            self.magi_limit(),
            self.tentative_credit(),
            vehicle.business_use_pct if vehicle else None,
            self.business_portion(),
            self.personal_credit(),
        ]
