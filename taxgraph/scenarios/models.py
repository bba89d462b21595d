"""Pydantic models for what-if scenarios and their calculation results."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_scenario_id() -> str:
    """Generate a unique scenario id."""
    return f"scenario_{secrets.token_hex(6)}"


def new_modification_id() -> str:
    """Generate a unique modification id."""
    return f"mod_{secrets.token_hex(6)}"


class ModificationType(str, Enum):
    """Kinds of edit a scenario can apply to the base snapshot."""

    SET_FIELD = "SET_FIELD"
    """Assign ``value`` at ``field_path``."""

    ADJUST_FIELD = "ADJUST_FIELD"
    """Add ``value`` to the number at ``field_path``."""

    ADD_INCOME = "ADD_INCOME"
    """Add wages to the first W-2."""

    MODIFY_INCOME = "MODIFY_INCOME"
    """Replace the first W-2's wages."""

    ADD_401K_CONTRIBUTION = "ADD_401K_CONTRIBUTION"
    """Defer additional wages into a 401(k) on the first W-2."""

    ADD_HSA_CONTRIBUTION = "ADD_HSA_CONTRIBUTION"
    """Open an additional HSA with the given contribution."""

    ADD_DEPENDENT = "ADD_DEPENDENT"
    """Append a dependent."""

    ADD_SPOUSE = "ADD_SPOUSE"
    """Add a spouse, optionally with a W-2."""

    CHANGE_FILING_STATUS = "CHANGE_FILING_STATUS"
    """Switch filing status."""

    ADD_ITEMIZED_DEDUCTION = "ADD_ITEMIZED_DEDUCTION"
    """Set one itemized deduction field named by ``field_path``."""


class Modification(BaseModel):
    """A single typed edit within a scenario.

    Attributes:
        id: Unique id within the scenario.
        kind: What the edit does.
        label: Human-readable description.
        value: New value, delta, or a mapping for structured edits.
        field_path: Dotted path into the snapshot (``w2s.0.income``) for
            field edits, or the itemized deduction field name.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_modification_id)
    kind: ModificationType
    label: str = ""
    value: Any = None
    field_path: str | None = None


class Scenario(BaseModel):
    """A named, ordered list of modifications against the base snapshot.

    Attributes:
        tax_year: Year to compute under; ``None`` keeps the base snapshot's year.
    """

    id: str = Field(default_factory=new_scenario_id)
    name: str
    description: str = ""
    modifications: list[Modification] = Field(default_factory=list)
    tax_year: int | None = None
    created_at: datetime = Field(default_factory=utcnow)
    modified_at: datetime = Field(default_factory=utcnow)


class TaxCalculationResult(BaseModel):
    """Summary of one full pass over the form graph.

    Rates are percentages rounded to two places.
    """

    model_config = ConfigDict(frozen=True)

    scenario_id: str
    scenario_name: str
    is_baseline: bool = False
    tax_year: int | None = None
    # Income
    total_income: Decimal = Decimal("0")
    wages_income: Decimal = Decimal("0")
    other_income: Decimal = Decimal("0")
    agi: Decimal = Decimal("0")
    # Deductions
    standard_deduction: Decimal = Decimal("0")
    itemized_deduction: Decimal = Decimal("0")
    deduction_used: Decimal = Decimal("0")
    taxable_income: Decimal = Decimal("0")
    # Tax
    tax_before_credits: Decimal = Decimal("0")
    total_credits: Decimal = Decimal("0")
    total_tax: Decimal = Decimal("0")
    # Payments
    withholdings: Decimal = Decimal("0")
    estimated_payments: Decimal = Decimal("0")
    total_payments: Decimal = Decimal("0")
    # Result
    refund_amount: Decimal = Decimal("0")
    amount_owed: Decimal = Decimal("0")
    effective_tax_rate: Decimal = Decimal("0")
    marginal_tax_rate: Decimal = Decimal("0")
    errors: list[str] = Field(default_factory=list)
    calculated_successfully: bool = True
    filed_forms: list[str] | None = None
    calculated_at: datetime = Field(default_factory=utcnow)


class ScenarioDifference(BaseModel):
    """How one scenario's result differs from the baseline."""

    model_config = ConfigDict(frozen=True)

    scenario_id: str
    scenario_name: str
    agi_diff: Decimal
    taxable_income_diff: Decimal
    total_tax_diff: Decimal
    refund_diff: Decimal
    amount_owed_diff: Decimal
    effective_rate_diff: Decimal


class ScenarioComparison(BaseModel):
    """Baseline plus scenarios, side by side."""

    model_config = ConfigDict(frozen=True)

    baseline: TaxCalculationResult
    scenarios: list[TaxCalculationResult]
    differences: list[ScenarioDifference]
