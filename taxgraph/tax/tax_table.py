"""Ordinary income tax from the year's marginal brackets."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from taxgraph.models.information import FilingStatus
from taxgraph.tax.year_config import ORDINARY_RATES, TaxYearConfig

CENTS = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    """Round a dollar amount to cents, half up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_ordinary_tax(
    config: TaxYearConfig, filing_status: FilingStatus, taxable_income: Decimal
) -> Decimal:
    """Calculate federal income tax using marginal brackets.

    Args:
        config: Parameters for the return's tax year.
        filing_status: Filing status selecting the bracket table.
        taxable_income: Income after deductions. Negative amounts tax as zero.

    Returns:
        Tax rounded to cents.

    Example:
        >>> compute_ordinary_tax(TAX_YEAR_2025, FilingStatus.SINGLE, Decimal("34250"))
        Decimal('3871.50')
    """
    bounds = config.ordinary_brackets[filing_status]
    remaining = max(Decimal("0"), taxable_income)
    tax = Decimal("0")
    prev_bound = Decimal("0")

    for index, rate in enumerate(ORDINARY_RATES):
        if remaining <= 0:
            break
        if index < len(bounds):
            bracket_size = min(remaining, bounds[index] - prev_bound)
            prev_bound = bounds[index]
        else:
            # Top bracket - no limit
            bracket_size = remaining
        tax += bracket_size * rate
        remaining -= bracket_size

    return to_cents(tax)


def marginal_rate(
    config: TaxYearConfig, filing_status: FilingStatus, taxable_income: Decimal
) -> Decimal:
    """Marginal rate, in percent, of the bracket containing ``taxable_income``.

    An amount exactly on a bracket's upper bound belongs to that bracket.
    """
    for bound, rate in zip(config.ordinary_brackets[filing_status], ORDINARY_RATES):
        if taxable_income <= bound:
            return rate * 100
    return ORDINARY_RATES[-1] * 100
