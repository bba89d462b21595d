"""Ready-made scenarios for common what-if questions."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from taxgraph.core.config import settings
from taxgraph.models.information import FilingStatus, HsaCoverage
from taxgraph.scenarios.models import Modification, ModificationType, Scenario
from taxgraph.tax.year_config import get_tax_year_config


def _dollars(amount: Decimal) -> str:
    return f"${amount:,.0f}"


def max_401k_scenario(
    current_contribution: Decimal = Decimal("0"), tax_year: int | None = None
) -> Scenario:
    """Defer enough additional wages to reach the year's 401(k) limit.

    Args:
        current_contribution: Amount already deferred this year.
        tax_year: Year whose limit applies; defaults to the configured year.
    """
    config = get_tax_year_config(tax_year or settings.default_tax_year)
    additional = max(Decimal("0"), config.elective_deferral_limit - current_contribution)
    return Scenario(
        name="Max Out 401(k)",
        description=f"Add {_dollars(additional)} to reach 401(k) max",
        modifications=[
            Modification(
                kind=ModificationType.ADD_401K_CONTRIBUTION,
                label="Additional 401(k) Contribution",
                value=additional,
            )
        ],
    )


def add_child_scenario(tax_year: int | None = None) -> Scenario:
    """Add a five-year-old qualifying child."""
    year = tax_year or settings.default_tax_year
    return Scenario(
        name="Add Child Dependent",
        description="Add a qualifying child dependent",
        modifications=[
            Modification(
                kind=ModificationType.ADD_DEPENDENT,
                label="New Child",
                value={
                    "first_name": "New",
                    "last_name": "Child",
                    "relationship": "Son/Daughter",
                    "date_of_birth": date(year - 5, 1, 1),
                },
            )
        ],
    )


def max_hsa_scenario(
    current_contribution: Decimal = Decimal("0"),
    family_coverage: bool = False,
    tax_year: int | None = None,
) -> Scenario:
    """Contribute up to the year's HSA limit for the coverage type."""
    config = get_tax_year_config(tax_year or settings.default_tax_year)
    coverage = HsaCoverage.FAMILY if family_coverage else HsaCoverage.SELF_ONLY
    additional = max(Decimal("0"), config.hsa_limit(coverage) - current_contribution)
    return Scenario(
        name="Max Out HSA",
        description=f"Add {_dollars(additional)} HSA contribution",
        modifications=[
            Modification(
                kind=ModificationType.ADD_HSA_CONTRIBUTION,
                label="Additional HSA Contribution",
                value={"amount": additional, "coverage_type": coverage},
            )
        ],
    )


def spouse_works_scenario(spouse_income: Decimal = Decimal("50000")) -> Scenario:
    """Add a working spouse and switch to married filing jointly."""
    return Scenario(
        name="Spouse Works",
        description=f"Add spouse with {_dollars(spouse_income)} income",
        modifications=[
            Modification(
                kind=ModificationType.ADD_SPOUSE,
                label="Add Working Spouse",
                value={
                    "first_name": "Spouse",
                    "last_name": "Name",
                    "date_of_birth": date(1985, 1, 1),
                    "income": spouse_income,
                },
            ),
            Modification(
                kind=ModificationType.CHANGE_FILING_STATUS,
                label="Change to Married Filing Jointly",
                value=FilingStatus.MFJ,
            ),
        ],
    )
