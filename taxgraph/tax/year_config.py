"""Tax year-specific federal parameters.

This module centralizes the bracket thresholds, deduction amounts, credit
limits and contribution caps each form reads, so no form hardcodes a
year-dependent number.

Example:
    >>> from taxgraph.tax.year_config import get_tax_year_config
    >>> config = get_tax_year_config(2025)
    >>> config.standard_deduction(FilingStatus.SINGLE)
    Decimal('15750')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from taxgraph.models.information import FilingStatus, HsaCoverage

# Marginal rates shared by every filing status, lowest bracket first
ORDINARY_RATES: tuple[Decimal, ...] = (
    Decimal("0.10"),
    Decimal("0.12"),
    Decimal("0.22"),
    Decimal("0.24"),
    Decimal("0.32"),
    Decimal("0.35"),
    Decimal("0.37"),
)

MARRIED_STATUSES = (FilingStatus.MFJ, FilingStatus.MFS, FilingStatus.QW)


def _by_status(
    single: str, mfj: str, mfs: str, hoh: str, qw: str | None = None
) -> dict[FilingStatus, Decimal]:
    """Build a per-status table; qualifying surviving spouse defaults to MFJ."""
    return {
        FilingStatus.SINGLE: Decimal(single),
        FilingStatus.MFJ: Decimal(mfj),
        FilingStatus.MFS: Decimal(mfs),
        FilingStatus.HOH: Decimal(hoh),
        FilingStatus.QW: Decimal(qw if qw is not None else mfj),
    }


def _brackets(*bounds: str) -> tuple[Decimal, ...]:
    return tuple(Decimal(b) for b in bounds)


@dataclass(frozen=True)
class TaxYearConfig:
    """Federal constants and thresholds for one tax year.

    All monetary values are Decimal. Frozen to prevent accidental
    modification.

    Attributes:
        tax_year: The tax year these values apply to.
        ordinary_brackets: Upper bound of each bracket except the top one,
            per filing status.
        standard_deductions: Basic standard deduction per filing status.
        additional_deduction_married: Age/blindness allowance for married statuses.
        additional_deduction_unmarried: Age/blindness allowance otherwise.
        ltcg_0_thresholds: Top of the 0% capital gains bracket.
        ltcg_15_thresholds: Top of the 15% capital gains bracket.
        ss_wage_base: Social Security wage base limit.
        salt_cap: State and local tax deduction cap (half for MFS).
        ctc_per_child: Child tax credit per qualifying child.
        actc_max_per_child: Refundable portion cap per qualifying child.
        hsa_limit_self_only: HSA contribution limit, self-only coverage.
        hsa_limit_family: HSA contribution limit, family coverage.
        elective_deferral_limit: 401(k) elective deferral limit.
    """

    tax_year: int
    ordinary_brackets: dict[FilingStatus, tuple[Decimal, ...]]
    standard_deductions: dict[FilingStatus, Decimal]
    additional_deduction_married: Decimal
    additional_deduction_unmarried: Decimal
    ltcg_0_thresholds: dict[FilingStatus, Decimal]
    ltcg_15_thresholds: dict[FilingStatus, Decimal]

    # Social Security / Medicare
    ss_wage_base: Decimal
    ss_rate_employee: Decimal = Decimal("0.062")
    medicare_rate: Decimal = Decimal("0.0145")

    # Self-employment tax (combined employer + employee rates)
    se_ss_rate: Decimal = Decimal("0.124")  # 12.4% (6.2% x 2)
    se_medicare_rate: Decimal = Decimal("0.029")  # 2.9% (1.45% x 2)
    se_net_earnings_factor: Decimal = Decimal("0.9235")  # 92.35% of net SE income
    se_minimum_net_earnings: Decimal = Decimal("400")

    # Dependent filer standard deduction
    dependent_deduction_floor: Decimal = Decimal("1300")
    dependent_earned_income_addon: Decimal = Decimal("450")

    # Capital losses
    capital_loss_limit: Decimal = Decimal("3000")
    capital_loss_limit_mfs: Decimal = Decimal("1500")

    # Itemized deductions
    medical_floor_rate: Decimal = Decimal("0.075")
    salt_cap: Decimal = Decimal("10000")
    salt_phasedown_threshold: Decimal | None = None
    salt_phasedown_rate: Decimal = Decimal("0.30")
    salt_floor: Decimal = Decimal("10000")

    # Child tax credit
    ctc_per_child: Decimal = Decimal("2000")
    odc_per_dependent: Decimal = Decimal("500")
    ctc_phaseout_mfj: Decimal = Decimal("400000")
    ctc_phaseout_other: Decimal = Decimal("200000")
    ctc_phaseout_step: Decimal = Decimal("1000")
    ctc_phaseout_per_step: Decimal = Decimal("50")
    ctc_age_limit: int = 17
    actc_max_per_child: Decimal = Decimal("1700")
    actc_earned_income_floor: Decimal = Decimal("2500")
    actc_rate: Decimal = Decimal("0.15")

    # Health savings accounts
    hsa_limit_self_only: Decimal = Decimal("4150")
    hsa_limit_family: Decimal = Decimal("8300")
    hsa_catch_up: Decimal = Decimal("1000")
    hsa_catch_up_age: int = 55
    hsa_additional_tax_rate: Decimal = Decimal("0.20")

    # Retirement
    elective_deferral_limit: Decimal = Decimal("23000")

    # Clean vehicle credit
    clean_vehicle_new_max: Decimal = Decimal("7500")
    clean_vehicle_used_max: Decimal = Decimal("4000")
    clean_vehicle_magi_new: dict[FilingStatus, Decimal] = field(
        default_factory=lambda: _by_status("150000", "300000", "150000", "225000")
    )
    clean_vehicle_magi_used: dict[FilingStatus, Decimal] = field(
        default_factory=lambda: _by_status("75000", "150000", "75000", "112500")
    )

    # Schedule B threshold
    schedule_b_threshold: Decimal = Decimal("1500")

    def standard_deduction(self, status: FilingStatus) -> Decimal:
        """Basic standard deduction for a filing status."""
        return self.standard_deductions[status]

    def additional_deduction(self, status: FilingStatus) -> Decimal:
        """Per-allowance amount for age 65+ or blindness."""
        if status in MARRIED_STATUSES:
            return self.additional_deduction_married
        return self.additional_deduction_unmarried

    def hsa_limit(self, coverage: HsaCoverage) -> Decimal:
        """Annual HSA contribution limit before catch-up."""
        if coverage == HsaCoverage.FAMILY:
            return self.hsa_limit_family
        return self.hsa_limit_self_only

    def capital_loss_cap(self, status: FilingStatus) -> Decimal:
        """Largest net capital loss deductible against ordinary income."""
        if status == FilingStatus.MFS:
            return self.capital_loss_limit_mfs
        return self.capital_loss_limit


# 2024 Configuration - IRS published values
TAX_YEAR_2024 = TaxYearConfig(
    tax_year=2024,
    ordinary_brackets={
        FilingStatus.SINGLE: _brackets("11600", "47150", "100525", "191950", "243725", "609350"),
        FilingStatus.MFJ: _brackets("23200", "94300", "201050", "383900", "487450", "731200"),
        FilingStatus.MFS: _brackets("11600", "47150", "100525", "191950", "243725", "365600"),
        FilingStatus.HOH: _brackets("16550", "63100", "100500", "191950", "243700", "609350"),
        FilingStatus.QW: _brackets("23200", "94300", "201050", "383900", "487450", "731200"),
    },
    standard_deductions=_by_status("14600", "29200", "14600", "21900"),
    additional_deduction_married=Decimal("1550"),
    additional_deduction_unmarried=Decimal("1950"),
    ltcg_0_thresholds=_by_status("47025", "94050", "47025", "63000"),
    ltcg_15_thresholds=_by_status("518900", "583750", "291850", "551350"),
    ss_wage_base=Decimal("168600"),
    dependent_deduction_floor=Decimal("1300"),
    salt_cap=Decimal("10000"),
    ctc_per_child=Decimal("2000"),
    actc_max_per_child=Decimal("1700"),
    hsa_limit_self_only=Decimal("4150"),
    hsa_limit_family=Decimal("8300"),
    elective_deferral_limit=Decimal("23000"),
)

# 2025 Configuration - reflects the 2025 reconciliation act amounts
TAX_YEAR_2025 = TaxYearConfig(
    tax_year=2025,
    ordinary_brackets={
        FilingStatus.SINGLE: _brackets("11925", "48475", "103350", "197300", "250525", "626350"),
        FilingStatus.MFJ: _brackets("23850", "96950", "206700", "394600", "501050", "751600"),
        FilingStatus.MFS: _brackets("11925", "48475", "103350", "197300", "250525", "375800"),
        FilingStatus.HOH: _brackets("17000", "64850", "103350", "197300", "250500", "626350"),
        FilingStatus.QW: _brackets("23850", "96950", "206700", "394600", "501050", "751600"),
    },
    standard_deductions=_by_status("15750", "31500", "15750", "23625"),
    additional_deduction_married=Decimal("1600"),
    additional_deduction_unmarried=Decimal("2000"),
    ltcg_0_thresholds=_by_status("48350", "96700", "48350", "64750"),
    ltcg_15_thresholds=_by_status("533400", "600050", "300000", "566700"),
    ss_wage_base=Decimal("176100"),
    dependent_deduction_floor=Decimal("1350"),
    salt_cap=Decimal("40000"),
    salt_phasedown_threshold=Decimal("500000"),
    ctc_per_child=Decimal("2200"),
    actc_max_per_child=Decimal("1700"),
    hsa_limit_self_only=Decimal("4300"),
    hsa_limit_family=Decimal("8550"),
    elective_deferral_limit=Decimal("23500"),
)

# Registry of available tax year configurations
TAX_YEAR_CONFIGS: dict[int, TaxYearConfig] = {
    2024: TAX_YEAR_2024,
    2025: TAX_YEAR_2025,
}


def get_tax_year_config(year: int) -> TaxYearConfig:
    """Get configuration for a specific tax year.

    Args:
        year: The tax year (e.g., 2025).

    Returns:
        TaxYearConfig for the specified year.

    Raises:
        ValueError: If no configuration exists for the requested year.
    """
    if year not in TAX_YEAR_CONFIGS:
        available = sorted(TAX_YEAR_CONFIGS.keys())
        raise ValueError(
            f"No tax configuration for year {year}. Available years: {available}"
        )
    return TAX_YEAR_CONFIGS[year]
