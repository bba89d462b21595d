"""Tax year parameters and bracket math."""

from taxgraph.tax.tax_table import compute_ordinary_tax, marginal_rate, to_cents
from taxgraph.tax.year_config import (
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_CONFIGS,
    TaxYearConfig,
    get_tax_year_config,
)

__all__ = [
    "TaxYearConfig",
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEAR_CONFIGS",
    "get_tax_year_config",
    "compute_ordinary_tax",
    "marginal_rate",
    "to_cents",
]
