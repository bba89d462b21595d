"""Pydantic models for the validated taxpayer snapshot.

A ``ValidatedInformation`` instance is the single input of a computation
pass. Every model here is frozen: form nodes hold a read-only reference and
scenarios derive new snapshots instead of mutating an existing one.

All monetary fields use Decimal. Optional numeric fields that arrive as
``None`` or an empty string resolve to ``Decimal("0")`` so that a partially
entered return still computes.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from taxgraph.core.config import settings


def _zero_if_missing(value: Any) -> Any:
    """Resolve absent numeric input to zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, str) and not value.strip():
        return Decimal("0")
    return value


# Money fields default to zero when the caller leaves them blank
Money = Annotated[Decimal, BeforeValidator(_zero_if_missing)]


class FilingStatus(str, Enum):
    """Federal filing status."""

    SINGLE = "single"
    MFJ = "mfj"
    MFS = "mfs"
    HOH = "hoh"
    QW = "qw"


class PersonRole(str, Enum):
    """Role of a person on the return."""

    PRIMARY = "PRIMARY"
    SPOUSE = "SPOUSE"
    DEPENDENT = "DEPENDENT"


class AccountType(str, Enum):
    """Bank account type for direct deposit."""

    CHECKING = "checking"
    SAVINGS = "savings"


class HsaCoverage(str, Enum):
    """High deductible health plan coverage type."""

    SELF_ONLY = "self-only"
    FAMILY = "family"


class _FrozenModel(BaseModel):
    """Base for all snapshot models."""

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Identity
# =============================================================================


class Address(_FrozenModel):
    """Mailing address."""

    address: str = ""
    apartment: str | None = None
    city: str = ""
    state: str | None = None
    zip: str | None = None


class Person(_FrozenModel):
    """A person appearing on the return.

    Attributes:
        first_name: Given name.
        last_name: Family name.
        ssid: Social Security number as entered.
        role: Role of this person on the return.
        date_of_birth: Date of birth, used for age-based allowances.
        is_blind: Whether the person is legally blind.
        is_taxpayer_dependent: Whether someone else can claim this person.
    """

    first_name: str
    last_name: str
    ssid: str = ""
    role: PersonRole = PersonRole.PRIMARY
    date_of_birth: date
    is_blind: bool = False
    is_taxpayer_dependent: bool = False

    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}".strip()

    def age_at_end_of(self, year: int) -> int:
        """Age attained on December 31 of ``year``."""
        return year - self.date_of_birth.year


class Dependent(Person):
    """A dependent claimed on the return."""

    role: PersonRole = PersonRole.DEPENDENT
    relationship: str = ""


class TaxPayer(_FrozenModel):
    """Filing unit: status, people and contact details."""

    filing_status: FilingStatus = FilingStatus.SINGLE
    primary_person: Person
    spouse: Person | None = None
    dependents: tuple[Dependent, ...] = ()
    address: Address = Field(default_factory=Address)
    contact_phone_number: str | None = None
    contact_email: str | None = None


# =============================================================================
# Income documents
# =============================================================================


class IncomeW2(_FrozenModel):
    """Form W-2 wage statement.

    Attributes:
        income: Box 1 wages, tips, other compensation.
        medicare_income: Box 5 Medicare wages. ``None`` falls back to ``income``.
        fed_withholding: Box 2 federal income tax withheld.
        ss_wages: Box 3 Social Security wages.
        ss_withholding: Box 4 Social Security tax withheld.
        medicare_withholding: Box 6 Medicare tax withheld.
        box12: Box 12 amounts keyed by code (D for 401(k), W for HSA).
        person_role: Whose W-2 this is.
    """

    employer_name: str = ""
    occupation: str = ""
    income: Money = Decimal("0")
    medicare_income: Decimal | None = None
    fed_withholding: Money = Decimal("0")
    ss_wages: Money = Decimal("0")
    ss_withholding: Money = Decimal("0")
    medicare_withholding: Money = Decimal("0")
    box12: dict[str, Decimal] = Field(default_factory=dict)
    person_role: PersonRole = PersonRole.PRIMARY

    @property
    def effective_medicare_income(self) -> Decimal:
        """Box 5 wages, defaulting to box 1 when not supplied."""
        if self.medicare_income is None:
            return self.income
        return self.medicare_income

    def box12_amount(self, code: str) -> Decimal:
        """Amount reported under a box 12 code, zero when absent."""
        return self.box12.get(code.upper(), Decimal("0"))


class Form1099Int(_FrozenModel):
    """Form 1099-INT interest income."""

    payer: str
    income: Money = Decimal("0")
    person_role: PersonRole = PersonRole.PRIMARY


class Form1099Div(_FrozenModel):
    """Form 1099-DIV dividends and distributions."""

    payer: str
    dividends: Money = Decimal("0")
    qualified_dividends: Money = Decimal("0")
    total_capital_gains_distributions: Money = Decimal("0")
    foreign_tax_paid: Money = Decimal("0")
    person_role: PersonRole = PersonRole.PRIMARY


class CapitalTransaction(_FrozenModel):
    """One brokerage sale reported on Form 1099-B.

    Attributes:
        description: Property description (e.g. "100 sh XYZ").
        date_acquired: Acquisition date, ``None`` for "various".
        date_sold: Sale date.
        proceeds: Gross proceeds.
        cost_basis: Cost or other basis.
        adjustment: Adjustment to gain or loss (wash sales, etc.).
        long_term: Held more than one year.
        basis_reported: Basis was reported to the IRS.
    """

    description: str
    date_acquired: date | None = None
    date_sold: date
    proceeds: Money = Decimal("0")
    cost_basis: Money = Decimal("0")
    adjustment: Money = Decimal("0")
    long_term: bool = False
    basis_reported: bool = True

    @property
    def gain(self) -> Decimal:
        """Gain or (loss) after adjustments."""
        return self.proceeds - self.cost_basis + self.adjustment


# =============================================================================
# Entities
# =============================================================================


class ScheduleK1(_FrozenModel):
    """Partnership Schedule K-1 received by a partner."""

    partnership_name: str
    partnership_ein: str = ""
    is_passive: bool = False
    ordinary_business_income: Money = Decimal("0")
    guaranteed_payments: Money = Decimal("0")
    interest_income: Money = Decimal("0")
    self_employment_earnings: Money = Decimal("0")
    person_role: PersonRole = PersonRole.PRIMARY


class RentalProperty(_FrozenModel):
    """Residential rental property reported on Schedule E part I."""

    address: Address
    property_type: str = "single_family"
    fair_rental_days: int = 365
    personal_use_days: int = 0
    rent_received: Money = Decimal("0")
    advertising: Money = Decimal("0")
    auto: Money = Decimal("0")
    cleaning: Money = Decimal("0")
    commissions: Money = Decimal("0")
    insurance: Money = Decimal("0")
    legal: Money = Decimal("0")
    management: Money = Decimal("0")
    mortgage_interest: Money = Decimal("0")
    repairs: Money = Decimal("0")
    supplies: Money = Decimal("0")
    taxes: Money = Decimal("0")
    utilities: Money = Decimal("0")
    depreciation: Money = Decimal("0")
    other: Money = Decimal("0")

    def expense_lines(self) -> list[Decimal]:
        """Expenses in Schedule E line 5 through 19 order."""
        return [
            self.advertising,
            self.auto,
            self.cleaning,
            self.commissions,
            self.insurance,
            self.legal,
            self.management,
            self.mortgage_interest,
            Decimal("0"),
            self.repairs,
            self.supplies,
            self.taxes,
            self.utilities,
            self.depreciation,
            self.other,
        ]


# =============================================================================
# Deductions, credits, payments
# =============================================================================


class ItemizedDeductions(_FrozenModel):
    """Schedule A itemized deduction inputs."""

    medical_and_dental: Money = Decimal("0")
    state_and_local_taxes: Money = Decimal("0")
    is_sales_tax: bool = False
    state_and_local_real_estate_taxes: Money = Decimal("0")
    state_and_local_property_taxes: Money = Decimal("0")
    interest_8a: Money = Decimal("0")
    interest_8b: Money = Decimal("0")
    interest_8c: Money = Decimal("0")
    interest_8d: Money = Decimal("0")
    investment_interest: Money = Decimal("0")
    charity_cash_check: Money = Decimal("0")
    charity_other: Money = Decimal("0")


class HealthSavingsAccount(_FrozenModel):
    """Health savings account held during the year."""

    label: str
    coverage_type: HsaCoverage = HsaCoverage.SELF_ONLY
    contributions: Money = Decimal("0")
    total_distributions: Money = Decimal("0")
    qualified_distributions: Money = Decimal("0")
    person_role: PersonRole = PersonRole.PRIMARY


class CleanVehicle(_FrozenModel):
    """Clean vehicle placed in service, claimed on Form 8936."""

    vin: str
    year_make_model: str = ""
    placed_in_service: date | None = None
    is_new: bool = True
    tentative_credit: Money = Decimal("0")
    business_use_pct: Money = Decimal("0")


class EstimatedTaxPayment(_FrozenModel):
    """A federal estimated tax payment."""

    label: str = ""
    payment: Money = Decimal("0")


class RefundInfo(_FrozenModel):
    """Direct deposit details for a refund."""

    routing_number: str
    account_number: str
    account_type: AccountType = AccountType.CHECKING


# =============================================================================
# Snapshot
# =============================================================================


class ValidatedInformation(_FrozenModel):
    """A taxpayer's full tax-year snapshot.

    Attributes:
        tax_year: Tax year the snapshot belongs to.
        taxpayer: Filing status, people and contact details.
        w2s: Wage statements.
        f1099_ints: Interest statements.
        f1099_divs: Dividend statements.
        capital_transactions: Brokerage sales.
        schedule_k1s: Partnership K-1s received.
        real_estate: Rental properties.
        itemized_deductions: Itemized deduction inputs, if any were entered.
        elect_itemized_deductions: Itemize even when the standard deduction is larger.
        health_savings_accounts: HSAs held during the year.
        clean_vehicles: Clean vehicles placed in service.
        estimated_taxes: Estimated tax payments made.
        refund: Direct deposit details.
        digital_assets: Answer to the digital asset question.
    """

    tax_year: int = Field(default_factory=lambda: settings.default_tax_year)
    taxpayer: TaxPayer
    w2s: tuple[IncomeW2, ...] = ()
    f1099_ints: tuple[Form1099Int, ...] = ()
    f1099_divs: tuple[Form1099Div, ...] = ()
    capital_transactions: tuple[CapitalTransaction, ...] = ()
    schedule_k1s: tuple[ScheduleK1, ...] = ()
    real_estate: tuple[RentalProperty, ...] = ()
    itemized_deductions: ItemizedDeductions | None = None
    elect_itemized_deductions: bool = False
    health_savings_accounts: tuple[HealthSavingsAccount, ...] = ()
    clean_vehicles: tuple[CleanVehicle, ...] = ()
    estimated_taxes: tuple[EstimatedTaxPayment, ...] = ()
    refund: RefundInfo | None = None
    digital_assets: bool = False

    @property
    def filing_status(self) -> FilingStatus:
        """Shortcut for ``taxpayer.filing_status``."""
        return self.taxpayer.filing_status
