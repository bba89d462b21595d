"""Pytest configuration and shared fixtures for tests."""

from datetime import date
from decimal import Decimal

import pytest

from taxgraph.models.information import (
    Address,
    CapitalTransaction,
    CleanVehicle,
    Dependent,
    EstimatedTaxPayment,
    FilingStatus,
    Form1099Div,
    Form1099Int,
    HealthSavingsAccount,
    IncomeW2,
    ItemizedDeductions,
    Person,
    PersonRole,
    RefundInfo,
    RentalProperty,
    ScheduleK1,
    TaxPayer,
    ValidatedInformation,
)


def make_person(
    first_name: str = "Alex",
    last_name: str = "Rivera",
    role: PersonRole = PersonRole.PRIMARY,
    born: date = date(1985, 6, 15),
    **kwargs,
) -> Person:
    """Create a person with sensible defaults.

    Returns:
        Person instance.
    """
    return Person(
        first_name=first_name,
        last_name=last_name,
        ssid="123-45-6789" if role == PersonRole.PRIMARY else "987-65-4321",
        role=role,
        date_of_birth=born,
        **kwargs,
    )


def make_child(first_name: str, born: date) -> Dependent:
    return Dependent(
        first_name=first_name,
        last_name="Rivera",
        ssid="111-22-3333",
        date_of_birth=born,
        relationship="Son/Daughter",
    )


def make_w2(
    income: str,
    withholding: str = "0",
    role: PersonRole = PersonRole.PRIMARY,
    **kwargs,
) -> IncomeW2:
    """Create a W-2 whose Social Security wages match box 1."""
    amount = Decimal(income)
    return IncomeW2(
        employer_name="Acme Corp",
        occupation="Engineer",
        income=amount,
        fed_withholding=Decimal(withholding),
        ss_wages=amount,
        ss_withholding=(amount * Decimal("0.062")).quantize(Decimal("0.01")),
        medicare_withholding=(amount * Decimal("0.0145")).quantize(Decimal("0.01")),
        person_role=role,
        **kwargs,
    )


def make_info(
    w2s: tuple[IncomeW2, ...] = (),
    filing_status: FilingStatus = FilingStatus.SINGLE,
    spouse: Person | None = None,
    dependents: tuple[Dependent, ...] = (),
    primary: Person | None = None,
    tax_year: int = 2025,
    **kwargs,
) -> ValidatedInformation:
    """Create a snapshot for a single tax year.

    Returns:
        ValidatedInformation instance.
    """
    return ValidatedInformation(
        tax_year=tax_year,
        taxpayer=TaxPayer(
            filing_status=filing_status,
            primary_person=primary or make_person(),
            spouse=spouse,
            dependents=dependents,
            address=Address(address="1 Main St", city="Springfield", state="IL", zip="62701"),
        ),
        w2s=w2s,
        **kwargs,
    )


@pytest.fixture
def single_info() -> ValidatedInformation:
    """Single filer, 50,000 wages, 5,000 withheld, tax year 2025."""
    return make_info(w2s=(make_w2("50000", "5000"),))


@pytest.fixture
def single_owing_info() -> ValidatedInformation:
    """Single filer, 50,000 wages, nothing withheld."""
    return make_info(w2s=(make_w2("50000"),))


@pytest.fixture
def family_info() -> ValidatedInformation:
    """Married couple filing jointly with two young children."""
    return make_info(
        w2s=(
            make_w2("80000", "10000"),
            make_w2("40000", "4000", role=PersonRole.SPOUSE),
        ),
        filing_status=FilingStatus.MFJ,
        spouse=make_person("Sam", "Rivera", role=PersonRole.SPOUSE, born=date(1986, 2, 1)),
        dependents=(
            make_child("Jamie", date(2018, 4, 1)),
            make_child("Robin", date(2020, 9, 1)),
        ),
    )


@pytest.fixture
def rich_info() -> ValidatedInformation:
    """A return that files nearly every supported form."""
    return make_info(
        w2s=(
            make_w2("90000", "12000", box12={"W": Decimal("1000")}),
            make_w2("40000", "3000", role=PersonRole.SPOUSE),
        ),
        filing_status=FilingStatus.MFJ,
        spouse=make_person("Sam", "Rivera", role=PersonRole.SPOUSE, born=date(1966, 2, 1)),
        dependents=(make_child("Jamie", date(2015, 4, 1)),),
        f1099_ints=(Form1099Int(payer="First Bank", income=Decimal("2200")),),
        f1099_divs=(
            Form1099Div(
                payer="Index Fund",
                dividends=Decimal("3000"),
                qualified_dividends=Decimal("2500"),
                total_capital_gains_distributions=Decimal("400"),
                foreign_tax_paid=Decimal("60"),
            ),
        ),
        capital_transactions=(
            CapitalTransaction(
                description="100 sh XYZ",
                date_acquired=date(2025, 1, 10),
                date_sold=date(2025, 8, 1),
                proceeds=Decimal("10000"),
                cost_basis=Decimal("8000"),
            ),
            CapitalTransaction(
                description="50 sh ABC",
                date_acquired=date(2020, 3, 1),
                date_sold=date(2025, 5, 1),
                proceeds=Decimal("6000"),
                cost_basis=Decimal("2500"),
                adjustment=Decimal("150"),
                long_term=True,
            ),
        ),
        schedule_k1s=(
            ScheduleK1(
                partnership_name="Rivera Consulting LLC",
                partnership_ein="12-3456789",
                ordinary_business_income=Decimal("20000"),
                interest_income=Decimal("100"),
                self_employment_earnings=Decimal("20000"),
            ),
        ),
        real_estate=(
            RentalProperty(
                address=Address(address="22 Oak Ave", city="Springfield"),
                rent_received=Decimal("24000"),
                mortgage_interest=Decimal("6000"),
                taxes=Decimal("3000"),
                depreciation=Decimal("5000"),
            ),
        ),
        itemized_deductions=ItemizedDeductions(
            state_and_local_taxes=Decimal("9000"),
            state_and_local_real_estate_taxes=Decimal("6000"),
            interest_8a=Decimal("14000"),
            charity_cash_check=Decimal("5000"),
        ),
        health_savings_accounts=(
            HealthSavingsAccount(
                label="HSA Bank",
                contributions=Decimal("3000"),
                total_distributions=Decimal("500"),
                qualified_distributions=Decimal("300"),
            ),
        ),
        clean_vehicles=(
            CleanVehicle(
                vin="1HGCM82633A004352",
                year_make_model="2025 Example EV",
                placed_in_service=date(2025, 3, 1),
                tentative_credit=Decimal("7500"),
            ),
        ),
        estimated_taxes=(EstimatedTaxPayment(label="Q1", payment=Decimal("1000")),),
        refund=RefundInfo(routing_number="021000021", account_number="123456789"),
    )
