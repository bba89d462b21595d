"""Input data models for a computation pass."""

from taxgraph.models.information import (
    AccountType,
    Address,
    CapitalTransaction,
    CleanVehicle,
    Dependent,
    EstimatedTaxPayment,
    FilingStatus,
    Form1099Div,
    Form1099Int,
    HealthSavingsAccount,
    HsaCoverage,
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

__all__ = [
    "AccountType",
    "Address",
    "CapitalTransaction",
    "CleanVehicle",
    "Dependent",
    "EstimatedTaxPayment",
    "FilingStatus",
    "Form1099Div",
    "Form1099Int",
    "HealthSavingsAccount",
    "HsaCoverage",
    "IncomeW2",
    "ItemizedDeductions",
    "Person",
    "PersonRole",
    "RefundInfo",
    "RentalProperty",
    "ScheduleK1",
    "TaxPayer",
    "ValidatedInformation",
]
