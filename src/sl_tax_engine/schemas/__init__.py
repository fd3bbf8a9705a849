"""Pydantic schemas for the Sri Lanka tax engine."""

from sl_tax_engine.schemas.records import (
    AssetRecord,
    Certificate,
    EmploymentIncome,
    FinancialAsset,
    ImmovableProperty,
    IncomeRecord,
    InvestmentIncome,
    Jewellery,
    LiabilityRecord,
    ShareAccount,
    TaxEntity,
)
from sl_tax_engine.schemas.results import AuditRisk, IncomeSummary, TaxComputation, TaxReport
from sl_tax_engine.schemas.tables import FiscalYearRegime, TaxBracket, TaxTables

__all__ = [
    "AssetRecord",
    "AuditRisk",
    "Certificate",
    "EmploymentIncome",
    "FinancialAsset",
    "FiscalYearRegime",
    "ImmovableProperty",
    "IncomeRecord",
    "IncomeSummary",
    "InvestmentIncome",
    "Jewellery",
    "LiabilityRecord",
    "ShareAccount",
    "TaxBracket",
    "TaxComputation",
    "TaxEntity",
    "TaxReport",
    "TaxTables",
]
