"""Tax computation and audit-risk engine.

Every function here is a pure function of its inputs: records, a fiscal
year label and the TaxTables passed in.
"""

from sl_tax_engine.engine.asset_filter import filter_assets_for_year, in_scope
from sl_tax_engine.engine.asset_schedule import build_asset_schedule, outstanding_balance
from sl_tax_engine.engine.audit_risk import calculate_audit_risk, classify_risk
from sl_tax_engine.engine.income import calculate_total_income, derived_investment_income
from sl_tax_engine.engine.progressive_tax import compute_tax, get_tax_breakdown, tax_on
from sl_tax_engine.engine.source_of_funds import source_of_funds_warnings, validate_source_of_funds
from sl_tax_engine.engine.valuation import (
    appreciated_value,
    foreign_currency_value,
    get_asset_market_value,
)

__all__ = [
    "appreciated_value",
    "build_asset_schedule",
    "calculate_audit_risk",
    "calculate_total_income",
    "classify_risk",
    "compute_tax",
    "derived_investment_income",
    "filter_assets_for_year",
    "foreign_currency_value",
    "get_asset_market_value",
    "get_tax_breakdown",
    "in_scope",
    "outstanding_balance",
    "source_of_funds_warnings",
    "tax_on",
    "validate_source_of_funds",
]
