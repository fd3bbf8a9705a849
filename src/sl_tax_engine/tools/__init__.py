"""Deterministic tools: fiscal calendar, currency helpers and table loading."""

from sl_tax_engine.tools.currency import format_lkr, parse_currency_string
from sl_tax_engine.tools.fiscal_year import fiscal_year_of, in_year, range_of
from sl_tax_engine.tools.tables import TaxTablesError, load_tax_tables

__all__ = [
    "fiscal_year_of",
    "format_lkr",
    "in_year",
    "load_tax_tables",
    "parse_currency_string",
    "range_of",
    "TaxTablesError",
]
