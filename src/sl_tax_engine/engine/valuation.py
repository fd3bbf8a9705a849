"""Market valuation of assets for a fiscal year.

Precious items are valued from historical cost using two compounded factors:
the change in the USD commodity price index and the change in the LKR/USD
exchange rate between the acquisition year and the target year. Foreign
currency balances are converted at the target year's rate.
"""

import logging
from typing import Iterable, Optional, TypeVar, assert_never

from sl_tax_engine.schemas.records import (
    AnyAsset,
    BusinessProperty,
    FinancialAsset,
    ImmovableProperty,
    Jewellery,
    MotorVehicle,
    ShareAccount,
)
from sl_tax_engine.schemas.tables import TaxTables
from sl_tax_engine.tools.fiscal_year import fiscal_year_of

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def record_for_year(records: Iterable[_T], label: str) -> Optional[_T]:
    """Get the sub-record for exactly this fiscal year, if any."""
    return next((r for r in records if r.tax_year == label), None)


def latest_record_up_to(records: Iterable[_T], label: str) -> Optional[_T]:
    """Get the most recent sub-record at or before the fiscal year (never a future one)."""
    eligible = [r for r in records if int(r.tax_year) <= int(label)]
    if not eligible:
        return None
    return max(eligible, key=lambda r: int(r.tax_year))


def appreciated_value(
    cost: float,
    item_type: Optional[str],
    acquired_year: str,
    target_year: str,
    tables: TaxTables,
) -> float:
    """Index a precious item's cost from its acquisition year to the target year.

    value = cost x (index[target] / index[acquired]) x (USD[target] / USD[acquired])
    """
    base_index = tables.commodity_index(item_type, acquired_year)
    base_rate = tables.fx_rate("USD", acquired_year)
    if base_index == 0 or base_rate == 0:
        logger.warning(f"Zero base index for {item_type} in {acquired_year}; keeping cost")
        return cost

    usd_appreciation = tables.commodity_index(item_type, target_year) / base_index
    rupee_depreciation = tables.fx_rate("USD", target_year) / base_rate
    return cost * usd_appreciation * rupee_depreciation


def foreign_currency_value(asset: FinancialAsset, target_year: str, tables: TaxTables) -> float:
    """LKR value of a foreign currency account for the fiscal year.

    Prefers the year's closing balance; falls back to the stored market value,
    which is taken to be in the account currency.
    """
    if not asset.is_foreign_currency:
        return asset.market_value

    rate = tables.fx_rate(asset.currency, target_year)
    balance = record_for_year(asset.balances, target_year)
    if balance is not None:
        return balance.closing_balance * rate
    return asset.market_value * rate


def jewellery_market_value(asset: Jewellery, target_year: str, tables: TaxTables) -> float:
    """Indexed value of a jewellery holding, including later purchases and sales."""
    acquired_year = fiscal_year_of(asset.date_acquired)
    value = appreciated_value(asset.cost, asset.item_type, acquired_year, target_year, tables)

    for tx in asset.jewellery_transactions:
        if int(tx.tax_year) > int(target_year):
            continue
        if tx.type == "purchase":
            value += appreciated_value(
                tx.amount, tx.item_type or asset.item_type, tx.tax_year, target_year, tables
            )
        else:
            value -= tx.amount

    return max(0.0, value)


def _valued_property(asset, target_year: str) -> Optional[float]:
    valuation = latest_record_up_to(asset.valuations, target_year)
    if valuation is not None:
        return valuation.market_value
    return None


def get_asset_market_value(asset: AnyAsset, target_year: str, tables: TaxTables) -> float:
    """Market value of any asset as reported for the fiscal year."""
    if isinstance(asset, ImmovableProperty):
        valued = _valued_property(asset, target_year)
        if valued is not None:
            return valued
        with_value = [e for e in asset.property_expenses if e.market_value is not None]
        expense = latest_record_up_to(with_value, target_year)
        if expense is not None:
            return expense.market_value
        return asset.market_value
    if isinstance(asset, MotorVehicle):
        valued = _valued_property(asset, target_year)
        return valued if valued is not None else asset.market_value
    if isinstance(asset, ShareAccount):
        stock_balance = latest_record_up_to(asset.stock_balances, target_year)
        return stock_balance.portfolio_value if stock_balance is not None else asset.market_value
    if isinstance(asset, Jewellery):
        return jewellery_market_value(asset, target_year, tables)
    if isinstance(asset, FinancialAsset):
        return foreign_currency_value(asset, target_year, tables)
    if isinstance(asset, BusinessProperty):
        return asset.market_value
    assert_never(asset)

