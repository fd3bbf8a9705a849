"""Statement of assets and liabilities for a fiscal year."""

import logging
from typing import Iterable, Optional

from sl_tax_engine.engine.asset_filter import filter_assets_for_year
from sl_tax_engine.engine.valuation import get_asset_market_value
from sl_tax_engine.schemas.records import AnyAsset, LiabilityRecord
from sl_tax_engine.schemas.results import AssetSchedule, AssetScheduleLine
from sl_tax_engine.schemas.tables import TaxTables
from sl_tax_engine.snapshot import ownership_fraction
from sl_tax_engine.tools.fiscal_year import range_of

logger = logging.getLogger(__name__)


def outstanding_balance(liability: LiabilityRecord, label: str) -> float:
    """Balance owed at the end of the fiscal year.

    current_balance applies when no payment falls after the year end. Otherwise the
    balance is replayed from the original amount through the payments made by the
    year end: a recorded balance_after_payment resets it, any other payment reduces
    it by the principal paid.
    """
    _, year_end = range_of(label)
    if not any(p.date > year_end for p in liability.payments):
        return liability.current_balance

    balance = liability.original_amount
    for payment in sorted(liability.payments, key=lambda p: p.date):
        if payment.date > year_end:
            break
        if payment.balance_after_payment is not None:
            balance = payment.balance_after_payment
        else:
            balance -= payment.principal_paid
    return max(0.0, balance)


def build_asset_schedule(
    assets: Iterable[AnyAsset],
    liabilities: Iterable[LiabilityRecord],
    label: str,
    tables: TaxTables,
    owner_id: Optional[str] = None,
) -> AssetSchedule:
    """List the year's in-scope assets at market value, with outstanding liabilities.

    Args:
        assets: Asset records
        liabilities: Liability records
        label: Fiscal year label
        tables: Regime and index tables
        owner_id: Entity whose share is reported; None reports the whole family

    Returns:
        AssetSchedule with one line per in-scope asset
    """
    _, year_end = range_of(label)
    lines = [
        AssetScheduleLine(
            asset_id=asset.id,
            cage=asset.cage,
            category=asset.category,
            description=asset.description,
            date_acquired=asset.date_acquired,
            cost=asset.cost,
            market_value=get_asset_market_value(asset, label, tables),
            ownership_fraction=ownership_fraction(asset, owner_id),
        )
        for asset in filter_assets_for_year(assets, label)
    ]

    total_liabilities = sum(
        outstanding_balance(liability, label) * ownership_fraction(liability, owner_id)
        for liability in liabilities
        if liability.date_acquired <= year_end
    )

    logger.debug(f"Asset schedule {label}: {len(lines)} assets, liabilities {total_liabilities:,.2f}")
    return AssetSchedule(tax_year=label, lines=lines, total_liabilities=total_liabilities)
