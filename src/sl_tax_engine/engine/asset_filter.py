"""Fiscal-year scoping of asset records."""

import logging
from typing import Iterable, Optional, Union

from sl_tax_engine.schemas.records import AssetBase, Closure, Disposal
from sl_tax_engine.tools.fiscal_year import range_of

logger = logging.getLogger(__name__)


def _terminated_before(marker: Optional[Union[Disposal, Closure]], window_start) -> bool:
    if marker is None:
        return False
    # A terminal marker without a date is an invalid state: always out of scope
    if marker.date is None:
        return True
    return marker.date < window_start


def in_scope(asset: AssetBase, label: str) -> bool:
    """Decide whether an asset belongs to the fiscal year view.

    An asset is in scope when it was acquired on or before the end of the
    year and was neither disposed nor closed before the year started.
    """
    start, end = range_of(label)
    if asset.date_acquired > end:
        return False
    if _terminated_before(asset.disposed, start):
        return False
    if _terminated_before(asset.closed, start):
        return False
    return True


def filter_assets_for_year(assets: Iterable[AssetBase], label: str) -> list[AssetBase]:
    """Keep only the assets in scope for the fiscal year, preserving order."""
    assets = list(assets)
    scoped = [asset for asset in assets if in_scope(asset, label)]
    if len(scoped) != len(assets):
        logger.debug(f"{len(assets) - len(scoped)} of {len(assets)} assets out of scope for {label}")
    return scoped
