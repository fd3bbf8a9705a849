"""Source-of-funds completeness check for asset acquisitions."""

import logging
from typing import Iterable

from sl_tax_engine.schemas.records import AssetBase
from sl_tax_engine.schemas.results import SourceOfFundsCheck

logger = logging.getLogger(__name__)


def validate_source_of_funds(asset: AssetBase) -> SourceOfFundsCheck:
    """Check that declared funding sources cover the asset's cost.

    Returns a result rather than raising: an asset with no declared sources
    is invalid with its whole cost unexplained.
    """
    if asset.funding_sources is None:
        return SourceOfFundsCheck(asset_id=asset.id, is_valid=False, unexplained_amount=asset.cost)

    total_funding = sum(source.amount for source in asset.funding_sources)
    unexplained = asset.cost - total_funding

    return SourceOfFundsCheck(
        asset_id=asset.id,
        is_valid=unexplained <= 0,
        unexplained_amount=max(0.0, unexplained),
    )


def source_of_funds_warnings(assets: Iterable[AssetBase]) -> list[str]:
    """Human-readable warnings for assets whose funding is not fully explained."""
    warnings = []
    for asset in assets:
        check = validate_source_of_funds(asset)
        if not check.is_valid:
            label = asset.description or asset.id
            warnings.append(
                f"Source of funds for '{label}' leaves Rs. {check.unexplained_amount:,.2f} unexplained"
            )
    if warnings:
        logger.warning(f"{len(warnings)} asset(s) with incomplete source of funds")
    return warnings
