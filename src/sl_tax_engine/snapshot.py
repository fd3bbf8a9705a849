"""Taxpayer record snapshots: loading from JSON and owner scoping."""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

from sl_tax_engine.schemas.records import (
    AssetRecord,
    Certificate,
    IncomeRecord,
    LiabilityRecord,
    OwnershipShare,
    TaxEntity,
)

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read or does not match the schema."""

    pass


class TaxpayerSnapshot(BaseModel):
    """Immutable view of all records the engine works on for one invocation."""

    entities: list[TaxEntity] = Field(default_factory=list)
    assets: list[AssetRecord] = Field(default_factory=list)
    liabilities: list[LiabilityRecord] = Field(default_factory=list)
    incomes: list[IncomeRecord] = Field(default_factory=list)
    certificates: list[Certificate] = Field(default_factory=list)
    solar_investment: float = Field(
        default=0.0, description="Rooftop solar investment eligible for relief"
    )

    def entity(self, entity_id: str) -> Optional[TaxEntity]:
        return next((e for e in self.entities if e.id == entity_id), None)


def load_snapshot(path: Union[str, Path]) -> TaxpayerSnapshot:
    """Load a snapshot from a JSON file.

    Args:
        path: JSON file with entities, assets, liabilities, incomes and certificates

    Returns:
        Validated TaxpayerSnapshot

    Raises:
        SnapshotError: If the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e

    try:
        snapshot = TaxpayerSnapshot.model_validate(raw)
    except ValidationError as e:
        raise SnapshotError(f"Snapshot {path} failed validation:\n{e}") from e

    logger.info(
        f"Loaded snapshot {path.name}: {len(snapshot.entities)} entities, "
        f"{len(snapshot.assets)} assets, {len(snapshot.liabilities)} liabilities, "
        f"{len(snapshot.incomes)} incomes, {len(snapshot.certificates)} certificates"
    )
    return snapshot


def _holds_share(shares: list[OwnershipShare], entity_id: str) -> bool:
    return any(share.entity_id == entity_id for share in shares)


def ownership_fraction(record, entity_id: Optional[str]) -> float:
    """Fraction (0-1) of an asset or liability attributable to an entity.

    The family view (entity_id None) owns everything. When ownership shares
    are recorded they take precedence over the owner_id.
    """
    if entity_id is None:
        return 1.0
    if record.ownership_shares:
        return sum(s.percentage for s in record.ownership_shares if s.entity_id == entity_id) / 100.0
    return 1.0 if record.owner_id == entity_id else 0.0


def scope_snapshot(snapshot: TaxpayerSnapshot, owner_id: Optional[str]) -> TaxpayerSnapshot:
    """Restrict a snapshot to one entity's records; None keeps the whole family."""
    if owner_id is None:
        return snapshot

    def owns(record) -> bool:
        return record.owner_id == owner_id or _holds_share(record.ownership_shares, owner_id)

    scoped = snapshot.model_copy(
        update={
            "assets": [a for a in snapshot.assets if owns(a)],
            "liabilities": [l for l in snapshot.liabilities if owns(l)],
            "incomes": [i for i in snapshot.incomes if i.owner_id == owner_id],
            "certificates": [c for c in snapshot.certificates if c.owner_id == owner_id],
        }
    )
    logger.debug(
        f"Scoped snapshot to {owner_id}: {len(scoped.assets)} assets, {len(scoped.incomes)} incomes"
    )
    return scoped
