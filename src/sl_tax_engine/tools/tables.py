"""Loading of the regime and valuation index tables."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from sl_tax_engine.config import settings
from sl_tax_engine.schemas.tables import TaxTables

logger = logging.getLogger(__name__)


class TaxTablesError(Exception):
    """Raised when the tax tables cannot be loaded or are invalid."""

    pass


@lru_cache(maxsize=8)
def _load(path: Path) -> TaxTables:
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise TaxTablesError(f"Tax tables not found at {path}") from e
    except json.JSONDecodeError as e:
        raise TaxTablesError(f"Tax tables at {path} are not valid JSON: {e}") from e

    try:
        tables = TaxTables.model_validate(raw)
    except ValidationError as e:
        raise TaxTablesError(f"Tax tables at {path} are invalid: {e}") from e

    logger.info(
        f"Loaded tax tables v{tables.version} from {path} "
        f"(regimes {tables.earliest_year}-{tables.latest_year})"
    )
    return tables


def load_tax_tables(path: Optional[Path] = None) -> TaxTables:
    """Load tax tables from JSON, once per path.

    Args:
        path: Table file (default: settings.tax_tables_path)

    Returns:
        Frozen TaxTables instance

    Raises:
        TaxTablesError: If the file is missing, malformed or violates bracket invariants
    """
    return _load(Path(path or settings.tax_tables_path).resolve())
