"""Versioned tax regime and valuation index tables.

Each series is keyed by fiscal year label. Lookups outside a series clamp to
its first or last defined year, so every lookup is defined.
"""

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator

logger = logging.getLogger(__name__)

BASE_CURRENCY = "LKR"


class TaxBracket(BaseModel):
    """A marginal rate band. The upper limit is exclusive of the next band's rate."""

    model_config = ConfigDict(frozen=True)

    upper_limit: Optional[float] = Field(
        None, description="Upper bound of the band; None for the final, unbounded band"
    )
    rate: float = Field(ge=0.0, le=1.0)


class FiscalYearRegime(BaseModel):
    """Tax configuration for one year of assessment."""

    model_config = ConfigDict(frozen=True)

    personal_relief: float = Field(ge=0.0)
    brackets: tuple[TaxBracket, ...]

    @field_validator("brackets")
    @classmethod
    def check_bracket_order(cls, brackets: tuple[TaxBracket, ...]) -> tuple[TaxBracket, ...]:
        if not brackets:
            raise ValueError("A regime needs at least one bracket")
        if brackets[-1].upper_limit is not None:
            raise ValueError("The final bracket must be unbounded (upper_limit = null)")
        previous = 0.0
        for bracket in brackets[:-1]:
            if bracket.upper_limit is None:
                raise ValueError("Only the final bracket may be unbounded")
            if bracket.upper_limit <= previous:
                raise ValueError(
                    f"Bracket limits must be strictly increasing ({bracket.upper_limit} <= {previous})"
                )
            previous = bracket.upper_limit
        return brackets


def _clamped_lookup(series: Mapping[str, float], label: str) -> Optional[str]:
    """Pick the year key to use for label: exact, else nearest earlier, else earliest."""
    if not series:
        return None
    if label in series:
        return label
    years = sorted(int(year) for year in series)
    target = int(label)
    if target < years[0]:
        return str(years[0])
    earlier = [year for year in years if year <= target]
    return str(earlier[-1])


class TaxTables(BaseModel):
    """Regimes, exchange rates and commodity price indices."""

    model_config = ConfigDict(frozen=True)

    version: str = "unversioned"
    max_solar_relief: float = Field(default=600_000.0, ge=0.0)
    rent_relief_rate: float = Field(default=0.25, ge=0.0, le=1.0)
    default_commodity: str = "Other"

    regimes: dict[str, FiscalYearRegime]
    fx_rates: dict[str, dict[str, PositiveFloat]] = Field(default_factory=dict)
    commodity_indices: dict[str, dict[str, PositiveFloat]] = Field(default_factory=dict)

    @field_validator("regimes")
    @classmethod
    def check_regimes_present(cls, regimes: dict[str, FiscalYearRegime]) -> dict[str, FiscalYearRegime]:
        if not regimes:
            raise ValueError("At least one fiscal year regime is required")
        return regimes

    @field_validator("fx_rates")
    @classmethod
    def normalize_currency_codes(cls, rates: dict[str, dict[str, float]]) -> dict[str, dict[str, float]]:
        return {code.upper(): series for code, series in rates.items()}

    @property
    def earliest_year(self) -> str:
        return min(self.regimes, key=int)

    @property
    def latest_year(self) -> str:
        return max(self.regimes, key=int)

    def regime_for(self, label: str) -> FiscalYearRegime:
        """Get the regime for a fiscal year, clamping to the table boundaries."""
        year = _clamped_lookup(self.regimes, label)
        if year != label:
            logger.debug(f"No regime defined for {label}; using {year}")
        return self.regimes[year]

    def fx_rate(self, currency: Optional[str], label: str) -> float:
        """LKR per unit of currency for a fiscal year. Unknown currencies are unit rate."""
        code = (currency or BASE_CURRENCY).upper()
        if code == BASE_CURRENCY:
            return 1.0
        series = self.fx_rates.get(code)
        if not series:
            logger.debug(f"No exchange rate series for {code}; treating as unit rate")
            return 1.0
        return series[_clamped_lookup(series, label)]

    def commodity_index(self, item_type: Optional[str], label: str) -> float:
        """USD price index for a precious item type, falling back to the default series."""
        series = self.commodity_indices.get(item_type or "")
        if not series:
            series = self.commodity_indices.get(self.default_commodity)
        if not series:
            logger.warning(f"No commodity index for {item_type} or {self.default_commodity}")
            return 0.0
        return series[_clamped_lookup(series, label)]
