"""Progressive personal income tax computation.

Brackets are applied as a marginal integral: each band taxes only the slice
of income between the previous band's limit and its own. An amount equal to
a band's limit is taxed entirely within that band.
"""

import logging
import math
from typing import Iterable

from sl_tax_engine.engine.income import calculate_total_income
from sl_tax_engine.schemas.records import AnyAsset, AnyIncome, Certificate
from sl_tax_engine.schemas.results import Reliefs, TaxBracketSlice, TaxComputation, TaxCredits
from sl_tax_engine.schemas.tables import TaxTables

logger = logging.getLogger(__name__)


def round_rupees(amount: float) -> float:
    """Round half-up to whole rupees."""
    return float(math.floor(amount + 0.5))


def get_tax_breakdown(taxable_income: float, label: str, tables: TaxTables) -> list[TaxBracketSlice]:
    """Split taxable income into per-bracket slices for the fiscal year's regime."""
    regime = tables.regime_for(label)
    slices: list[TaxBracketSlice] = []
    previous_limit = 0.0

    for bracket in regime.brackets:
        if taxable_income <= previous_limit:
            break
        upper = bracket.upper_limit if bracket.upper_limit is not None else math.inf
        amount = min(taxable_income, upper) - previous_limit
        slices.append(
            TaxBracketSlice(
                lower=previous_limit,
                upper=bracket.upper_limit,
                rate=bracket.rate,
                amount=amount,
                tax=round_rupees(amount * bracket.rate),
            )
        )
        previous_limit = upper

    return slices


def tax_on(taxable_income: float, label: str, tables: TaxTables) -> float:
    """Tax due on a taxable income figure, rounded to whole rupees."""
    regime = tables.regime_for(label)
    tax = 0.0
    previous_limit = 0.0

    for bracket in regime.brackets:
        if taxable_income <= previous_limit:
            break
        upper = bracket.upper_limit if bracket.upper_limit is not None else math.inf
        tax += (min(taxable_income, upper) - previous_limit) * bracket.rate
        previous_limit = upper

    return round_rupees(tax)


def compute_tax(
    incomes: Iterable[AnyIncome],
    assets: Iterable[AnyAsset],
    label: str,
    tables: TaxTables,
    solar_investment: float = 0.0,
    certificates: Iterable[Certificate] = (),
) -> TaxComputation:
    """Compute the tax liability for a fiscal year.

    Steps:
    1. Aggregate income and credits (APIT, WHT) for the year.
    2. Solar relief is capped at the table's max_solar_relief.
    3. Taxable income = max(0, total income - personal relief - solar relief).
    4. Tax on income from the year's brackets.
    5. Tax payable = max(0, tax on income - APIT - WHT).
    """
    logger.info(f"Computing tax for fiscal year {label}")

    regime = tables.regime_for(label)
    income = calculate_total_income(incomes, assets, label, tables, certificates)

    solar_relief = min(max(0.0, solar_investment or 0.0), tables.max_solar_relief)
    assessable_income = income.total_income
    taxable_income = max(0.0, assessable_income - regime.personal_relief - solar_relief)

    tax_on_income = tax_on(taxable_income, label, tables)
    tax_payable = max(0.0, tax_on_income - income.total_apit - income.total_wht)

    logger.info(
        f"Taxable income {taxable_income:,.2f}, tax {tax_on_income:,.2f}, payable {tax_payable:,.2f}"
    )

    return TaxComputation(
        tax_year=label,
        assessable_income=assessable_income,
        reliefs=Reliefs(personal_relief=regime.personal_relief, solar_relief=solar_relief),
        taxable_income=taxable_income,
        tax_on_income=tax_on_income,
        tax_credits=TaxCredits(apit=income.total_apit, wht=income.total_wht),
        tax_payable=tax_payable,
        income=income,
        breakdown=get_tax_breakdown(taxable_income, label, tables),
    )
