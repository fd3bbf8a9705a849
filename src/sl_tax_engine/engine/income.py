"""Income aggregation across schedules, asset-derived income and tax credits."""

import logging
from typing import Iterable, assert_never

from sl_tax_engine.engine.asset_filter import filter_assets_for_year
from sl_tax_engine.engine.valuation import record_for_year
from sl_tax_engine.schemas.records import (
    AnyAsset,
    AnyIncome,
    BusinessIncome,
    BusinessProperty,
    Certificate,
    EmploymentIncome,
    FinancialAsset,
    ImmovableProperty,
    InvestmentIncome,
    Jewellery,
    MotorVehicle,
    OtherIncome,
    ShareAccount,
)
from sl_tax_engine.schemas.results import DerivedIncomeLine, IncomeSummary
from sl_tax_engine.schemas.tables import TaxTables

logger = logging.getLogger(__name__)

INTEREST_BEARING = ("bank_deposit", "loan_given")


def _derived_lines(asset: AnyAsset, label: str, tables: TaxTables) -> list[DerivedIncomeLine]:
    if isinstance(asset, FinancialAsset):
        if asset.category not in INTEREST_BEARING:
            return []
        balance = record_for_year(asset.balances, label)
        if balance is None or not balance.interest_earned:
            return []
        currency = (asset.currency or "LKR").upper()
        return [
            DerivedIncomeLine(
                asset_id=asset.id,
                source=asset.bank_name or asset.description or asset.id,
                type="interest",
                amount=balance.interest_earned * tables.fx_rate(currency, label),
                original_amount=balance.interest_earned,
                currency=currency,
            )
        ]
    if isinstance(asset, ShareAccount):
        stock_balance = record_for_year(asset.stock_balances, label)
        if stock_balance is None or not stock_balance.dividends:
            return []
        return [
            DerivedIncomeLine(
                asset_id=asset.id,
                source=asset.company_name or asset.description or asset.id,
                type="dividend",
                amount=stock_balance.dividends,
                original_amount=stock_balance.dividends,
            )
        ]
    if isinstance(asset, (ImmovableProperty, MotorVehicle, Jewellery, BusinessProperty)):
        return []
    assert_never(asset)


def derived_investment_income(
    assets: Iterable[AnyAsset],
    label: str,
    tables: TaxTables,
) -> list[DerivedIncomeLine]:
    """Interest and dividend income recorded on asset histories for the fiscal year.

    Only in-scope assets with a history record for exactly this year contribute.
    Foreign currency interest is converted at the year's exchange rate.
    """
    lines: list[DerivedIncomeLine] = []
    for asset in filter_assets_for_year(assets, label):
        lines.extend(_derived_lines(asset, label, tables))
    return lines


def calculate_total_income(
    incomes: Iterable[AnyIncome],
    assets: Iterable[AnyAsset],
    label: str,
    tables: TaxTables,
    certificates: Iterable[Certificate] = (),
) -> IncomeSummary:
    """Sum declared income per schedule and collect APIT / WHT credits.

    Args:
        incomes: Income records (other fiscal years are ignored)
        assets: Asset records used for derived interest and dividends
        label: Fiscal year label
        tables: Regime and index tables
        certificates: Withholding certificates (other fiscal years are ignored)

    Returns:
        IncomeSummary for the fiscal year
    """
    employment_income = 0.0
    business_income = 0.0
    investment_income = 0.0
    other_income = 0.0
    total_apit = 0.0
    total_wht = 0.0

    for income in incomes:
        if income.tax_year != label:
            continue
        if isinstance(income, EmploymentIncome):
            employment_income += (
                income.gross_remuneration + income.non_cash_benefits - income.exempt_income
            )
            total_apit += income.apit_deducted
        elif isinstance(income, BusinessIncome):
            business_income += income.net_profit
        elif isinstance(income, InvestmentIncome):
            amount = income.gross_amount
            # 25% relief on rent (cage 316)
            if income.type == "rent":
                amount -= amount * tables.rent_relief_rate
            investment_income += amount
            total_wht += income.wht_deducted
        elif isinstance(income, OtherIncome):
            other_income += income.gross_amount - income.exempt_amount
            total_wht += income.wht_deducted
        else:
            assert_never(income)

    derived = derived_investment_income(assets, label, tables)
    investment_income += sum(line.amount for line in derived)

    for certificate in certificates:
        if certificate.tax_year != label:
            continue
        if certificate.type == "employment":
            total_apit += certificate.tax_deducted
        else:
            total_wht += certificate.tax_deducted

    total_income = employment_income + business_income + investment_income + other_income
    logger.debug(
        f"Income for {label}: employment={employment_income:,.2f} business={business_income:,.2f} "
        f"investment={investment_income:,.2f} other={other_income:,.2f} "
        f"(APIT {total_apit:,.2f}, WHT {total_wht:,.2f})"
    )

    return IncomeSummary(
        tax_year=label,
        employment_income=employment_income,
        business_income=business_income,
        investment_income=investment_income,
        other_income=other_income,
        total_income=total_income,
        total_apit=total_apit,
        total_wht=total_wht,
        derived_income=derived,
    )
