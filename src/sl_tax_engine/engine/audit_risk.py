"""Audit risk (danger meter) by cash-flow balancing.

Known outflows for the year (asset purchases, savings deposits, broker cash
deposits, property expenses, loan repayments) are reconciled against known
inflows (income after tax deducted, new loans, asset sales, savings and
broker withdrawals). Any surplus of inflows is taken to be living expenses;
any shortfall is wealth the declared income does not explain.
"""

import logging
from datetime import date
from typing import Iterable

from sl_tax_engine.engine.asset_filter import filter_assets_for_year
from sl_tax_engine.engine.income import calculate_total_income
from sl_tax_engine.engine.valuation import record_for_year
from sl_tax_engine.schemas.records import (
    AnyAsset,
    AnyIncome,
    BusinessProperty,
    Certificate,
    FinancialAsset,
    ImmovableProperty,
    LiabilityRecord,
    ShareAccount,
)
from sl_tax_engine.schemas.results import AuditRisk, InflowBreakdown, OutflowBreakdown, RiskLevel
from sl_tax_engine.schemas.tables import TaxTables
from sl_tax_engine.tools.fiscal_year import fiscal_year_of, in_year, previous_fiscal_year, range_of

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = 100_000.0
DANGER_THRESHOLD = 500_000.0


def classify_risk(
    risk_score: float,
    warning_threshold: float = WARNING_THRESHOLD,
    danger_threshold: float = DANGER_THRESHOLD,
) -> RiskLevel:
    if risk_score > danger_threshold:
        return "danger"
    if risk_score > warning_threshold:
        return "warning"
    return "safe"


def _disposed_by(asset: AnyAsset, year_end: date) -> bool:
    # Only disposals up to the year end cancel the purchase
    return asset.disposed is not None and asset.disposed.date is not None and asset.disposed.date <= year_end


def _cost_in_lkr(asset: AnyAsset, tables: TaxTables) -> float:
    if isinstance(asset, FinancialAsset) and asset.is_foreign_currency:
        return asset.cost * tables.fx_rate(asset.currency, fiscal_year_of(asset.date_acquired))
    return asset.cost


def _closed_in_year(asset: FinancialAsset, label: str) -> bool:
    return asset.closed is not None and asset.closed.date is not None and in_year(asset.closed.date, label)


def _balance_change(asset: FinancialAsset, label: str, tables: TaxTables) -> float:
    """Net deposit (+) or withdrawal (-) in LKR, excluding interest credited.

    An account closed during the year is taken to be emptied: its closing
    figure is zero and the whole opening balance counts as withdrawn.
    """
    current = record_for_year(asset.balances, label)
    closed = _closed_in_year(asset, label)
    if current is None and not closed:
        return 0.0

    previous = record_for_year(asset.balances, previous_fiscal_year(label))
    if previous is not None:
        opening = previous.closing_balance
    elif in_year(asset.date_acquired, label):
        # Opening deposit is already counted as asset growth
        opening = asset.cost
    else:
        logger.debug(f"No opening balance for {asset.id} in {label}; balance change not tracked")
        return 0.0

    closing = 0.0 if closed else current.closing_balance
    interest = current.interest_earned if current is not None else 0.0
    change = closing - opening - interest
    return change * tables.fx_rate(asset.currency, label)


def calculate_audit_risk(
    assets: Iterable[AnyAsset],
    liabilities: Iterable[LiabilityRecord],
    incomes: Iterable[AnyIncome],
    label: str,
    tables: TaxTables,
    certificates: Iterable[Certificate] = (),
    warning_threshold: float = WARNING_THRESHOLD,
    danger_threshold: float = DANGER_THRESHOLD,
) -> AuditRisk:
    """Reconcile the year's cash flows and classify the unexplained remainder.

    Args:
        assets: Asset records (scoped to the fiscal year internally)
        liabilities: Liability records
        incomes: Income records (other fiscal years are ignored)
        label: Fiscal year label
        tables: Regime and index tables
        certificates: Withholding certificates counted as tax already deducted
        warning_threshold: Score above which the level is "warning"
        danger_threshold: Score above which the level is "danger"

    Returns:
        AuditRisk with the itemized inflows and outflows
    """
    logger.info(f"Calculating audit risk for fiscal year {label}")

    assets = list(assets)
    scoped = filter_assets_for_year(assets, label)
    outflows = OutflowBreakdown()
    inflows = InflowBreakdown()

    _, year_end = range_of(label)
    for asset in scoped:
        if in_year(asset.date_acquired, label) and not _disposed_by(asset, year_end):
            outflows.asset_growth += _cost_in_lkr(asset, tables)

        if asset.disposed is not None and asset.disposed.date is not None:
            if in_year(asset.disposed.date, label):
                inflows.asset_sales += asset.disposed.sale_price

        if isinstance(asset, FinancialAsset):
            change = _balance_change(asset, label, tables)
            if change > 0:
                outflows.balance_increases += change
            else:
                inflows.balance_decreases += -change
        elif isinstance(asset, ShareAccount):
            stock_balance = record_for_year(asset.stock_balances, label)
            if stock_balance is not None:
                if stock_balance.cash_transfers > 0:
                    outflows.stock_cash_deposits += stock_balance.cash_transfers
                else:
                    inflows.stock_cash_withdrawals += -stock_balance.cash_transfers
        elif isinstance(asset, (ImmovableProperty, BusinessProperty)):
            expense = record_for_year(asset.property_expenses, label)
            if expense is not None:
                outflows.property_expenses += expense.amount

    for liability in liabilities:
        if in_year(liability.date_acquired, label):
            inflows.new_loans += liability.original_amount
        for payment in liability.payments:
            if payment.tax_year == label:
                outflows.loan_principal += payment.principal_paid
                outflows.loan_interest += payment.interest_paid

    income = calculate_total_income(incomes, assets, label, tables, certificates)
    tax_deducted = income.total_apit + income.total_wht
    inflows.net_income = income.total_income - tax_deducted

    actual_outflows = (
        outflows.asset_growth
        + outflows.balance_increases
        + outflows.property_expenses
        + outflows.loan_payments
        + outflows.stock_cash_deposits
    )
    actual_inflows = (
        inflows.net_income
        + inflows.new_loans
        + inflows.asset_sales
        + inflows.balance_decreases
        + inflows.stock_cash_withdrawals
    )

    # Whatever inflow is left over is treated as spent on living
    derived_living_expenses = max(0.0, actual_inflows - actual_outflows)
    risk_score = (actual_outflows + derived_living_expenses) - actual_inflows
    risk_level = classify_risk(risk_score, warning_threshold, danger_threshold)

    logger.info(
        f"Audit risk {label}: outflows {actual_outflows:,.2f}, inflows {actual_inflows:,.2f}, "
        f"living {derived_living_expenses:,.2f}, score {risk_score:,.2f} ({risk_level})"
    )

    return AuditRisk(
        tax_year=label,
        employment_income=income.employment_income,
        business_income=income.business_income,
        investment_income=income.investment_income,
        other_income=income.other_income,
        total_income=income.total_income,
        tax_deducted=tax_deducted,
        outflows=outflows,
        inflows=inflows,
        actual_outflows=actual_outflows,
        actual_inflows=actual_inflows,
        derived_living_expenses=derived_living_expenses,
        risk_score=risk_score,
        risk_level=risk_level,
    )
