"""Computed outputs: tax computation, audit risk and the combined report.

These are never persisted; they are recomputed from a snapshot on demand.
"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field

RiskLevel = Literal["safe", "warning", "danger"]


class DerivedIncomeLine(BaseModel):
    """Interest or dividend income read off an asset's yearly history."""

    asset_id: str
    source: str
    type: Literal["interest", "dividend"]
    amount: float = Field(description="Amount in LKR")
    original_amount: float
    currency: str = "LKR"


class IncomeSummary(BaseModel):
    """Income totals per schedule plus tax credits for one fiscal year."""

    tax_year: str
    employment_income: float = 0.0
    business_income: float = 0.0
    investment_income: float = 0.0
    other_income: float = 0.0
    total_income: float = 0.0
    total_apit: float = Field(default=0.0, description="Cage 903")
    total_wht: float = Field(default=0.0, description="Cage 908")
    derived_income: list[DerivedIncomeLine] = Field(default_factory=list)

    @property
    def total_credits(self) -> float:
        return self.total_apit + self.total_wht


class TaxBracketSlice(BaseModel):
    """Portion of taxable income taxed at one marginal rate."""

    lower: float
    upper: Optional[float] = None
    rate: float
    amount: float
    tax: float

    @property
    def rate_label(self) -> str:
        return f"{self.rate * 100:g}%"


class Reliefs(BaseModel):
    personal_relief: float
    solar_relief: float = 0.0

    @property
    def total(self) -> float:
        return self.personal_relief + self.solar_relief


class TaxCredits(BaseModel):
    apit: float = 0.0
    wht: float = 0.0

    @property
    def total(self) -> float:
        return self.apit + self.wht


class TaxComputation(BaseModel):
    """Result of a personal income tax computation for one fiscal year."""

    tax_year: str
    assessable_income: float
    reliefs: Reliefs
    taxable_income: float
    tax_on_income: float
    tax_credits: TaxCredits
    tax_payable: float
    income: IncomeSummary
    breakdown: list[TaxBracketSlice] = Field(default_factory=list)


class OutflowBreakdown(BaseModel):
    asset_growth: float = 0.0
    balance_increases: float = 0.0
    stock_cash_deposits: float = 0.0
    property_expenses: float = 0.0
    loan_principal: float = 0.0
    loan_interest: float = 0.0

    @property
    def loan_payments(self) -> float:
        return self.loan_principal + self.loan_interest


class InflowBreakdown(BaseModel):
    net_income: float = 0.0
    new_loans: float = 0.0
    asset_sales: float = 0.0
    balance_decreases: float = 0.0
    stock_cash_withdrawals: float = 0.0


class AuditRisk(BaseModel):
    """Danger meter: reconciliation of known cash flows for one fiscal year."""

    tax_year: str

    # Declared income
    employment_income: float = 0.0
    business_income: float = 0.0
    investment_income: float = 0.0
    other_income: float = 0.0
    total_income: float = 0.0
    tax_deducted: float = Field(default=0.0, description="APIT + WHT already paid")

    outflows: OutflowBreakdown
    inflows: InflowBreakdown

    actual_outflows: float
    actual_inflows: float
    derived_living_expenses: float
    risk_score: float
    risk_level: RiskLevel

    # Flat accessors for display and reporting
    @property
    def asset_growth(self) -> float:
        return self.outflows.asset_growth

    @property
    def property_expenses(self) -> float:
        return self.outflows.property_expenses

    @property
    def loan_payments(self) -> float:
        return self.outflows.loan_payments

    @property
    def net_income(self) -> float:
        return self.inflows.net_income

    @property
    def new_loans(self) -> float:
        return self.inflows.new_loans

    @property
    def asset_sales(self) -> float:
        return self.inflows.asset_sales


class SourceOfFundsCheck(BaseModel):
    """Soft validation of an asset's declared funding sources."""

    asset_id: str
    is_valid: bool
    unexplained_amount: float


class AssetScheduleLine(BaseModel):
    """One asset as it appears on the statement of assets for a fiscal year."""

    asset_id: str
    cage: str
    category: str
    description: str
    date_acquired: date
    cost: float
    market_value: float
    ownership_fraction: float = 1.0

    @property
    def owned_market_value(self) -> float:
        return self.market_value * self.ownership_fraction


class AssetSchedule(BaseModel):
    tax_year: str
    lines: list[AssetScheduleLine] = Field(default_factory=list)
    total_liabilities: float = 0.0

    @property
    def total_market_value(self) -> float:
        return sum(line.owned_market_value for line in self.lines)

    @property
    def net_worth(self) -> float:
        return self.total_market_value - self.total_liabilities


class TaxReport(BaseModel):
    """Final report combining computation, risk and asset schedule."""

    tax_year: str
    owner_id: Optional[str] = Field(None, description="None for the family view")
    generated_at: Optional[date] = Field(None, description="Report date; None when not stamped")
    tables_version: str

    computation: TaxComputation
    audit_risk: AuditRisk
    asset_schedule: AssetSchedule

    validation_warnings: list[str] = Field(default_factory=list)
