"""Taxpayer input records: entities, incomes, assets, liabilities, certificates.

Records are owned by the surrounding application. The engine only reads them
as a snapshot. Income schedules and asset categories are discriminated unions
so aggregation code can match them exhaustively.
"""

import datetime
from typing import Annotated, Iterable, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from sl_tax_engine.tools.currency import coerce_amount

# Missing or formatted ("Rs. 1,000") amounts are accepted; missing means zero
Money = Annotated[float, BeforeValidator(coerce_amount)]


class DuplicateYearRecordError(ValueError):
    """Raised when a second per-year sub-record is inserted for the same fiscal year."""

    pass


class OwnershipShare(BaseModel):
    entity_id: str
    percentage: float = Field(ge=0.0, le=100.0)


class TaxEntity(BaseModel):
    """A taxpayer (or family member) the records belong to."""

    id: str
    name: str
    tin: Optional[str] = None
    nic: Optional[str] = None
    type: Literal["individual", "company", "partnership", "trust"] = "individual"
    role: Optional[Literal["primary", "spouse"]] = None


# ---------------------------------------------------------------------------
# Income schedules
# ---------------------------------------------------------------------------


class IncomeBase(BaseModel):
    id: str
    owner_id: str
    tax_year: str = Field(description="Fiscal year label, e.g. '2024' for 2024/2025")


class EmploymentIncome(IncomeBase):
    """Schedule 1: employment income (cages 103/104, APIT credit cage 903)."""

    schedule: Literal["employment"] = "employment"
    employer_name: str = ""
    employer_tin: Optional[str] = None
    gross_remuneration: Money = 0.0
    non_cash_benefits: Money = 0.0
    exempt_income: Money = 0.0
    apit_deducted: Money = 0.0


class BusinessIncome(IncomeBase):
    """Schedule 2: business income; net profit is cage 203."""

    schedule: Literal["business"] = "business"
    business_name: str = ""
    gross_revenue: Money = 0.0
    direct_expenses: Money = 0.0
    net_profit: Money = 0.0


class InvestmentIncome(IncomeBase):
    """Schedule 3: interest, dividends and rent (WHT credit cage 908)."""

    schedule: Literal["investment"] = "investment"
    type: Literal["interest", "dividend", "rent"] = "interest"
    source: str = ""
    gross_amount: Money = 0.0
    wht_deducted: Money = 0.0


class OtherIncome(IncomeBase):
    """Schedule 4: other income not covered by the other schedules."""

    schedule: Literal["other"] = "other"
    description: str = ""
    gross_amount: Money = 0.0
    exempt_amount: Money = 0.0
    wht_deducted: Money = 0.0


AnyIncome = Union[EmploymentIncome, BusinessIncome, InvestmentIncome, OtherIncome]

IncomeRecord = Annotated[AnyIncome, Field(discriminator="schedule")]


class Certificate(BaseModel):
    """Withholding / advance tax certificate issued by a payer."""

    id: str
    owner_id: str
    type: Literal["employment", "interest", "dividend", "rent", "service_fee", "other"]
    tax_year: str
    certificate_no: Optional[str] = None
    issuer: Optional[str] = None
    gross_amount: Money = 0.0
    tax_deducted: Money = 0.0


# ---------------------------------------------------------------------------
# Asset history sub-records
# ---------------------------------------------------------------------------


class FundingSource(BaseModel):
    type: Literal["current-income", "asset-sale", "loan", "gift", "savings"]
    amount: Money = 0.0
    description: Optional[str] = None
    related_id: Optional[str] = None


class FinancialAssetBalance(BaseModel):
    """Closing balance of a financial asset as of March 31 of the fiscal year."""

    tax_year: str
    closing_balance: Money = 0.0
    interest_earned: Money = 0.0
    notes: Optional[str] = None


class StockHolding(BaseModel):
    symbol: str
    company_name: Optional[str] = None
    quantity: float = 0.0
    average_cost: Money = 0.0
    current_price: Money = 0.0
    dividend_income: Money = 0.0


class StockBalance(BaseModel):
    """Year-end position of a share (CDS) account."""

    tax_year: str
    broker_cash_balance: Money = 0.0
    cash_transfers: Money = Field(
        default=0.0,
        description="Net cash moved into the broker account (negative = withdrawn)",
    )
    portfolio_value: Money = 0.0
    holdings: list[StockHolding] = Field(default_factory=list)
    purchases: Money = 0.0
    sales: Money = 0.0
    dividends: Money = 0.0
    capital_gain: Money = 0.0


class PropertyExpense(BaseModel):
    tax_year: str
    date: Optional[datetime.date] = None
    description: str = ""
    expense_type: Literal["repair", "renovation", "maintenance", "rates", "insurance", "other"] = "other"
    amount: Money = 0.0
    market_value: Optional[float] = Field(
        None, description="Market value of the property recorded alongside the expense"
    )


class ValuationEntry(BaseModel):
    tax_year: str
    market_value: Money = 0.0
    date: Optional[datetime.date] = None
    notes: Optional[str] = None


class JewelleryTransaction(BaseModel):
    tax_year: str
    type: Literal["purchase", "sale"]
    item_type: Optional[str] = None
    description: str = ""
    weight: Optional[float] = None
    purity: Optional[str] = None
    amount: Money = 0.0


class Disposal(BaseModel):
    """Disposal marker. A missing date is an invalid state."""

    date: Optional[datetime.date] = None
    sale_price: Money = 0.0
    capital_gain: Optional[float] = None


class Closure(BaseModel):
    """Account closure marker. A missing date is an invalid state."""

    date: Optional[datetime.date] = None
    final_balance: Money = 0.0


def _check_unique_years(records: list, kind: str) -> list:
    seen = set()
    for record in records:
        if record.tax_year in seen:
            raise ValueError(f"Duplicate {kind} record for fiscal year {record.tax_year}")
        seen.add(record.tax_year)
    return records


# ---------------------------------------------------------------------------
# Asset categories
# ---------------------------------------------------------------------------


class AssetBase(BaseModel):
    id: str
    owner_id: str
    ownership_shares: list[OwnershipShare] = Field(default_factory=list)
    description: str = ""
    date_acquired: datetime.date
    cost: Money = 0.0
    market_value: Money = 0.0
    funding_sources: Optional[list[FundingSource]] = None
    disposed: Optional[Disposal] = None
    closed: Optional[Closure] = None

    @property
    def cage(self) -> str:
        """Asset cage on the return (provenance label only)."""
        return CAGE_BY_CATEGORY[self.category]


class ImmovableProperty(AssetBase):
    category: Literal["immovable_property"] = "immovable_property"
    address: Optional[str] = None
    deed_no: Optional[str] = None
    property_expenses: list[PropertyExpense] = Field(default_factory=list)
    valuations: list[ValuationEntry] = Field(default_factory=list)

    @field_validator("property_expenses")
    @classmethod
    def unique_expense_years(cls, v):
        return _check_unique_years(v, "property expense")

    @field_validator("valuations")
    @classmethod
    def unique_valuation_years(cls, v):
        return _check_unique_years(v, "valuation")


class MotorVehicle(AssetBase):
    category: Literal["motor_vehicle"] = "motor_vehicle"
    reg_no: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    valuations: list[ValuationEntry] = Field(default_factory=list)

    @field_validator("valuations")
    @classmethod
    def unique_valuation_years(cls, v):
        return _check_unique_years(v, "valuation")


class FinancialAsset(AssetBase):
    """Bank deposits, cash in hand and loans given, tracked by yearly balances."""

    category: Literal["bank_deposit", "cash_in_hand", "loan_given"]
    bank_name: Optional[str] = None
    account_no: Optional[str] = None
    currency: Optional[str] = Field(None, description="ISO code; None or LKR means rupees")
    balances: list[FinancialAssetBalance] = Field(default_factory=list)

    @field_validator("balances")
    @classmethod
    def unique_balance_years(cls, v):
        return _check_unique_years(v, "balance")

    @property
    def is_foreign_currency(self) -> bool:
        return bool(self.currency) and self.currency.upper() != "LKR"


class ShareAccount(AssetBase):
    category: Literal["shares"] = "shares"
    company_name: Optional[str] = None
    cds_account_no: Optional[str] = None
    stock_balances: list[StockBalance] = Field(default_factory=list)

    @field_validator("stock_balances")
    @classmethod
    def unique_stock_balance_years(cls, v):
        return _check_unique_years(v, "stock balance")

    @model_validator(mode="before")
    @classmethod
    def reject_cash_balances(cls, data):
        """Dividends are read from stock_balances; a balances history here would be ignored."""
        if isinstance(data, dict) and data.get("balances"):
            raise ValueError(
                "Share accounts record dividends in stock_balances[].dividends, not balances"
            )
        return data


class Jewellery(AssetBase):
    """Jewellery, precious metals and gems, valued by commodity index."""

    category: Literal["jewellery"] = "jewellery"
    item_type: Optional[str] = Field(None, description="Gold, Silver, Platinum, Gems, ...")
    weight: Optional[float] = None
    jewellery_transactions: list[JewelleryTransaction] = Field(default_factory=list)


class BusinessProperty(AssetBase):
    category: Literal["business_property"] = "business_property"
    property_expenses: list[PropertyExpense] = Field(default_factory=list)

    @field_validator("property_expenses")
    @classmethod
    def unique_expense_years(cls, v):
        return _check_unique_years(v, "property expense")


AnyAsset = Union[ImmovableProperty, MotorVehicle, FinancialAsset, ShareAccount, Jewellery, BusinessProperty]

AssetRecord = Annotated[AnyAsset, Field(discriminator="category")]

CAGE_BY_CATEGORY = {
    "immovable_property": "A",
    "motor_vehicle": "Bi",
    "bank_deposit": "Bii",
    "shares": "Biii",
    "cash_in_hand": "Biv",
    "loan_given": "Bv",
    "jewellery": "Bvi",
    "business_property": "C",
}


# ---------------------------------------------------------------------------
# Liabilities
# ---------------------------------------------------------------------------


class LiabilityPayment(BaseModel):
    date: datetime.date
    tax_year: str
    principal_paid: Money = 0.0
    interest_paid: Money = 0.0
    balance_after_payment: Optional[float] = None
    notes: Optional[str] = None

    @property
    def total_paid(self) -> float:
        return self.principal_paid + self.interest_paid


class LiabilityRecord(BaseModel):
    """Loan or other liability (cage 781)."""

    id: str
    owner_id: str
    ownership_shares: list[OwnershipShare] = Field(default_factory=list)
    description: str = ""
    lender_name: str = ""
    original_amount: Money = 0.0
    current_balance: Money = 0.0
    date_acquired: datetime.date
    interest_rate: Optional[float] = None
    security_given: Optional[str] = None
    payments: list[LiabilityPayment] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Insert-time helpers for append-only histories
# ---------------------------------------------------------------------------

_YearRecordT = TypeVar("_YearRecordT", bound=BaseModel)


def append_year_record(
    records: Iterable[_YearRecordT],
    record: _YearRecordT,
    overwrite: bool = False,
) -> list[_YearRecordT]:
    """Return a new history list with record appended, one entry per fiscal year.

    Args:
        records: Existing history (left untouched)
        record: New sub-record carrying a tax_year
        overwrite: Replace an existing record for the same year instead of rejecting

    Returns:
        New list ordered by fiscal year

    Raises:
        DuplicateYearRecordError: If the year already has a record and overwrite is False
    """
    existing = list(records)
    clash = [r for r in existing if r.tax_year == record.tax_year]
    if clash and not overwrite:
        raise DuplicateYearRecordError(
            f"A {type(record).__name__} already exists for fiscal year {record.tax_year}"
        )
    updated = [r for r in existing if r.tax_year != record.tax_year] + [record]
    return sorted(updated, key=lambda r: int(r.tax_year))
