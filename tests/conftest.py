"""Pytest configuration and fixtures."""

import json
from datetime import date
from pathlib import Path

import pytest

from sl_tax_engine.schemas.records import (
    BusinessIncome,
    EmploymentIncome,
    FinancialAsset,
    FinancialAssetBalance,
    ImmovableProperty,
    InvestmentIncome,
    LiabilityPayment,
    LiabilityRecord,
    MotorVehicle,
    PropertyExpense,
)
from sl_tax_engine.schemas.tables import FiscalYearRegime, TaxBracket, TaxTables
from sl_tax_engine.tools.tables import load_tax_tables


@pytest.fixture
def tables() -> TaxTables:
    """Packaged regime and index tables."""
    return load_tax_tables()


@pytest.fixture
def flat_tables() -> TaxTables:
    """Alternate tables with a gap (2021-2023) and a single flat 10% band."""
    flat = FiscalYearRegime(personal_relief=1_000_000, brackets=(TaxBracket(upper_limit=None, rate=0.10),))
    stepped = FiscalYearRegime(
        personal_relief=500_000,
        brackets=(TaxBracket(upper_limit=1_000_000, rate=0.05), TaxBracket(upper_limit=None, rate=0.20)),
    )
    return TaxTables(
        version="test",
        regimes={"2020": flat, "2024": stepped},
        fx_rates={"usd": {"2020": 200, "2024": 300}},
        commodity_indices={"Other": {"2020": 100, "2024": 150}},
    )


@pytest.fixture
def employment_income() -> EmploymentIncome:
    return EmploymentIncome(
        id="inc-1",
        owner_id="primary",
        tax_year="2024",
        employer_name="Acme Lanka (Pvt) Ltd",
        gross_remuneration=2_400_000,
        apit_deducted=50_000,
    )


@pytest.fixture
def zero_case_records() -> dict:
    """Records whose flows balance exactly: living expenses absorb the surplus."""
    return {
        "assets": [
            ImmovableProperty(
                id="house",
                owner_id="primary",
                description="House in Kandy",
                date_acquired=date(2024, 6, 1),
                cost=5_000_000,
                market_value=5_000_000,
                property_expenses=[PropertyExpense(tax_year="2024", description="Roof", amount=100_000)],
            ),
            MotorVehicle(
                id="car",
                owner_id="primary",
                description="Old car",
                date_acquired=date(2019, 5, 1),
                cost=2_500_000,
                disposed={"date": date(2024, 9, 15), "sale_price": 2_000_000},
            ),
        ],
        "liabilities": [
            LiabilityRecord(
                id="loan",
                owner_id="primary",
                lender_name="People's Bank",
                original_amount=2_000_000,
                current_balance=1_900_000,
                date_acquired=date(2024, 5, 20),
                payments=[
                    LiabilityPayment(
                        date=date(2025, 1, 10), tax_year="2024", principal_paid=100_000, interest_paid=50_000
                    )
                ],
            )
        ],
        "incomes": [
            EmploymentIncome(
                id="salary",
                owner_id="primary",
                tax_year="2024",
                gross_remuneration=3_000_000,
                apit_deducted=100_000,
            )
        ],
    }


@pytest.fixture
def savings_account() -> FinancialAsset:
    return FinancialAsset(
        id="savings",
        owner_id="primary",
        category="bank_deposit",
        bank_name="Commercial Bank",
        date_acquired=date(2020, 4, 15),
        cost=500_000,
        balances=[
            FinancialAssetBalance(tax_year="2023", closing_balance=1_000_000, interest_earned=40_000),
            FinancialAssetBalance(tax_year="2024", closing_balance=1_500_000, interest_earned=50_000),
        ],
    )


@pytest.fixture
def snapshot_data() -> dict:
    """JSON-ready family snapshot with a jointly owned house."""
    return {
        "entities": [
            {"id": "primary", "name": "Nimal Perera", "tin": "123456789", "role": "primary"},
            {"id": "spouse", "name": "Kumari Perera", "role": "spouse"},
        ],
        "assets": [
            {
                "id": "house",
                "owner_id": "primary",
                "category": "immovable_property",
                "description": "House in Colombo 5",
                "date_acquired": "2018-07-01",
                "cost": "Rs. 12,000,000.00",
                "market_value": 15_000_000,
                "ownership_shares": [
                    {"entity_id": "primary", "percentage": 50},
                    {"entity_id": "spouse", "percentage": 50},
                ],
                "valuations": [{"tax_year": "2023", "market_value": 18_000_000}],
            },
            {
                "id": "fd",
                "owner_id": "spouse",
                "category": "bank_deposit",
                "bank_name": "Sampath Bank",
                "date_acquired": "2024-05-02",
                "cost": 1_000_000,
                "funding_sources": [{"type": "savings", "amount": 600_000}],
                "balances": [{"tax_year": "2024", "closing_balance": 1_000_000, "interest_earned": 80_000}],
            },
        ],
        "liabilities": [
            {
                "id": "housing-loan",
                "owner_id": "primary",
                "lender_name": "HNB",
                "original_amount": 5_000_000,
                "current_balance": 3_000_000,
                "date_acquired": "2018-07-01",
                "payments": [
                    {"date": "2024-12-01", "tax_year": "2024", "principal_paid": 400_000, "interest_paid": 200_000}
                ],
            }
        ],
        "incomes": [
            {
                "id": "salary",
                "owner_id": "primary",
                "schedule": "employment",
                "tax_year": "2024",
                "gross_remuneration": 2_400_000,
                "apit_deducted": 50_000,
            },
            {
                "id": "rent",
                "owner_id": "spouse",
                "schedule": "investment",
                "type": "rent",
                "tax_year": "2024",
                "gross_amount": 100_000,
            },
        ],
        "certificates": [],
    }


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_data: dict) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data))
    return path


@pytest.fixture
def business_income() -> BusinessIncome:
    return BusinessIncome(id="biz", owner_id="primary", tax_year="2024", net_profit=400_000)


@pytest.fixture
def interest_income() -> InvestmentIncome:
    return InvestmentIncome(
        id="int", owner_id="primary", tax_year="2024", type="interest", gross_amount=100_000, wht_deducted=5_000
    )
