"""Unit tests for income aggregation."""

from datetime import date

import pytest

from sl_tax_engine.engine.income import calculate_total_income, derived_investment_income
from sl_tax_engine.schemas.records import (
    Certificate,
    EmploymentIncome,
    FinancialAsset,
    FinancialAssetBalance,
    InvestmentIncome,
    OtherIncome,
    ShareAccount,
    StockBalance,
)


def test_employment_income_and_apit(tables, employment_income):
    benefits = employment_income.model_copy(
        update={"id": "inc-2", "gross_remuneration": 600_000, "non_cash_benefits": 120_000, "exempt_income": 20_000, "apit_deducted": 10_000}
    )
    summary = calculate_total_income([employment_income, benefits], [], "2024", tables)

    assert summary.employment_income == 3_100_000
    assert summary.total_apit == 60_000
    assert summary.total_income == 3_100_000


def test_rent_relief_applies_only_to_rent(tables):
    rent = InvestmentIncome(id="r", owner_id="p", tax_year="2024", type="rent", gross_amount=100_000)
    dividend = InvestmentIncome(id="d", owner_id="p", tax_year="2024", type="dividend", gross_amount=100_000)

    assert calculate_total_income([rent], [], "2024", tables).investment_income == 75_000
    assert calculate_total_income([dividend], [], "2024", tables).investment_income == 100_000


def test_business_and_other_income(tables, business_income, interest_income):
    other = OtherIncome(
        id="o", owner_id="primary", tax_year="2024", gross_amount=300_000, exempt_amount=50_000, wht_deducted=2_000
    )
    summary = calculate_total_income([business_income, interest_income, other], [], "2024", tables)

    assert summary.business_income == 400_000
    assert summary.investment_income == 100_000
    assert summary.other_income == 250_000
    assert summary.total_wht == 7_000
    assert summary.total_income == 750_000


def test_other_fiscal_years_ignored(tables, employment_income):
    last_year = employment_income.model_copy(update={"id": "old", "tax_year": "2023"})
    summary = calculate_total_income([last_year], [], "2024", tables)

    assert summary.total_income == 0
    assert summary.total_apit == 0


def test_certificates_split_into_apit_and_wht(tables):
    certificates = [
        Certificate(id="c1", owner_id="p", type="employment", tax_year="2024", tax_deducted=40_000),
        Certificate(id="c2", owner_id="p", type="interest", tax_year="2024", tax_deducted=5_000),
        Certificate(id="c3", owner_id="p", type="dividend", tax_year="2024", tax_deducted=1_500),
        Certificate(id="c4", owner_id="p", type="rent", tax_year="2023", tax_deducted=9_999),
    ]
    summary = calculate_total_income([], [], "2024", tables, certificates)

    assert summary.total_apit == 40_000
    assert summary.total_wht == 6_500
    assert summary.total_credits == 46_500


def test_missing_numeric_fields_count_as_zero(tables):
    income = EmploymentIncome.model_validate(
        {"id": "e", "owner_id": "p", "tax_year": "2024", "gross_remuneration": None, "apit_deducted": "Rs. 1,000"}
    )
    summary = calculate_total_income([income], [], "2024", tables)

    assert summary.employment_income == 0
    assert summary.total_apit == 1_000


class TestDerivedIncome:
    """Interest and dividends recorded on asset histories."""

    def test_foreign_interest_converted(self, tables):
        account = FinancialAsset(
            id="usd",
            owner_id="p",
            category="bank_deposit",
            currency="USD",
            bank_name="HSBC",
            date_acquired=date(2022, 5, 1),
            balances=[FinancialAssetBalance(tax_year="2024", closing_balance=10_000, interest_earned=100)],
        )
        lines = derived_investment_income([account], "2024", tables)

        assert len(lines) == 1
        assert lines[0].type == "interest"
        assert lines[0].source == "HSBC"
        assert lines[0].currency == "USD"
        assert lines[0].original_amount == 100
        assert lines[0].amount == pytest.approx(29_500)

    def test_dividends_from_share_account(self, tables):
        shares = ShareAccount(
            id="cds",
            owner_id="p",
            company_name="CT Holdings",
            date_acquired=date(2021, 5, 1),
            stock_balances=[StockBalance(tax_year="2024", dividends=20_000)],
        )
        lines = derived_investment_income([shares], "2024", tables)

        assert [(line.type, line.amount) for line in lines] == [("dividend", 20_000)]

    def test_cash_in_hand_and_zero_interest_skipped(self, tables):
        cash = FinancialAsset(
            id="cash",
            owner_id="p",
            category="cash_in_hand",
            date_acquired=date(2021, 5, 1),
            balances=[FinancialAssetBalance(tax_year="2024", closing_balance=50_000, interest_earned=999)],
        )
        idle = FinancialAsset(
            id="idle",
            owner_id="p",
            category="bank_deposit",
            date_acquired=date(2021, 5, 1),
            balances=[FinancialAssetBalance(tax_year="2024", closing_balance=50_000)],
        )
        assert derived_investment_income([cash, idle], "2024", tables) == []

    def test_out_of_scope_asset_skipped(self, tables):
        future = FinancialAsset(
            id="future",
            owner_id="p",
            category="loan_given",
            date_acquired=date(2025, 6, 1),
            balances=[FinancialAssetBalance(tax_year="2024", closing_balance=1, interest_earned=10_000)],
        )
        assert derived_investment_income([future], "2024", tables) == []

    def test_derived_income_added_to_investment_income(self, tables, savings_account, interest_income):
        summary = calculate_total_income([interest_income], [savings_account], "2024", tables)

        assert summary.investment_income == 150_000
        assert len(summary.derived_income) == 1
