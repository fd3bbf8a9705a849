"""Unit tests for taxpayer record schemas."""

from datetime import date

import pytest
from pydantic import TypeAdapter, ValidationError

from sl_tax_engine.schemas.records import (
    AssetRecord,
    DuplicateYearRecordError,
    FinancialAsset,
    FinancialAssetBalance,
    ImmovableProperty,
    IncomeRecord,
    InvestmentIncome,
    Jewellery,
    JewelleryTransaction,
    LiabilityPayment,
    LiabilityRecord,
    ValuationEntry,
    append_year_record,
)


class TestDiscriminatedUnions:
    def test_asset_category_selects_model(self):
        asset = TypeAdapter(AssetRecord).validate_python(
            {"id": "a", "owner_id": "p", "category": "loan_given", "date_acquired": "2022-01-15", "cost": 100_000}
        )
        assert isinstance(asset, FinancialAsset)
        assert asset.cage == "Bv"

    def test_income_schedule_selects_model(self):
        income = TypeAdapter(IncomeRecord).validate_python(
            {"id": "i", "owner_id": "p", "schedule": "investment", "type": "rent", "tax_year": "2024"}
        )
        assert isinstance(income, InvestmentIncome)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(AssetRecord).validate_python(
                {"id": "a", "owner_id": "p", "category": "yacht", "date_acquired": "2022-01-15"}
            )

    def test_share_account_rejects_cash_balances(self):
        with pytest.raises(ValidationError, match="stock_balances"):
            TypeAdapter(AssetRecord).validate_python(
                {
                    "id": "cds",
                    "owner_id": "p",
                    "category": "shares",
                    "date_acquired": "2022-01-15",
                    "balances": [{"tax_year": "2024", "closing_balance": 0, "interest_earned": 40_000}],
                }
            )

    def test_share_account_accepts_empty_balances(self):
        asset = TypeAdapter(AssetRecord).validate_python(
            {"id": "cds", "owner_id": "p", "category": "shares", "date_acquired": "2022-01-15", "balances": []}
        )
        assert asset.stock_balances == []

    @pytest.mark.parametrize(
        "category,cage",
        [("immovable_property", "A"), ("motor_vehicle", "Bi"), ("bank_deposit", "Bii"), ("shares", "Biii"),
         ("cash_in_hand", "Biv"), ("jewellery", "Bvi"), ("business_property", "C")],
    )
    def test_cages(self, category, cage):
        asset = TypeAdapter(AssetRecord).validate_python(
            {"id": "a", "owner_id": "p", "category": category, "date_acquired": "2022-01-15"}
        )
        assert asset.cage == cage


class TestMoneyFields:
    def test_formatted_amount_parsed(self):
        house = ImmovableProperty(id="h", owner_id="p", date_acquired=date(2020, 5, 1), cost="Rs. 12,500,000.00")
        assert house.cost == 12_500_000

    def test_missing_amount_is_zero(self):
        house = ImmovableProperty(id="h", owner_id="p", date_acquired=date(2020, 5, 1), cost=None)
        assert house.cost == 0

    def test_unparseable_amount_rejected(self):
        with pytest.raises(ValidationError):
            ImmovableProperty(id="h", owner_id="p", date_acquired=date(2020, 5, 1), cost="a lot")


class TestYearUniqueness:
    def test_duplicate_balance_years_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate balance"):
            FinancialAsset(
                id="a",
                owner_id="p",
                category="bank_deposit",
                date_acquired=date(2020, 5, 1),
                balances=[
                    FinancialAssetBalance(tax_year="2024", closing_balance=1),
                    FinancialAssetBalance(tax_year="2024", closing_balance=2),
                ],
            )

    def test_duplicate_valuation_years_rejected(self):
        with pytest.raises(ValidationError):
            ImmovableProperty(
                id="h",
                owner_id="p",
                date_acquired=date(2020, 5, 1),
                valuations=[
                    ValuationEntry(tax_year="2023", market_value=1),
                    ValuationEntry(tax_year="2023", market_value=2),
                ],
            )

    def test_jewellery_transactions_may_repeat_years(self):
        ring = Jewellery(
            id="j",
            owner_id="p",
            date_acquired=date(2020, 5, 1),
            jewellery_transactions=[
                JewelleryTransaction(tax_year="2024", type="purchase", amount=10_000),
                JewelleryTransaction(tax_year="2024", type="purchase", amount=20_000),
            ],
        )
        assert len(ring.jewellery_transactions) == 2

    def test_liability_payments_may_repeat_years(self):
        loan = LiabilityRecord(
            id="l",
            owner_id="p",
            date_acquired=date(2020, 5, 1),
            payments=[
                LiabilityPayment(date=date(2024, 5, 1), tax_year="2024", principal_paid=10_000, interest_paid=2_000),
                LiabilityPayment(date=date(2024, 6, 1), tax_year="2024", principal_paid=10_000),
            ],
        )
        assert sum(p.total_paid for p in loan.payments) == 22_000


class TestAppendYearRecord:
    def test_appends_in_year_order(self):
        history = [FinancialAssetBalance(tax_year="2024", closing_balance=3)]
        updated = append_year_record(history, FinancialAssetBalance(tax_year="2022", closing_balance=1))

        assert [b.tax_year for b in updated] == ["2022", "2024"]
        assert len(history) == 1

    def test_rejects_duplicate_year(self):
        history = [FinancialAssetBalance(tax_year="2024", closing_balance=3)]

        with pytest.raises(DuplicateYearRecordError, match="2024"):
            append_year_record(history, FinancialAssetBalance(tax_year="2024", closing_balance=4))

    def test_overwrite_replaces_year(self):
        history = [
            FinancialAssetBalance(tax_year="2023", closing_balance=1),
            FinancialAssetBalance(tax_year="2024", closing_balance=3),
        ]
        updated = append_year_record(
            history, FinancialAssetBalance(tax_year="2024", closing_balance=4), overwrite=True
        )

        assert [(b.tax_year, b.closing_balance) for b in updated] == [("2023", 1), ("2024", 4)]

    def test_duplicate_error_is_value_error(self):
        assert issubclass(DuplicateYearRecordError, ValueError)
