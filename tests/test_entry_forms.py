from datetime import datetime

import pytest

from app.entry_forms import EntryForm, build_entry
from domain.entries import (
    FALLBACK_LABEL,
    ExpenseEntry,
    IncomeEntry,
    InvestmentEntry,
    InvestmentType,
    SavingCurrency,
    SavingEntry,
)
from domain.errors import InvalidAmount


class TestBuildEntry:
    def test_income(self):
        entry = build_entry(
            EntryForm(kind="income", amount_text="1,500", date="2025-01-01", note=" Salary ")
        )
        assert isinstance(entry, IncomeEntry)
        assert entry.amount == 1500.0
        assert entry.note == "Salary"
        assert entry.date == datetime(2025, 1, 1)

    def test_expense_category_defaults_to_other(self):
        entry = build_entry(EntryForm(kind="expense", amount_text="20", date="2025-01-01"))
        assert isinstance(entry, ExpenseEntry)
        assert entry.category == FALLBACK_LABEL
        assert entry.subcategory is None

    def test_expense_with_subcategory(self):
        entry = build_entry(
            EntryForm(
                kind="expense",
                amount_text="20",
                date="2025-01-01",
                category="Car",
                subcategory=" Tyres ",
            )
        )
        assert entry.category == "Car"
        assert entry.subcategory == "Tyres"

    def test_saving_withdrawal(self):
        entry = build_entry(
            EntryForm(kind="saving", amount_text="-150", date="2025-01-01", currency="USD")
        )
        assert isinstance(entry, SavingEntry)
        assert entry.currency is SavingCurrency.USD
        assert entry.delta == -150.0
        assert entry.amount == 150.0

    def test_saving_currency_defaults_to_irr(self):
        entry = build_entry(EntryForm(kind="saving", amount_text="10", date="2025-01-01"))
        assert entry.currency is SavingCurrency.IRR

    def test_investment_type_defaults_to_other(self):
        entry = build_entry(EntryForm(kind="investment", amount_text="10", date="2025-01-01"))
        assert isinstance(entry, InvestmentEntry)
        assert entry.investment_type is InvestmentType.OTHER

    def test_missing_date_means_now(self):
        before = datetime.now()
        entry = build_entry(EntryForm(kind="income", amount_text="1"))
        assert before <= entry.date <= datetime.now()

    @pytest.mark.parametrize(
        ("kind", "text"),
        [
            ("income", "0"),
            ("expense", "-3"),
            ("investment", "abc"),
            ("saving", "0"),
            ("income", ""),
        ],
    )
    def test_invalid_amounts(self, kind, text):
        with pytest.raises(InvalidAmount):
            build_entry(EntryForm(kind=kind, amount_text=text, date="2025-01-01"))

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            build_entry(EntryForm(kind="loan", amount_text="1"))

    def test_unknown_currency(self):
        with pytest.raises(ValueError):
            build_entry(EntryForm(kind="saving", amount_text="1", currency="EUR"))

    def test_ids_avoid_existing(self):
        first = build_entry(EntryForm(kind="income", amount_text="1"))
        second = build_entry(EntryForm(kind="income", amount_text="1"), existing_ids={first.id})
        assert first.id != second.id

    def test_explicit_id_is_kept(self):
        entry = build_entry(EntryForm(kind="income", amount_text="1"), entry_id="keep-me")
        assert entry.id == "keep-me"


class TestFromEntry:
    def test_saving_prefill_keeps_sign(self):
        original = SavingEntry(id="s", date="2025-01-01", currency="usd", delta=-25)
        form = EntryForm.from_entry(original)
        assert form.amount_text == "-25.0"
        assert build_entry(form, entry_id=original.id) == original

    def test_expense_prefill_rebuilds_same_entry(self):
        original = ExpenseEntry(
            id="x", date="2025-01-01T12:30:00", amount=12.75, category="Car", note="oil"
        )
        assert build_entry(EntryForm.from_entry(original), entry_id="x") == original

    def test_investment_prefill(self):
        original = InvestmentEntry(id="v", date="2025-01-01", amount=3, investment_type="gold")
        form = EntryForm.from_entry(original)
        assert form.investment_type is InvestmentType.GOLD
        assert form.category is None
