from datetime import date

import pytest

from domain.entries import (
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    InvestmentEntry,
    SavingEntry,
)
from domain.reports import Dashboard
from utils.charting import pie_sections


@pytest.fixture
def entries():
    return [
        IncomeEntry(date="2025-01-01", amount=1000, note="Salary"),
        ExpenseEntry(date="2025-01-02", amount=300, category="Food", subcategory="Bakery"),
        ExpenseEntry(date="2025-02-03", amount=200),
        SavingEntry(date="2025-02-04", currency="irr", delta=500),
        SavingEntry(date="2025-02-05", currency="usd", delta=-20),
        InvestmentEntry(date="2025-03-06", amount=400, investment_type="stocks"),
    ]


class TestDashboard:
    def test_entries_sorted_newest_first(self, entries):
        dashboard = Dashboard(entries)
        dates = [entry.date for entry in dashboard.entries()]
        assert dates == sorted(dates, reverse=True)

    def test_totals(self, entries):
        dashboard = Dashboard(entries)
        assert dashboard.income == 1000.0
        assert dashboard.expenses == 500.0
        assert dashboard.balance == 500.0
        assert dashboard.invested == 400.0
        assert dashboard.saving_balance("irr") == 500.0
        assert dashboard.saving_balance("usd") == -20.0

    def test_negative_savings(self, entries):
        assert Dashboard(entries).negative_savings() == ["USD"]

    def test_breakdowns(self, entries):
        dashboard = Dashboard(entries)
        assert dashboard.expense_breakdown() == {"Other": 200.0, "Food": 300.0}
        assert dashboard.expense_breakdown(by_subcategory=True) == {
            "Other": 200.0,
            "Food / Bakery": 300.0,
        }
        assert dashboard.income_breakdown() == {"Salary": 1000.0}
        assert dashboard.investment_breakdown() == {"Stocks": 400.0}
        assert dashboard.saving_breakdown() == {"IRR": 500.0, "USD": -20.0}

    def test_recent(self, entries):
        dashboard = Dashboard(entries)
        recent = dashboard.recent(2)
        assert [entry.kind for entry in recent] == [EntryKind.INVESTMENT, EntryKind.SAVING]
        assert dashboard.recent(0) == []

    def test_of_kind(self, entries):
        dashboard = Dashboard(entries)
        assert len(dashboard.of_kind("expense")) == 2
        with pytest.raises(ValueError):
            dashboard.of_kind("transfer")

    def test_empty_dashboard(self):
        dashboard = Dashboard([])
        assert dashboard.balance == 0.0
        assert dashboard.invested == 0.0
        assert dashboard.recent(10) == []
        assert dashboard.expense_breakdown() == {}
        assert dashboard.title == "Dashboard"


class TestFilterByPeriod:
    def test_month(self, entries):
        february = Dashboard(entries).filter_by_period("2025-02")
        assert len(february.entries()) == 3
        assert february.expenses == 200.0
        assert february.income == 0.0
        assert february.title == "Dashboard (2025-02-01 - 2025-02-28)"

    def test_year(self, entries):
        year = Dashboard(entries).filter_by_period("2025")
        assert len(year.entries()) == len(entries)
        assert year.period_start_date == "2025-01-01"
        assert year.period_end_date == "2025-12-31"

    def test_day(self, entries):
        day = Dashboard(entries).filter_by_period("2025-01-02")
        assert [entry.kind for entry in day.entries()] == [EntryKind.EXPENSE]

    def test_invalid_period(self, entries):
        with pytest.raises(ValueError):
            Dashboard(entries).filter_by_period("2025/02")


def test_monthly_income_expense_rows(entries):
    year, rows = Dashboard(entries).monthly_income_expense_rows()
    assert year == 2025
    assert len(rows) == 12
    assert rows[0] == ("2025-01", 1000.0, 300.0)
    assert rows[1] == ("2025-02", 0.0, 200.0)
    assert rows[2] == ("2025-03", 0.0, 0.0)


def test_monthly_rows_for_explicit_year():
    dashboard = Dashboard(
        [
            IncomeEntry(date="2026-01-10", amount=1000.0),
            ExpenseEntry(date="2026-01-11", amount=200.0, category="Food"),
            ExpenseEntry(date="2026-03-12", amount=150.0, category="Food"),
            SavingEntry(date="2026-03-13", delta=-500.0),
            IncomeEntry(date="2025-12-31", amount=999.0),
        ]
    )

    year, rows = dashboard.monthly_income_expense_rows(2026)

    assert year == 2026
    assert rows[0] == ("2026-01", 1000.0, 200.0)
    assert rows[2] == ("2026-03", 0.0, 150.0)
    assert sum(income for _, income, _ in rows) == 1000.0
    assert sum(expense for _, _, expense in rows) == 350.0


def test_monthly_rows_default_to_current_year_when_empty():
    year, rows = Dashboard([]).monthly_income_expense_rows()
    assert year == date.today().year
    assert all(income == 0.0 and expense == 0.0 for _, income, expense in rows)


class TestTables:
    def test_summary_table(self, entries):
        table = Dashboard(entries).summary_table()
        assert "Balance" in table
        assert "1,000" in table
        assert "Savings (USD)" in table
        assert "-20" in table

    def test_breakdown_table(self):
        sections = pie_sections({"Food": 300.0, "Other": 200.0})
        table = Dashboard.breakdown_table("Expense", sections)
        assert "Food" in table
        assert "60%" in table
        assert "40%" in table
        assert "TOTAL" in table
        assert "500" in table

    def test_entries_table(self, entries):
        table = Dashboard.entries_table(entries)
        assert "2025/1/2" in table
        assert "Food · Bakery" in table
        for entry in entries:
            assert entry.id in table
