from collections.abc import Iterable, Sequence
from datetime import date as dt_date

from prettytable import PrettyTable

from . import aggregation
from .entries import Entry, EntryKind, SavingCurrency
from .validation import parse_report_period_end, parse_report_period_start, parse_ymd


class Dashboard:
    def __init__(
        self,
        entries: Iterable[Entry],
        period_start_date: str | None = None,
        period_end_date: str | None = None,
    ):
        self._entries = aggregation.sort_entries(entries)
        self._period_start_date = period_start_date
        self._period_end_date = period_end_date

    def entries(self) -> list[Entry]:
        return list(self._entries)

    @property
    def income(self) -> float:
        return aggregation.total_income(self._entries)

    @property
    def expenses(self) -> float:
        return aggregation.total_expense(self._entries)

    @property
    def balance(self) -> float:
        return aggregation.net_balance(self._entries)

    @property
    def invested(self) -> float:
        return aggregation.total_invested(self._entries)

    def saving_balance(self, currency: SavingCurrency | str) -> float:
        return aggregation.saving_balance(self._entries, currency)

    def negative_savings(self) -> list[str]:
        """Currencies whose running balance went below zero."""
        return [label for label, value in self.saving_breakdown().items() if value < 0]

    def recent(self, n: int = 10) -> list[Entry]:
        return aggregation.recent_entries(self._entries, n)

    def expense_breakdown(self, by_subcategory: bool = False) -> dict[str, float]:
        key_fn = aggregation.by_expense_subcategory if by_subcategory else None
        return aggregation.group_sum(self._entries, EntryKind.EXPENSE, key_fn)

    def income_breakdown(self) -> dict[str, float]:
        return aggregation.group_sum(self._entries, EntryKind.INCOME)

    def investment_breakdown(self) -> dict[str, float]:
        return aggregation.group_sum(self._entries, EntryKind.INVESTMENT)

    def saving_breakdown(self) -> dict[str, float]:
        return aggregation.saving_balances(self._entries)

    def of_kind(self, kind: EntryKind | str) -> list[Entry]:
        kind = EntryKind.parse(kind)
        return [entry for entry in self._entries if entry.kind == kind]

    @property
    def period_start_date(self) -> str | None:
        return self._period_start_date

    @property
    def period_end_date(self) -> str | None:
        return self._period_end_date

    @property
    def title(self) -> str:
        if self._period_start_date and self._period_end_date:
            return f"Dashboard ({self._period_start_date} - {self._period_end_date})"
        return "Dashboard"

    def filter_by_period(self, prefix: str) -> "Dashboard":
        start_date = parse_report_period_start(prefix)
        end_date = parse_report_period_end(prefix)
        start = parse_ymd(start_date)
        end = parse_ymd(end_date)
        filtered = [entry for entry in self._entries if start <= entry.date.date() <= end]
        return Dashboard(filtered, period_start_date=start_date, period_end_date=end_date)

    def monthly_income_expense_rows(
        self, year: int | None = None
    ) -> tuple[int, list[tuple[str, float, float]]]:
        if year is None:
            years = [entry.date.year for entry in self._entries]
            year = max(years) if years else dt_date.today().year

        aggregates: dict[int, tuple[float, float]] = {}
        for entry in self._entries:
            if entry.date.year != year:
                continue
            income_total, expense_total = aggregates.get(entry.date.month, (0.0, 0.0))
            if entry.kind == EntryKind.INCOME:
                income_total += entry.amount
            elif entry.kind == EntryKind.EXPENSE:
                expense_total += entry.amount
            else:
                continue
            aggregates[entry.date.month] = (income_total, expense_total)

        rows: list[tuple[str, float, float]] = []
        for month in range(1, 13):
            income_total, expense_total = aggregates.get(month, (0.0, 0.0))
            rows.append((f"{year}-{month:02d}", income_total, expense_total))
        return year, rows

    def summary_table(self) -> str:
        from utils.formatting import format_amount

        table = PrettyTable()
        table.field_names = ["Figure", "Value"]
        table.align["Figure"] = "l"
        table.align["Value"] = "r"
        table.add_row(["Balance", format_amount(self.balance)], divider=True)
        table.add_row(["Income", format_amount(self.income)])
        table.add_row(["Expenses", format_amount(self.expenses)], divider=True)
        for label, value in self.saving_breakdown().items():
            table.add_row([f"Savings ({label})", format_amount(value)])
        table.add_row(["Invested", format_amount(self.invested)])
        return str(table)

    @staticmethod
    def breakdown_table(title: str, sections: Sequence) -> str:
        """Render pie sections (see utils.charting.pie_sections) with a total row."""
        from utils.formatting import format_amount

        table = PrettyTable()
        table.field_names = [title, "Amount", "Share"]
        table.align[title] = "l"
        table.align["Amount"] = "r"
        table.align["Share"] = "r"
        for section in sections:
            table.add_row([section.label, format_amount(section.value), f"{section.percent}%"])
        total = sum((section.value for section in sections), 0.0)
        table.add_row(["TOTAL", format_amount(total), ""], divider=True)
        return str(table)

    @staticmethod
    def entries_table(entries: Iterable[Entry]) -> str:
        from utils.formatting import entry_subtitle, format_amount, format_date

        table = PrettyTable()
        table.field_names = ["Date", "Type", "Amount", "Details", "ID"]
        table.align["Amount"] = "r"
        table.align["Details"] = "l"
        for entry in entries:
            table.add_row(
                [
                    format_date(entry.date),
                    entry.kind.label,
                    format_amount(entry.amount),
                    entry_subtitle(entry),
                    entry.id,
                ]
            )
        return str(table)
