from datetime import datetime

from domain.aggregation import round_half_away
from domain.entries import Entry, ExpenseEntry, IncomeEntry, InvestmentEntry, SavingEntry


def format_amount(value: float) -> str:
    """Whole-number amount with thousands separators, e.g. ``100,000``."""
    return f"{round_half_away(value):,}"


def format_date(value: datetime) -> str:
    return f"{value.year}/{value.month}/{value.day}"


def entry_subtitle(entry: Entry) -> str:
    parts: list[str] = []
    if isinstance(entry, ExpenseEntry):
        if entry.category:
            parts.append(entry.category)
        if entry.subcategory:
            parts.append(entry.subcategory)
    elif isinstance(entry, SavingEntry):
        parts.append(entry.currency.label)
        parts.append("withdrawal" if entry.is_withdrawal else "deposit")
    elif isinstance(entry, InvestmentEntry):
        if entry.investment_type is not None:
            parts.append(entry.investment_type.label)
    elif isinstance(entry, IncomeEntry) and entry.note:
        parts.append(f"Source: {entry.note}")
    if not parts:
        return entry.note or ""
    return " · ".join(parts)
