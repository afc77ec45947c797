"""Derived dashboard figures computed from a snapshot of entries.

Every function here is pure: it reads the given entries, never mutates them
and never raises on empty input.
"""

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime

from .entries import (
    FALLBACK_LABEL,
    Entry,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    InvestmentEntry,
    SavingCurrency,
    SavingEntry,
)

KeyFn = Callable[[Entry], str]


def _sum_amounts(entries: Iterable[Entry], kind: EntryKind) -> float:
    return sum((entry.amount for entry in entries if entry.kind == kind), 0.0)


def total_income(entries: Iterable[Entry]) -> float:
    return _sum_amounts(entries, EntryKind.INCOME)


def total_expense(entries: Iterable[Entry]) -> float:
    return _sum_amounts(entries, EntryKind.EXPENSE)


def net_balance(entries: Iterable[Entry]) -> float:
    snapshot = list(entries)
    return total_income(snapshot) - total_expense(snapshot)


def saving_balance(entries: Iterable[Entry], currency: SavingCurrency | str) -> float:
    """Running saving balance in ``currency``; negative when over-withdrawn."""
    currency = SavingCurrency.parse(currency)
    return sum(
        (
            entry.delta
            for entry in entries
            if isinstance(entry, SavingEntry) and entry.currency == currency
        ),
        0.0,
    )


def saving_balances(entries: Iterable[Entry]) -> dict[str, float]:
    snapshot = list(entries)
    return {currency.label: saving_balance(snapshot, currency) for currency in SavingCurrency}


def total_invested(entries: Iterable[Entry]) -> float:
    """Cumulative amount put in, not a present value."""
    return _sum_amounts(entries, EntryKind.INVESTMENT)


def by_expense_category(entry: Entry) -> str:
    category = entry.category if isinstance(entry, ExpenseEntry) else None
    return (category or "").strip() or FALLBACK_LABEL


def by_expense_subcategory(entry: Entry) -> str:
    category = by_expense_category(entry)
    subcategory = entry.subcategory if isinstance(entry, ExpenseEntry) else None
    subcategory = (subcategory or "").strip()
    if not subcategory:
        return category
    return f"{category} / {subcategory}"


def by_investment_type(entry: Entry) -> str:
    investment_type = entry.investment_type if isinstance(entry, InvestmentEntry) else None
    if investment_type is None:
        return FALLBACK_LABEL
    return investment_type.label


def by_income_source(entry: Entry) -> str:
    note = entry.note if isinstance(entry, IncomeEntry) else None
    return (note or "").strip() or FALLBACK_LABEL


def by_saving_currency(entry: Entry) -> str:
    if isinstance(entry, SavingEntry):
        return entry.currency.label
    return FALLBACK_LABEL


DEFAULT_KEY_FNS: dict[EntryKind, KeyFn] = {
    EntryKind.INCOME: by_income_source,
    EntryKind.EXPENSE: by_expense_category,
    EntryKind.SAVING: by_saving_currency,
    EntryKind.INVESTMENT: by_investment_type,
}


def group_sum(
    entries: Iterable[Entry],
    kind: EntryKind | str,
    key_fn: KeyFn | None = None,
) -> dict[str, float]:
    """Sum ``amount`` per group key over entries of ``kind``.

    Keys keep first-occurrence order from the input so chart legends stay
    stable within one render.
    """
    kind = EntryKind.parse(kind)
    key_fn = key_fn or DEFAULT_KEY_FNS[kind]
    totals: dict[str, float] = {}
    for entry in entries:
        if entry.kind != kind:
            continue
        key = key_fn(entry) or FALLBACK_LABEL
        totals[key] = totals.get(key, 0.0) + entry.amount
    return totals


def round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def percentage_shares(group_sums: Mapping[str, float]) -> dict[str, int]:
    total = sum(group_sums.values(), 0.0)
    if total == 0 or not math.isfinite(total):
        return {key: 0 for key in group_sums}
    return {key: round_half_away(value / total * 100) for key, value in group_sums.items()}


def recent_entries(entries: Sequence[Entry], n: int = 10) -> list[Entry]:
    """First ``n`` entries of a list already sorted newest first."""
    if n <= 0:
        return []
    return list(entries[:n])


def _date_key(entry: Entry) -> datetime:
    return entry.date


def sort_entries(entries: Iterable[Entry]) -> list[Entry]:
    """Newest first; entries sharing a date keep their relative order."""
    return sorted(entries, key=_date_key, reverse=True)
