from collections.abc import Collection
from dataclasses import dataclass
from datetime import date as dt_date
from datetime import datetime

from domain.entries import (
    FALLBACK_LABEL,
    Entry,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    InvestmentEntry,
    InvestmentType,
    SavingCurrency,
    SavingEntry,
    new_entry_id,
)
from domain.validation import normalize_note, parse_amount, parse_entry_date


@dataclass(frozen=True)
class EntryForm:
    """Raw values as typed or picked by the user."""

    kind: EntryKind | str
    amount_text: str
    date: datetime | dt_date | str | None = None
    note: str | None = None
    category: str | None = None
    subcategory: str | None = None
    currency: SavingCurrency | str | None = None
    investment_type: InvestmentType | str | None = None

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryForm":
        """Prefill an edit form from an existing entry."""
        amount = entry.delta if isinstance(entry, SavingEntry) else entry.amount
        return cls(
            kind=entry.kind,
            amount_text=repr(float(amount)),
            date=entry.date,
            note=entry.note,
            category=getattr(entry, "category", None),
            subcategory=getattr(entry, "subcategory", None),
            currency=getattr(entry, "currency", None),
            investment_type=getattr(entry, "investment_type", None),
        )


def _fresh_id(existing_ids: Collection[str]) -> str:
    entry_id = new_entry_id()
    while entry_id in existing_ids:
        entry_id = new_entry_id()
    return entry_id


def build_entry(
    form: EntryForm,
    existing_ids: Collection[str] = (),
    entry_id: str | None = None,
) -> Entry:
    """Validate ``form`` and build the matching Entry.

    Pass ``entry_id`` to rebuild an existing entry during an edit; otherwise a
    fresh id unique among ``existing_ids`` is generated. Raises InvalidAmount
    for unusable amounts and ValueError for other bad input.
    """
    kind = EntryKind.parse(form.kind)
    value = parse_amount(form.amount_text, kind.value)
    when = parse_entry_date(form.date) if form.date is not None else datetime.now()
    common = {
        "id": entry_id or _fresh_id(existing_ids),
        "date": when,
        "note": normalize_note(form.note),
    }

    if kind == EntryKind.INCOME:
        return IncomeEntry(amount=value, **common)
    if kind == EntryKind.EXPENSE:
        return ExpenseEntry(
            amount=value,
            category=normalize_note(form.category) or FALLBACK_LABEL,
            subcategory=normalize_note(form.subcategory),
            **common,
        )
    if kind == EntryKind.SAVING:
        currency = SavingCurrency.parse(form.currency) if form.currency else SavingCurrency.IRR
        return SavingEntry(currency=currency, delta=value, **common)
    investment_type = (
        InvestmentType.parse(form.investment_type)
        if form.investment_type
        else InvestmentType.OTHER
    )
    return InvestmentEntry(amount=value, investment_type=investment_type, **common)
