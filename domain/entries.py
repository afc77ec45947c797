import math
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date as dt_date
from datetime import datetime
from enum import Enum

from .errors import InvalidAmount
from .validation import parse_entry_date

FALLBACK_LABEL = "Other"

EXPENSE_CATEGORIES = (
    "Bills (water/power/gas/internet/mobile)",
    "Gym - membership",
    "Gym - nutrition/supplements",
    "Gym - equipment",
    "Going out",
    "Home appliances",
    "Camping gear",
    "Car",
    "Household supplies",
    "Cleaning/hygiene",
    "Repairs",
    FALLBACK_LABEL,
)


def new_entry_id() -> str:
    """Clock-ordered id with a random suffix; never derived from content."""
    return f"{time.time_ns():x}-{secrets.token_hex(4)}"


class _Choice(str, Enum):
    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower(), member.label.lower()):
                return member
        raise ValueError(f"Unknown {cls.__name__}: {value!r}")


class EntryKind(_Choice):
    INCOME = "income"
    EXPENSE = "expense"
    SAVING = "saving"
    INVESTMENT = "investment"


class SavingCurrency(_Choice):
    IRR = "irr"
    USD = "usd"

    @property
    def label(self) -> str:
        return self.name


class InvestmentType(_Choice):
    GOLD = "gold"
    STOCKS = "stocks"
    CRYPTO = "crypto"
    OTHER = "other"


@dataclass(frozen=True)
class Entry(ABC):
    date: datetime | dt_date | str
    amount: float = 0.0
    note: str | None = None
    id: str = field(default_factory=new_entry_id)

    def __post_init__(self) -> None:
        entry_id = str(self.id or "").strip()
        if not entry_id:
            raise ValueError("id must be a non-empty string")
        object.__setattr__(self, "id", entry_id)
        object.__setattr__(self, "date", parse_entry_date(self.date))
        self._normalize_amount()

    def _normalize_amount(self) -> None:
        try:
            amount = float(self.amount)
        except (TypeError, ValueError) as exc:
            raise InvalidAmount(f"Invalid amount: {self.amount!r}") from exc
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidAmount(f"{self.kind.label} amount must be positive, got {self.amount!r}")
        object.__setattr__(self, "amount", amount)

    @property
    @abstractmethod
    def kind(self) -> EntryKind:
        raise NotImplementedError


class IncomeEntry(Entry):
    @property
    def kind(self) -> EntryKind:
        return EntryKind.INCOME


@dataclass(frozen=True)
class ExpenseEntry(Entry):
    category: str | None = None
    subcategory: str | None = None

    @property
    def kind(self) -> EntryKind:
        return EntryKind.EXPENSE


@dataclass(frozen=True)
class SavingEntry(Entry):
    """Deposit (positive ``delta``) or withdrawal (negative) in one currency.

    ``amount`` is always derived as ``abs(delta)``.
    """

    currency: SavingCurrency = SavingCurrency.IRR
    delta: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", SavingCurrency.parse(self.currency))
        super().__post_init__()

    def _normalize_amount(self) -> None:
        try:
            delta = float(self.delta)
        except (TypeError, ValueError) as exc:
            raise InvalidAmount(f"Invalid saving delta: {self.delta!r}") from exc
        if not math.isfinite(delta) or delta == 0:
            raise InvalidAmount("Saving delta must be a non-zero number")
        object.__setattr__(self, "delta", delta)
        object.__setattr__(self, "amount", abs(delta))

    @property
    def kind(self) -> EntryKind:
        return EntryKind.SAVING

    @property
    def is_withdrawal(self) -> bool:
        return self.delta < 0


@dataclass(frozen=True)
class InvestmentEntry(Entry):
    investment_type: InvestmentType | None = None

    def __post_init__(self) -> None:
        if self.investment_type is not None:
            object.__setattr__(
                self, "investment_type", InvestmentType.parse(self.investment_type)
            )
        super().__post_init__()

    @property
    def kind(self) -> EntryKind:
        return EntryKind.INVESTMENT


ENTRY_CLASSES: dict[EntryKind, type[Entry]] = {
    EntryKind.INCOME: IncomeEntry,
    EntryKind.EXPENSE: ExpenseEntry,
    EntryKind.SAVING: SavingEntry,
    EntryKind.INVESTMENT: InvestmentEntry,
}
