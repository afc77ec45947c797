import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from domain.aggregation import sort_entries
from domain.entries import (
    Entry,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    InvestmentEntry,
    SavingEntry,
)
from domain.errors import StorageReadFailure, StorageWriteFailure
from domain.goals import Goal
from storage.base import KeyValueStore

logger = logging.getLogger(__name__)

ENTRIES_KEY = "finance_entries"
GOALS_KEY = "finance_goals"
LAST_DELETED_KEY = "finance_last_deleted"

ENTRY_FIELDS = (
    "id",
    "type",
    "date",
    "amount",
    "note",
    "expenseCategory",
    "expenseSubcategory",
    "savingCurrency",
    "savingDelta",
    "investmentType",
)
GOAL_FIELDS = ("id", "title", "note", "done")


class FinanceRepository(ABC):
    @abstractmethod
    def load_entries(self) -> list[Entry]:
        """Load all entries, newest first. Returns [] when nothing is readable."""
        pass

    @abstractmethod
    def save_entries(self, entries: Iterable[Entry]) -> None:
        """Replace the stored entry list. Raises StorageWriteFailure."""
        pass

    @abstractmethod
    def load_goals(self) -> list[Goal]:
        """Load all goals in stored order. Returns [] when nothing is readable."""
        pass

    @abstractmethod
    def save_goals(self, goals: Iterable[Goal]) -> None:
        """Replace the stored goal list. Raises StorageWriteFailure."""
        pass

    @abstractmethod
    def load_last_deleted(self) -> Entry | None:
        """The entry an undo would restore, or None."""
        pass

    @abstractmethod
    def save_last_deleted(self, entry: Entry | None) -> None:
        """Remember ``entry`` for undo; None forgets it. Raises StorageWriteFailure."""
        pass


def entry_to_dict(entry: Entry) -> dict:
    payload = {
        "id": entry.id,
        "type": entry.kind.value,
        "date": entry.date.isoformat(),
        "amount": entry.amount,
        "note": entry.note,
        "expenseCategory": None,
        "expenseSubcategory": None,
        "savingCurrency": None,
        "savingDelta": None,
        "investmentType": None,
    }
    if isinstance(entry, ExpenseEntry):
        payload["expenseCategory"] = entry.category
        payload["expenseSubcategory"] = entry.subcategory
    elif isinstance(entry, SavingEntry):
        payload["savingCurrency"] = entry.currency.value
        payload["savingDelta"] = entry.delta
    elif isinstance(entry, InvestmentEntry):
        payload["investmentType"] = (
            entry.investment_type.value if entry.investment_type is not None else None
        )
    return payload


def _optional_text(value) -> str | None:
    if value is None:
        return None
    return str(value)


def entry_from_dict(item: dict) -> Entry:
    """Rebuild an Entry from a wire record. Raises ValueError/KeyError on bad data."""
    kind = EntryKind.parse(item.get("type"))
    if item.get("id") in (None, ""):
        raise ValueError("Record without id")
    common = {
        "id": str(item["id"]),
        "date": str(item["date"]),
        "amount": item.get("amount", 0.0),
        "note": _optional_text(item.get("note")),
    }
    if kind == EntryKind.INCOME:
        return IncomeEntry(**common)
    if kind == EntryKind.EXPENSE:
        return ExpenseEntry(
            **common,
            category=_optional_text(item.get("expenseCategory")),
            subcategory=_optional_text(item.get("expenseSubcategory")),
        )
    if kind == EntryKind.SAVING:
        delta = item.get("savingDelta")
        if delta is None:
            raise ValueError("Saving record without savingDelta")
        return SavingEntry(
            **common,
            currency=item.get("savingCurrency") or "irr",
            delta=delta,
        )
    return InvestmentEntry(**common, investment_type=item.get("investmentType"))


def goal_to_dict(goal: Goal) -> dict:
    return {"id": goal.id, "title": goal.title, "note": goal.note, "done": goal.done}


def goal_from_dict(item: dict) -> Goal:
    done = item.get("done", False)
    if not isinstance(done, bool):
        raise ValueError(f"Goal done flag must be true or false, got {done!r}")
    return Goal(
        id=str(item["id"]),
        title=str(item.get("title") or ""),
        note=_optional_text(item.get("note")),
        done=done,
    )


class KeyValueFinanceRepository(FinanceRepository):
    """Stores each list as one JSON blob and rewrites it whole on every save."""

    def __init__(
        self,
        store: KeyValueStore,
        entries_key: str = ENTRIES_KEY,
        goals_key: str = GOALS_KEY,
        last_deleted_key: str = LAST_DELETED_KEY,
    ) -> None:
        self._store = store
        self._entries_key = entries_key
        self._goals_key = goals_key
        self._last_deleted_key = last_deleted_key

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def load_entries(self) -> list[Entry]:
        entries = self._decode_unique(self._entries_key, entry_from_dict, "entry")
        return sort_entries(entries)

    def save_entries(self, entries: Iterable[Entry]) -> None:
        self._save_items(self._entries_key, [entry_to_dict(entry) for entry in entries])

    def load_goals(self) -> list[Goal]:
        return self._decode_unique(self._goals_key, goal_from_dict, "goal")

    def save_goals(self, goals: Iterable[Goal]) -> None:
        self._save_items(self._goals_key, [goal_to_dict(goal) for goal in goals])

    def load_last_deleted(self) -> Entry | None:
        try:
            raw = self._store.get(self._last_deleted_key)
        except StorageReadFailure as e:
            logger.warning("Failed to read '%s', nothing to undo: %s", self._last_deleted_key, e)
            return None
        if raw is None:
            return None
        try:
            return entry_from_dict(json.loads(raw))
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Stored '%s' is unusable, nothing to undo: %s", self._last_deleted_key, e
            )
            return None

    def save_last_deleted(self, entry: Entry | None) -> None:
        if entry is None:
            self._store.delete(self._last_deleted_key)
            return
        raw = json.dumps(entry_to_dict(entry), ensure_ascii=False)
        self._store.set(self._last_deleted_key, raw)

    def _decode_unique(self, key: str, decode, label: str) -> list:
        records = []
        seen: set[str] = set()
        for index, item in enumerate(self._load_items(key)):
            try:
                record = decode(item)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping invalid %s at index %s: %s", label, index, e)
                continue
            if record.id in seen:
                logger.warning("Skipping duplicate %s id=%s at index %s", label, record.id, index)
                continue
            seen.add(record.id)
            records.append(record)
        return records

    def _load_items(self, key: str) -> list[dict]:
        try:
            raw = self._store.get(key)
        except StorageReadFailure as e:
            logger.warning("Failed to read '%s', using empty list: %s", key, e)
            return []
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Stored '%s' is not valid JSON, using empty list: %s", key, e)
            return []
        if not isinstance(data, list):
            logger.warning("Stored '%s' is not a list, using empty list", key)
            return []
        items = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping non-dict record in '%s' at index %s", key, index)
                continue
            items.append(item)
        return items

    def _save_items(self, key: str, items: list[dict]) -> None:
        try:
            raw = json.dumps(items, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageWriteFailure(f"Failed to serialize '{key}': {e}") from e
        self._store.set(key, raw)
