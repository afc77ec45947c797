from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from domain.entries import Entry
from domain.errors import StorageWriteFailure
from domain.goals import Goal
from domain.reports import Dashboard
from infrastructure.repositories import FinanceRepository

from .entry_forms import EntryForm, build_entry
from .use_cases import (
    AddEntry,
    AddGoal,
    ClearEntries,
    ClearGoals,
    DeleteEntry,
    DeleteGoal,
    GenerateDashboard,
    ImportEntries,
    RestoreEntry,
    ToggleGoal,
    UpdateEntry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FinanceController:
    """Holds the in-memory entry and goal lists a front end renders from.

    Every mutation persists the whole new list first; the in-memory list is
    replaced only once that write succeeded.
    """

    def __init__(self, repository: FinanceRepository) -> None:
        self._repository = repository
        self._entries: list[Entry] = []
        self._goals: list[Goal] = []
        self._last_deleted: Entry | None = None

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def goals(self) -> tuple[Goal, ...]:
        return tuple(self._goals)

    @property
    def last_deleted(self) -> Entry | None:
        return self._last_deleted

    def refresh(self) -> None:
        self._entries = self._repository.load_entries()
        self._goals = self._repository.load_goals()
        self._last_deleted = self._repository.load_last_deleted()

    def get_entry(self, entry_id: str) -> Entry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"Not found: {entry_id}")

    def add_entry(self, form: EntryForm) -> Entry:
        entry = build_entry(form, existing_ids={e.id for e in self._entries})
        self._entries = self._commit(
            "add entry", lambda: AddEntry(self._repository).execute(self._entries, entry)
        )
        return entry

    def edit_entry(self, entry_id: str, form: EntryForm) -> Entry:
        self.get_entry(entry_id)
        entry = build_entry(form, entry_id=entry_id)
        self._entries = self._commit(
            "edit entry", lambda: UpdateEntry(self._repository).execute(self._entries, entry)
        )
        return entry

    def delete_entry(self, entry_id: str) -> Entry:
        target = self.get_entry(entry_id)
        self._commit("remember deleted entry", lambda: self._repository.save_last_deleted(target))
        updated, removed = self._commit(
            "delete entry", lambda: DeleteEntry(self._repository).execute(self._entries, entry_id)
        )
        self._entries = updated
        self._last_deleted = removed
        return removed

    def undo_delete(self) -> Entry | None:
        removed = self._last_deleted
        if removed is None:
            return None
        self._entries = self._commit(
            "undo delete", lambda: RestoreEntry(self._repository).execute(self._entries, removed)
        )
        self._forget_deleted()
        return removed

    def clear_entries(self) -> None:
        self._entries = self._commit("clear entries", ClearEntries(self._repository).execute)
        self._forget_deleted()

    def import_entries(self, incoming: Iterable[Entry]) -> int:
        updated, count = self._commit(
            "import entries",
            lambda: ImportEntries(self._repository).execute(self._entries, incoming),
        )
        self._entries = updated
        return count

    def add_goal(self, title: str, note: str | None = None) -> Goal:
        goal = Goal(title=title, note=(note or "").strip() or None)
        self._goals = self._commit(
            "add goal", lambda: AddGoal(self._repository).execute(self._goals, goal)
        )
        return goal

    def toggle_goal(self, goal_id: str, done: bool) -> None:
        self._goals = self._commit(
            "toggle goal", lambda: ToggleGoal(self._repository).execute(self._goals, goal_id, done)
        )

    def delete_goal(self, goal_id: str) -> None:
        self._goals = self._commit(
            "delete goal", lambda: DeleteGoal(self._repository).execute(self._goals, goal_id)
        )

    def clear_goals(self) -> None:
        self._goals = self._commit("clear goals", ClearGoals(self._repository).execute)

    def dashboard(self, period: str | None = None) -> Dashboard:
        return GenerateDashboard().execute(self._entries, period)

    @staticmethod
    def _commit(action: str, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except StorageWriteFailure:
            logger.exception("Failed to %s, in-memory state left unchanged", action)
            raise

    def _forget_deleted(self) -> None:
        self._commit("forget deleted entry", lambda: self._repository.save_last_deleted(None))
        self._last_deleted = None
