import logging
from collections.abc import Iterable, Sequence

from domain.aggregation import sort_entries
from domain.entries import Entry
from domain.goals import Goal
from domain.reports import Dashboard
from infrastructure.repositories import FinanceRepository

logger = logging.getLogger(__name__)


def _index_of(items: Sequence, item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise KeyError(f"Not found: {item_id}")


class AddEntry:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, entries: Sequence[Entry], entry: Entry) -> list[Entry]:
        """Append, re-sort and persist the full list."""
        if any(existing.id == entry.id for existing in entries):
            raise ValueError(f"Duplicate entry id: {entry.id}")
        updated = sort_entries([*entries, entry])
        self._repository.save_entries(updated)
        logger.info(
            "Entry added id=%s kind=%s amount=%s date=%s",
            entry.id,
            entry.kind.value,
            entry.amount,
            entry.date.isoformat(),
        )
        return updated


class UpdateEntry:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, entries: Sequence[Entry], entry: Entry) -> list[Entry]:
        """Replace the entry with the same id by the new value."""
        index = _index_of(entries, entry.id)
        updated = list(entries)
        updated[index] = entry
        updated = sort_entries(updated)
        self._repository.save_entries(updated)
        logger.info(
            "Entry updated id=%s kind=%s amount=%s", entry.id, entry.kind.value, entry.amount
        )
        return updated


class DeleteEntry:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, entries: Sequence[Entry], entry_id: str) -> tuple[list[Entry], Entry]:
        index = _index_of(entries, entry_id)
        removed = entries[index]
        updated = [entry for entry in entries if entry.id != entry_id]
        self._repository.save_entries(updated)
        logger.info("Entry deleted id=%s kind=%s", removed.id, removed.kind.value)
        return updated, removed


class RestoreEntry:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, entries: Sequence[Entry], entry: Entry) -> list[Entry]:
        """Put a deleted entry back; a no-op if its id is already present."""
        if any(existing.id == entry.id for existing in entries):
            return list(entries)
        updated = sort_entries([*entries, entry])
        self._repository.save_entries(updated)
        logger.info("Entry restored id=%s", entry.id)
        return updated


class ClearEntries:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self) -> list[Entry]:
        self._repository.save_entries([])
        logger.info("All entries deleted")
        return []


class ImportEntries:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(
        self, entries: Sequence[Entry], incoming: Iterable[Entry]
    ) -> tuple[list[Entry], int]:
        """Merge ``incoming``, skipping ids that already exist."""
        known = {entry.id for entry in entries}
        added: list[Entry] = []
        for entry in incoming:
            if entry.id in known:
                logger.warning("Skipping imported entry with existing id=%s", entry.id)
                continue
            known.add(entry.id)
            added.append(entry)
        if not added:
            return list(entries), 0
        updated = sort_entries([*entries, *added])
        self._repository.save_entries(updated)
        logger.info("Imported %s entries", len(added))
        return updated, len(added)


class AddGoal:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, goals: Sequence[Goal], goal: Goal) -> list[Goal]:
        if any(existing.id == goal.id for existing in goals):
            raise ValueError(f"Duplicate goal id: {goal.id}")
        updated = [*goals, goal]
        self._repository.save_goals(updated)
        logger.info("Goal added id=%s title=%s", goal.id, goal.title)
        return updated


class ToggleGoal:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, goals: Sequence[Goal], goal_id: str, done: bool) -> list[Goal]:
        """Set ``done`` on one goal; repeating the same value changes nothing."""
        index = _index_of(goals, goal_id)
        updated = list(goals)
        updated[index] = goals[index].with_done(done)
        self._repository.save_goals(updated)
        logger.info("Goal toggled id=%s done=%s", goal_id, bool(done))
        return updated


class DeleteGoal:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self, goals: Sequence[Goal], goal_id: str) -> list[Goal]:
        _index_of(goals, goal_id)
        updated = [goal for goal in goals if goal.id != goal_id]
        self._repository.save_goals(updated)
        logger.info("Goal deleted id=%s", goal_id)
        return updated


class ClearGoals:
    def __init__(self, repository: FinanceRepository):
        self._repository = repository

    def execute(self) -> list[Goal]:
        self._repository.save_goals([])
        logger.info("All goals deleted")
        return []


class GenerateDashboard:
    def execute(self, entries: Iterable[Entry], period: str | None = None) -> Dashboard:
        dashboard = Dashboard(entries)
        if period:
            return dashboard.filter_by_period(period)
        return dashboard
