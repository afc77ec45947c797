import csv
import logging
import os

from domain.entries import Entry
from infrastructure.repositories import ENTRY_FIELDS, entry_from_dict, entry_to_dict

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = ("amount", "savingDelta")


def export_entries_to_csv(entries: list[Entry], filepath: str) -> None:
    """Write entries with the same columns as the stored records."""
    if os.path.dirname(filepath):
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(ENTRY_FIELDS))
        writer.writeheader()
        for entry in entries:
            row = entry_to_dict(entry)
            writer.writerow({key: "" if value is None else value for key, value in row.items()})


def _row_to_item(row: dict[str, str]) -> dict:
    item: dict = {}
    for key in ENTRY_FIELDS:
        value = (row.get(key) or "").strip()
        if not value:
            item[key] = None
        elif key in _NUMERIC_FIELDS:
            item[key] = float(value)
        else:
            item[key] = value
    return item


def import_entries_from_csv(filepath: str) -> tuple[list[Entry], list[str]]:
    """Read entries exported by ``export_entries_to_csv``.

    Returns the parsed entries and one message per rejected row.
    """
    entries: list[Entry] = []
    errors: list[str] = []
    with open(filepath, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        missing = [name for name in ("id", "type", "date") if name not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"CSV is missing required columns: {', '.join(missing)}")
        for line_no, row in enumerate(reader, start=2):
            try:
                entries.append(entry_from_dict(_row_to_item(row)))
            except (KeyError, TypeError, ValueError) as exc:
                message = f"row {line_no}: {exc}"
                logger.warning("Skipping CSV %s", message)
                errors.append(message)
    return entries, errors
