from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from infrastructure.repositories import ENTRIES_KEY, GOALS_KEY, entry_from_dict, goal_from_dict
from storage.json_storage import JsonFileStore
from storage.sqlite_storage import SQLiteStore

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent
MIGRATED_KEYS = (ENTRIES_KEY, GOALS_KEY)


def _resolve_schema_path(schema_path: str) -> str:
    candidate = Path(schema_path)
    if candidate.is_absolute():
        return str(candidate)
    return str((Path(__file__).resolve().parent / candidate).resolve())


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Copy finance entries and goals from JSON storage to SQLite storage."
    )
    parser.add_argument(
        "--json-path",
        default=str(PROJECT_ROOT / "data.json"),
        help="Path to source JSON file (default: <project>/data.json)",
    )
    parser.add_argument(
        "--sqlite-path",
        default=str(PROJECT_ROOT / "finance.db"),
        help="Path to target SQLite database (default: <project>/finance.db)",
    )
    parser.add_argument(
        "--schema-path",
        default=str(PROJECT_ROOT / "db" / "schema.sql"),
        help="Path to SQLite schema.sql (default: <project>/db/schema.sql)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the source without writing to SQLite",
    )
    return parser.parse_args(argv)


def _validate_blob(key: str, raw: str) -> int:
    """Check that a stored blob decodes into valid records; return their count."""
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"'{key}' is not a list")
    decode = entry_from_dict if key == ENTRIES_KEY else goal_from_dict
    ids: set[str] = set()
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"'{key}' record #{index} is not an object")
        record = decode(item)
        if record.id in ids:
            raise ValueError(f"'{key}' has duplicate id {record.id}")
        ids.add(record.id)
    return len(data)


def _read_source(json_path: str) -> dict[str, str]:
    if not Path(json_path).exists():
        raise FileNotFoundError(f"JSON source not found: {json_path}")
    store = JsonFileStore(json_path)
    blobs: dict[str, str] = {}
    for key in MIGRATED_KEYS:
        raw = store.get(key)
        if raw is None:
            continue
        count = _validate_blob(key, raw)
        print(f"  {key}: {count}")
        blobs[key] = raw
    return blobs


def run_dry_run(args: argparse.Namespace) -> int:
    print("== DRY RUN: JSON -> SQLite ==")
    try:
        _read_source(args.json_path)
        print("[ok] Source data integrity passed")
        print("[dry-run] Nothing written")
        return 0
    except Exception as exc:
        print(f"[error] Dry-run failed: {exc}")
        return 1


def run_migration(args: argparse.Namespace) -> int:
    print("== MIGRATION: JSON -> SQLite ==")
    try:
        blobs = _read_source(args.json_path)
        print("[ok] Source data integrity passed")
        sqlite_store = SQLiteStore(
            args.sqlite_path, schema_path=_resolve_schema_path(args.schema_path)
        )
    except Exception as exc:
        print(f"[error] Migration failed: {exc}")
        return 1

    try:
        existing = {key: sqlite_store.get(key) for key in MIGRATED_KEYS}
        if any(value is not None for value in existing.values()):
            if all(existing[key] == blobs.get(key) for key in MIGRATED_KEYS):
                print("[ok] Target SQLite already contains equivalent data, migration skipped")
                return 0
            raise RuntimeError("Target SQLite is not empty and differs from source JSON")
        sqlite_store.set_many(blobs)
        print("[ok] Migration finished successfully")
        return 0
    except Exception as exc:
        logger.exception("Migration from %s failed", args.json_path)
        print(f"[error] Migration failed: {exc}")
        return 1
    finally:
        sqlite_store.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.dry_run:
        return run_dry_run(args)
    return run_migration(args)


if __name__ == "__main__":
    sys.exit(main())
