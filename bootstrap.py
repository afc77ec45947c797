from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path

import config
from backup import create_backup, export_to_json
from domain.errors import StorageReadFailure
from infrastructure.repositories import ENTRIES_KEY, GOALS_KEY, KeyValueFinanceRepository
from migrate_json_to_sqlite import run_migration
from storage.json_storage import JsonFileStore
from storage.sqlite_storage import SQLiteStore

logger = logging.getLogger(__name__)


def configure_logging(level: str | int = config.LOG_LEVEL) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("Unknown log level")
    logging.basicConfig(level=level, format=config.LOG_FORMAT, force=True)


def _sqlite_has_data(sqlite_path: str, schema_path: str | None = None) -> bool:
    store = SQLiteStore(sqlite_path, schema_path=schema_path)
    try:
        return bool(store.keys())
    finally:
        store.close()


def _count_items(raw: str | None) -> int:
    if raw is None:
        return 0
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return 0
    return len(data) if isinstance(data, list) else 0


def _json_source_readable(json_path: str) -> bool:
    try:
        JsonFileStore(json_path).keys()
    except StorageReadFailure as e:
        logger.warning("JSON source unreadable, starting with an empty SQLite store: %s", e)
        return False
    return True


def _validate_startup_integrity(json_path: str, sqlite_store: SQLiteStore) -> None:
    json_store = JsonFileStore(json_path)
    for key in (ENTRIES_KEY, GOALS_KEY):
        json_count = _count_items(json_store.get(key))
        sqlite_count = _count_items(sqlite_store.get(key))
        if json_count != sqlite_count:
            raise RuntimeError(
                f"Storage mismatch for '{key}': JSON={json_count} SQLite={sqlite_count}"
            )
    logger.info("Startup integrity check passed")


def bootstrap_repository(
    use_sqlite: bool = config.USE_SQLITE,
    json_path: str = config.JSON_PATH,
    sqlite_path: str = config.SQLITE_PATH,
    schema_path: str = config.SCHEMA_PATH,
) -> KeyValueFinanceRepository:
    if not use_sqlite:
        logger.info("Storage selected: JSON (%s)", json_path)
        return KeyValueFinanceRepository(JsonFileStore(json_path))

    logger.info("Storage selected: SQLite (%s)", sqlite_path)
    create_backup(json_path)

    db_has_data = _sqlite_has_data(sqlite_path, schema_path)
    migrated = False
    if db_has_data:
        logger.info("SQLite already has data, migration skipped")
    elif not Path(json_path).exists():
        logger.info("JSON source file not found, migration skipped")
    elif _json_source_readable(json_path):
        logger.info("SQLite empty, starting one-time migration from JSON")
        code = run_migration(
            Namespace(
                json_path=json_path,
                sqlite_path=sqlite_path,
                schema_path=schema_path,
                dry_run=False,
            )
        )
        if code != 0:
            raise RuntimeError("Migration to SQLite failed")
        migrated = True

    store = SQLiteStore(sqlite_path, schema_path=schema_path)
    if migrated:
        _validate_startup_integrity(json_path, store)
    export_to_json(sqlite_path, json_path, schema_path=schema_path)
    return KeyValueFinanceRepository(store)
