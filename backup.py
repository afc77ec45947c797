from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from storage.json_storage import JsonFileStore
from storage.sqlite_storage import SQLiteStore

logger = logging.getLogger(__name__)


def create_backup(json_path: str) -> str | None:
    source = Path(json_path)
    if not source.exists():
        return None
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_dir = source.parent / "backups"
    backup_dir.mkdir(exist_ok=True)
    backup_path = backup_dir / f"{source.stem}_backup_{stamp}{source.suffix}"
    shutil.copy2(source, backup_path)
    logger.info("JSON backup created: %s", backup_path)
    return str(backup_path)


def export_to_json(sqlite_path: str, json_path: str, schema_path: str | None = None) -> None:
    """Mirror every key of the SQLite store into the JSON store."""
    sqlite_store = SQLiteStore(sqlite_path, schema_path=schema_path)
    try:
        writer = JsonFileStore(json_path)
        for key in sqlite_store.keys():
            value = sqlite_store.get(key)
            if value is not None:
                writer.set(key, value)
        logger.info("SQLite exported to JSON: %s", json_path)
    finally:
        sqlite_store.close()
