from __future__ import annotations

import json
import logging
import os
import tempfile
import threading

from domain.errors import StorageReadFailure, StorageWriteFailure

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Key-value store kept as one JSON object file (key -> text blob)."""

    def __init__(self, file_path: str = "data.json") -> None:
        self._file_path = file_path
        self._lock = threading.RLock()

    @property
    def file_path(self) -> str:
        return self._file_path

    def get(self, key: str) -> str | None:
        value = self._load_data().get(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._load_data()
            except StorageReadFailure:
                logger.warning("Overwriting unreadable store file %s", self._file_path)
                data = {}
            data[key] = str(value)
            self._save_data(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load_data()
            if key in data:
                data.pop(key)
                self._save_data(data)

    def keys(self) -> list[str]:
        return list(self._load_data())

    def _load_data(self) -> dict:
        with self._lock:
            try:
                with open(self._file_path, encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                return {}
            except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise StorageReadFailure(
                    f"Failed to read store file {self._file_path}: {exc}"
                ) from exc
        if not isinstance(data, dict):
            raise StorageReadFailure(f"Store file {self._file_path} is not a JSON object")
        return data

    def _save_data(self, data: dict) -> None:
        with self._lock:
            directory = os.path.dirname(self._file_path) or "."
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(prefix=".store_", suffix=".json", dir=directory)
            except OSError as exc:
                raise StorageWriteFailure(
                    f"Failed to write store file {self._file_path}: {exc}"
                ) from exc
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self._file_path)
            except OSError as exc:
                raise StorageWriteFailure(
                    f"Failed to write store file {self._file_path}: {exc}"
                ) from exc
            finally:
                try:
                    if os.path.exists(tmp_path):
                        os.remove(tmp_path)
                except OSError:
                    logger.exception("Failed to cleanup temporary file during save: %s", tmp_path)
