"""History log persistence backends."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pysesame.models.history import HistoryLog

_logger = logging.getLogger(__name__)

#: Ring size of the accessory history format (28 days of 10-minute samples).
DEFAULT_MAX_ENTRIES = 4032


class HistoryStorage(Protocol):
    def load(self) -> HistoryLog: ...

    def save(self, log: HistoryLog) -> None: ...


def history_file_name(host_id: str, display_name: str) -> str:
    """Deterministic per-accessory file name.

    Only the first label of *host_id* is used, so ``box.local`` and
    ``box`` share a file.
    """
    host = host_id.split(".", 1)[0]
    return f"{host}_{display_name}_persist.json"


class MemoryHistoryStorage:
    """Keeps the log in memory; nothing survives a restart."""

    def __init__(self, log: HistoryLog | None = None) -> None:
        self.log = log.model_copy(deep=True) if log is not None else HistoryLog()
        self.saves = 0

    def load(self) -> HistoryLog:
        return self.log.model_copy(deep=True)

    def save(self, log: HistoryLog) -> None:
        self.log = log.model_copy(deep=True)
        self.saves += 1


class JsonHistoryStorage:
    """Stores the log as a JSON document, keeping the newest *max_entries*."""

    def __init__(self, path: Path, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._path = path
        self._max_entries = max_entries

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> HistoryLog:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return HistoryLog()
        try:
            return HistoryLog.model_validate_json(text)
        except ValidationError:
            _logger.warning("Ignoring unreadable history file %s", self._path, exc_info=True)
            return HistoryLog()

    def save(self, log: HistoryLog) -> None:
        if len(log.entries) > self._max_entries:
            del log.entries[: len(log.entries) - self._max_entries]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(log.model_dump_json(), encoding="utf-8")
        os.replace(tmp_path, self._path)
