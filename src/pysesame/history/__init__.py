"""Activity history: open/close transitions, heartbeats and counters."""

from pysesame.history.recorder import HistoryRecorder
from pysesame.history.storage import (
    HistoryStorage,
    JsonHistoryStorage,
    MemoryHistoryStorage,
    history_file_name,
)

__all__ = [
    "HistoryRecorder",
    "HistoryStorage",
    "JsonHistoryStorage",
    "MemoryHistoryStorage",
    "history_file_name",
]
