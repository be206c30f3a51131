"""History recorder.

Appends one entry per confirmed open/close transition plus a heartbeat
entry every ``heartbeat_interval`` seconds, and keeps the open counter
and its reset epoch in the accessory context.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable

from pysesame._constants import HEARTBEAT_INTERVAL_SECONDS, HISTORY_EPOCH_OFFSET
from pysesame.exposer import AccessoryExposer, Characteristic
from pysesame.history.storage import HistoryStorage
from pysesame.models.context import AccessoryContext
from pysesame.models.history import HistoryEntry, HistoryLog
from pysesame.state.events import StateChange

_logger = logging.getLogger(__name__)


class HistoryRecorder:
    """Drives the activity history of one accessory."""

    def __init__(
        self,
        context: AccessoryContext,
        storage: HistoryStorage,
        exposer: AccessoryExposer,
        *,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._context = context
        self._storage = storage
        self._exposer = exposer
        self._heartbeat_interval = heartbeat_interval
        self._clock = clock
        self._log: HistoryLog | None = None
        self._heartbeat_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load the log and start the heartbeat. Needs a running loop."""
        self._ensure_log()
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.get_running_loop().create_task(
                self._heartbeat_loop(), name="pysesame-history-heartbeat"
            )

    async def stop(self) -> None:
        task = self._heartbeat_task
        self._heartbeat_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            try:
                self.heartbeat()
            except Exception:
                _logger.warning("History heartbeat failed", exc_info=True)

    def _ensure_log(self) -> tuple[HistoryLog, int]:
        """Return the loaded log and its initial time, fixing it on first use."""
        log = self._log
        if log is None:
            log = self._storage.load()
            self._log = log
        initial = log.initial_time
        if initial is None:
            initial = int(self._clock())
            log.initial_time = initial
            self._storage.save(log)
        return log, initial

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    @property
    def initial_time(self) -> int:
        return self._ensure_log()[1]

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._ensure_log()[0].entries)

    def _append(self, entry: HistoryEntry) -> None:
        log, _ = self._ensure_log()
        log.entries.append(entry)
        self._storage.save(log)

    def heartbeat(self) -> None:
        """Append an entry for the current state, changed or not."""
        self._append(HistoryEntry(time=int(self._clock()), status=self._context.contact_state))

    def record_transition(self, change: StateChange) -> None:
        """Record a confirmed transition; opens also bump the counter."""
        if change.is_open:
            self._context.times_opened += 1
            self._context.last_activation = change.timestamp
            self._exposer.update_value(Characteristic.TIMES_OPENED, self._context.times_opened)
            self._exposer.update_value(Characteristic.LAST_ACTIVATION, self.last_activation)
        self._append(HistoryEntry(time=change.timestamp, status=change.contact_state))

    def reset_counters(self, reset_marker: int) -> None:
        """Zero the open counter and start a new counting epoch.

        Existing history entries are left untouched.
        """
        self._context.times_opened = 0
        self._context.last_reset = int(reset_marker)
        self._exposer.update_value(Characteristic.TIMES_OPENED, 0)

    # ------------------------------------------------------------------
    # Exposed values
    # ------------------------------------------------------------------

    @property
    def last_activation(self) -> int:
        """Seconds from the first recorder activation to the last open."""
        if self._context.last_activation is None:
            return 0
        return max(0, self._context.last_activation - self.initial_time)

    @property
    def last_reset(self) -> int:
        """Reset epoch in the history format's 2001-based clock."""
        if self._context.last_reset is not None:
            return self._context.last_reset
        return self.initial_time - HISTORY_EPOCH_OFFSET
