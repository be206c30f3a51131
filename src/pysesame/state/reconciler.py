"""Merge status samples from polling and push into the accessory context."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pysesame.models.context import AccessoryContext
from pysesame.models.status import LockState, MechStatus
from pysesame.state.events import StateChange

_logger = logging.getLogger(__name__)

ChangeListener = Callable[[StateChange], None]
JamListener = Callable[[LockState], None]


class StateReconciler:
    """Applies samples to the persisted context with de-duplication.

    Samples may come from either source in any order; the last valid one
    applied wins. Listeners only hear about samples whose derived lock
    state differs from the stored one.
    """

    def __init__(
        self,
        context: AccessoryContext,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._context = context
        self._clock = clock
        self._change_listeners: list[ChangeListener] = []
        self._jam_listeners: list[JamListener] = []

    @property
    def lock_state(self) -> LockState:
        return self._context.lock_state

    def add_listener(self, listener: ChangeListener) -> None:
        self._change_listeners.append(listener)

    def add_jam_listener(self, listener: JamListener) -> None:
        self._jam_listeners.append(listener)

    def apply(self, sample: MechStatus | None) -> StateChange | None:
        """Apply *sample*; return the transition it caused, if any."""
        if sample is None:
            return None
        if sample.is_ambiguous:
            _logger.debug(
                "Discarding ambiguous sample lock_range=%s unlock_range=%s",
                sample.is_in_lock_range,
                sample.is_in_unlock_range,
            )
            return None

        # Battery is refreshed on every valid sample; it is only pushed to
        # listeners together with a lock-state change.
        self._context.battery_level = sample.battery_percentage
        self._context.battery_critical = sample.is_battery_critical

        new_state = sample.lock_state
        old_state = self._context.lock_state
        if new_state == old_state:
            return None

        self._context.lock_state = new_state
        change = StateChange(
            old=old_state,
            new=new_state,
            battery=sample.battery,
            timestamp=int(self._clock()),
        )
        _logger.debug("Lock state %s -> %s", old_state.name, new_state.name)
        for listener in list(self._change_listeners):
            try:
                listener(change)
            except Exception:
                _logger.warning("State change listener failed", exc_info=True)
        return change

    def mark_jammed(self) -> None:
        """Force ``JAMMED`` after a command could not be confirmed."""
        self._context.lock_state = LockState.JAMMED
        for listener in list(self._jam_listeners):
            try:
                listener(LockState.JAMMED)
            except Exception:
                _logger.warning("Jam listener failed", exc_info=True)
