"""Serialized lock/unlock command dispatch."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pysesame._constants import SETTLE_DELAY_SECONDS
from pysesame.clients import SesameClient
from pysesame.config import ClientMode
from pysesame.exposer import AccessoryExposer, Characteristic
from pysesame.models.status import Command, LockState
from pysesame.state.reconciler import StateReconciler

_logger = logging.getLogger(__name__)

_TARGET_COMMANDS: dict[LockState, Command] = {
    LockState.SECURED: Command.LOCK,
    LockState.UNSECURED: Command.UNLOCK,
}


class CommandDispatcher:
    """Runs one command at a time against a lock.

    Concurrent :meth:`dispatch` calls queue on an ``asyncio.Lock`` and run
    in arrival order. Status observation (polling, push, reads) never
    waits on that lock.

    Parameters
    ----------
    client
        Client used to send commands; its ``mode`` decides whether a
        forced re-poll follows a successful command.
    reconciler
        Receives the jam marker on failure.
    exposer
        Receives the optimistic target state.
    refresh
        Coroutine that fetches and reconciles the current status.
    actor
        Name recorded in the lock's own history.
    settle_delay
        Seconds to let the bolt move before re-polling.
    """

    def __init__(
        self,
        client: SesameClient,
        reconciler: StateReconciler,
        exposer: AccessoryExposer,
        *,
        refresh: Callable[[], Awaitable[None]],
        actor: str,
        settle_delay: float = SETTLE_DELAY_SECONDS,
    ) -> None:
        self._client = client
        self._reconciler = reconciler
        self._exposer = exposer
        self._refresh = refresh
        self._actor = actor
        self._settle_delay = settle_delay
        self._lock = asyncio.Lock()
        self.target_state = LockState.UNSECURED if reconciler.lock_state == LockState.UNSECURED else LockState.SECURED

    @property
    def busy(self) -> bool:
        """Whether a command is in flight."""
        return self._lock.locked()

    async def dispatch(self, target: LockState | int) -> None:
        """Drive the lock towards *target*.

        Never raises for command failures: the lock is reported as
        ``JAMMED`` instead and the user has to try again.
        """
        command = _TARGET_COMMANDS.get(target)  # type: ignore[call-overload]
        if command is None:
            _logger.debug("Ignoring unsupported target state %r", target)
            return
        target_state = LockState(target)

        async with self._lock:
            self.target_state = target_state
            self._exposer.update_value(Characteristic.LOCK_TARGET_STATE, int(target_state))

            try:
                await self._client.post_command(command, self._actor)
            except Exception:
                _logger.error("%s command failed; marking lock as jammed", command.name, exc_info=True)
                self._reconciler.mark_jammed()
                return

            if self._client.mode != ClientMode.POLLING:
                # The device pushes its new status on its own.
                return

            await asyncio.sleep(self._settle_delay)
            try:
                await self._refresh()
            except Exception:
                _logger.warning("Status refresh after %s failed", command.name, exc_info=True)
