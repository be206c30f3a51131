"""Lock accessory: wires client, reconciler, dispatcher and history."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pysesame._constants import HEARTBEAT_INTERVAL_SECONDS, SETTLE_DELAY_SECONDS
from pysesame.clients import SesameClient
from pysesame.dispatcher import CommandDispatcher
from pysesame.exceptions import SesameError
from pysesame.exposer import AccessoryExposer, Characteristic
from pysesame.history.recorder import HistoryRecorder
from pysesame.history.storage import HistoryStorage
from pysesame.models.context import AccessoryContext
from pysesame.models.status import LockState, MechStatus
from pysesame.state.events import StateChange
from pysesame.state.reconciler import StateReconciler

_logger = logging.getLogger(__name__)


class LockAccessory:
    """One Sesame lock exposed as a lock + contact sensor accessory.

    Read callbacks are answered from the persisted context without any
    network traffic. Writes to the target state go through the
    :class:`CommandDispatcher`; writes to ``ResetTotal`` reset the open
    counter.

    Usage::

        accessory = LockAccessory(name, client, context, storage, exposer)
        await accessory.start()
        ...
        await accessory.shutdown()
    """

    def __init__(
        self,
        name: str,
        client: SesameClient,
        context: AccessoryContext,
        history_storage: HistoryStorage,
        exposer: AccessoryExposer,
        *,
        actor: str = "OpenSesame",
        settle_delay: float = SETTLE_DELAY_SECONDS,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
        persist: Callable[[AccessoryContext], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.name = name
        self._client = client
        self._context = context
        self._exposer = exposer
        self._persist = persist
        self._started = False

        self.reconciler = StateReconciler(context, clock=clock)
        self.recorder = HistoryRecorder(
            context,
            history_storage,
            exposer,
            heartbeat_interval=heartbeat_interval,
            clock=clock,
        )
        self.dispatcher = CommandDispatcher(
            client,
            self.reconciler,
            exposer,
            refresh=self.refresh,
            actor=actor,
            settle_delay=settle_delay,
        )

        self.reconciler.add_listener(self._on_state_change)
        self.reconciler.add_listener(self.recorder.record_transition)
        self.reconciler.add_listener(self._save_context)
        self.reconciler.add_jam_listener(self._on_jammed)

    @property
    def context(self) -> AccessoryContext:
        return self._context

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start history, subscribe to status updates and fetch once."""
        if self._started:
            return
        self._started = True
        self.recorder.start()
        self._client.subscribe(self._on_status)
        try:
            await self.refresh()
        except Exception:
            _logger.warning("Initial status fetch failed for %s", self.name, exc_info=True)

    async def shutdown(self) -> None:
        """Stop the heartbeat and release the client. Safe to call twice."""
        if not self._started:
            return
        self._started = False
        await self.recorder.stop()
        await self._client.shutdown()
        self._save_context()

    async def refresh(self) -> None:
        """Fetch the current status and reconcile it, outside the poll schedule."""
        status = await self._client.get_status()
        self.reconciler.apply(status)

    def _on_status(self, status: MechStatus) -> None:
        self.reconciler.apply(status)

    # ------------------------------------------------------------------
    # Bridge callbacks
    # ------------------------------------------------------------------

    def get_value(self, characteristic: Characteristic) -> int:
        """Answer a read callback from local state."""
        context = self._context
        match characteristic:
            case Characteristic.LOCK_CURRENT_STATE:
                return int(context.lock_state)
            case Characteristic.LOCK_TARGET_STATE:
                return int(self.dispatcher.target_state)
            case Characteristic.BATTERY_LEVEL:
                return context.battery_level
            case Characteristic.STATUS_LOW_BATTERY:
                return int(context.battery_critical)
            case Characteristic.CONTACT_SENSOR_STATE:
                return int(context.contact_state)
            case Characteristic.OPEN_DURATION | Characteristic.CLOSED_DURATION:
                return 0
            case Characteristic.TIMES_OPENED:
                return context.times_opened
            case Characteristic.LAST_ACTIVATION:
                return self.recorder.last_activation
            case Characteristic.RESET_TOTAL:
                return self.recorder.last_reset
        raise SesameError(f"Unsupported characteristic {characteristic!r}")

    async def set_value(self, characteristic: Characteristic, value: int) -> None:
        """Handle a write callback."""
        if characteristic == Characteristic.LOCK_TARGET_STATE:
            await self.dispatcher.dispatch(value)
            return
        if characteristic == Characteristic.RESET_TOTAL:
            self.recorder.reset_counters(int(value))
            self._save_context()
            return
        raise SesameError(f"{characteristic.value} is read-only")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _on_state_change(self, change: StateChange) -> None:
        _logger.info("%s is now %s", self.name, change.new.name.lower())
        self.dispatcher.target_state = change.new
        self._exposer.update_value(Characteristic.LOCK_CURRENT_STATE, int(change.new))
        self._exposer.update_value(Characteristic.LOCK_TARGET_STATE, int(change.new))
        self._exposer.update_value(Characteristic.BATTERY_LEVEL, change.battery.level)
        self._exposer.update_value(Characteristic.STATUS_LOW_BATTERY, int(change.battery.is_critical))
        self._exposer.update_value(Characteristic.CONTACT_SENSOR_STATE, int(change.contact_state))

    def _on_jammed(self, state: LockState) -> None:
        self._exposer.update_value(Characteristic.LOCK_CURRENT_STATE, int(state))
        self._save_context()

    def _save_context(self, _change: StateChange | None = None) -> None:
        if self._persist is None:
            return
        try:
            self._persist(self._context)
        except Exception:
            _logger.warning("Persisting context for %s failed", self.name, exc_info=True)
