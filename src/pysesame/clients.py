"""Status/command clients for a single lock.

Two implementations sit behind :class:`SesameClient`:

* :class:`PollingClient` re-fetches the REST shadow on a fixed interval.
* :class:`PushClient` subscribes to the lock's realtime shadow topic.

Both send commands and answer one-off status requests over REST. The
accessory picks one at construction and never switches.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Protocol

import aiohttp

from pysesame._api.command import post_command
from pysesame._api.status import fetch_shadow
from pysesame._mqtt import SesameMqttRuntime, build_mqtt_bootstrap
from pysesame._transport import ApiKeyTransport, Transport
from pysesame.config import ClientMode, LockConfig, SesameConfig
from pysesame.models.status import Command, MechStatus

_logger = logging.getLogger(__name__)

StatusCallback = Callable[[MechStatus], None]


class SesameClient(Protocol):
    """Capabilities the accessory core consumes."""

    @property
    def mode(self) -> ClientMode: ...

    async def get_status(self) -> MechStatus | None: ...

    def subscribe(self, callback: StatusCallback) -> None: ...

    async def post_command(self, command: Command, actor: str) -> None: ...

    async def shutdown(self) -> None: ...


class _RestClient:
    """Shared REST plumbing for both client modes."""

    mode: ClientMode

    def __init__(self, config: SesameConfig, lock: LockConfig, transport: Transport) -> None:
        self._config = config
        self._lock = lock
        self._transport = transport
        self._callbacks: list[StatusCallback] = []
        self._closed = False

    @property
    def lock(self) -> LockConfig:
        return self._lock

    async def get_status(self) -> MechStatus | None:
        """Fetch the current sample; ``None`` means nothing to report."""
        shadow = await fetch_shadow(self._transport, self._lock.uuid)
        if shadow is None:
            return None
        return shadow.to_mech_status()

    async def post_command(self, command: Command, actor: str) -> None:
        await post_command(self._transport, self._lock.uuid, self._lock.secret_key, command, actor)

    def _emit(self, status: MechStatus) -> None:
        for callback in list(self._callbacks):
            try:
                callback(status)
            except Exception:
                _logger.debug("status callback failed uuid=%s", self._lock.uuid, exc_info=True)


class PollingClient(_RestClient):
    """Client that polls ``GET /{uuid}`` every ``config.update_interval`` seconds."""

    mode = ClientMode.POLLING

    def __init__(self, config: SesameConfig, lock: LockConfig, transport: Transport) -> None:
        super().__init__(config, lock, transport)
        self._poll_task: asyncio.Task[None] | None = None

    def subscribe(self, callback: StatusCallback) -> None:
        """Register *callback* and start the poll loop if not running."""
        if self._closed:
            return
        self._callbacks.append(callback)
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.get_running_loop().create_task(
                self._poll_loop(), name=f"pysesame-poll-{self._lock.uuid}"
            )

    async def _poll_loop(self) -> None:
        interval = self._config.update_interval
        while True:
            await asyncio.sleep(interval)
            try:
                status = await self.get_status()
            except Exception:
                _logger.warning("Status poll failed uuid=%s", self._lock.uuid, exc_info=True)
                continue
            if status is not None:
                self._emit(status)

    async def shutdown(self) -> None:
        self._closed = True
        self._callbacks.clear()
        task = self._poll_task
        self._poll_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


class PushClient(_RestClient):
    """Client that receives samples from the lock's shadow topic."""

    mode = ClientMode.PUSH

    def __init__(
        self,
        config: SesameConfig,
        lock: LockConfig,
        transport: Transport,
        *,
        runtime_factory: Callable[..., SesameMqttRuntime] = SesameMqttRuntime,
    ) -> None:
        super().__init__(config, lock, transport)
        self._runtime_factory = runtime_factory
        self._runtime: SesameMqttRuntime | None = None

    def subscribe(self, callback: StatusCallback) -> None:
        """Register *callback* and connect to the broker if not connected.

        Broker startup is best-effort: a failure is logged and the next
        ``subscribe`` call tries again. REST calls keep working meanwhile.
        """
        if self._closed:
            return
        self._callbacks.append(callback)
        if self._runtime is not None and self._runtime.is_running:
            return
        try:
            runtime = self._runtime_factory(
                loop=asyncio.get_running_loop(),
                on_status=self._emit,
                keepalive=self._config.push_keepalive,
                logger=_logger,
            )
            runtime.start(build_mqtt_bootstrap(self._config, self._lock))
            self._runtime = runtime
        except Exception:
            _logger.warning("MQTT startup failed uuid=%s", self._lock.uuid, exc_info=True)

    async def shutdown(self) -> None:
        self._closed = True
        self._callbacks.clear()
        runtime = self._runtime
        self._runtime = None
        if runtime is not None:
            runtime.stop()


def create_client(
    config: SesameConfig,
    lock: LockConfig,
    http_session: aiohttp.ClientSession,
) -> PollingClient | PushClient:
    """Build the client matching ``config.client_mode`` for *lock*."""
    transport = ApiKeyTransport(config, http_session)
    if config.client_mode == ClientMode.PUSH:
        return PushClient(config, lock, transport)
    return PollingClient(config, lock, transport)
