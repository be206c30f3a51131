"""Platform bootstrap: one accessory per configured lock."""

from __future__ import annotations

import logging
import socket
from collections.abc import Callable
from typing import Any

import aiohttp

from pysesame._cache import ContextStore
from pysesame.accessory import LockAccessory
from pysesame.clients import SesameClient, create_client
from pysesame.config import LockConfig, SesameConfig
from pysesame.exceptions import SesameError
from pysesame.exposer import AccessoryExposer
from pysesame.history.storage import JsonHistoryStorage, history_file_name

_logger = logging.getLogger(__name__)

CONTEXT_CACHE_FILE = "accessories.json"


class SesamePlatform:
    """Owns the HTTP session and the accessories for a :class:`SesameConfig`.

    Usage::

        async with SesamePlatform(config, exposer_factory) as platform:
            accessory = platform.accessories[uuid]
            await accessory.set_value(Characteristic.LOCK_TARGET_STATE, 0)
    """

    def __init__(
        self,
        config: SesameConfig,
        exposer_factory: Callable[[LockConfig], AccessoryExposer],
        *,
        session: aiohttp.ClientSession | None = None,
        host_id: str | None = None,
        client_factory: Callable[[SesameConfig, LockConfig, aiohttp.ClientSession], SesameClient] = create_client,
    ) -> None:
        self._config = config
        self._exposer_factory = exposer_factory
        self._external_session = session is not None
        self._http_session = session
        self._host_id = host_id or socket.gethostname()
        self._client_factory = client_factory
        self._contexts = ContextStore(config.storage_path / CONTEXT_CACHE_FILE)
        self.accessories: dict[str, LockAccessory] = {}

    async def __aenter__(self) -> SesamePlatform:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        try:
            for uuid in self._contexts.prune(lock.uuid for lock in self._config.locks):
                _logger.info("Removing cached context for unconfigured lock %s", uuid)
            for lock in self._config.locks:
                await self._add_accessory(lock)
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        accessories = list(self.accessories.values())
        self.accessories.clear()
        for accessory in accessories:
            try:
                await accessory.shutdown()
            except Exception:
                _logger.warning("Shutting down %s failed", accessory.name, exc_info=True)
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise SesameError("Platform not initialized. Use 'async with SesamePlatform(...) as platform:'")
        return self._http_session

    async def _add_accessory(self, lock: LockConfig) -> LockAccessory:
        if lock.uuid in self.accessories:
            raise SesameError(f"Lock {lock.uuid} is configured twice")

        context = self._contexts.get(lock.uuid)
        _logger.info("Adding accessory %s (%s)", lock.display_name, lock.uuid)

        client = self._client_factory(self._config, lock, self._require_session())
        storage = JsonHistoryStorage(
            self._config.storage_path / history_file_name(self._host_id, lock.display_name),
        )
        accessory = LockAccessory(
            lock.display_name,
            client,
            context,
            storage,
            self._exposer_factory(lock),
            actor=self._config.name,
            settle_delay=self._config.settle_delay,
            heartbeat_interval=self._config.heartbeat_interval,
            persist=lambda ctx, uuid=lock.uuid: self._contexts.put(uuid, ctx),
        )
        self.accessories[lock.uuid] = accessory
        await accessory.start()
        return accessory
