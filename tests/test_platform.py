"""Drive the platform end to end with in-memory clients and file storage."""

from __future__ import annotations

import json
from pathlib import Path

import aiohttp
import pytest

from fakes import FakeClient, RecordingExposer, locked, unlocked
from pysesame.config import LockConfig, SesameConfig
from pysesame.exceptions import SesameError
from pysesame.exposer import Characteristic
from pysesame.models.status import Command, LockState
from pysesame.platform import CONTEXT_CACHE_FILE, SesamePlatform

pytestmark = pytest.mark.e2e

_SECRET = "a13d4b890111676ba8fb36ece7e94f7d"


class _Factories:
    def __init__(self) -> None:
        self.clients: dict[str, FakeClient] = {}
        self.exposers: dict[str, RecordingExposer] = {}

    def client(self, _config: SesameConfig, lock: LockConfig, _session: aiohttp.ClientSession) -> FakeClient:
        client = FakeClient(status=locked(80))
        client.status_after_command[Command.UNLOCK] = unlocked(79)
        self.clients[lock.uuid] = client
        return client

    def exposer(self, lock: LockConfig) -> RecordingExposer:
        exposer = RecordingExposer()
        self.exposers[lock.uuid] = exposer
        return exposer


def _config(tmp_path: Path, *locks: LockConfig) -> SesameConfig:
    return SesameConfig(api_key="key", locks=locks, settle_delay=0, storage_path=tmp_path)


@pytest.mark.asyncio
async def test_platform_runs_accessories_and_persists_context(tmp_path: Path) -> None:
    lock = LockConfig(uuid="lock-1", secret_key=_SECRET, name="Front Door")
    factories = _Factories()

    async with SesamePlatform(
        _config(tmp_path, lock),
        factories.exposer,
        host_id="bridge.local",
        client_factory=factories.client,
    ) as platform:
        accessory = platform.accessories["lock-1"]
        assert accessory.get_value(Characteristic.BATTERY_LEVEL) == 80
        assert accessory.get_value(Characteristic.LOCK_CURRENT_STATE) == int(LockState.SECURED)

        await accessory.set_value(Characteristic.LOCK_TARGET_STATE, int(LockState.UNSECURED))

        assert accessory.get_value(Characteristic.LOCK_CURRENT_STATE) == int(LockState.UNSECURED)
        assert factories.exposers["lock-1"].last(Characteristic.TIMES_OPENED) == 1

    assert platform.accessories == {}
    assert factories.clients["lock-1"].shutdown_calls == 1

    cache = json.loads((tmp_path / CONTEXT_CACHE_FILE).read_text(encoding="utf-8"))
    assert cache["lock-1"]["lock_state"] == int(LockState.UNSECURED)
    assert cache["lock-1"]["times_opened"] == 1

    history = json.loads((tmp_path / "bridge_Front Door_persist.json").read_text(encoding="utf-8"))
    assert history["initial_time"] is not None
    assert [entry["status"] for entry in history["entries"]] == [1]

    # A restart restores the counter and state before the first poll.
    factories = _Factories()
    async with SesamePlatform(
        _config(tmp_path, lock),
        factories.exposer,
        host_id="bridge",
        client_factory=factories.client,
    ) as platform:
        accessory = platform.accessories["lock-1"]
        assert accessory.get_value(Characteristic.TIMES_OPENED) == 1
        assert accessory.recorder.initial_time == history["initial_time"]


@pytest.mark.asyncio
async def test_platform_rejects_duplicate_locks(tmp_path: Path) -> None:
    lock = LockConfig(uuid="lock-1", secret_key=_SECRET)
    factories = _Factories()

    with pytest.raises(SesameError, match="configured twice"):
        async with SesamePlatform(
            _config(tmp_path, lock, lock),
            factories.exposer,
            host_id="bridge",
            client_factory=factories.client,
        ):
            pass

    assert factories.clients["lock-1"].shutdown_calls == 1


@pytest.mark.asyncio
async def test_platform_prunes_contexts_of_unconfigured_locks(tmp_path: Path) -> None:
    cache_path = tmp_path / CONTEXT_CACHE_FILE
    cache_path.write_text(
        json.dumps({"lock-1": {"times_opened": 4}, "retired-lock": {"times_opened": 7}}),
        encoding="utf-8",
    )
    lock = LockConfig(uuid="lock-1", secret_key=_SECRET)
    factories = _Factories()

    async with SesamePlatform(
        _config(tmp_path, lock),
        factories.exposer,
        host_id="bridge",
        client_factory=factories.client,
    ) as platform:
        assert platform.accessories["lock-1"].get_value(Characteristic.TIMES_OPENED) == 4
        cache = json.loads(cache_path.read_text(encoding="utf-8"))
        assert set(cache) == {"lock-1"}

    assert set(json.loads(cache_path.read_text(encoding="utf-8"))) == {"lock-1"}
