from __future__ import annotations

from pathlib import Path

import pytest

from pysesame.config import ClientMode, LockConfig, SesameConfig
from pysesame.exceptions import SesameConfigError

_SECRET = "a13d4b890111676ba8fb36ece7e94f7d"


def _block(**extra: object) -> dict[str, object]:
    block: dict[str, object] = {
        "apiKey": "api-key",
        "updateInterval": 30,
        "locks": [{"uuid": "lock-1", "secret": _SECRET, "name": "Front Door"}],
    }
    block.update(extra)
    return block


def test_from_mapping_minimal_block() -> None:
    config = SesameConfig.from_mapping(_block())

    assert config.api_key == "api-key"
    assert config.update_interval == 30.0
    assert config.client_mode == ClientMode.POLLING
    assert config.name == "OpenSesame"
    assert config.locks == (LockConfig(uuid="lock-1", secret_key=_SECRET, name="Front Door"),)
    assert config.locks[0].display_name == "Front Door"


def test_from_mapping_push_mode_and_overrides(tmp_path: Path) -> None:
    config = SesameConfig.from_mapping(
        _block(clientMode="push", clientID="bridge", brokerHost="broker.example", brokerPort="8883"),
        storage_path=tmp_path,
        push_transport="tcp",
    )

    assert config.client_mode == ClientMode.PUSH
    assert config.push_client_id == "bridge"
    assert config.push_broker_host == "broker.example"
    assert config.push_broker_port == 8883
    assert config.push_transport == "tcp"
    assert config.storage_path == tmp_path


@pytest.mark.parametrize("missing", ["apiKey", "locks", "updateInterval"])
def test_from_mapping_requires_keys(missing: str) -> None:
    block = _block()
    del block[missing]

    with pytest.raises(SesameConfigError, match=missing):
        SesameConfig.from_mapping(block)


@pytest.mark.parametrize(
    "block",
    [
        _block(updateInterval="soon"),
        _block(updateInterval=0),
        _block(clientMode="carrier-pigeon"),
        _block(clientMode="push"),
        _block(locks=[{"uuid": "lock-1", "secret": "short"}]),
        _block(locks=[{"secret": _SECRET}]),
        _block(locks="lock-1"),
        _block(locks=["oops"]),
        _block(locks=[{"uuid": "lock-1", "secret": _SECRET}, 7]),
        _block(clientMode="push", clientID="bridge", brokerHost="broker.example", brokerPort="x"),
    ],
)
def test_from_mapping_rejects_invalid_blocks(block: dict[str, object]) -> None:
    with pytest.raises(SesameConfigError):
        SesameConfig.from_mapping(block)


def test_lock_accepts_secret_key_alias_and_defaults_name_to_uuid() -> None:
    lock = LockConfig.from_mapping({"uuid": "lock-2", "secretKey": _SECRET.upper()})

    assert lock.name is None
    assert lock.display_name == "lock-2"


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SESAME_API_KEY", "env-key")
    monkeypatch.setenv("SESAME_UPDATE_INTERVAL", "15")
    monkeypatch.setenv("SESAME_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("SESAME_LOCK_UUID", "lock-9")
    monkeypatch.setenv("SESAME_LOCK_SECRET", _SECRET)
    monkeypatch.setenv("SESAME_LOCK_NAME", "Garage")

    config = SesameConfig.from_env(settle_delay=0.5)

    assert config.api_key == "env-key"
    assert config.update_interval == 15.0
    assert config.settle_delay == 0.5
    assert config.storage_path == tmp_path
    assert config.locks == (LockConfig(uuid="lock-9", secret_key=_SECRET, name="Garage"),)


def test_from_env_without_api_key_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SESAME_API_KEY", raising=False)

    with pytest.raises(SesameConfigError, match="api_key"):
        SesameConfig.from_env()


def test_from_env_rejects_unknown_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SESAME_API_KEY", "env-key")
    monkeypatch.setenv("SESAME_CLIENT_MODE", "smoke-signals")

    with pytest.raises(SesameConfigError):
        SesameConfig.from_env()


@pytest.mark.parametrize(
    "name, value",
    [("SESAME_BROKER_PORT", "https"), ("SESAME_UPDATE_INTERVAL", "often")],
)
def test_from_env_rejects_malformed_numbers(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv("SESAME_API_KEY", "env-key")
    monkeypatch.setenv(name, value)

    with pytest.raises(SesameConfigError, match=name):
        SesameConfig.from_env()
