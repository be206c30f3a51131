"""Client configuration for pysesame."""

from __future__ import annotations

import dataclasses
import enum
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pysesame._constants import (
    BASE_URL,
    DEFAULT_UPDATE_INTERVAL_SECONDS,
    HEARTBEAT_INTERVAL_SECONDS,
    PUSH_TOPIC_TEMPLATE,
    SETTLE_DELAY_SECONDS,
)
from pysesame._crypto import is_valid_secret_key
from pysesame.exceptions import SesameConfigError


class ClientMode(enum.StrEnum):
    """How lock status reaches the accessory.

    Chosen once when the client is built; never switched at runtime.
    """

    POLLING = "polling"
    PUSH = "push"


_REQUIRED_KEYS: tuple[str, ...] = ("apiKey", "locks", "updateInterval")


@dataclasses.dataclass(frozen=True)
class LockConfig:
    """A single Sesame lock registered with the web API.

    Parameters
    ----------
    uuid : str
        Device UUID shown in the Sesame app.
    secret_key : str
        32-character hex secret key used to sign commands.
    name : str or None
        Display name for the accessory. Defaults to the UUID.
    """

    uuid: str
    secret_key: str
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.uuid

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LockConfig:
        uuid = str(data.get("uuid") or "").strip()
        if not uuid:
            raise SesameConfigError("lock entry is missing 'uuid'")
        secret_key = str(data.get("secret") or data.get("secretKey") or "").strip()
        if not is_valid_secret_key(secret_key):
            raise SesameConfigError(f"lock {uuid} has an invalid secret key (expected 32 hex characters)")
        name = data.get("name")
        return cls(uuid=uuid, secret_key=secret_key, name=str(name) if name else None)


@dataclasses.dataclass(frozen=True)
class SesameConfig:
    """Platform configuration.

    Parameters
    ----------
    api_key : str
        Sesame web API key (``x-api-key`` header).
    locks : tuple of LockConfig
        Locks to expose as accessories.
    name : str
        Actor name recorded in the lock's own history for every command.
    client_mode : ClientMode
        ``POLLING`` re-fetches status every *update_interval* seconds;
        ``PUSH`` subscribes to the lock's realtime shadow topic.
    update_interval : float
        Seconds between status polls in polling mode.
    settle_delay : float
        Seconds to wait after a command before the forced re-poll
        (polling mode only).
    heartbeat_interval : float
        Seconds between unconditional history entries.
    base_url : str
        REST API base URL.
    request_timeout : float
        Total timeout for a single REST request, in seconds.
    push_client_id : str or None
        Client identifier for the push broker. Required in push mode.
    push_broker_host : str or None
        Push broker host name. Required in push mode.
    push_broker_port : int
        Push broker port.
    push_transport : str
        ``"tcp"`` or ``"websockets"``.
    push_username, push_password : str or None
        Optional broker credentials.
    push_topic_template : str
        Shadow topic; ``{uuid}`` is replaced with the lock UUID.
    push_keepalive : int
        MQTT keepalive in seconds.
    storage_path : Path
        Directory for history logs and the accessory context cache.
    """

    api_key: str
    locks: tuple[LockConfig, ...] = ()
    name: str = "OpenSesame"
    client_mode: ClientMode = ClientMode.POLLING
    update_interval: float = DEFAULT_UPDATE_INTERVAL_SECONDS
    settle_delay: float = SETTLE_DELAY_SECONDS
    heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS
    base_url: str = BASE_URL
    request_timeout: float = 10.0
    push_client_id: str | None = None
    push_broker_host: str | None = None
    push_broker_port: int = 443
    push_transport: str = "websockets"
    push_username: str | None = None
    push_password: str | None = None
    push_topic_template: str = PUSH_TOPIC_TEMPLATE
    push_keepalive: int = 60
    storage_path: Path = dataclasses.field(default_factory=lambda: Path.home() / ".pysesame")

    def __post_init__(self) -> None:
        if not self.api_key:
            raise SesameConfigError("api_key is required")
        if self.update_interval <= 0:
            raise SesameConfigError("update_interval must be positive")
        if self.settle_delay < 0:
            raise SesameConfigError("settle_delay must not be negative")
        if self.heartbeat_interval <= 0:
            raise SesameConfigError("heartbeat_interval must be positive")
        if self.push_transport not in {"tcp", "websockets"}:
            raise SesameConfigError(f"push_transport must be 'tcp' or 'websockets', got {self.push_transport!r}")
        if self.client_mode == ClientMode.PUSH:
            if not self.push_client_id:
                raise SesameConfigError("push mode requires push_client_id")
            if not self.push_broker_host:
                raise SesameConfigError("push mode requires push_broker_host")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], **overrides: Any) -> SesameConfig:
        """Build configuration from a platform config block.

        The block uses the camelCase keys of the accessory bridge config
        file (``apiKey``, ``clientID``, ``locks``, ``updateInterval``).

        Raises
        ------
        SesameConfigError
            If a required key is missing or a lock entry is invalid.
        """
        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise SesameConfigError(f"missing required config keys: {', '.join(missing)}")

        raw_locks = data["locks"]
        if not isinstance(raw_locks, list):
            raise SesameConfigError("'locks' must be a list")
        for index, entry in enumerate(raw_locks):
            if not isinstance(entry, Mapping):
                raise SesameConfigError(f"lock entry {index} must be a mapping, got {type(entry).__name__}")
        locks = tuple(LockConfig.from_mapping(entry) for entry in raw_locks)

        try:
            update_interval = float(data["updateInterval"])
        except (TypeError, ValueError) as exc:
            raise SesameConfigError("'updateInterval' must be a number") from exc

        try:
            client_mode = ClientMode(str(data.get("clientMode", ClientMode.POLLING)))
        except ValueError as exc:
            raise SesameConfigError(f"unknown clientMode {data.get('clientMode')!r}") from exc

        config_kwargs: dict[str, Any] = {
            "api_key": str(data["apiKey"]),
            "locks": locks,
            "update_interval": update_interval,
            "client_mode": client_mode,
        }
        _MAPPING_KEYS = {
            "name": "name",
            "clientID": "push_client_id",
            "brokerHost": "push_broker_host",
            "brokerPort": "push_broker_port",
            "baseUrl": "base_url",
        }
        for key, field_name in _MAPPING_KEYS.items():
            if data.get(key) is not None:
                config_kwargs[field_name] = data[key]
        if "push_broker_port" in config_kwargs:
            try:
                config_kwargs["push_broker_port"] = int(config_kwargs["push_broker_port"])
            except (TypeError, ValueError) as exc:
                raise SesameConfigError("'brokerPort' must be an integer") from exc
        if data.get("storagePath"):
            config_kwargs["storage_path"] = Path(str(data["storagePath"]))

        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> SesameConfig:
        """Create configuration from environment variables.

        Reads ``SESAME_API_KEY`` plus optional ``SESAME_*`` variables. A
        single lock can be configured with ``SESAME_LOCK_UUID``,
        ``SESAME_LOCK_SECRET`` and ``SESAME_LOCK_NAME``. Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SESAME_API_KEY": "api_key",
            "SESAME_NAME": "name",
            "SESAME_BASE_URL": "base_url",
            "SESAME_CLIENT_ID": "push_client_id",
            "SESAME_BROKER_HOST": "push_broker_host",
            "SESAME_BROKER_USERNAME": "push_username",
            "SESAME_BROKER_PASSWORD": "push_password",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "SESAME_UPDATE_INTERVAL": "update_interval",
            "SESAME_SETTLE_DELAY": "settle_delay",
            "SESAME_HEARTBEAT_INTERVAL": "heartbeat_interval",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError as exc:
                    raise SesameConfigError(f"{env_key} must be a number, got {val!r}") from exc

        port_env = env.get("SESAME_BROKER_PORT")
        if port_env is not None and "push_broker_port" not in overrides:
            try:
                config_kwargs["push_broker_port"] = int(port_env)
            except ValueError as exc:
                raise SesameConfigError(f"SESAME_BROKER_PORT must be an integer, got {port_env!r}") from exc

        mode_env = env.get("SESAME_CLIENT_MODE")
        if mode_env is not None and "client_mode" not in overrides:
            try:
                config_kwargs["client_mode"] = ClientMode(mode_env.strip().lower())
            except ValueError as exc:
                raise SesameConfigError(f"unknown SESAME_CLIENT_MODE {mode_env!r}") from exc

        storage_env = env.get("SESAME_STORAGE_PATH")
        if storage_env:
            config_kwargs["storage_path"] = Path(storage_env)

        lock_uuid = env.get("SESAME_LOCK_UUID")
        if lock_uuid and "locks" not in overrides:
            config_kwargs["locks"] = (
                LockConfig.from_mapping(
                    {
                        "uuid": lock_uuid,
                        "secret": env.get("SESAME_LOCK_SECRET", ""),
                        "name": env.get("SESAME_LOCK_NAME"),
                    }
                ),
            )

        config_kwargs.update(overrides)
        config_kwargs.setdefault("api_key", "")
        return cls(**config_kwargs)
