"""Internal MQTT bootstrap, parsing, and runtime helpers for push mode."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pysesame.config import LockConfig, SesameConfig
from pysesame.exceptions import SesameError
from pysesame.models.status import MechStatus, parse_shadow_message


@dataclass(frozen=True)
class MqttBootstrap:
    """Broker/session data required to subscribe to a lock's shadow."""

    broker_host: str
    broker_port: int
    topic: str
    client_id: str
    transport: str = "websockets"
    username: str | None = None
    password: str | None = None


def build_mqtt_bootstrap(config: SesameConfig, lock: LockConfig) -> MqttBootstrap:
    """Build connection details for *lock* from the platform config."""
    if not config.push_broker_host or not config.push_client_id:
        raise SesameError("Push mode requires push_broker_host and push_client_id")
    return MqttBootstrap(
        broker_host=config.push_broker_host,
        broker_port=config.push_broker_port,
        topic=config.push_topic_template.format(uuid=lock.uuid),
        # One connection per lock; broker client ids must be unique.
        client_id=f"{config.push_client_id}-{lock.uuid}",
        transport=config.push_transport,
        username=config.push_username,
        password=config.push_password,
    )


def decode_mqtt_payload(payload: bytes) -> MechStatus | None:
    """Parse a shadow document into a sample.

    Returns ``None`` for documents without a mechanical status.
    """
    parsed = json.loads(payload.decode("utf-8"))
    if not isinstance(parsed, dict):
        raise SesameError("MQTT payload is not a JSON object")
    return parse_shadow_message(parsed)


class SesameMqttRuntime:
    """Threaded paho-mqtt runtime that emits parsed samples onto an asyncio loop."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_status: Callable[[MechStatus], None],
        keepalive: int = 60,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_status = on_status
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._topic: str | None = None

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def start(self, bootstrap: MqttBootstrap) -> None:
        """Connect and subscribe with provided broker details."""
        self.stop()
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s topic=%s client_id=%s",
            bootstrap.broker_host,
            bootstrap.broker_port,
            bootstrap.topic,
            bootstrap.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=bootstrap.client_id,
            transport=bootstrap.transport,
        )
        client.enable_logger(self._logger)
        if bootstrap.username:
            client.username_pw_set(bootstrap.username, bootstrap.password)
        client.tls_set()

        self._topic = bootstrap.topic

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected successfully reason=%s", reason_code)
            if self._topic:
                self._logger.debug("MQTT subscribing topic=%s", self._topic)
                c.subscribe(self._topic, qos=1)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                status = decode_mqtt_payload(msg.payload)
            except Exception:
                self._logger.debug("MQTT payload parse failure topic=%s", msg.topic, exc_info=True)
                return
            if status is None:
                self._logger.debug("MQTT shadow update without mechst topic=%s", msg.topic)
                return
            self._logger.debug("MQTT status topic=%s status=%s", msg.topic, status)
            self._loop.call_soon_threadsafe(self._on_status, status)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(bootstrap.broker_host, bootstrap.broker_port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        self._topic = None

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
