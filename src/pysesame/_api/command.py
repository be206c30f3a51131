"""Remote command endpoint.

Endpoint:
  - POST /{uuid}/cmd

The body carries the command code, the actor name (base64, recorded in
the lock's own history) and an AES-CMAC signature of the current time
under the lock's secret key.
"""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Callable
from typing import Any

from pysesame._crypto import sign_timestamp
from pysesame._transport import Transport
from pysesame.exceptions import SesameCommandError
from pysesame.models.status import Command

_logger = logging.getLogger(__name__)


def build_command_body(
    command: Command,
    actor: str,
    secret_key: str,
    *,
    timestamp: int,
) -> dict[str, Any]:
    return {
        "cmd": int(command),
        "history": base64.b64encode(actor.encode("utf-8")).decode("ascii"),
        "sign": sign_timestamp(secret_key, timestamp),
    }


async def post_command(
    transport: Transport,
    uuid: str,
    secret_key: str,
    command: Command,
    actor: str,
    *,
    clock: Callable[[], float] = time.time,
) -> None:
    """Send *command* to the lock.

    Raises
    ------
    SesameCommandError
        If the API answers with an error document.
    SesameTransportError
        On network or HTTP failures.
    """
    endpoint = f"/{uuid}/cmd"
    body = build_command_body(command, actor, secret_key, timestamp=int(clock()))
    _logger.debug("Sending %s to %s as %r", command.name, uuid, actor)
    response = await transport.post_json(endpoint, body)
    if isinstance(response, dict) and ("error" in response or "message" in response):
        message = response.get("error") or response.get("message")
        raise SesameCommandError(
            f"{command.name} rejected: {message}",
            code=str(response.get("code", "")),
            endpoint=endpoint,
        )
