"""Lock status endpoint.

Endpoint:
  - GET /{uuid}
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pysesame._transport import Transport
from pysesame.exceptions import SesameApiError
from pysesame.models.status import SesameShadow

_logger = logging.getLogger(__name__)


async def fetch_shadow(transport: Transport, uuid: str) -> SesameShadow | None:
    """Fetch the lock's last reported shadow.

    Returns ``None`` when the API has nothing to report for the device
    (empty body), which callers treat as "no new data".
    """
    endpoint = f"/{uuid}"
    response = await transport.get_json(endpoint)
    if response is None:
        return None
    if not isinstance(response, dict):
        raise SesameApiError(f"Unexpected status payload from {endpoint}", endpoint=endpoint)
    if "error" in response or ("message" in response and "CHSesame2Status" not in response):
        message = response.get("error") or response.get("message")
        raise SesameApiError(f"Status request failed: {message}", endpoint=endpoint)
    try:
        return SesameShadow.model_validate(response)
    except ValidationError as exc:
        raise SesameApiError(f"Malformed status payload from {endpoint}: {exc}", endpoint=endpoint) from exc
