from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any

import pytest
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.cmac import CMAC

from pysesame._api.command import build_command_body, post_command
from pysesame._api.status import fetch_shadow
from pysesame._crypto import is_valid_secret_key, sign_timestamp
from pysesame.exceptions import SesameApiError, SesameCommandError, SesameCryptoError
from pysesame.models.status import Command

_UUID = "488ABAAB-164F-7A86-595F-DDD778CB86C3"
_SECRET = "a13d4b890111676ba8fb36ece7e94f7d"


class _FakeTransport:
    def __init__(self, response: Any = None) -> None:
        self.response = response
        self.calls: list[tuple[str, str, Mapping[str, Any] | None]] = []

    async def get_json(self, endpoint: str) -> Any:
        self.calls.append(("GET", endpoint, None))
        return self.response

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        self.calls.append(("POST", endpoint, payload))
        return self.response


def _reference_sign(timestamp: int) -> str:
    mac = CMAC(algorithms.AES(bytes.fromhex(_SECRET)))
    mac.update(timestamp.to_bytes(4, "little")[1:4])
    return mac.finalize().hex()


def test_sign_timestamp_uses_upper_three_bytes() -> None:
    signature = sign_timestamp(_SECRET, 1_700_000_000)

    assert signature == _reference_sign(1_700_000_000)
    assert len(signature) == 32
    # The low byte is not part of the signed message.
    assert sign_timestamp(_SECRET, 0x6553F100) == sign_timestamp(_SECRET, 0x6553F1FF)


@pytest.mark.parametrize("key", ["", "abc", "zz" * 16, "00" * 15, "00" * 32])
def test_invalid_secret_key_is_rejected(key: str) -> None:
    assert is_valid_secret_key(key) is False
    with pytest.raises(SesameCryptoError):
        sign_timestamp(key, 1)


def test_build_command_body() -> None:
    body = build_command_body(Command.UNLOCK, "Front Door", _SECRET, timestamp=1_700_000_000)

    assert body["cmd"] == 83
    assert base64.b64decode(body["history"]).decode("utf-8") == "Front Door"
    assert body["sign"] == _reference_sign(1_700_000_000)


@pytest.mark.asyncio
async def test_post_command_posts_signed_body() -> None:
    transport = _FakeTransport(response=None)

    await post_command(transport, _UUID, _SECRET, Command.LOCK, "OpenSesame", clock=lambda: 1_700_000_000.9)

    method, endpoint, payload = transport.calls[0]
    assert (method, endpoint) == ("POST", f"/{_UUID}/cmd")
    assert payload is not None
    assert payload["cmd"] == 82
    assert payload["sign"] == _reference_sign(1_700_000_000)


@pytest.mark.asyncio
async def test_post_command_error_document_raises() -> None:
    transport = _FakeTransport(response={"message": "Forbidden", "code": 403})

    with pytest.raises(SesameCommandError) as excinfo:
        await post_command(transport, _UUID, _SECRET, Command.UNLOCK, "OpenSesame")

    assert excinfo.value.code == "403"
    assert excinfo.value.endpoint == f"/{_UUID}/cmd"


@pytest.mark.asyncio
async def test_post_command_bad_key_fails_before_sending() -> None:
    transport = _FakeTransport()

    with pytest.raises(SesameCryptoError):
        await post_command(transport, _UUID, "not-hex", Command.LOCK, "OpenSesame")

    assert transport.calls == []


@pytest.mark.asyncio
async def test_fetch_shadow() -> None:
    transport = _FakeTransport(response={"batteryPercentage": 77, "CHSesame2Status": "unlocked"})

    shadow = await fetch_shadow(transport, _UUID)

    assert transport.calls == [("GET", f"/{_UUID}", None)]
    assert shadow is not None
    assert shadow.battery_percentage == 77
    assert shadow.status == "unlocked"


@pytest.mark.asyncio
async def test_fetch_shadow_empty_body_is_none() -> None:
    assert await fetch_shadow(_FakeTransport(response=None), _UUID) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        {"message": "Not Found"},
        {"error": "device offline"},
        ["unexpected"],
        {"batteryPercentage": "lots", "CHSesame2Status": "locked"},
    ],
)
async def test_fetch_shadow_errors(response: Any) -> None:
    with pytest.raises(SesameApiError):
        await fetch_shadow(_FakeTransport(response=response), _UUID)
