"""AES-CMAC command signing for the Sesame web API."""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.cmac import CMAC

from pysesame.exceptions import SesameCryptoError


def _parse_secret_key(value: str) -> bytes:
    text = value.strip()
    if not text:
        raise SesameCryptoError("secret key is empty")
    try:
        key = bytes.fromhex(text)
    except ValueError as exc:
        raise SesameCryptoError("secret key must be hex-encoded") from exc
    if len(key) != 16:
        raise SesameCryptoError(f"secret key must be 16 bytes (got {len(key)})")
    return key


def is_valid_secret_key(value: str) -> bool:
    """Whether *value* is a usable 16-byte hex secret key."""
    try:
        _parse_secret_key(value)
    except SesameCryptoError:
        return False
    return True


def sign_timestamp(secret_key_hex: str, timestamp: int) -> str:
    """Sign a Unix timestamp for ``/cmd`` requests.

    The signed message is bytes 1..3 of the little-endian 4-byte
    timestamp; the result is the lowercase hex CMAC.
    """
    key = _parse_secret_key(secret_key_hex)
    message = int(timestamp).to_bytes(4, "little")[1:4]
    try:
        mac = CMAC(algorithms.AES(key))
        mac.update(message)
        return mac.finalize().hex()
    except Exception as exc:
        raise SesameCryptoError(f"CMAC signing failed: {exc}") from exc
