"""Custom exception hierarchy for pysesame."""

from __future__ import annotations


class SesameError(Exception):
    """Base exception for all pysesame errors."""


class SesameConfigError(SesameError):
    """Invalid or missing configuration."""


class SesameCryptoError(SesameError):
    """Command signing failure (bad secret key, CMAC error)."""


class SesameTransportError(SesameError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SesameApiError(SesameError):
    """The Sesame web API rejected a request (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class SesameCommandError(SesameApiError):
    """A lock/unlock command was not accepted by the lock.

    The accessory turns this (and any other command failure) into a
    ``JAMMED`` lock state instead of guessing the physical position.
    """
