"""Lock state enums and mechanical status samples."""

from __future__ import annotations

import enum
import struct
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pysesame._constants import LOW_BATTERY_PERCENTAGE, voltage_to_percentage
from pysesame.models._base import SesameBaseModel, SesameEnum

_MECHST_FORMAT = "<Hhh2B"
_MECHST_SIZE = struct.calcsize(_MECHST_FORMAT)

_FLAG_LOCK_RANGE = 0x02
_FLAG_UNLOCK_RANGE = 0x04
_FLAG_BATTERY_CRITICAL = 0x20


class LockState(SesameEnum):
    """Lock mechanism state, numbered like the accessory protocol's
    ``LockCurrentState`` characteristic."""

    UNSECURED = 0
    SECURED = 1
    JAMMED = 2
    UNKNOWN = 3


class ContactState(enum.IntEnum):
    """Door contact as reported to the controller and the history log."""

    DETECTED = 0  # closed
    NOT_DETECTED = 1  # open

    @classmethod
    def from_lock_state(cls, state: LockState) -> ContactState:
        return cls.DETECTED if state == LockState.SECURED else cls.NOT_DETECTED


class Command(enum.IntEnum):
    """``cmd`` values accepted by ``POST /{uuid}/cmd``."""

    LOCK = 82
    UNLOCK = 83


class BatteryInfo(BaseModel):
    """Battery telemetry as exposed to the controller."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(default=100, ge=0, le=100)
    is_critical: bool = False


class MechStatus(BaseModel):
    """Point-in-time report of the bolt position and battery.

    Exactly one of the two range flags is set when the bolt rests in a
    detent; both clear (moving) or both set is ambiguous.
    """

    model_config = ConfigDict(frozen=True)

    is_in_lock_range: bool
    is_in_unlock_range: bool
    battery_percentage: int = Field(ge=0, le=100)
    is_battery_critical: bool = False

    @property
    def is_ambiguous(self) -> bool:
        return self.is_in_lock_range == self.is_in_unlock_range

    @property
    def lock_state(self) -> LockState:
        """Derived lock state; ``UNKNOWN`` when ambiguous."""
        if self.is_ambiguous:
            return LockState.UNKNOWN
        return LockState.SECURED if self.is_in_lock_range else LockState.UNSECURED

    @property
    def battery(self) -> BatteryInfo:
        return BatteryInfo(level=self.battery_percentage, is_critical=self.is_battery_critical)

    @classmethod
    def from_mechst(cls, mechst: str) -> MechStatus:
        """Decode the hex ``mechst`` blob pushed on the shadow topic.

        Layout (little endian): battery ``uint16`` (raw ADC, volts =
        raw * 7.2 / 1023), target ``int16``, position ``int16``, one
        reserved byte and a flag byte.
        """
        try:
            data = bytes.fromhex(mechst.strip())
        except ValueError as exc:
            raise ValueError("mechst must be hex-encoded") from exc
        if len(data) < _MECHST_SIZE:
            raise ValueError(f"mechst must be at least {_MECHST_SIZE} bytes (got {len(data)})")

        battery_raw, _target, _position, _reserved, flags = struct.unpack(_MECHST_FORMAT, data[:_MECHST_SIZE])
        voltage = battery_raw * 7.2 / 1023
        return cls(
            is_in_lock_range=bool(flags & _FLAG_LOCK_RANGE),
            is_in_unlock_range=bool(flags & _FLAG_UNLOCK_RANGE),
            battery_percentage=voltage_to_percentage(voltage),
            is_battery_critical=bool(flags & _FLAG_BATTERY_CRITICAL),
        )


class SesameShadow(SesameBaseModel):
    """Response of ``GET /{uuid}``.

    Example::

        {"batteryPercentage": 94, "batteryVoltage": 5.87, "position": 11,
         "CHSesame2Status": "locked", "timestamp": 1598523693}
    """

    battery_percentage: int = 0
    battery_voltage: float | None = None
    position: int | None = None
    status: str = Field(default="", validation_alias="CHSesame2Status")
    timestamp: int | None = None

    def to_mech_status(self) -> MechStatus:
        level = max(0, min(100, self.battery_percentage))
        return MechStatus(
            is_in_lock_range=self.status == "locked",
            is_in_unlock_range=self.status == "unlocked",
            battery_percentage=level,
            is_battery_critical=level < LOW_BATTERY_PERCENTAGE,
        )


def parse_shadow_message(payload: dict[str, Any]) -> MechStatus | None:
    """Extract a sample from a push shadow document.

    Returns ``None`` when the document carries no ``mechst`` field.
    """
    state = payload.get("state")
    reported = state.get("reported") if isinstance(state, dict) else None
    if not isinstance(reported, dict):
        return None
    mechst = reported.get("mechst")
    if not isinstance(mechst, str) or not mechst:
        return None
    return MechStatus.from_mechst(mechst)
