"""Interface to the accessory bridge.

The bridge owns the controller-facing characteristics; this library only
pushes values to it through :class:`AccessoryExposer` and answers its
read/write callbacks (see :class:`pysesame.accessory.LockAccessory`).
"""

from __future__ import annotations

import enum
import logging
from typing import Protocol

_logger = logging.getLogger(__name__)


class Characteristic(enum.StrEnum):
    """Characteristics published for a lock accessory."""

    LOCK_CURRENT_STATE = "LockCurrentState"
    LOCK_TARGET_STATE = "LockTargetState"
    BATTERY_LEVEL = "BatteryLevel"
    STATUS_LOW_BATTERY = "StatusLowBattery"
    CONTACT_SENSOR_STATE = "ContactSensorState"
    OPEN_DURATION = "OpenDuration"
    CLOSED_DURATION = "ClosedDuration"
    TIMES_OPENED = "TimesOpened"
    LAST_ACTIVATION = "LastActivation"
    RESET_TOTAL = "ResetTotal"


class AccessoryExposer(Protocol):
    """Receives characteristic updates that should notify the controller."""

    def update_value(self, characteristic: Characteristic, value: int) -> None: ...


class LoggingExposer:
    """Exposer that only logs; handy for scripts and headless runs."""

    def __init__(self, name: str) -> None:
        self._name = name
        self.values: dict[Characteristic, int] = {}

    def update_value(self, characteristic: Characteristic, value: int) -> None:
        self.values[characteristic] = value
        _logger.info("%s: %s = %s", self._name, characteristic.value, value)
