"""Data models for lock status, persisted context and history."""

from pysesame.models._base import SesameBaseModel, SesameEnum
from pysesame.models.context import AccessoryContext
from pysesame.models.history import HistoryEntry, HistoryLog
from pysesame.models.status import (
    BatteryInfo,
    Command,
    ContactState,
    LockState,
    MechStatus,
    SesameShadow,
    parse_shadow_message,
)

__all__ = [
    "AccessoryContext",
    "BatteryInfo",
    "Command",
    "ContactState",
    "HistoryEntry",
    "HistoryLog",
    "LockState",
    "MechStatus",
    "SesameBaseModel",
    "SesameEnum",
    "SesameShadow",
    "parse_shadow_message",
]
