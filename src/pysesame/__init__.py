"""pysesame - Async Sesame smart lock integration for accessory bridges."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pysesame")
except PackageNotFoundError:
    __version__ = "0+local"
from pysesame.accessory import LockAccessory
from pysesame.clients import PollingClient, PushClient, SesameClient, create_client
from pysesame.config import ClientMode, LockConfig, SesameConfig
from pysesame.dispatcher import CommandDispatcher
from pysesame.exceptions import (
    SesameApiError,
    SesameCommandError,
    SesameConfigError,
    SesameCryptoError,
    SesameError,
    SesameTransportError,
)
from pysesame.exposer import AccessoryExposer, Characteristic, LoggingExposer
from pysesame.history import (
    HistoryRecorder,
    HistoryStorage,
    JsonHistoryStorage,
    MemoryHistoryStorage,
    history_file_name,
)
from pysesame.models import (
    AccessoryContext,
    BatteryInfo,
    Command,
    ContactState,
    HistoryEntry,
    HistoryLog,
    LockState,
    MechStatus,
)
from pysesame.platform import SesamePlatform
from pysesame.state import StateChange, StateReconciler

__all__ = [
    "__version__",
    "AccessoryContext",
    "AccessoryExposer",
    "BatteryInfo",
    "Characteristic",
    "ClientMode",
    "Command",
    "CommandDispatcher",
    "ContactState",
    "HistoryEntry",
    "HistoryLog",
    "HistoryRecorder",
    "HistoryStorage",
    "JsonHistoryStorage",
    "LockAccessory",
    "LockConfig",
    "LockState",
    "LoggingExposer",
    "MechStatus",
    "MemoryHistoryStorage",
    "PollingClient",
    "PushClient",
    "SesameApiError",
    "SesameClient",
    "SesameCommandError",
    "SesameConfig",
    "SesameConfigError",
    "SesameCryptoError",
    "SesameError",
    "SesamePlatform",
    "SesameTransportError",
    "StateChange",
    "StateReconciler",
    "create_client",
    "history_file_name",
]
