"""Per-accessory state that survives process restarts."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pysesame.models.status import BatteryInfo, ContactState, LockState

_logger = logging.getLogger(__name__)


class AccessoryContext(BaseModel):
    """Persisted accessory context.

    Mutable: the reconciler, dispatcher and history recorder update it in
    place from the event loop.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    lock_state: LockState = LockState.SECURED
    battery_level: int = Field(default=100, ge=0, le=100)
    battery_critical: bool = False
    times_opened: int = Field(default=0, ge=0)
    last_reset: int | None = None
    last_activation: int | None = None

    @property
    def battery(self) -> BatteryInfo:
        return BatteryInfo(level=self.battery_level, is_critical=self.battery_critical)

    @property
    def contact_state(self) -> ContactState:
        return ContactState.from_lock_state(self.lock_state)

    @classmethod
    def restore(cls, data: Mapping[str, Any] | None) -> AccessoryContext:
        """Load a persisted context, falling back to defaults.

        Fields that fail validation are dropped individually so one bad
        value does not discard the rest.
        """
        if not data:
            return cls()
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            bad = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
            _logger.warning("Discarding invalid persisted context fields: %s", ", ".join(sorted(bad)))
            return cls.model_validate({k: v for k, v in data.items() if k not in bad})
