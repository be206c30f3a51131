"""State-change notifications emitted by the reconciler."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pysesame.models.status import BatteryInfo, ContactState, LockState


class StateChange(BaseModel):
    """A confirmed lock-state transition."""

    model_config = ConfigDict(frozen=True)

    old: LockState
    new: LockState
    battery: BatteryInfo
    timestamp: int
    """Epoch seconds at which the transition was observed."""

    @property
    def contact_state(self) -> ContactState:
        return ContactState.from_lock_state(self.new)

    @property
    def is_open(self) -> bool:
        return self.contact_state == ContactState.NOT_DETECTED
