"""Activity history records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pysesame.models.status import ContactState


class HistoryEntry(BaseModel):
    """One point on the door activity timeline."""

    model_config = ConfigDict(frozen=True)

    time: int
    status: ContactState


class HistoryLog(BaseModel):
    """Everything a history storage backend persists for one accessory."""

    initial_time: int | None = None
    entries: list[HistoryEntry] = Field(default_factory=list)
