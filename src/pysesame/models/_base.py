"""Base model and enum for Sesame API payloads.

Every response model inherits from :class:`SesameBaseModel`, which maps
the API's camelCase keys onto snake_case fields and keeps the original
payload in ``raw``.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class SesameEnum(enum.IntEnum):
    """Base for integer state enums.

    Subclasses define an ``UNKNOWN`` member; values without a mapped
    member resolve to it instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> SesameEnum:
        if hasattr(cls, "UNKNOWN"):
            unknown: SesameEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class SesameBaseModel(BaseModel):
    """Base for Sesame API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API payload."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        cleaned["raw"] = dict(values)
        return cleaned
