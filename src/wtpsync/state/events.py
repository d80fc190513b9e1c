"""Normalized state updates.

Every ingestion path (HTTP polling, simulation, manual injection)
wraps its partial state in a :class:`PlantUpdate`. Only the store merges
them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UpdateSource(StrEnum):
    HTTP = "http"
    SIMULATION = "simulation"
    MANUAL = "manual"


class PlantUpdate(BaseModel):
    """A partial plant state to merge into the store."""

    model_config = ConfigDict(frozen=True)

    source: UpdateSource
    data: dict[str, Any] = Field(default_factory=dict, description="Partial state keyed by subsystem")
    sequence: int | None = Field(
        default=None,
        description="Issue order of the fetch that produced this update; older sequences are dropped.",
    )
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
