"""Per-frame outputs: visual states, alarm entries and connection status."""

from __future__ import annotations

import dataclasses
from enum import StrEnum


class ConnectionStatus(StrEnum):
    """Telemetry connection state, owned by the poller."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


@dataclasses.dataclass(frozen=True, slots=True)
class VisualState:
    """Rendering parameters of one component for one frame.

    A field left as ``None`` is not claimed this frame: the rendering
    collaborator keeps whatever the scene currently shows for it, and
    alarm overlays may fill it.

    Parameters
    ----------
    emissive_color : int or None
        Emissive color as ``0xRRGGBB``.
    emissive_intensity : float or None
        Emissive intensity (0 = dark).
    position_offset : float or None
        Vertical offset from the rest position captured at bind time.
    rotation_delta : float or None
        Radians to add to the current rotation about the vertical axis.
    scale_y : float or None
        Absolute vertical scale.
    base_color : int or None
        Material (diffuse) color as ``0xRRGGBB``.
    """

    emissive_color: int | None = None
    emissive_intensity: float | None = None
    position_offset: float | None = None
    rotation_delta: float | None = None
    scale_y: float | None = None
    base_color: int | None = None

    def claimed(self) -> frozenset[str]:
        """Names of the fields this state assigns."""
        return frozenset(f.name for f in dataclasses.fields(self) if getattr(self, f.name) is not None)

    def fill_unclaimed(self, overlay: VisualState) -> VisualState:
        """Return a copy with *overlay* applied only to unclaimed fields."""
        updates = {
            f.name: getattr(overlay, f.name)
            for f in dataclasses.fields(self)
            if getattr(self, f.name) is None and getattr(overlay, f.name) is not None
        }
        return dataclasses.replace(self, **updates) if updates else self


@dataclasses.dataclass(frozen=True, slots=True)
class AlarmEntry:
    """An active alarm as shown in the alarm panel."""

    label: str
    source_component: str
