"""The fixed set of animated plant components.

Component ids double as the expected scene node names, compared after
:func:`normalize_node_name`.
"""

from __future__ import annotations

import dataclasses
import re
from enum import StrEnum

from wtpsync.models.plant import Subsystem


class ComponentKind(StrEnum):
    PUMP = "pump"
    MIXER = "mixer"
    TANK_FILL = "tank_fill"
    TANK_SHELL = "tank_shell"
    PIPE = "pipe"


@dataclasses.dataclass(frozen=True, slots=True)
class Component:
    """A logical plant entity that may be bound to a scene node.

    ``instance`` selects the unit of a replicated subsystem (SCT, CWT).
    """

    component_id: str
    kind: ComponentKind
    subsystem: Subsystem | None = None
    instance: int = 0


def _c(component_id: str, kind: ComponentKind, subsystem: Subsystem | None = None, instance: int = 0) -> Component:
    return Component(component_id=component_id, kind=kind, subsystem=subsystem, instance=instance)


_PUMP = ComponentKind.PUMP
_MIXER = ComponentKind.MIXER
_FILL = ComponentKind.TANK_FILL
_SHELL = ComponentKind.TANK_SHELL
_PIPE = ComponentKind.PIPE

COMPONENTS: tuple[Component, ...] = (
    # Pumps
    _c("CDP", _PUMP, Subsystem.CDP),
    _c("PPS_PUMP1", _PUMP, Subsystem.PPS),
    _c("PPS_PUMP2", _PUMP, Subsystem.PPS),
    # Rotating equipment
    _c("CFT_MIXER", _MIXER, Subsystem.CFT),
    _c("SCT_1_SCRAPER", _MIXER, Subsystem.SCT, 0),
    _c("SCT_2_SCRAPER", _MIXER, Subsystem.SCT, 1),
    # Water meshes inside the tanks
    _c("RWT_WATER", _FILL, Subsystem.RWT),
    _c("CST_WATER", _FILL, Subsystem.CST),
    _c("CFT_WATER", _FILL, Subsystem.CFT),
    _c("SCT_1_WATER", _FILL, Subsystem.SCT, 0),
    _c("SCT_2_WATER", _FILL, Subsystem.SCT, 1),
    _c("CWT_1_WATER", _FILL, Subsystem.CWT, 0),
    _c("CWT_2_WATER", _FILL, Subsystem.CWT, 1),
    _c("SLT_WATER", _FILL, Subsystem.SLT),
    # Tank bodies (alarm overlays)
    _c("RWT", _SHELL, Subsystem.RWT),
    _c("CST", _SHELL, Subsystem.CST),
    _c("CFT", _SHELL, Subsystem.CFT),
    _c("SCT_1", _SHELL, Subsystem.SCT, 0),
    _c("SCT_2", _SHELL, Subsystem.SCT, 1),
    _c("CWT_1", _SHELL, Subsystem.CWT, 0),
    _c("CWT_2", _SHELL, Subsystem.CWT, 1),
    _c("SLT", _SHELL, Subsystem.SLT),
    # Pipes
    _c("PIPE_RWT_CFT", _PIPE),
    _c("PIPE_CFT_SCT", _PIPE),
    _c("PIPE_SCT_FTR", _PIPE),
    _c("PIPE_FTR_CWT", _PIPE),
    _c("PIPE_SCT_SLT", _PIPE),
)

_BY_ID: dict[str, Component] = {c.component_id: c for c in COMPONENTS}

COMPONENT_IDS: tuple[str, ...] = tuple(_BY_ID)


def get_component(component_id: str) -> Component:
    """Look up a component. Raises ``KeyError`` for unknown ids."""
    return _BY_ID[component_id]


def normalize_node_name(name: str) -> str:
    """Upper-case a scene node name and collapse separators to ``_``."""
    return re.sub(r"[^A-Z0-9]+", "_", name.upper()).strip("_")


def component_for_node_name(name: str) -> Component | None:
    """Return the component a scene node named *name* represents, if any."""
    return _BY_ID.get(normalize_node_name(name))
