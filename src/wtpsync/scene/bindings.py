"""Weak links between plant components and the renderer's scene nodes.

The engine never owns scene objects: a binding holds a weak reference
and the rest pose captured when the node was bound. Operations on an
unbound component, or on one whose node has been garbage collected, do
nothing.
"""

from __future__ import annotations

import dataclasses
import logging
import weakref
from collections.abc import Mapping
from typing import Any, Protocol

from wtpsync.models.visual import VisualState
from wtpsync.scene.components import COMPONENT_IDS, component_for_node_name

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class ComponentBinding:
    """Binding of one component to a scene node.

    ``rest_position`` and ``rest_scale_y`` are captured once at bind time
    and never updated; vibration offsets are applied relative to them.
    """

    component_id: str
    node_ref: weakref.ReferenceType[Any]
    rest_position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rest_scale_y: float = 1.0

    @property
    def node(self) -> Any | None:
        return self.node_ref()

    def position_y(self, state: VisualState) -> float | None:
        """Absolute vertical position for *state*, or ``None`` if unclaimed."""
        if state.position_offset is None:
            return None
        return self.rest_position[1] + state.position_offset


class SceneApplier(Protocol):
    """Rendering-side hook that writes a visual state onto a node."""

    def apply(self, node: Any, state: VisualState, binding: ComponentBinding) -> None:
        ...


class BindingRegistry:
    """Component id -> :class:`ComponentBinding` lookup."""

    def __init__(self) -> None:
        self._bindings: dict[str, ComponentBinding] = {}

    def bind(
        self,
        component_id: str,
        node: Any,
        *,
        rest_position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        rest_scale_y: float = 1.0,
    ) -> ComponentBinding:
        """Bind *node* to *component_id*, capturing its rest pose.

        Raises
        ------
        ValueError
            If *component_id* is not part of the component catalog.
        TypeError
            If *node* does not support weak references.
        """
        if component_id not in COMPONENT_IDS:
            raise ValueError(f"Unknown component: {component_id}")
        binding = ComponentBinding(
            component_id=component_id,
            node_ref=weakref.ref(node),
            rest_position=(float(rest_position[0]), float(rest_position[1]), float(rest_position[2])),
            rest_scale_y=float(rest_scale_y),
        )
        self._bindings[component_id] = binding
        return binding

    def bind_by_name(self, name: str, node: Any, **kwargs: Any) -> ComponentBinding | None:
        """Bind *node* if its scene name matches a component, else return ``None``."""
        component = component_for_node_name(name)
        if component is None:
            return None
        return self.bind(component.component_id, node, **kwargs)

    def unbind(self, component_id: str) -> None:
        self._bindings.pop(component_id, None)

    def get(self, component_id: str) -> ComponentBinding | None:
        """Return the live binding for *component_id*, dropping dead ones."""
        binding = self._bindings.get(component_id)
        if binding is None:
            return None
        if binding.node is None:
            del self._bindings[component_id]
            return None
        return binding

    def rest_scale(self, component_id: str) -> float | None:
        binding = self.get(component_id)
        return binding.rest_scale_y if binding is not None else None

    def bound_ids(self) -> list[str]:
        return [cid for cid in list(self._bindings) if self.get(cid) is not None]

    def apply(self, frame: Mapping[str, VisualState], applier: SceneApplier) -> int:
        """Hand each bound component's state to *applier*. Returns how many were applied."""
        applied = 0
        for component_id, state in frame.items():
            binding = self.get(component_id)
            if binding is None:
                continue
            node = binding.node
            if node is None:
                continue
            applier.apply(node, state, binding)
            applied += 1
        return applied
