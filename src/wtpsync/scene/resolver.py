"""Per-frame visual state resolution.

Every frame is computed from the current snapshot and the frame time
alone; the previous frame's output is never consulted. The only state
carried between frames is the tank-fill smoothing held by the
:class:`~wtpsync.animation.Smoother`.

Pumps follow a single priority function, evaluated fresh each frame:

=========  ======================  ==========================  ===========
Mode       Condition               Emissive                    Vibration
=========  ======================  ==========================  ===========
FAULT      fault                   alarm color, square blink   none
ON         status and not fault    on color, 0.3 + 0.1 sin 5t  0.02 sin 30t
OFF        otherwise               off color, 0                none
=========  ======================  ==========================  ===========

Pump alarms exist only as the FAULT branch. Nothing else writes a pump's
emissive channel, so the outcome does not depend on update order.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from wtpsync._constants import (
    BLINK_FREQUENCY,
    BLINK_INTENSITY,
    MIXER_RATE,
    PIPE_PULSE_AMPLITUDE,
    PIPE_PULSE_BASE,
    PIPE_PULSE_FREQUENCY,
    PUMP_PULSE_AMPLITUDE,
    PUMP_PULSE_BASE,
    PUMP_PULSE_FREQUENCY,
    PUMP_VIBRATION_AMPLITUDE,
    PUMP_VIBRATION_FREQUENCY,
    SCRAPER_RATE,
    TURBIDITY_FULL_SCALE,
)
from wtpsync.animation import FrameTime, Smoother, blink, lerp_color, pulse, vibration
from wtpsync.config import ColorPalette, TankScale
from wtpsync.ingestion.normalize import clamp
from wtpsync.models.plant import REPLICATED_SUBSYSTEMS, SUBSYSTEM_MODELS, PlantState, Subsystem, unit_at
from wtpsync.models.visual import VisualState
from wtpsync.scene.components import COMPONENTS, Component, ComponentKind


class PumpMode(StrEnum):
    FAULT = "fault"
    ON = "on"
    OFF = "off"


#: Drive flag and angular rate (rad/s) of each rotating subsystem.
_MIXER_DRIVES: dict[Subsystem, tuple[str, float]] = {
    Subsystem.CFT: ("mixer_status", MIXER_RATE),
    Subsystem.SCT: ("scraper_status", SCRAPER_RATE),
}


def pump_mode(status: bool, fault: bool) -> PumpMode:
    """Fault dominates status; there is no hysteresis."""
    if fault:
        return PumpMode.FAULT
    if status:
        return PumpMode.ON
    return PumpMode.OFF


def resolve_pump(status: bool, fault: bool, elapsed: float, colors: ColorPalette) -> VisualState:
    mode = pump_mode(status, fault)
    if mode is PumpMode.FAULT:
        lit = blink(elapsed, frequency=BLINK_FREQUENCY)
        return VisualState(
            emissive_color=colors.alarm,
            emissive_intensity=BLINK_INTENSITY if lit else 0.0,
            position_offset=0.0,
        )
    if mode is PumpMode.ON:
        return VisualState(
            emissive_color=colors.on,
            emissive_intensity=pulse(
                elapsed, base=PUMP_PULSE_BASE, amplitude=PUMP_PULSE_AMPLITUDE, frequency=PUMP_PULSE_FREQUENCY
            ),
            position_offset=vibration(elapsed, amplitude=PUMP_VIBRATION_AMPLITUDE, frequency=PUMP_VIBRATION_FREQUENCY),
        )
    return VisualState(emissive_color=colors.off, emissive_intensity=0.0, position_offset=0.0)


def resolve_mixer(running: bool, rate: float, delta: float) -> VisualState:
    """Rotation advances only while running; stopping keeps the current angle."""
    return VisualState(rotation_delta=rate * delta if running else 0.0)


def resolve_pipe(flow_rate: float, elapsed: float, colors: ColorPalette) -> VisualState:
    if flow_rate <= 0:
        return VisualState(emissive_color=colors.clean_water, emissive_intensity=0.0)
    return VisualState(
        emissive_color=colors.clean_water,
        emissive_intensity=pulse(
            elapsed, base=PIPE_PULSE_BASE, amplitude=PIPE_PULSE_AMPLITUDE, frequency=PIPE_PULSE_FREQUENCY
        ),
    )


def fill_target(level: float, tank: TankScale) -> float:
    """Map a 0-100 % level onto the tank's scale range."""
    fraction = clamp(level / 100.0, 0.0, 1.0)
    return tank.min_scale + fraction * (tank.max_scale - tank.min_scale)


def fill_color(subsystem: Subsystem, unit: Any, colors: ColorPalette) -> int | None:
    """Material color of a tank's water, or ``None`` to leave it as modelled."""
    if subsystem is Subsystem.RWT:
        turbidity = clamp(unit.turbidity, 0.0, TURBIDITY_FULL_SCALE)
        return lerp_color(colors.clean_water, colors.raw_water, turbidity / TURBIDITY_FULL_SCALE)
    if subsystem is Subsystem.CWT:
        return colors.clean_water
    if subsystem is Subsystem.SLT:
        return colors.sludge
    return None


def _subsystem(component: Component) -> Subsystem:
    if component.subsystem is None:
        raise ValueError(f"Component {component.component_id} has no subsystem")
    return component.subsystem


def _unit(snapshot: PlantState, component: Component) -> Any:
    subsystem = _subsystem(component)
    value = getattr(snapshot, subsystem.value.lower())
    if subsystem in REPLICATED_SUBSYSTEMS:
        return unit_at(value, component.instance, SUBSYSTEM_MODELS[subsystem])
    return value


class VisualStateResolver:
    """Resolves every catalog component for one frame."""

    def __init__(
        self,
        colors: ColorPalette,
        tank: TankScale,
        smoother: Smoother,
        components: tuple[Component, ...] = COMPONENTS,
    ) -> None:
        self._colors = colors
        self._tank = tank
        self._smoother = smoother
        self._components = components

    def resolve(
        self,
        snapshot: PlantState,
        frame: FrameTime,
        *,
        initial_scale: Callable[[str], float | None] | None = None,
    ) -> dict[str, VisualState]:
        """Return the visual state of every component.

        *initial_scale* supplies the starting fill scale of a tank the
        first time it is smoothed (normally the bound node's rest scale).
        Tank shells come back unclaimed; alarm overlays own them.
        """
        states: dict[str, VisualState] = {}
        for component in self._components:
            states[component.component_id] = self._resolve_component(component, snapshot, frame, initial_scale)
        return states

    def _resolve_component(
        self,
        component: Component,
        snapshot: PlantState,
        frame: FrameTime,
        initial_scale: Callable[[str], float | None] | None,
    ) -> VisualState:
        kind = component.kind
        if kind is ComponentKind.PUMP:
            unit = _unit(snapshot, component)
            return resolve_pump(unit.status, unit.fault, frame.elapsed, self._colors)

        if kind is ComponentKind.MIXER:
            flag, rate = _MIXER_DRIVES[_subsystem(component)]
            return resolve_mixer(bool(getattr(_unit(snapshot, component), flag)), rate, frame.delta)

        if kind is ComponentKind.TANK_FILL:
            unit = _unit(snapshot, component)
            initial = initial_scale(component.component_id) if initial_scale is not None else None
            scale = self._smoother.step(
                component.component_id,
                fill_target(unit.level, self._tank),
                frame.delta,
                initial=initial,
            )
            return VisualState(scale_y=scale, base_color=fill_color(_subsystem(component), unit, self._colors))

        if kind is ComponentKind.PIPE:
            return resolve_pipe(snapshot.pps.flow_rate, frame.elapsed, self._colors)

        return VisualState()
