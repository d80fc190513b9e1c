"""Alarm aggregation.

The alarm list is recomputed from the snapshot every frame and replaces
the previous list wholesale. Rules fire in declaration order and carry
unique labels, so the list is ordered and free of duplicates.

Visual alarm effects are limited to tank shells, whose emissive channel
the resolver leaves unclaimed. Pump faults are rendered by the resolver's
FAULT mode; rules may not target pumps.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable

from wtpsync._constants import BLINK_FREQUENCY, BLINK_INTENSITY
from wtpsync.animation import blink
from wtpsync.config import ColorPalette
from wtpsync.models.plant import PlantState
from wtpsync.models.visual import AlarmEntry, VisualState
from wtpsync.scene.components import ComponentKind, get_component

_DARK = VisualState(emissive_color=0x000000, emissive_intensity=0.0)


@dataclasses.dataclass(frozen=True, slots=True)
class AlarmRule:
    """One alarm predicate.

    ``overlay_targets`` are the components that blink while the alarm is
    active. They must exist and must not be pumps.
    """

    label: str
    source_component: str
    predicate: Callable[[PlantState], bool]
    overlay_targets: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for target in self.overlay_targets:
            try:
                component = get_component(target)
            except KeyError:
                raise ValueError(f"Alarm {self.label!r} targets unknown component {target!r}") from None
            if component.kind is ComponentKind.PUMP:
                raise ValueError(f"Alarm {self.label!r} may not overlay pump {target!r}")


DEFAULT_ALARM_RULES: tuple[AlarmRule, ...] = (
    AlarmRule("RWT High Level", "RWT", lambda s: s.rwt.high_level_alarm, ("RWT",)),
    AlarmRule("RWT Low Level", "RWT", lambda s: s.rwt.low_level_alarm, ("RWT",)),
    AlarmRule("CST Low Level", "CST", lambda s: s.cst.low_level_alarm, ("CST",)),
    AlarmRule("CWT High Level", "CWT", lambda s: any(u.high_level_alarm for u in s.cwt), ("CWT_1", "CWT_2")),
    AlarmRule("CWT Low Level", "CWT", lambda s: any(u.low_level_alarm for u in s.cwt), ("CWT_1", "CWT_2")),
    AlarmRule("CDP Fault", "CDP", lambda s: s.cdp.fault),
    AlarmRule("PPS Fault", "PPS", lambda s: s.pps.fault),
    AlarmRule("Plant Alarm", "PLT", lambda s: s.plt.alarm_status),
)


def active_alarms(snapshot: PlantState, rules: Iterable[AlarmRule] = DEFAULT_ALARM_RULES) -> list[AlarmEntry]:
    """Alarms whose predicate holds for *snapshot*, in rule order."""
    return [AlarmEntry(label=rule.label, source_component=rule.source_component) for rule in rules if rule.predicate(snapshot)]


@dataclasses.dataclass(frozen=True, slots=True)
class AlarmReport:
    alarms: tuple[AlarmEntry, ...]
    overlays: dict[str, VisualState]


class AlarmAggregator:
    """Evaluates alarm rules and builds tank-shell overlays each frame."""

    def __init__(self, colors: ColorPalette, rules: tuple[AlarmRule, ...] = DEFAULT_ALARM_RULES) -> None:
        labels = [rule.label for rule in rules]
        if len(labels) != len(set(labels)):
            raise ValueError("Alarm rule labels must be unique")
        self._colors = colors
        self._rules = rules
        self._active: tuple[AlarmEntry, ...] = ()

    @property
    def active(self) -> tuple[AlarmEntry, ...]:
        """Alarms of the most recent evaluation."""
        return self._active

    def evaluate(self, snapshot: PlantState, elapsed: float) -> AlarmReport:
        """Recompute alarms and overlays for one frame.

        Every overlay target gets a state each frame: blinking while one
        of its alarms is active, dark otherwise.
        """
        lit = blink(elapsed, frequency=BLINK_FREQUENCY)
        flashing = VisualState(
            emissive_color=self._colors.alarm if lit else 0x000000,
            emissive_intensity=BLINK_INTENSITY if lit else 0.0,
        )

        overlays: dict[str, VisualState] = {}
        alarms: list[AlarmEntry] = []
        for rule in self._rules:
            triggered = rule.predicate(snapshot)
            if triggered:
                alarms.append(AlarmEntry(label=rule.label, source_component=rule.source_component))
            for target in rule.overlay_targets:
                if triggered:
                    overlays[target] = flashing
                else:
                    overlays.setdefault(target, _DARK)

        self._active = tuple(alarms)
        return AlarmReport(alarms=self._active, overlays=overlays)
