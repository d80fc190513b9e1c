"""Continuous animation time base.

Two mechanisms drive every animated property:

* **Smoothing**: properties with a persisted :class:`AnimationTarget`
  (tank fill levels) move towards their target each frame by
  ``(target - current) * min(1, rate * delta)``. The step never
  overshoots, so convergence is monotonic.
* **Oscillators**: pulses, blinks and vibration are pure functions of
  elapsed time and keep no state.

Both read the same :class:`AnimationClock`, which runs independently of
the poll cadence.
"""

from __future__ import annotations

import dataclasses
import math
import time
from collections.abc import Callable


@dataclasses.dataclass(frozen=True, slots=True)
class FrameTime:
    """Elapsed seconds since the clock started and seconds since the last frame."""

    elapsed: float
    delta: float


class AnimationClock:
    """Monotonic frame clock.

    The first :meth:`tick` reports a delta of zero. Time sources that go
    backwards yield a delta of zero rather than a negative step.
    """

    def __init__(self, time_source: Callable[[], float] = time.monotonic) -> None:
        self._time_source = time_source
        self._started_at = time_source()
        self._last_tick: float | None = None

    @property
    def elapsed(self) -> float:
        return self._time_source() - self._started_at

    def tick(self) -> FrameTime:
        now = self._time_source()
        delta = 0.0 if self._last_tick is None else max(0.0, now - self._last_tick)
        self._last_tick = now
        return FrameTime(elapsed=now - self._started_at, delta=delta)


@dataclasses.dataclass(slots=True)
class AnimationTarget:
    current_value: float
    target_value: float


class Smoother:
    """Exponential smoothing of named properties.

    Targets are created on first use, keyed by component id, and kept for
    the lifetime of the smoother; the component set is fixed.
    """

    def __init__(self, rate: float = 2.0) -> None:
        self._rate = rate
        self._targets: dict[str, AnimationTarget] = {}

    @property
    def rate(self) -> float:
        return self._rate

    def get(self, key: str) -> AnimationTarget | None:
        return self._targets.get(key)

    def step(self, key: str, target: float, delta: float, *, initial: float | None = None) -> float:
        """Advance *key* towards *target* by one frame and return the new value.

        *initial* seeds the current value the first time *key* is seen;
        without it the property starts at its target.
        """
        entry = self._targets.get(key)
        if entry is None:
            entry = AnimationTarget(current_value=target if initial is None else initial, target_value=target)
            self._targets[key] = entry

        entry.target_value = target
        factor = min(1.0, self._rate * max(0.0, delta))
        entry.current_value += (target - entry.current_value) * factor
        return entry.current_value


# ------------------------------------------------------------------
# Oscillators
# ------------------------------------------------------------------


def pulse(elapsed: float, *, base: float, amplitude: float, frequency: float) -> float:
    """``base + amplitude * sin(frequency * elapsed)``."""
    return base + amplitude * math.sin(frequency * elapsed)


def blink(elapsed: float, *, frequency: float) -> bool:
    """Square wave: ``True`` while ``sin(frequency * elapsed) > 0``."""
    return math.sin(frequency * elapsed) > 0


def vibration(elapsed: float, *, amplitude: float, frequency: float) -> float:
    """Zero-centred vertical oscillation."""
    return amplitude * math.sin(frequency * elapsed)


def lerp_color(start: int, end: int, t: float) -> int:
    """Blend two ``0xRRGGBB`` colors; *t* is clamped to ``[0, 1]``."""
    t = max(0.0, min(1.0, t))
    channels = []
    for shift in (16, 8, 0):
        a = (start >> shift) & 0xFF
        b = (end >> shift) & 0xFF
        channels.append(round(a + (b - a) * t))
    return (channels[0] << 16) | (channels[1] << 8) | channels[2]
