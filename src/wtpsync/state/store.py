"""In-memory plant state store.

This is the only component allowed to merge partial plant state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from wtpsync.models.plant import REPLICATED_SUBSYSTEMS, PlantState, Subsystem
from wtpsync.state.events import PlantUpdate

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _merge_subsystem(current: dict[str, Any], subsystem: Subsystem, value: Any) -> bool:
    """Merge one subsystem patch into *current* in place.

    Mapping subsystems are shallow-merged: keys in the patch overwrite,
    the rest are kept. Array subsystems are replaced wholesale.
    """

    if subsystem in REPLICATED_SUBSYSTEMS:
        if not isinstance(value, (list, tuple)) or not all(isinstance(unit, Mapping) for unit in value):
            return False
        current[subsystem.value] = [dict(unit) for unit in value]
        return True

    if not isinstance(value, Mapping):
        return False
    current[subsystem.value] = {**current[subsystem.value], **value}
    return True


class PlantStateStore:
    """Single-writer store for the plant snapshot.

    The store starts from a fully populated default snapshot. Each merge
    builds a new immutable :class:`PlantState` and publishes it with a
    single assignment, so a reader sees either the old or the new
    snapshot, never a half-merged one.
    """

    def __init__(
        self,
        initial: PlantState | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._snapshot = initial if initial is not None else PlantState()
        self._sequence: int | None = None
        self._last_merged_at: datetime | None = None

    @property
    def sequence(self) -> int | None:
        """Newest sequence number merged so far."""
        return self._sequence

    @property
    def last_merged_at(self) -> datetime | None:
        return self._last_merged_at

    def get(self) -> PlantState:
        """Return the current snapshot (immutable)."""
        return self._snapshot

    def merge(self, update: Mapping[str, Any], *, sequence: int | None = None) -> bool:
        """Merge a partial state keyed by subsystem.

        Returns ``False`` when the update is discarded because a newer
        sequence has already been merged.
        """

        if sequence is not None and self._sequence is not None and sequence < self._sequence:
            _logger.debug("Dropping out-of-order update %s (have %s)", sequence, self._sequence)
            return False

        current = self._snapshot.to_mapping()
        for key, value in update.items():
            try:
                subsystem = Subsystem(str(key))
            except ValueError:
                _logger.debug("Ignoring unknown subsystem %r", key)
                continue
            if not _merge_subsystem(current, subsystem, value):
                _logger.debug("Ignoring malformed %s patch: %r", subsystem, value)

        self._snapshot = PlantState.model_validate(current)
        if sequence is not None:
            self._sequence = sequence
        self._last_merged_at = self._clock()
        return True

    def apply(self, update: PlantUpdate) -> bool:
        """Merge a :class:`PlantUpdate`."""
        return self.merge(update.data, sequence=update.sequence)

    def age_seconds(self, now: datetime | None = None) -> float | None:
        """Seconds since the last merge, or ``None`` before the first one."""
        if self._last_merged_at is None:
            return None
        current = now if now is not None else self._clock()
        return (current - self._last_merged_at).total_seconds()
