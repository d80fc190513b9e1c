"""Random plant data for running the dashboard without the live API."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any

from wtpsync.state.events import PlantUpdate, UpdateSource
from wtpsync.state.store import PlantStateStore

_logger = logging.getLogger(__name__)


def simulate_update(rng: random.Random) -> dict[str, Any]:
    """One partial update with plausible random readings.

    Only the fields listed here change; everything else keeps its
    current value when merged.
    """
    sct = {
        "level": 60 + rng.random() * 30,
        "sludge_level": 10 + rng.random() * 20,
        "scraper_status": True,
    }
    cwt = {
        "level": 70 + rng.random() * 25,
        "ph": 6.8 + rng.random() * 0.6,
        "residual_chlorine": 0.5 + rng.random() * 0.8,
    }
    return {
        "RWT": {
            "level": 50 + rng.random() * 40,
            "ph": 6.5 + rng.random() * 1.5,
            "turbidity": 30 + rng.random() * 40,
            "inflow_rate": 100 + rng.random() * 50,
            "high_level_alarm": rng.random() > 0.95,
            "low_level_alarm": rng.random() > 0.95,
        },
        "CFT": {
            "level": 40 + rng.random() * 40,
            "mixer_status": True,
            "ph": 6.0 + rng.random() * 1.5,
            "turbidity": 15 + rng.random() * 20,
        },
        "SCT": [dict(sct), dict(sct)],
        "CWT": [dict(cwt), dict(cwt)],
        "FTR": {
            "flow_rate": 80 + rng.random() * 40,
            "differential_pressure": 0.5 + rng.random() * 1,
        },
        "PPS": {
            "status": rng.random() > 0.3,
            "flow_rate": 90 + rng.random() * 40,
        },
        "CDP": {
            "status": True,
            "dosing_rate": 3 + rng.random() * 5,
        },
        "SLT": {
            "level": 20 + rng.random() * 40,
        },
    }


class Simulator:
    """Merges a simulated update into the store once per interval."""

    def __init__(self, store: PlantStateStore, *, interval: float = 1.0, seed: int | None = None) -> None:
        self._store = store
        self._interval = interval
        self._rng = random.Random(seed)
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def step(self) -> None:
        """Merge one simulated update immediately."""
        self._store.apply(PlantUpdate(source=UpdateSource.SIMULATION, data=simulate_update(self._rng)))

    def start(self) -> None:
        if self.is_running:
            return
        _logger.info("Starting simulation every %ss", self._interval)
        self._task = asyncio.get_running_loop().create_task(self._run(), name="wtpsync-simulation")

    def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            _logger.info("Stopping simulation")
            task.cancel()

    def toggle(self) -> bool:
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.step()
