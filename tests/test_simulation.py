from __future__ import annotations

import asyncio
import random

import pytest

from wtpsync.simulation import Simulator, simulate_update
from wtpsync.state.store import PlantStateStore


def test_simulated_update_is_partial_and_in_range() -> None:
    update = simulate_update(random.Random(7))

    assert "CST" not in update
    assert "PLT" not in update
    assert 50 <= update["RWT"]["level"] <= 90
    assert 6.8 <= update["CWT"][0]["ph"] <= 7.4
    assert len(update["SCT"]) == 2
    assert update["SCT"][0] == update["SCT"][1]


def test_step_merges_into_store() -> None:
    store = PlantStateStore()
    store.merge({"CST": {"level": 44.0}, "PLT": {"system_mode": "MANUAL"}})

    Simulator(store, seed=3).step()

    state = store.get()
    assert state.rwt.level >= 50
    assert state.cdp.status is True
    assert state.cst.level == 44.0
    assert state.plt.system_mode == "MANUAL"


def test_seeded_simulators_agree() -> None:
    first, second = PlantStateStore(), PlantStateStore()

    Simulator(first, seed=11).step()
    Simulator(second, seed=11).step()

    assert first.get() == second.get()


@pytest.mark.asyncio
async def test_start_stop_toggle() -> None:
    store = PlantStateStore()
    simulator = Simulator(store, interval=0.01, seed=1)

    assert simulator.toggle() is True
    await asyncio.sleep(0.05)
    assert simulator.toggle() is False

    assert store.last_merged_at is not None
    merged_at = store.last_merged_at
    await asyncio.sleep(0.03)
    assert store.last_merged_at == merged_at
