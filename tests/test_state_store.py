from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from wtpsync.models.plant import PlantState
from wtpsync.state.events import PlantUpdate, UpdateSource
from wtpsync.state.store import PlantStateStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_initial_snapshot_is_fully_populated() -> None:
    state = PlantStateStore().get()

    assert state.rwt.level == 0.0
    assert state.rwt.ph == 7.0
    assert state.cdp.mode == "AUTO"
    assert state.pps.fault is False
    assert len(state.sct) == 2
    assert len(state.cwt) == 2


def test_omitted_fields_retain_prior_values() -> None:
    store = PlantStateStore()
    store.merge({"RWT": {"level": 40.0, "turbidity": 12.0}})
    store.merge({"RWT": {"level": 55.0}})

    state = store.get()
    assert state.rwt.level == 55.0
    assert state.rwt.turbidity == 12.0


def test_absent_subsystems_are_untouched() -> None:
    store = PlantStateStore()
    store.merge({"PPS": {"status": True, "flow_rate": 110.0}})
    before = store.get()

    store.merge({"CDP": {"status": True}})

    after = store.get()
    assert after.pps == before.pps
    assert after.cdp.status is True


def test_array_subsystems_replaced_wholesale() -> None:
    store = PlantStateStore()
    store.merge({"SCT": [{"level": 10.0, "sludge_level": 5.0}, {"level": 20.0, "sludge_level": 6.0}]})
    store.merge({"SCT": [{"level": 30.0}, {"level": 40.0}]})

    state = store.get()
    assert [u.level for u in state.sct] == [30.0, 40.0]
    # Not merged element-wise: the sludge level falls back to its default.
    assert [u.sludge_level for u in state.sct] == [0.0, 0.0]


def test_present_but_invalid_field_takes_default() -> None:
    store = PlantStateStore()
    store.merge({"RWT": {"ph": 8.1}})
    store.merge({"RWT": {"ph": "garbage"}})

    assert store.get().rwt.ph == 7.0


def test_unknown_and_malformed_patches_are_ignored() -> None:
    store = PlantStateStore()
    store.merge({"RWT": {"level": 33.0}})

    store.merge({"XYZ": {"level": 1.0}, "RWT": "not a mapping", "SCT": {"level": 1.0}})

    state = store.get()
    assert state.rwt.level == 33.0
    assert state.sct[0].level == 0.0


def test_merge_publishes_new_snapshot_without_touching_old_one() -> None:
    store = PlantStateStore()
    before = store.get()

    store.merge({"PPS": {"status": True}})

    assert before.pps.status is False
    assert store.get() is not before
    assert store.get().pps.status is True


def test_snapshot_is_read_only() -> None:
    state = PlantStateStore().get()
    with pytest.raises(ValidationError):
        state.pps.status = True  # type: ignore[misc]


def test_out_of_order_sequence_is_dropped() -> None:
    store = PlantStateStore()

    assert store.merge({"RWT": {"level": 80.0}}, sequence=5) is True
    assert store.merge({"RWT": {"level": 10.0}}, sequence=4) is False

    assert store.get().rwt.level == 80.0
    assert store.sequence == 5


def test_unsequenced_merge_always_applies() -> None:
    store = PlantStateStore()
    store.merge({"RWT": {"level": 80.0}}, sequence=5)

    assert store.merge({"RWT": {"level": 10.0}}) is True
    assert store.get().rwt.level == 10.0


def test_apply_update_and_age() -> None:
    now = _dt()
    store = PlantStateStore(clock=lambda: now)
    assert store.age_seconds() is None

    store.apply(PlantUpdate(source=UpdateSource.MANUAL, data={"SLT": {"level": 12.0}}, sequence=1))

    assert store.get().slt.level == 12.0
    assert store.last_merged_at == now
    assert store.age_seconds(now + timedelta(seconds=30)) == 30.0


def test_to_mapping_round_trips_through_merge() -> None:
    store = PlantStateStore()
    store.merge({"RWT": {"level": 45.0}, "CWT": [{"level": 90.0}, {"level": 91.0}]})

    other = PlantStateStore()
    other.merge(store.get().to_mapping())

    assert other.get() == store.get()
    assert isinstance(other.get(), PlantState)
