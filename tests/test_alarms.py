from __future__ import annotations

import pytest

from wtpsync.alarms import DEFAULT_ALARM_RULES, AlarmAggregator, AlarmRule, active_alarms
from wtpsync.config import ColorPalette
from wtpsync.models.plant import PlantState
from wtpsync.models.visual import AlarmEntry
from wtpsync.scene.components import ComponentKind, get_component

COLORS = ColorPalette()


def test_no_alarms_on_default_snapshot() -> None:
    assert active_alarms(PlantState()) == []


def test_alarms_follow_rule_order() -> None:
    snapshot = PlantState.model_validate(
        {
            "PLT": {"alarm_status": True},
            "PPS": {"fault": True},
            "RWT": {"high_level_alarm": True},
            "CWT": [{"low_level_alarm": False}, {"low_level_alarm": True}],
        }
    )

    assert active_alarms(snapshot) == [
        AlarmEntry("RWT High Level", "RWT"),
        AlarmEntry("CWT Low Level", "CWT"),
        AlarmEntry("PPS Fault", "PPS"),
        AlarmEntry("Plant Alarm", "PLT"),
    ]


def test_evaluation_is_pure() -> None:
    snapshot = PlantState.model_validate({"CDP": {"fault": True}})

    assert active_alarms(snapshot) == active_alarms(snapshot)
    assert snapshot == PlantState.model_validate({"CDP": {"fault": True}})


def test_default_rules_never_target_pumps() -> None:
    for rule in DEFAULT_ALARM_RULES:
        for target in rule.overlay_targets:
            assert get_component(target).kind is not ComponentKind.PUMP


def test_rule_targeting_pump_is_rejected() -> None:
    with pytest.raises(ValueError, match="pump"):
        AlarmRule("Bad", "PPS", lambda s: True, ("PPS_PUMP1",))


def test_rule_targeting_unknown_component_is_rejected() -> None:
    with pytest.raises(ValueError, match="unknown component"):
        AlarmRule("Bad", "RWT", lambda s: True, ("NOPE",))


def test_duplicate_labels_are_rejected() -> None:
    rule = AlarmRule("Same", "RWT", lambda s: True)
    with pytest.raises(ValueError):
        AlarmAggregator(COLORS, (rule, rule))


class TestAlarmAggregator:
    def test_active_shell_blinks(self) -> None:
        aggregator = AlarmAggregator(COLORS)
        snapshot = PlantState.model_validate({"RWT": {"high_level_alarm": True}})

        lit = aggregator.evaluate(snapshot, 0.1)
        dark = aggregator.evaluate(snapshot, 0.7)

        assert lit.overlays["RWT"].emissive_color == COLORS.alarm
        assert lit.overlays["RWT"].emissive_intensity == 0.5
        assert dark.overlays["RWT"].emissive_color == 0x000000
        assert dark.overlays["RWT"].emissive_intensity == 0.0

    def test_inactive_targets_are_dark(self) -> None:
        report = AlarmAggregator(COLORS).evaluate(PlantState(), 0.1)

        assert set(report.overlays) == {"RWT", "CST", "CWT_1", "CWT_2"}
        assert all(o.emissive_intensity == 0.0 for o in report.overlays.values())

    def test_second_rule_on_same_target_does_not_darken_it(self) -> None:
        # Low level is inactive but must not override the active high level.
        snapshot = PlantState.model_validate({"RWT": {"high_level_alarm": True, "low_level_alarm": False}})

        report = AlarmAggregator(COLORS).evaluate(snapshot, 0.1)

        assert report.overlays["RWT"].emissive_intensity == 0.5

    def test_list_is_replaced_each_evaluation(self) -> None:
        aggregator = AlarmAggregator(COLORS)
        aggregator.evaluate(PlantState.model_validate({"PPS": {"fault": True}}), 0.0)
        assert aggregator.active == (AlarmEntry("PPS Fault", "PPS"),)

        aggregator.evaluate(PlantState(), 0.0)

        assert aggregator.active == ()

    def test_pump_faults_have_no_overlay(self) -> None:
        snapshot = PlantState.model_validate({"PPS": {"fault": True}, "CDP": {"fault": True}})

        report = AlarmAggregator(COLORS).evaluate(snapshot, 0.1)

        assert "PPS_PUMP1" not in report.overlays
        assert "CDP" not in report.overlays
        assert [a.label for a in report.alarms] == ["CDP Fault", "PPS Fault"]
