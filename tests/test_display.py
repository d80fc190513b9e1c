from __future__ import annotations

from datetime import UTC, datetime, timedelta

from wtpsync.display import PanelValue, connection_summary, format_age, format_dashboard, format_labels
from wtpsync.models.plant import PlantState
from wtpsync.models.visual import ConnectionStatus

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def test_dashboard_formats_units_and_status_classes() -> None:
    state = PlantState.model_validate(
        {
            "RWT": {"level": 65.04, "turbidity": 12.34, "inflow_rate": 120.6},
            "FTR": {"differential_pressure": 1.234, "backwash_status": True},
            "CDP": {"status": True, "dosing_rate": 4.56, "mode": "MANUAL"},
            "CWT": [{"residual_chlorine": 0.8}, {"residual_chlorine": 0.9}],
            "PLT": {"system_mode": "MANUAL"},
        }
    )

    values = format_dashboard(state)

    assert values["rwt-level"] == PanelValue("65.0%")
    assert values["rwt-turbidity"].text == "12.3 NTU"
    assert values["rwt-inflow"].text == "121 m³/h"
    assert values["ftr-pressure"].text == "1.23 bar"
    assert values["ftr-backwash"] == PanelValue("ACTIVE", "warning")
    assert values["cdp-status-val"] == PanelValue("ON", "ok")
    assert values["cdp-mode"].text == "MANUAL"
    assert values["cdp-rate"].text == "4.6 L/h"
    assert values["cwt-chlorine"].text == "0.80 mg/L"
    assert values["system-mode"] == PanelValue("MANUAL", "manual")


def test_dashboard_defaults() -> None:
    values = format_dashboard(PlantState())

    assert values["pps-status"] == PanelValue("OFF")
    assert values["rwt-ph"].text == "7.0"
    assert values["system-mode"] == PanelValue("AUTO")


def test_labels() -> None:
    labels = format_labels(PlantState.model_validate({"SLT": {"level": 33.333}}))

    assert labels["slt"] == "Level: 33.3%"
    assert labels["rwt"] == "Level: 0.0%"
    assert set(labels) == {"rwt", "cst", "cft", "sct", "cwt", "slt"}


def test_format_age() -> None:
    assert format_age(None, NOW) == "Never"
    assert format_age(NOW - timedelta(seconds=12), NOW) == "12s ago"
    assert format_age(NOW - timedelta(seconds=185), NOW) == "3m ago"
    assert format_age(NOW + timedelta(seconds=5), NOW) == "0s ago"


def test_connection_summary() -> None:
    live = connection_summary(ConnectionStatus.CONNECTED, True, NOW, NOW)
    failing = connection_summary(ConnectionStatus.ERROR, True, None, NOW)
    stopped = connection_summary(ConnectionStatus.DISCONNECTED, False, NOW, NOW)

    assert (live.status_text, live.data_source) == ("Live Data", "Data: Live API")
    assert (failing.status_text, failing.last_update, failing.data_source) == ("Error", "Never", "Data: API Error")
    assert (stopped.status_text, stopped.data_source) == ("Disconnected", "Data: Simulation")
