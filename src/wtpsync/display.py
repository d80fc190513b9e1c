"""Text values for the dashboard panels, 3D labels and connection indicator.

Pure formatting of a snapshot; the UI collaborator decides where the
strings go.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime

from wtpsync.models.plant import PlantState
from wtpsync.models.visual import ConnectionStatus

_PLACEHOLDER = "--"


@dataclasses.dataclass(frozen=True, slots=True)
class PanelValue:
    """A dashboard cell: display text and status class (``ok``, ``warning`` or empty)."""

    text: str
    status: str = ""


def _num(value: float, digits: int, unit: str = "") -> str:
    return f"{value:.{digits}f}{unit}"


def _on_off(flag: bool, *, on: str = "ON", on_status: str = "ok") -> PanelValue:
    return PanelValue(on, on_status) if flag else PanelValue("OFF")


def format_dashboard(state: PlantState) -> dict[str, PanelValue]:
    """Panel id -> value for the side dashboard.

    Replicated tanks show their first unit.
    """
    sct = state.sct[0] if state.sct else None
    cwt = state.cwt[0] if state.cwt else None

    values: dict[str, PanelValue] = {
        "rwt-level": PanelValue(_num(state.rwt.level, 1, "%")),
        "rwt-ph": PanelValue(_num(state.rwt.ph, 1)),
        "rwt-turbidity": PanelValue(_num(state.rwt.turbidity, 1, " NTU")),
        "rwt-inflow": PanelValue(_num(state.rwt.inflow_rate, 0, " m³/h")),
        "cft-level": PanelValue(_num(state.cft.level, 1, "%")),
        "cft-mixer": _on_off(state.cft.mixer_status),
        "cft-ph": PanelValue(_num(state.cft.ph, 1)),
        "ftr-flow": PanelValue(_num(state.ftr.flow_rate, 0, " m³/h")),
        "ftr-pressure": PanelValue(_num(state.ftr.differential_pressure, 2, " bar")),
        "ftr-backwash": _on_off(state.ftr.backwash_status, on="ACTIVE", on_status="warning"),
        "cdp-status-val": _on_off(state.cdp.status),
        "cdp-mode": PanelValue(state.cdp.mode),
        "cdp-rate": PanelValue(_num(state.cdp.dosing_rate, 1, " L/h")),
        "pps-status": _on_off(state.pps.status),
        "pps-flow": PanelValue(_num(state.pps.flow_rate, 0, " m³/h")),
        "system-mode": PanelValue(state.plt.system_mode, "manual" if state.plt.system_mode == "MANUAL" else ""),
    }

    if sct is not None:
        values["sct-level"] = PanelValue(_num(sct.level, 1, "%"))
        values["sct-sludge"] = PanelValue(_num(sct.sludge_level, 1, "%"))
        values["sct-scraper"] = _on_off(sct.scraper_status)
    else:
        values.update({key: PanelValue(_PLACEHOLDER) for key in ("sct-level", "sct-sludge", "sct-scraper")})

    if cwt is not None:
        values["cwt-level"] = PanelValue(_num(cwt.level, 1, "%"))
        values["cwt-ph"] = PanelValue(_num(cwt.ph, 1))
        values["cwt-chlorine"] = PanelValue(_num(cwt.residual_chlorine, 2, " mg/L"))
    else:
        values.update({key: PanelValue(_PLACEHOLDER) for key in ("cwt-level", "cwt-ph", "cwt-chlorine")})

    return values


def format_labels(state: PlantState) -> dict[str, str]:
    """Tank id -> floating label text (``Level: 65.0%``)."""
    levels = {
        "rwt": state.rwt.level,
        "cst": state.cst.level,
        "cft": state.cft.level,
        "sct": state.sct[0].level if state.sct else None,
        "cwt": state.cwt[0].level if state.cwt else None,
        "slt": state.slt.level,
    }
    return {key: f"Level: {_num(level, 1, '%') if level is not None else _PLACEHOLDER}" for key, level in levels.items()}


@dataclasses.dataclass(frozen=True, slots=True)
class ConnectionSummary:
    status_text: str
    last_update: str
    data_source: str


_STATUS_TEXT = {
    ConnectionStatus.CONNECTED: "Live Data",
    ConnectionStatus.DISCONNECTED: "Disconnected",
    ConnectionStatus.ERROR: "Error",
}


def format_age(last_fetch: datetime | None, now: datetime) -> str:
    """``"12s ago"`` below a minute, ``"3m ago"`` above, ``"Never"`` without a fetch."""
    if last_fetch is None:
        return "Never"
    seconds = max(0, int((now - last_fetch).total_seconds()))
    return f"{seconds}s ago" if seconds < 60 else f"{seconds // 60}m ago"


def connection_summary(
    status: ConnectionStatus,
    polling: bool,
    last_fetch: datetime | None,
    now: datetime,
) -> ConnectionSummary:
    """Texts for the connection indicator."""
    if polling and status is ConnectionStatus.CONNECTED:
        source = "Data: Live API"
    elif polling and status is ConnectionStatus.ERROR:
        source = "Data: API Error"
    else:
        source = "Data: Simulation"
    return ConnectionSummary(
        status_text=_STATUS_TEXT[status],
        last_update=format_age(last_fetch, now),
        data_source=source,
    )
