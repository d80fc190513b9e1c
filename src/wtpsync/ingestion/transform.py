"""Raw telemetry record to canonical partial plant state.

The source reports one flat record of camelCase fields. :data:`FIELD_MAP`
is the single place that knows which source field feeds which canonical
field; the per-field default policy lives on the models.
"""

from __future__ import annotations

from typing import Any

from wtpsync._constants import READINGS_FIELD
from wtpsync.ingestion.normalize import extract_record
from wtpsync.models.plant import REPLICATED_SUBSYSTEMS, SUBSYSTEM_MODELS, Subsystem

FIELD_MAP: dict[Subsystem, dict[str, str]] = {
    Subsystem.RWT: {
        "level": "rwtLevel",
        "high_level_alarm": "rwtLevelHighAlarm",
        "low_level_alarm": "rwtLevelLowAlarm",
        "inflow_rate": "rwtInflowRate",
        "outflow_rate": "rwtOutflowRate",
        "ph": "rwtph",
        "turbidity": "rwtTurbidity",
    },
    Subsystem.CDP: {
        "status": "cdpStatus",
        "mode": "cdpMode",
        "dosing_rate": "cdpDosingRate",
        "total_chemical_used": "cdpTotalChemicalUsed",
        "pressure": "cdpPressure",
        "fault": "cdpFault",
    },
    Subsystem.CST: {
        "level": "cstLevel",
        "low_level_alarm": "cstLowLevelAlarm",
    },
    Subsystem.CFT: {
        "level": "cftLevel",
        "mixer_status": "cftMixerStatus",
        "ph": "cftph",
        "turbidity": "cftTurbidity",
        "dosing_rate": "cftDosingRate",
    },
    Subsystem.SCT: {
        "level": "sctLevel",
        "sludge_level": "sctSludgeLevel",
        "turbidity_outlet": "sctTurbidityOutlet",
        "scraper_status": "sctScraperStatus",
    },
    Subsystem.FTR: {
        "differential_pressure": "ftrDifferentialPressure",
        "flow_rate": "ftrFlowRate",
        "backwash_status": "ftrBackwashStatus",
    },
    Subsystem.CWT: {
        "level": "cwtLevel",
        "high_level_alarm": "cwtLevelHighAlarm",
        "low_level_alarm": "cwtLevelLowAlarm",
        "ph": "cwtph",
        "turbidity": "cwtTurbidity",
        "residual_chlorine": "cwtResidualChlorine",
    },
    Subsystem.SLT: {
        "level": "sltLevel",
        "pump_status": "sltPumpStatus",
    },
    Subsystem.PPS: {
        "status": "ppsPumpStatus",
        "mode": "ppsMode",
        "flow_rate": "ppsFlowRate",
        "outlet_pressure": "ppsOutletPressure",
        "fault": "ppsFault",
    },
    Subsystem.PLT: {
        "total_inflow": "pltTotalInflow",
        "total_outflow": "pltTotalOutflow",
        "system_mode": "pltSystemMode",
        "alarm_status": "pltAlarmStatus",
    },
}


def transform_record(record: dict[str, Any]) -> dict[str, Any]:
    """Map one flat source record to a complete canonical state mapping.

    Every canonical field is present in the result; missing or
    non-coercible source values take the field default.

    Replicated subsystems receive the single source value in every slot.
    The source does not yet distinguish physical units.
    """

    state: dict[str, Any] = {}
    for subsystem, fields in FIELD_MAP.items():
        model = SUBSYSTEM_MODELS[subsystem]
        unit = model.model_validate({name: record.get(source) for name, source in fields.items()}).model_dump()
        count = REPLICATED_SUBSYSTEMS.get(subsystem)
        if count is None:
            state[subsystem.value] = unit
        else:
            state[subsystem.value] = [dict(unit) for _ in range(count)]
    return state


def transform(raw_payload: Any, *, readings_field: str = READINGS_FIELD) -> dict[str, Any] | None:
    """Normalize a telemetry response body.

    Returns ``None`` when the readings envelope is missing; the poller
    counts that as a failed fetch.
    """

    record = extract_record(raw_payload, readings_field)
    if record is None:
        return None
    return transform_record(record)
