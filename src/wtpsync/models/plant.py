"""Canonical plant state model.

One frozen model per subsystem; :class:`PlantState` composes them into
the snapshot every reader sees. Field defaults are the values readers
observe before the first successful fetch and whenever the source omits
a field or sends something that cannot be coerced.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeVar

from pydantic import Field

from wtpsync.models._base import PlantBaseModel

# ------------------------------------------------------------------
# Subsystems
# ------------------------------------------------------------------


class Subsystem(StrEnum):
    """Keys of the canonical plant state."""

    RWT = "RWT"
    CDP = "CDP"
    CST = "CST"
    CFT = "CFT"
    SCT = "SCT"
    FTR = "FTR"
    CWT = "CWT"
    SLT = "SLT"
    PPS = "PPS"
    PLT = "PLT"


#: Subsystems modelled as fixed-size arrays of physical units. The source
#: reports a single value for each; see :mod:`wtpsync.ingestion.transform`.
REPLICATED_SUBSYSTEMS: dict[Subsystem, int] = {
    Subsystem.SCT: 2,
    Subsystem.CWT: 2,
}


class RawWaterTank(PlantBaseModel):
    level: float = 0.0
    high_level_alarm: bool = False
    low_level_alarm: bool = False
    inflow_rate: float = 0.0
    outflow_rate: float = 0.0
    ph: float = 7.0
    turbidity: float = 0.0


class ChemicalDosingPump(PlantBaseModel):
    status: bool = False
    mode: str = "AUTO"
    dosing_rate: float = 0.0
    total_chemical_used: float = 0.0
    pressure: float = 0.0
    fault: bool = False


class ChemicalStorageTank(PlantBaseModel):
    level: float = 0.0
    low_level_alarm: bool = False


class CoagulationTank(PlantBaseModel):
    level: float = 0.0
    mixer_status: bool = False
    ph: float = 7.0
    turbidity: float = 0.0
    dosing_rate: float = 0.0


class SedimentationTank(PlantBaseModel):
    level: float = 0.0
    sludge_level: float = 0.0
    turbidity_outlet: float = 0.0
    scraper_status: bool = False


class FilterUnit(PlantBaseModel):
    differential_pressure: float = 0.0
    flow_rate: float = 0.0
    backwash_status: bool = False


class CleanWaterTank(PlantBaseModel):
    level: float = 0.0
    high_level_alarm: bool = False
    low_level_alarm: bool = False
    ph: float = 7.0
    turbidity: float = 0.0
    residual_chlorine: float = 0.0


class SludgeTank(PlantBaseModel):
    level: float = 0.0
    pump_status: bool = False


class ProductPumpStation(PlantBaseModel):
    status: bool = False
    mode: str = "AUTO"
    flow_rate: float = 0.0
    outlet_pressure: float = 0.0
    fault: bool = False


class PlantOverview(PlantBaseModel):
    total_inflow: float = 0.0
    total_outflow: float = 0.0
    system_mode: str = "AUTO"
    alarm_status: bool = False


#: Model class for each subsystem key.
SUBSYSTEM_MODELS: dict[Subsystem, type[PlantBaseModel]] = {
    Subsystem.RWT: RawWaterTank,
    Subsystem.CDP: ChemicalDosingPump,
    Subsystem.CST: ChemicalStorageTank,
    Subsystem.CFT: CoagulationTank,
    Subsystem.SCT: SedimentationTank,
    Subsystem.FTR: FilterUnit,
    Subsystem.CWT: CleanWaterTank,
    Subsystem.SLT: SludgeTank,
    Subsystem.PPS: ProductPumpStation,
    Subsystem.PLT: PlantOverview,
}


def _units(model: type[PlantBaseModel], subsystem: Subsystem) -> Any:
    count = REPLICATED_SUBSYSTEMS[subsystem]
    return Field(default_factory=lambda: tuple(model() for _ in range(count)), alias=subsystem.value)


class PlantState(PlantBaseModel):
    """Snapshot of all subsystem readings.

    Validated from (and dumped to) a mapping keyed by :class:`Subsystem`
    values, e.g. ``{"PPS": {"status": True}}``. Instances are immutable;
    the store publishes a new instance on every merge.
    """

    rwt: RawWaterTank = Field(default_factory=RawWaterTank, alias="RWT")
    cdp: ChemicalDosingPump = Field(default_factory=ChemicalDosingPump, alias="CDP")
    cst: ChemicalStorageTank = Field(default_factory=ChemicalStorageTank, alias="CST")
    cft: CoagulationTank = Field(default_factory=CoagulationTank, alias="CFT")
    sct: tuple[SedimentationTank, ...] = _units(SedimentationTank, Subsystem.SCT)
    ftr: FilterUnit = Field(default_factory=FilterUnit, alias="FTR")
    cwt: tuple[CleanWaterTank, ...] = _units(CleanWaterTank, Subsystem.CWT)
    slt: SludgeTank = Field(default_factory=SludgeTank, alias="SLT")
    pps: ProductPumpStation = Field(default_factory=ProductPumpStation, alias="PPS")
    plt: PlantOverview = Field(default_factory=PlantOverview, alias="PLT")

    def to_mapping(self) -> dict[str, object]:
        """Plain nested mapping keyed by subsystem, as accepted by ``merge``."""
        return self.model_dump(by_alias=True)


TUnit = TypeVar("TUnit", bound=PlantBaseModel)


def unit_at(units: tuple[TUnit, ...], index: int, model: type[TUnit]) -> TUnit:
    """Return ``units[index]``, or a default unit when the array is shorter."""
    if 0 <= index < len(units):
        return units[index]
    return model()
