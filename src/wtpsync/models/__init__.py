"""Typed models for plant readings and per-frame outputs."""

from wtpsync.models.plant import (
    REPLICATED_SUBSYSTEMS,
    SUBSYSTEM_MODELS,
    ChemicalDosingPump,
    ChemicalStorageTank,
    CleanWaterTank,
    CoagulationTank,
    FilterUnit,
    PlantOverview,
    PlantState,
    ProductPumpStation,
    RawWaterTank,
    SedimentationTank,
    SludgeTank,
    Subsystem,
    unit_at,
)
from wtpsync.models.visual import AlarmEntry, ConnectionStatus, VisualState

__all__ = [
    "REPLICATED_SUBSYSTEMS",
    "SUBSYSTEM_MODELS",
    "AlarmEntry",
    "ChemicalDosingPump",
    "ChemicalStorageTank",
    "CleanWaterTank",
    "CoagulationTank",
    "ConnectionStatus",
    "FilterUnit",
    "PlantOverview",
    "PlantState",
    "ProductPumpStation",
    "RawWaterTank",
    "SedimentationTank",
    "SludgeTank",
    "Subsystem",
    "VisualState",
    "unit_at",
]
