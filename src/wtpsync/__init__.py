"""wtpsync - Telemetry-to-visual-state synchronization for a water-treatment plant dashboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wtpsync")
except PackageNotFoundError:
    __version__ = "0+local"

from wtpsync.alarms import AlarmAggregator, AlarmRule
from wtpsync.animation import AnimationClock, FrameTime, Smoother
from wtpsync.config import ColorPalette, TankScale, WtpConfig
from wtpsync.engine import Frame, PlantSyncEngine
from wtpsync.exceptions import (
    WtpApiError,
    WtpConfigError,
    WtpError,
    WtpFetchError,
    WtpNormalizationError,
    WtpTransportError,
)
from wtpsync.ingestion.transform import transform
from wtpsync.models import AlarmEntry, ConnectionStatus, PlantState, Subsystem, VisualState
from wtpsync.poller import Poller
from wtpsync.scene.bindings import BindingRegistry, ComponentBinding, SceneApplier
from wtpsync.scene.resolver import PumpMode, VisualStateResolver
from wtpsync.state.store import PlantStateStore

__all__ = [
    "__version__",
    "AlarmAggregator",
    "AlarmEntry",
    "AlarmRule",
    "AnimationClock",
    "BindingRegistry",
    "ColorPalette",
    "ComponentBinding",
    "ConnectionStatus",
    "Frame",
    "FrameTime",
    "PlantState",
    "PlantStateStore",
    "PlantSyncEngine",
    "Poller",
    "PumpMode",
    "SceneApplier",
    "Smoother",
    "Subsystem",
    "TankScale",
    "VisualState",
    "VisualStateResolver",
    "WtpApiError",
    "WtpConfig",
    "WtpConfigError",
    "WtpError",
    "WtpFetchError",
    "WtpNormalizationError",
    "WtpTransportError",
    "transform",
]
