"""Engine configuration for wtpsync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from wtpsync._constants import DEFAULT_ASSET_ID, DEFAULT_ENDPOINT, READINGS_FIELD
from wtpsync.exceptions import WtpConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class ColorPalette:
    """Named color roles as ``0xRRGGBB`` integers."""

    clean_water: int = 0x4FC3F7
    raw_water: int = 0x8D6E63
    sludge: int = 0x5D4037
    alarm: int = 0xFF5252
    on: int = 0x69F0AE
    off: int = 0xD32F2F


@dataclasses.dataclass(frozen=True)
class TankScale:
    """Vertical scale range of a tank's water mesh (empty to full)."""

    min_scale: float = 0.05
    max_scale: float = 1.0


@dataclasses.dataclass(frozen=True)
class WtpConfig:
    """Engine configuration.

    Parameters
    ----------
    endpoint : str
        Telemetry endpoint URL. The asset id is sent as ``assetId`` query
        parameter.
    asset_id : int
        Plant asset to fetch.
    bearer_token : str or None
        Token sent as ``Authorization: Bearer ...``. Omitted when ``None``.
    readings_field : str
        Key under ``data`` holding the array of reading records.
    poll_interval_ms : int
        Milliseconds between poll ticks.
    max_consecutive_errors : int
        Failed fetches in a row after which polling stops itself.
    request_timeout : float
        Total timeout of one fetch in seconds.
    smoothing_rate : float
        Rate constant (1/s) for tank-level smoothing.
    auto_start : bool
        Start polling as soon as the engine is entered.
    colors : ColorPalette
        Named color roles.
    tank : TankScale
        Tank fill scale range.
    """

    endpoint: str = DEFAULT_ENDPOINT
    asset_id: int = DEFAULT_ASSET_ID
    bearer_token: str | None = None
    readings_field: str = READINGS_FIELD
    poll_interval_ms: int = 3000
    max_consecutive_errors: int = 3
    request_timeout: float = 10.0
    smoothing_rate: float = 2.0
    auto_start: bool = True
    colors: ColorPalette = dataclasses.field(default_factory=ColorPalette)
    tank: TankScale = dataclasses.field(default_factory=TankScale)

    def __post_init__(self) -> None:
        if self.poll_interval_ms <= 0:
            raise WtpConfigError(f"poll_interval_ms must be positive, got {self.poll_interval_ms}")
        if self.max_consecutive_errors <= 0:
            raise WtpConfigError(f"max_consecutive_errors must be positive, got {self.max_consecutive_errors}")
        if self.request_timeout <= 0:
            raise WtpConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.smoothing_rate < 0:
            raise WtpConfigError(f"smoothing_rate must not be negative, got {self.smoothing_rate}")
        if self.tank.min_scale > self.tank.max_scale:
            raise WtpConfigError("tank.min_scale must not exceed tank.max_scale")

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    @classmethod
    def from_env(cls, **overrides: Any) -> WtpConfig:
        """Create configuration from ``WTP_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        WtpConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "WTP_ENDPOINT": "endpoint",
            "WTP_BEARER_TOKEN": "bearer_token",
            "WTP_READINGS_FIELD": "readings_field",
        }
        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "WTP_ASSET_ID": ("asset_id", int),
            "WTP_POLL_INTERVAL_MS": ("poll_interval_ms", int),
            "WTP_MAX_CONSECUTIVE_ERRORS": ("max_consecutive_errors", int),
            "WTP_REQUEST_TIMEOUT": ("request_timeout", float),
            "WTP_SMOOTHING_RATE": ("smoothing_rate", float),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        for env_key, (field_name, parser) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = parser(val)
            except ValueError as exc:
                raise WtpConfigError(f"{env_key} is not a valid {parser.__name__}: {val!r}") from exc

        if "auto_start" not in overrides:
            config_kwargs["auto_start"] = _env_bool(env.get("WTP_AUTO_START"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
