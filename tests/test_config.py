from __future__ import annotations

import pytest

from wtpsync.config import TankScale, WtpConfig
from wtpsync.exceptions import WtpConfigError

_ENV_KEYS = (
    "WTP_ENDPOINT",
    "WTP_BEARER_TOKEN",
    "WTP_READINGS_FIELD",
    "WTP_ASSET_ID",
    "WTP_POLL_INTERVAL_MS",
    "WTP_MAX_CONSECUTIVE_ERRORS",
    "WTP_REQUEST_TIMEOUT",
    "WTP_SMOOTHING_RATE",
    "WTP_AUTO_START",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = WtpConfig()

    assert config.asset_id == 6141
    assert config.poll_interval_ms == 3000
    assert config.poll_interval == 3.0
    assert config.max_consecutive_errors == 3
    assert config.bearer_token is None
    assert config.colors.alarm == 0xFF5252
    assert config.tank.min_scale == 0.05


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WTP_ENDPOINT", "https://plant.example.com/readings")
    monkeypatch.setenv("WTP_BEARER_TOKEN", " secret ")
    monkeypatch.setenv("WTP_ASSET_ID", "42")
    monkeypatch.setenv("WTP_POLL_INTERVAL_MS", "500")
    monkeypatch.setenv("WTP_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("WTP_AUTO_START", "off")

    config = WtpConfig.from_env()

    assert config.endpoint == "https://plant.example.com/readings"
    assert config.bearer_token == "secret"
    assert config.asset_id == 42
    assert config.poll_interval_ms == 500
    assert config.request_timeout == 2.5
    assert config.auto_start is False


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WTP_ASSET_ID", "42")
    monkeypatch.setenv("WTP_AUTO_START", "false")

    config = WtpConfig.from_env(asset_id=7, auto_start=True)

    assert config.asset_id == 7
    assert config.auto_start is True


def test_invalid_numeric_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WTP_POLL_INTERVAL_MS", "fast")

    with pytest.raises(WtpConfigError, match="WTP_POLL_INTERVAL_MS"):
        WtpConfig.from_env()


def test_invalid_override_does_not_consult_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WTP_POLL_INTERVAL_MS", "fast")

    assert WtpConfig.from_env(poll_interval_ms=100).poll_interval_ms == 100


@pytest.mark.parametrize(
    "kwargs",
    [
        {"poll_interval_ms": 0},
        {"max_consecutive_errors": 0},
        {"request_timeout": -1.0},
        {"smoothing_rate": -0.5},
        {"tank": TankScale(min_scale=1.0, max_scale=0.5)},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(WtpConfigError):
        WtpConfig(**kwargs)  # type: ignore[arg-type]
