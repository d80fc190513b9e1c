"""The synchronization engine: one context object owning every moving part."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from wtpsync._transport import HttpTransport, Transport
from wtpsync.alarms import AlarmAggregator
from wtpsync.animation import AnimationClock, FrameTime, Smoother
from wtpsync.config import WtpConfig
from wtpsync.display import ConnectionSummary, connection_summary
from wtpsync.exceptions import WtpError
from wtpsync.models.plant import PlantState
from wtpsync.models.visual import AlarmEntry, ConnectionStatus, VisualState
from wtpsync.poller import Poller
from wtpsync.scene.bindings import BindingRegistry, SceneApplier
from wtpsync.scene.resolver import VisualStateResolver
from wtpsync.state.events import PlantUpdate, UpdateSource
from wtpsync.state.store import PlantStateStore

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class Frame:
    """Everything resolved for one rendered frame."""

    time: FrameTime
    states: dict[str, VisualState]
    alarms: tuple[AlarmEntry, ...]


class PlantSyncEngine:
    """Polls telemetry and turns the plant snapshot into per-frame visuals.

    Usage::

        async with PlantSyncEngine(config) as engine:
            engine.bindings.bind("PPS_PUMP1", node, rest_position=node_pos)
            while rendering:
                frame = engine.update_frame(applier)

    The frame path never awaits I/O: it reads whatever snapshot the last
    completed fetch produced, or the default snapshot before that.
    """

    def __init__(
        self,
        config: WtpConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        applier: SceneApplier | None = None,
        time_source: Callable[[], float] = time.monotonic,
        on_update: Callable[[PlantState], None] | None = None,
        on_status_change: Callable[[ConnectionStatus], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._applier = applier
        self._on_update = on_update
        self._on_status_change = on_status_change

        self._store = PlantStateStore()
        self._clock = AnimationClock(time_source)
        self._smoother = Smoother(config.smoothing_rate)
        self._resolver = VisualStateResolver(config.colors, config.tank, self._smoother)
        self._alarms = AlarmAggregator(config.colors)
        self._bindings = BindingRegistry()
        self._poller: Poller | None = None
        if transport is not None:
            self._poller = self._make_poller(transport)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PlantSyncEngine:
        if self._poller is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._poller = self._make_poller(HttpTransport(self._config, self._http_session))
        if self._config.auto_start:
            self._poller.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._poller is not None:
            await self._poller.aclose()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _make_poller(self, transport: Transport) -> Poller:
        return Poller(
            self._config,
            transport,
            self._store,
            on_update=self._on_update,
            on_status_change=self._on_status_change,
        )

    def _require_poller(self) -> Poller:
        if self._poller is None:
            raise WtpError("Engine not initialized. Use 'async with PlantSyncEngine(...) as engine:'")
        return self._poller

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> WtpConfig:
        return self._config

    @property
    def store(self) -> PlantStateStore:
        return self._store

    @property
    def bindings(self) -> BindingRegistry:
        return self._bindings

    @property
    def smoother(self) -> Smoother:
        return self._smoother

    @property
    def poller(self) -> Poller:
        return self._require_poller()

    @property
    def snapshot(self) -> PlantState:
        return self._store.get()

    @property
    def alarms(self) -> tuple[AlarmEntry, ...]:
        """Alarms of the most recent frame."""
        return self._alarms.active

    @property
    def connection_status(self) -> ConnectionStatus:
        return self._poller.status if self._poller is not None else ConnectionStatus.DISCONNECTED

    @property
    def last_fetch_at(self) -> datetime | None:
        return self._poller.last_fetch_at if self._poller is not None else None

    @property
    def is_polling(self) -> bool:
        return self._poller is not None and self._poller.is_running

    def connection_summary(self, now: datetime | None = None) -> ConnectionSummary:
        return connection_summary(
            self.connection_status,
            self.is_polling,
            self.last_fetch_at,
            now if now is not None else datetime.now(UTC),
        )

    # ------------------------------------------------------------------
    # Polling control
    # ------------------------------------------------------------------

    def start_polling(self) -> None:
        self._require_poller().start()

    def stop_polling(self) -> None:
        self._require_poller().stop()

    def toggle_polling(self) -> bool:
        return self._require_poller().toggle()

    async def refresh(self) -> bool:
        """Fetch once now, outside the polling schedule."""
        return await self._require_poller().poll_once()

    def merge(self, update: Mapping[str, Any]) -> bool:
        """Merge a partial state supplied by the host application."""
        return self._store.apply(PlantUpdate(source=UpdateSource.MANUAL, data=dict(update)))

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def update_frame(self, applier: SceneApplier | None = None) -> Frame:
        """Advance the animation clock and resolve one frame.

        The snapshot is read once, so every component of the frame sees
        the same plant state. Alarm overlays only fill fields the
        resolver left unclaimed. When an applier is given (here or at
        construction) the states are pushed to the bound scene nodes.
        """
        frame_time = self._clock.tick()
        snapshot = self._store.get()

        states = self._resolver.resolve(snapshot, frame_time, initial_scale=self._bindings.rest_scale)
        report = self._alarms.evaluate(snapshot, frame_time.elapsed)
        for component_id, overlay in report.overlays.items():
            states[component_id] = states.get(component_id, VisualState()).fill_unclaimed(overlay)

        target = applier if applier is not None else self._applier
        if target is not None:
            self._bindings.apply(states, target)

        return Frame(time=frame_time, states=states, alarms=report.alarms)

    async def run_frames(
        self,
        fps: float = 60.0,
        on_frame: Callable[[Frame], None] | None = None,
    ) -> None:
        """Resolve frames at roughly *fps* until cancelled."""
        period = 1.0 / fps
        while True:
            frame = self.update_frame()
            if on_frame is not None:
                on_frame(frame)
            await asyncio.sleep(period)
