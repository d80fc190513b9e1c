"""Timer-driven telemetry polling.

The poller owns the connection status. It fetches once immediately on
:meth:`Poller.start` and then once per poll interval; a slow fetch never
delays or cancels the next tick, so fetches may overlap. Each fetch gets
a sequence number and the store drops completions that arrive after a
newer one.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from wtpsync._transport import Transport
from wtpsync.config import WtpConfig
from wtpsync.exceptions import WtpFetchError, WtpNormalizationError, WtpTransportError
from wtpsync.ingestion.transform import transform
from wtpsync.models.plant import PlantState
from wtpsync.models.visual import ConnectionStatus
from wtpsync.state.events import PlantUpdate, UpdateSource
from wtpsync.state.store import PlantStateStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Poller:
    """Fetch loop with failure classification and auto-stop.

    Failures are classified as:

    * :class:`WtpTransportError` -> ``DISCONNECTED``
    * :class:`WtpApiError` -> ``ERROR``
    * :class:`WtpNormalizationError` -> ``ERROR``
    * anything else raised while fetching -> ``ERROR``

    All of them count towards ``config.max_consecutive_errors``; reaching
    it stops polling until :meth:`start` is called again. The store is
    never cleared on failure.
    """

    def __init__(
        self,
        config: WtpConfig,
        transport: Transport,
        store: PlantStateStore,
        *,
        on_update: Callable[[PlantState], None] | None = None,
        on_status_change: Callable[[ConnectionStatus], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store
        self._on_update = on_update
        self._on_status_change = on_status_change
        self._clock = clock
        self._status = ConnectionStatus.DISCONNECTED
        self._consecutive_errors = 0
        self._last_fetch_at: datetime | None = None
        self._sequence = 0
        self._tick_task: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[bool]] = set()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    @property
    def last_fetch_at(self) -> datetime | None:
        """Completion time of the last successful fetch."""
        return self._last_fetch_at

    @property
    def in_flight(self) -> int:
        """Number of fetches currently outstanding."""
        return len(self._in_flight)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start polling. Must be called from a running event loop."""
        if self.is_running:
            _logger.info("Polling already active")
            return

        _logger.info("Starting telemetry polling every %sms", self._config.poll_interval_ms)
        self._consecutive_errors = 0
        loop = asyncio.get_running_loop()
        self._tick_task = loop.create_task(self._tick_loop(), name="wtpsync-poll-ticks")

    def stop(self) -> None:
        """Cancel future ticks. Fetches already in flight still complete."""
        if not self.is_running:
            _logger.debug("Polling not active")
            return

        _logger.info("Stopping telemetry polling")
        task = self._tick_task
        self._tick_task = None
        if task is not None:
            task.cancel()
        self._set_status(ConnectionStatus.DISCONNECTED)

    def toggle(self) -> bool:
        """Flip the running state. Returns the new state."""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    async def aclose(self) -> None:
        """Stop ticking and abort outstanding fetches (shutdown only)."""
        self.stop()
        pending = list(self._in_flight)
        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._in_flight.difference_update(pending)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _tick_loop(self) -> None:
        while True:
            self._spawn_fetch()
            await asyncio.sleep(self._config.poll_interval)

    def _spawn_fetch(self) -> None:
        task = asyncio.get_running_loop().create_task(self.poll_once())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def poll_once(self) -> bool:
        """Run one fetch/normalize/merge cycle. Returns ``True`` on success."""
        self._sequence += 1
        sequence = self._sequence

        try:
            body = await self._transport.fetch()
            data = transform(body, readings_field=self._config.readings_field)
            if data is None:
                raise WtpNormalizationError("No plant readings found in API response")
        except WtpTransportError as exc:
            self._record_failure(exc, ConnectionStatus.DISCONNECTED)
            return False
        except WtpFetchError as exc:
            self._record_failure(exc, ConnectionStatus.ERROR)
            return False
        except Exception as exc:
            self._record_failure(exc, ConnectionStatus.ERROR, unexpected=True)
            return False

        self._store.apply(PlantUpdate(source=UpdateSource.HTTP, data=data, sequence=sequence))
        self._consecutive_errors = 0
        self._last_fetch_at = self._clock()
        self._set_status(ConnectionStatus.CONNECTED)

        if self._on_update is not None:
            try:
                self._on_update(self._store.get())
            except Exception:
                _logger.debug("on_update callback failed", exc_info=True)
        return True

    def _record_failure(self, exc: Exception, status: ConnectionStatus, *, unexpected: bool = False) -> None:
        self._consecutive_errors += 1
        _logger.warning(
            "Error fetching plant data (%s in a row): %s",
            self._consecutive_errors,
            exc,
            exc_info=unexpected,
        )
        self._set_status(status)

        if self._consecutive_errors >= self._config.max_consecutive_errors and self.is_running:
            _logger.error("Stopping polling after %s consecutive errors", self._consecutive_errors)
            self.stop()

    def _set_status(self, status: ConnectionStatus) -> None:
        if status == self._status:
            return
        self._status = status
        if self._on_status_change is not None:
            try:
                self._on_status_change(status)
            except Exception:
                _logger.debug("on_status_change callback failed", exc_info=True)
