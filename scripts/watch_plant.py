#!/usr/bin/env python3
"""Headless plant watcher.

Runs the synchronization engine without a renderer and logs connection
status changes and alarm-list changes. Configuration comes from the
``WTP_*`` environment variables; command-line flags override them.

Examples::

    WTP_BEARER_TOKEN=... python scripts/watch_plant.py
    python scripts/watch_plant.py --simulate --fps 10
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from wtpsync import Frame, PlantSyncEngine, WtpConfig  # noqa: E402
from wtpsync.display import format_dashboard  # noqa: E402
from wtpsync.simulation import Simulator  # noqa: E402

_logger = logging.getLogger("watch_plant")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--simulate", action="store_true", help="use random data instead of the live API")
    parser.add_argument("--fps", type=float, default=5.0, help="frames resolved per second (default: 5)")
    parser.add_argument("--interval-ms", type=int, default=None, help="poll interval override in milliseconds")
    parser.add_argument("--asset-id", type=int, default=None, help="asset id override")
    parser.add_argument("--duration", type=float, default=None, help="stop after this many seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable DEBUG logging")
    return parser.parse_args(argv)


async def _watch(args: argparse.Namespace) -> None:
    overrides: dict[str, object] = {}
    if args.interval_ms is not None:
        overrides["poll_interval_ms"] = args.interval_ms
    if args.asset_id is not None:
        overrides["asset_id"] = args.asset_id
    if args.simulate:
        overrides["auto_start"] = False
    config = WtpConfig.from_env(**overrides)

    last_alarms: tuple[str, ...] = ()

    def _on_frame(frame: Frame) -> None:
        nonlocal last_alarms
        labels = tuple(alarm.label for alarm in frame.alarms)
        if labels != last_alarms:
            _logger.info("Alarms: %s", ", ".join(labels) if labels else "none")
            last_alarms = labels

    def _on_status(status: object) -> None:
        _logger.info("Connection status: %s", status)

    async with PlantSyncEngine(config, on_status_change=_on_status) as engine:
        simulator = Simulator(engine.store) if args.simulate else None
        if simulator is not None:
            simulator.start()

        frames = asyncio.create_task(engine.run_frames(args.fps, _on_frame))
        try:
            if args.duration is not None:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()
        finally:
            frames.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await frames
            if simulator is not None:
                simulator.stop()

        for panel, value in format_dashboard(engine.snapshot).items():
            _logger.info("%-15s %s", panel, value.text)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_watch(args))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
