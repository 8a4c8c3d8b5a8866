"""The sampling loop: acquire, insert, report, sleep.

Acquisition never terminates anything itself; it hands back a
:class:`TickResult` and :class:`Monitor` applies the configured error
policy:

``exit``
    any :class:`~amdtemp.sensors.errors.AcquisitionFailure` is re-raised and
    ends the loop.
``skip``
    transient failures skip the tick and back off (doubling the delay up to
    ``max_backoff_s``); schema mismatches are still re-raised because they
    will not fix themselves.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, TextIO

from ..config.runtime import MonitorConfig
from ..report import emit_report, format_report
from ..sensors.errors import AcquisitionFailure, SchemaMismatch
from ..sensors.factory import SensorSource
from ..tools.debug import time_block
from .channels import ChannelRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickResult:
    """Outcome of one acquisition: either ``readings`` or ``error`` is set."""

    readings: Optional[Dict[str, float]] = None
    error: Optional[AcquisitionFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def acquire(source: SensorSource) -> TickResult:
    """Read every channel once, capturing acquisition failures in the result."""
    try:
        readings = source.read()
    except AcquisitionFailure as exc:
        return TickResult(error=exc)
    return TickResult(readings=readings)


class Monitor:
    """Owns the channel buffers and the tick counter for one monitoring run."""

    def __init__(
        self,
        source: SensorSource,
        registry: ChannelRegistry,
        *,
        interval_s: float = 1.0,
        on_error: str = "exit",
        max_backoff_s: float = 30.0,
        stream: TextIO | None = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        if on_error not in ("exit", "skip"):
            raise ValueError(f"unknown on_error policy {on_error!r}")
        self.source = source
        self.registry = registry
        self.interval_s = float(interval_s)
        self.on_error = on_error
        self.max_backoff_s = max(self.interval_s, float(max_backoff_s))
        self.stream = stream
        self.ticks = 0
        self.consecutive_failures = 0
        self._sleep = sleep or time.sleep

    @classmethod
    def from_config(
        cls,
        config: MonitorConfig,
        source: SensorSource,
        *,
        stream: TextIO | None = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> "Monitor":
        return cls(
            source,
            ChannelRegistry.from_config(config),
            interval_s=config.interval_s,
            on_error=config.on_error,
            max_backoff_s=config.max_backoff_s,
            stream=stream,
            sleep=sleep,
        )

    # ------------------------------------------------------------------ ticks
    def step(self) -> TickResult:
        """
        Run a single tick without sleeping.

        Raises
        ------
        AcquisitionFailure
            When the failure is fatal under the current policy.
        """
        with time_block(f"tick {self.ticks}"):
            result = acquire(self.source)
            if not result.ok:
                self._handle_failure(result.error)
                return result

            try:
                self.registry.feed(result.readings)
            except KeyError as exc:
                raise SchemaMismatch(str(exc.args[0])) from exc

            self.consecutive_failures = 0
            emit_report(format_report(self.ticks, self.registry), self.stream)
            self.ticks += 1
        return result

    def _handle_failure(self, error: AcquisitionFailure) -> None:
        if self.on_error == "exit" or not error.transient:
            raise error
        self.consecutive_failures += 1
        logger.warning(
            "Skipping tick %d after acquisition failure (%d in a row): %s",
            self.ticks,
            self.consecutive_failures,
            error,
        )

    def next_delay(self) -> float:
        """Seconds to wait before the next tick, backing off after failures."""
        if self.consecutive_failures == 0:
            return self.interval_s
        # 2 ** 32 intervals is far past any sane cap; the power stays a finite float.
        exponent = min(self.consecutive_failures, 32)
        delay = self.interval_s * (2 ** exponent)
        return min(delay, self.max_backoff_s)

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Tick until ``max_ticks`` reports have been emitted, or forever.

        Returns the number of reports emitted by this call.
        """
        reported = 0
        while max_ticks is None or reported < max_ticks:
            result = self.step()
            if result.ok:
                reported += 1
                if max_ticks is not None and reported >= max_ticks:
                    break
            self._sleep(self.next_delay())
        return reported
