"""Readings from :func:`psutil.sensors_temperatures` (Linux/FreeBSD only).

Channel paths take the form ``chip/label``, e.g. ``k10temp/Tctl``. A path
with only the chip name selects that chip's first entry, which covers
drivers that report a single unlabeled temperature.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Dict

import psutil

from ..config.runtime import ChannelSpec
from .errors import SchemaMismatch, SensorUnavailable

logger = logging.getLogger(__name__)


class PsutilSource:
    """Reads the ``current`` value of each configured psutil temperature entry."""

    def __init__(self, channels: Sequence[ChannelSpec]) -> None:
        self.channels = tuple(channels)

    def _temperatures(self) -> dict:
        reader = getattr(psutil, "sensors_temperatures", None)
        if reader is None:
            raise SensorUnavailable("psutil has no temperature support on this platform")
        try:
            temps = reader()
        except OSError as exc:
            raise SensorUnavailable(f"psutil could not read temperatures: {exc}") from exc
        if not temps:
            raise SensorUnavailable("psutil reported no temperature sensors")
        return temps

    def read(self) -> Dict[str, float]:
        temps = self._temperatures()
        readings = {
            channel.name: self._lookup(temps, channel.path) for channel in self.channels
        }
        logger.debug("psutil readings: %s", readings)
        return readings

    @staticmethod
    def _lookup(temps: dict, path: str) -> float:
        chip, _, label = path.partition("/")
        entries = temps.get(chip)
        if not entries:
            raise SchemaMismatch(f"{path}: no sensor chip {chip!r} (have {sorted(temps)})")

        if not label:
            return float(entries[0].current)
        for entry in entries:
            if entry.label == label:
                return float(entry.current)
        labels = [entry.label for entry in entries]
        raise SchemaMismatch(f"{path}: chip {chip!r} has no label {label!r} (have {labels})")

    def close(self) -> None:
        pass
