"""
Readings from lm-sensors' JSON report (``sensors -j``).

The report is a tree keyed by chip, then feature label, then subfeature::

    {
      "k10temp-pci-00c3": {
        "Adapter": "PCI adapter",
        "Tctl": {"temp1_input": 55.25},
        "Tccd1": {"temp3_input": 48.0}
      }
    }

Each channel is addressed by a ``/``-separated key path such as
``k10temp-pci-00c3/Tctl/temp1_input``.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Optional

from ..config.runtime import DEFAULT_COMMAND, ChannelSpec
from .errors import SchemaMismatch, SensorUnavailable

logger = logging.getLogger(__name__)

# (command, timeout) -> stdout text
Runner = Callable[[Sequence[str], Optional[float]], str]


def parse_sensors_json(text: str) -> Dict[str, Any]:
    """Parse ``sensors -j`` output, raising :class:`SchemaMismatch` if it is not a JSON object."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaMismatch(f"malformed sensors output: {exc}") from exc
    if not isinstance(doc, dict):
        raise SchemaMismatch(f"expected a JSON object from sensors, got {type(doc).__name__}")
    return doc


def lookup_path(document: Mapping[str, Any], path: str) -> float:
    """
    Resolve ``path`` in ``document`` and return the numeric value found there.

    Integers are accepted (JSON has no separate float type); booleans,
    strings and nested objects are not.
    """
    keys = [part for part in path.split("/") if part]
    if not keys:
        raise SchemaMismatch(f"empty key path {path!r}")

    node: Any = document
    for depth, key in enumerate(keys):
        if not isinstance(node, Mapping) or key not in node:
            walked = "/".join(keys[:depth]) or "<root>"
            raise SchemaMismatch(f"{path}: no key {key!r} under {walked}")
        node = node[key]

    if isinstance(node, bool) or not isinstance(node, (int, float)):
        raise SchemaMismatch(f"{path}: expected a number, got {type(node).__name__}")
    return float(node)


def run_local(command: Sequence[str], timeout: Optional[float] = None) -> str:
    """Run ``command`` on this machine and return its stdout."""
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise SensorUnavailable(f"{command[0]} not found; is lm-sensors installed?") from exc
    except subprocess.TimeoutExpired as exc:
        raise SensorUnavailable(f"{' '.join(command)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise SensorUnavailable(f"could not run {' '.join(command)}: {exc}") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        raise SensorUnavailable(
            f"{' '.join(command)} exited with status {completed.returncode}: {stderr}"
        )
    return completed.stdout


class LmSensorsSource:
    """Polls ``sensors -j`` and extracts one value per configured channel."""

    def __init__(
        self,
        channels: Sequence[ChannelSpec],
        *,
        command: Sequence[str] = DEFAULT_COMMAND,
        timeout: Optional[float] = None,
        runner: Optional[Runner] = None,
    ) -> None:
        self.channels = tuple(channels)
        self.command = tuple(command)
        self.timeout = timeout
        self._runner: Runner = runner or run_local

    def read(self) -> Dict[str, float]:
        text = self._runner(self.command, self.timeout)
        doc = parse_sensors_json(text)
        readings = {channel.name: lookup_path(doc, channel.path) for channel in self.channels}
        logger.debug("lm-sensors readings: %s", readings)
        return readings

    def close(self) -> None:
        close = getattr(self._runner, "close", None)
        if callable(close):
            close()
