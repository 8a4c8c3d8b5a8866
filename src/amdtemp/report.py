"""Console rendering of the per-tick averages."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from .core.channels import ChannelRegistry

SEPARATOR = "*" * 33
PLACEHOLDER = "--"


def format_average(value: Optional[float], precision: int = 2) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:.{precision}f}"


def format_report(ticks: int, registry: ChannelRegistry, *, precision: int = 2) -> str:
    """
    Render one report block::

        *********************************
        Time running: 42
        Tctl avg: 55.30  54.10
        *********************************

    Windows without samples yet show ``--`` instead of a number.
    """
    lines = [SEPARATOR, f"Time running: {ticks}"]
    for name, group in registry.items():
        values = "  ".join(format_average(avg, precision) for avg in group.averages())
        lines.append(f"{name} avg: {values}")
    lines.append(SEPARATOR)
    return "\n".join(lines) + "\n"


def emit_report(text: str, stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    out.write(text)
    out.flush()
