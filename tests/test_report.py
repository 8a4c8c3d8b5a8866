from __future__ import annotations

import io

from amdtemp.core.channels import ChannelRegistry, Window
from amdtemp.report import PLACEHOLDER, SEPARATOR, emit_report, format_average, format_report


def _registry() -> ChannelRegistry:
    return ChannelRegistry(
        ["Tctl", "Tccd1", "Tccd2"], [Window("1m", 2), Window("5m", 4)]
    )


def test_report_block_layout() -> None:
    registry = _registry()
    for tctl, tccd1, tccd2 in ((55.0, 48.0, 46.0), (56.0, 48.5, 46.5), (54.5, 49.0, 47.5)):
        registry.feed({"Tctl": tctl, "Tccd1": tccd1, "Tccd2": tccd2})

    text = format_report(42, registry)

    assert text == (
        "*********************************\n"
        "Time running: 42\n"
        "Tctl avg: 55.25  55.17\n"
        "Tccd1 avg: 48.75  48.50\n"
        "Tccd2 avg: 47.00  46.67\n"
        "*********************************\n"
    )


def test_separator_is_thirty_three_stars() -> None:
    assert SEPARATOR == "*" * 33


def test_empty_buffers_render_placeholder() -> None:
    text = format_report(0, _registry())
    lines = text.splitlines()
    assert lines[1] == "Time running: 0"
    assert lines[2] == f"Tctl avg: {PLACEHOLDER}  {PLACEHOLDER}"
    assert len(lines) == 6


def test_format_average_precision() -> None:
    assert format_average(55.3) == "55.30"
    assert format_average(55.26, precision=1) == "55.3"
    assert format_average(None) == "--"


def test_emit_report_writes_to_stream() -> None:
    out = io.StringIO()
    emit_report("hello\n", out)
    assert out.getvalue() == "hello\n"
