from __future__ import annotations

import logging
from typing import Dict, List
from unittest import mock

import pytest

from amdtemp import cli
from amdtemp.sensors.errors import SensorUnavailable


class FakeSource:
    def __init__(self, steps: List[object]) -> None:
        self._steps = list(steps)
        self.closed = False

    def read(self) -> Dict[str, float]:
        step = self._steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    def close(self) -> None:
        self.closed = True


READING = {"Tctl": 55.3, "Tccd1": 48.2, "Tccd2": 46.1}


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)


def test_single_tick_prints_report(capsys) -> None:
    source = FakeSource([READING])
    with mock.patch.object(cli, "build_source", return_value=source):
        assert cli.main(["--ticks", "1"]) == cli.EXIT_OK

    out = capsys.readouterr().out
    assert out.splitlines() == [
        "*" * 33,
        "Time running: 0",
        "Tctl avg: 55.30  55.30",
        "Tccd1 avg: 48.20  48.20",
        "Tccd2 avg: 46.10  46.10",
        "*" * 33,
    ]
    assert source.closed


def test_acquisition_failure_exits_with_status_one(caplog) -> None:
    source = FakeSource([SensorUnavailable("sensors: command not found")])
    with mock.patch.object(cli, "build_source", return_value=source):
        assert cli.main(["--ticks", "3"]) == cli.EXIT_ACQUISITION

    assert "command not found" in caplog.text
    assert source.closed


def test_skip_policy_from_command_line(capsys) -> None:
    source = FakeSource([SensorUnavailable("busy"), READING])
    with mock.patch.object(cli, "build_source", return_value=source) as build, mock.patch(
        "amdtemp.core.monitor.time.sleep"
    ):
        assert cli.main(["--ticks", "1", "--on-error", "skip"]) == cli.EXIT_OK

    assert build.call_args.args[0].on_error == "skip"
    assert "Time running: 0" in capsys.readouterr().out


def test_overrides_reach_the_config() -> None:
    source = FakeSource([READING])
    with mock.patch.object(cli, "build_source", return_value=source) as build:
        cli.main(
            [
                "--ticks", "1",
                "--interval", "2.5",
                "--host", "pi.local",
                "--user", "pi",
                "--port", "2222",
                "--timeout", "4",
            ]
        )

    config = build.call_args.args[0]
    assert config.interval_s == 2.5
    assert (config.host, config.user, config.port) == ("pi.local", "pi", 2222)
    assert config.timeout_s == 4.0


def test_invalid_interval_is_a_config_error() -> None:
    assert cli.main(["--interval", "0"]) == cli.EXIT_CONFIG


def test_non_positive_ticks_rejected() -> None:
    assert cli.main(["--ticks", "0"]) == cli.EXIT_CONFIG


def test_psutil_with_host_is_rejected() -> None:
    assert cli.main(["--source", "psutil", "--host", "pi.local"]) == cli.EXIT_CONFIG


def test_config_file_is_loaded(tmp_path) -> None:
    path = tmp_path / "amdtemp.yaml"
    path.write_text("channels:\n  - {name: Tdie, path: chip/Tdie/temp1_input}\n", encoding="utf-8")
    source = FakeSource([{"Tdie": 40.0}])
    with mock.patch.object(cli, "build_source", return_value=source) as build:
        assert cli.main(["--config", str(path), "--ticks", "1"]) == cli.EXIT_OK
    assert [c.name for c in build.call_args.args[0].channels] == ["Tdie"]


def test_unparsable_config_file_is_a_config_error(tmp_path, caplog) -> None:
    path = tmp_path / "amdtemp.yaml"
    path.write_text("monitor: [unclosed\n", encoding="utf-8")

    assert cli.main(["--config", str(path), "--ticks", "1"]) == cli.EXIT_CONFIG
    assert "Invalid configuration" in caplog.text


def test_infinite_window_is_a_config_error(tmp_path) -> None:
    path = tmp_path / "amdtemp.yaml"
    path.write_text("windows:\n  - {label: forever, seconds: .inf}\n", encoding="utf-8")

    assert cli.main(["--config", str(path), "--ticks", "1"]) == cli.EXIT_CONFIG
