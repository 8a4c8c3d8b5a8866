from __future__ import annotations

from unittest import mock

import paramiko
import pytest

from amdtemp.config.runtime import MonitorConfig
from amdtemp.remote.ssh_client import Host, SSHClient
from amdtemp.sensors.errors import SensorUnavailable
from amdtemp.sensors.factory import build_source
from amdtemp.sensors.lm_sensors import LmSensorsSource
from amdtemp.sensors.psutil_source import PsutilSource


def _streams(stdout_text: str, status: int = 0, stderr_text: str = ""):
    stdout = mock.Mock()
    stdout.read.return_value = stdout_text.encode("utf-8")
    stdout.channel.recv_exit_status.return_value = status
    stderr = mock.Mock()
    stderr.read.return_value = stderr_text.encode("utf-8")
    return mock.Mock(), stdout, stderr


@pytest.fixture
def paramiko_client():
    with mock.patch("amdtemp.remote.ssh_client.paramiko.SSHClient") as factory:
        client = factory.return_value
        client.get_transport.return_value = None
        yield client


def test_run_text_returns_remote_stdout(paramiko_client) -> None:
    paramiko_client.exec_command.return_value = _streams('{"chip": {}}')
    ssh = SSHClient(Host(name="pi", host="pi.local", user="pi"))

    assert ssh(("sensors", "-j"), 5.0) == '{"chip": {}}'

    paramiko_client.exec_command.assert_called_once_with("sensors -j", timeout=5.0)
    connect_kwargs = paramiko_client.connect.call_args.kwargs
    assert connect_kwargs["hostname"] == "pi.local"
    assert connect_kwargs["look_for_keys"] is True


def test_password_disables_key_lookup(paramiko_client) -> None:
    paramiko_client.exec_command.return_value = _streams("{}")
    SSHClient(Host(name="pi", host="pi.local", user="pi", password="raspberry")).run_text(
        ("sensors", "-j")
    )
    connect_kwargs = paramiko_client.connect.call_args.kwargs
    assert connect_kwargs["password"] == "raspberry"
    assert connect_kwargs["look_for_keys"] is False
    assert connect_kwargs["allow_agent"] is False


def test_remote_non_zero_exit_is_unavailable(paramiko_client) -> None:
    paramiko_client.exec_command.return_value = _streams("", 127, "sensors: not found")
    ssh = SSHClient(Host(name="pi", host="pi.local"))

    with pytest.raises(SensorUnavailable) as excinfo:
        ssh.run_text(("sensors", "-j"))
    assert "127" in str(excinfo.value)


def test_connect_failure_is_unavailable(paramiko_client) -> None:
    paramiko_client.connect.side_effect = OSError("No route to host")
    ssh = SSHClient(Host(name="pi", host="pi.local"))

    with pytest.raises(SensorUnavailable):
        ssh.run_text(("sensors", "-j"))


def test_channel_error_drops_connection(paramiko_client) -> None:
    paramiko_client.exec_command.side_effect = paramiko.SSHException("channel closed")
    ssh = SSHClient(Host(name="pi", host="pi.local"))

    with pytest.raises(SensorUnavailable):
        ssh.run_text(("sensors", "-j"))
    paramiko_client.close.assert_called_once_with()


def test_build_source_uses_ssh_runner_for_host(paramiko_client) -> None:
    config = MonitorConfig(host="pi.local", user="pi", port=2222).sanitized()

    source = build_source(config)

    assert isinstance(source, LmSensorsSource)
    assert isinstance(source._runner, SSHClient)
    assert source._runner.host.port == 2222
    source.close()
    paramiko_client.close.assert_called_once_with()


def test_build_source_defaults() -> None:
    assert isinstance(build_source(MonitorConfig().sanitized()), LmSensorsSource)
    assert isinstance(build_source(MonitorConfig(source="psutil").sanitized()), PsutilSource)
