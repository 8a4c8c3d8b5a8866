"""Build the configured sensor source."""

from __future__ import annotations

from typing import Dict, Protocol

from ..config.runtime import ConfigError, MonitorConfig
from .lm_sensors import LmSensorsSource
from .psutil_source import PsutilSource


class SensorSource(Protocol):
    def read(self) -> Dict[str, float]: ...

    def close(self) -> None: ...


def build_source(config: MonitorConfig) -> SensorSource:
    """Return the source selected by ``config.source`` (and ``config.host``)."""
    if config.source == "psutil":
        if config.host:
            raise ConfigError("the psutil source only reads local sensors; drop 'host'")
        return PsutilSource(config.channels)

    runner = None
    if config.host:
        # Imported here so local-only use never needs paramiko loaded.
        from ..remote.ssh_client import Host, SSHClient

        runner = SSHClient(
            Host(
                name=config.host,
                host=config.host,
                user=config.user,
                password=config.password,
                port=config.port,
            )
        )

    return LmSensorsSource(
        config.channels,
        command=config.command,
        timeout=config.timeout_s,
        runner=runner,
    )
