"""Lightweight SSH client wrapper for polling ``sensors`` on another machine."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import logging
import paramiko
import shlex

from ..sensors.errors import SensorUnavailable


logger = logging.getLogger(__name__)


@dataclass
class Host:
    """Connection details for a monitored host (password or agent/key auth)."""

    name: str
    host: str
    user: Optional[str] = None
    password: Optional[str] = None
    port: int = 22


class SSHClient:
    """Simple wrapper around ``paramiko`` for running remote commands.

    Instances are callable with ``(command, timeout)`` so they can stand in
    for the local subprocess runner of :class:`~amdtemp.sensors.lm_sensors.LmSensorsSource`.
    """

    def __init__(self, host: Host, *, connect_timeout: float = 10.0) -> None:
        self.host = host
        self.connect_timeout = connect_timeout
        self._client: paramiko.SSHClient = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    # ------------------------------------------------------------------ internals
    def _ensure_client(self) -> paramiko.SSHClient:
        transport = self._client.get_transport()
        if not (transport and transport.is_active()):
            self.connect()
        return self._client

    # ------------------------------------------------------------------ connection
    def connect(self) -> None:
        transport = self._client.get_transport()
        if transport and transport.is_active():
            return

        logger.info(
            "Connecting to %s@%s:%s", self.host.user, self.host.host, self.host.port
        )

        # Fall back to keys/agent when no password is configured.
        use_keys = self.host.password is None
        try:
            self._client.connect(
                hostname=self.host.host,
                username=self.host.user,
                port=self.host.port,
                password=self.host.password,
                look_for_keys=use_keys,
                allow_agent=use_keys,
                timeout=self.connect_timeout,
            )
        except (paramiko.SSHException, OSError) as exc:
            raise SensorUnavailable(f"cannot connect to {self.host.host}: {exc}") from exc

    def close(self) -> None:
        try:
            self._client.close()
        except (paramiko.SSHException, OSError):
            logger.debug("Error while closing SSH connection", exc_info=True)

    # ------------------------------------------------------------------ commands
    def run(self, command: str, timeout: Optional[float] = None):
        """
        Execute a command over SSH and return stdin, stdout, stderr.

        This is a thin wrapper around :meth:`paramiko.SSHClient.exec_command`.
        """
        client = self._ensure_client()
        return client.exec_command(command, timeout=timeout)

    def run_text(self, command: Sequence[str], timeout: Optional[float] = None) -> str:
        """Run ``command`` remotely and return its stdout, failing on a non-zero exit."""
        joined = " ".join(shlex.quote(part) for part in command)
        try:
            _, stdout, stderr = self.run(joined, timeout=timeout)
            output = stdout.read().decode("utf-8", errors="replace")
            status = stdout.channel.recv_exit_status()
            err_text = stderr.read().decode("utf-8", errors="replace").strip()
        except (paramiko.SSHException, OSError) as exc:
            # Drop the transport so the next tick reconnects.
            self.close()
            raise SensorUnavailable(f"{self.host.name}: {joined} failed: {exc}") from exc

        if status != 0:
            raise SensorUnavailable(
                f"{self.host.name}: {joined} exited with status {status}: {err_text}"
            )
        return output

    __call__ = run_text
