"""Remote helpers for polling sensors on another machine over SSH.

:class:`SSHClient` runs ``sensors -j`` on the configured host and hands the
JSON text back to the same parser the local source uses.
"""

from .ssh_client import Host, SSHClient

__all__ = ["Host", "SSHClient"]
