"""Runtime configuration for the temperature monitor."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

SOURCES = ("lm-sensors", "psutil")
ERROR_POLICIES = ("exit", "skip")

DEFAULT_COMMAND = ("sensors", "-j")


class ConfigError(ValueError):
    """Raised for configuration values the monitor cannot run with."""


@dataclass(frozen=True)
class ChannelSpec:
    """One monitored sensor: a display name and the key path of its reading."""

    name: str
    path: str


@dataclass(frozen=True)
class WindowSpec:
    """A rolling window, e.g. ``1m`` covering 60 seconds."""

    label: str
    seconds: float


DEFAULT_CHANNELS = (
    ChannelSpec("Tctl", "k10temp-pci-00c3/Tctl/temp1_input"),
    ChannelSpec("Tccd1", "k10temp-pci-00c3/Tccd1/temp3_input"),
    ChannelSpec("Tccd2", "k10temp-pci-00c3/Tccd2/temp4_input"),
)

DEFAULT_WINDOWS = (
    WindowSpec("1m", 60.0),
    WindowSpec("5m", 300.0),
)


@dataclass(slots=True)
class MonitorConfig:
    """
    Tuning knobs for how temperatures are sampled and averaged.

    The defaults reproduce a 1 Hz poll of ``sensors -j`` on an AMD k10temp
    chip with one- and five-minute windows.
    """

    interval_s: float = 1.0
    source: str = "lm-sensors"
    command: tuple[str, ...] = DEFAULT_COMMAND
    timeout_s: Optional[float] = None
    on_error: str = "exit"
    max_backoff_s: float = 30.0

    # Remote lm-sensors over SSH
    host: Optional[str] = None
    user: Optional[str] = None
    port: int = 22
    password: Optional[str] = None

    channels: tuple[ChannelSpec, ...] = field(default=DEFAULT_CHANNELS)
    windows: tuple[WindowSpec, ...] = field(default=DEFAULT_WINDOWS)

    def sanitized(self) -> MonitorConfig:
        """Return a validated copy with values coerced to their expected types."""
        try:
            interval = float(self.interval_s)
            max_backoff = float(self.max_backoff_s)
            timeout = None if self.timeout_s is None else float(self.timeout_s)
            port = int(self.port)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid numeric setting: {exc}") from exc

        for name, value in (
            ("interval_s", interval),
            ("max_backoff_s", max_backoff),
            ("timeout_s", timeout),
        ):
            if value is not None and not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number, got {value}")
        if interval <= 0:
            raise ConfigError(f"interval_s must be positive, got {interval}")
        if timeout is not None and timeout <= 0:
            raise ConfigError(f"timeout_s must be positive, got {timeout}")

        source = str(self.source).strip().lower().replace("_", "-")
        if source in {"lm", "lmsensors", "sensors"}:
            source = "lm-sensors"
        if source not in SOURCES:
            raise ConfigError(f"unknown source {self.source!r}, expected one of {SOURCES}")

        on_error = str(self.on_error).strip().lower()
        if on_error not in ERROR_POLICIES:
            raise ConfigError(
                f"unknown on_error policy {self.on_error!r}, expected one of {ERROR_POLICIES}"
            )

        if isinstance(self.command, str):
            command = tuple(self.command.split())
        else:
            command = tuple(str(part) for part in self.command)
        if not command:
            raise ConfigError("command must not be empty")

        if not self.channels:
            raise ConfigError("at least one channel is required")
        names = [channel.name for channel in self.channels]
        if len(set(names)) != len(names):
            raise ConfigError(f"duplicate channel names in {names}")

        if not self.windows:
            raise ConfigError("at least one window is required")
        for window in self.windows:
            if not math.isfinite(window.seconds):
                raise ConfigError(f"window {window.label!r} must cover a finite duration")
            if window.seconds <= 0:
                raise ConfigError(f"window {window.label!r} must cover a positive duration")

        return replace(
            self,
            interval_s=interval,
            source=source,
            command=command,
            timeout_s=timeout,
            on_error=on_error,
            max_backoff_s=max(interval, max_backoff),
            port=port,
            channels=tuple(self.channels),
            windows=tuple(self.windows),
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`MonitorConfig`."""
    return {f.name for f in fields(MonitorConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the optional top-level ``monitor`` block."""
    if "monitor" in data and isinstance(data["monitor"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "monitor":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def _parse_channels(raw: Any) -> tuple[ChannelSpec, ...]:
    if isinstance(raw, Mapping):
        items = [{"name": name, "path": path} for name, path in raw.items()]
    elif isinstance(raw, (list, tuple)):
        items = list(raw)
    else:
        raise ConfigError(f"channels must be a list or mapping, got {type(raw).__name__}")

    channels = []
    for item in items:
        if not isinstance(item, Mapping) or "name" not in item or "path" not in item:
            raise ConfigError(f"channel entries need 'name' and 'path', got {item!r}")
        channels.append(ChannelSpec(name=str(item["name"]), path=str(item["path"])))
    return tuple(channels)


def _parse_windows(raw: Any) -> tuple[WindowSpec, ...]:
    if not isinstance(raw, (list, tuple)):
        raise ConfigError(f"windows must be a list, got {type(raw).__name__}")

    windows = []
    for item in raw:
        if not isinstance(item, Mapping) or "seconds" not in item:
            raise ConfigError(f"window entries need 'seconds', got {item!r}")
        try:
            seconds = float(item["seconds"])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"bad window duration in {item!r}") from exc
        label = str(item.get("label") or f"{seconds:g}s")
        windows.append(WindowSpec(label=label, seconds=seconds))
    return tuple(windows)


def config_from_mapping(data: Mapping[str, Any] | None) -> MonitorConfig:
    """Build :class:`MonitorConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return MonitorConfig().sanitized()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}

    if "channels" in payload:
        payload["channels"] = _parse_channels(payload["channels"])
    if "windows" in payload:
        payload["windows"] = _parse_windows(payload["windows"])
    if payload.get("command") is None:
        payload.pop("command", None)

    return MonitorConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> MonitorConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`MonitorConfig`.
    """
    if path is None:
        return MonitorConfig().sanitized()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return MonitorConfig().sanitized()
    with cfg_path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {cfg_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = [
    "ChannelSpec",
    "ConfigError",
    "DEFAULT_CHANNELS",
    "DEFAULT_WINDOWS",
    "MonitorConfig",
    "WindowSpec",
    "config_from_mapping",
    "load_config",
]
