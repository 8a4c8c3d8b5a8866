"""Configuration objects and helpers for amdtemp.

A single YAML file describes which sensor source to poll, how often, which
key paths map to which channels, and the rolling windows to average over.
The typed dataclasses in :mod:`runtime` are what the rest of the package
consumes.
"""

from .runtime import (
    ChannelSpec,
    ConfigError,
    MonitorConfig,
    WindowSpec,
    config_from_mapping,
    load_config,
)

__all__ = [
    "ChannelSpec",
    "ConfigError",
    "MonitorConfig",
    "WindowSpec",
    "config_from_mapping",
    "load_config",
]
