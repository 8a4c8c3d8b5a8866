"""Command-line entry point for the temperature monitor.

All launches (``amdtemp``, ``python -m amdtemp`` or ``python main.py``)
flow through :func:`main` here.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace
from typing import Any, Dict

from .config.runtime import ConfigError, MonitorConfig, load_config
from .core.monitor import Monitor
from .core.ringbuffer import InvalidCapacity
from .sensors.errors import AcquisitionFailure
from .sensors.factory import build_source

logger = logging.getLogger("amdtemp")

EXIT_OK = 0
EXIT_ACQUISITION = 1
EXIT_CONFIG = 2


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amdtemp",
        description="Print rolling averages of CPU die temperatures",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML config file (defaults apply when omitted or missing)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between samples (default: 1.0)",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Stop after this many reports (default: run until interrupted)",
    )
    parser.add_argument(
        "--source",
        choices=("lm-sensors", "psutil"),
        default=None,
        help="Where readings come from (default: lm-sensors)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Run 'sensors -j' on this host over SSH instead of locally",
    )
    parser.add_argument("--user", type=str, default=None, help="SSH user name")
    parser.add_argument("--port", type=int, default=None, help="SSH port (default: 22)")
    parser.add_argument(
        "--on-error",
        choices=("exit", "skip"),
        default=None,
        help="Exit on the first failed reading, or skip transient failures (default: exit)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for each sensors call (default: none)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    return parser


def _apply_overrides(config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    overrides: Dict[str, Any] = {}
    for arg_name, field_name in (
        ("interval", "interval_s"),
        ("source", "source"),
        ("host", "host"),
        ("user", "user"),
        ("port", "port"),
        ("on_error", "on_error"),
        ("timeout", "timeout_s"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    if not overrides:
        return config
    return replace(config, **overrides).sanitized()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """
    Parse ``argv`` (without the program name), run the monitor and return
    the process exit status.
    """
    args = _build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.ticks is not None and args.ticks <= 0:
        logger.error("--ticks must be positive, got %d", args.ticks)
        return EXIT_CONFIG

    try:
        config = _apply_overrides(load_config(args.config), args)
        source = build_source(config)
        monitor = Monitor.from_config(config, source)
    except (ConfigError, InvalidCapacity) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG

    logger.debug("Starting monitor with %s", config)
    try:
        monitor.run(max_ticks=args.ticks)
    except AcquisitionFailure as exc:
        logger.error("Could not read sensors: %s", exc)
        return EXIT_ACQUISITION
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
    finally:
        source.close()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
