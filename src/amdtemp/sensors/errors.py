"""Failures raised while acquiring a sensor reading."""

from __future__ import annotations


class AcquisitionFailure(RuntimeError):
    """A tick's readings could not be obtained."""

    #: Whether retrying on a later tick can reasonably succeed.
    transient = False


class SensorUnavailable(AcquisitionFailure):
    """The sensor facility could not be reached (missing binary, exit code, timeout, SSH)."""

    transient = True


class SchemaMismatch(AcquisitionFailure):
    """The facility answered, but not in the shape the channel paths expect."""
