"""Sensor sources that produce one temperature reading per channel.

:mod:`lm_sensors` parses the JSON report of ``sensors -j`` (locally or over
SSH), :mod:`psutil_source` reads :func:`psutil.sensors_temperatures`.
Both raise the :mod:`errors` taxonomy so the monitor loop can tell
transient outages from a channel path that will never resolve.
"""

from .errors import AcquisitionFailure, SchemaMismatch, SensorUnavailable
from .factory import SensorSource, build_source
from .lm_sensors import LmSensorsSource, lookup_path, parse_sensors_json
from .psutil_source import PsutilSource

__all__ = [
    "AcquisitionFailure",
    "LmSensorsSource",
    "PsutilSource",
    "SchemaMismatch",
    "SensorSource",
    "SensorUnavailable",
    "build_source",
    "lookup_path",
    "parse_sensors_json",
]
