"""amdtemp: rolling one- and five-minute averages of CPU die temperatures."""

__version__ = "0.1.0"
