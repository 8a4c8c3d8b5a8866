"""Core data structures and the sampling loop.

:class:`RingBuffer` is the fixed-capacity averaging buffer; a
:class:`ChannelRegistry` keeps one buffer per (channel, window) pair and
:class:`Monitor` feeds it once per tick from a sensor source.
"""

from .ringbuffer import EmptyBuffer, InvalidCapacity, RingBuffer
from .channels import ChannelRegistry, ChannelWindows, Window, calculate_capacity
from .monitor import Monitor, TickResult, acquire

__all__ = [
    "EmptyBuffer",
    "InvalidCapacity",
    "RingBuffer",
    "ChannelRegistry",
    "ChannelWindows",
    "Window",
    "calculate_capacity",
    "Monitor",
    "TickResult",
    "acquire",
]
