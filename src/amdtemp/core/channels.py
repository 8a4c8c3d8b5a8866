"""
Per-channel groups of rolling-average buffers.

Every channel owns one :class:`RingBuffer` per configured window; a single
raw reading is appended to all of them so the short and long averages see
the same sample stream.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .ringbuffer import EmptyBuffer, RingBuffer

if TYPE_CHECKING:
    from ..config.runtime import MonitorConfig

ChannelName = str


def calculate_capacity(window_seconds: float, interval_seconds: float) -> int:
    """
    Compute how many samples are needed to cover ``window_seconds`` when one
    sample arrives every ``interval_seconds``.
    """
    if interval_seconds <= 0:
        raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
    # Round before ceil so 60 / 0.1 does not become 601 through float error.
    samples = round(window_seconds / interval_seconds, 9)
    return max(1, int(math.ceil(samples)))


@dataclass(frozen=True)
class Window:
    label: str
    capacity: int


class ChannelWindows:
    """The buffers belonging to one channel, in window order."""

    __slots__ = ("name", "_entries")

    def __init__(self, name: ChannelName, windows: Iterable[Window]) -> None:
        self.name = name
        self._entries: List[Tuple[Window, RingBuffer]] = [
            (window, RingBuffer(window.capacity)) for window in windows
        ]
        if not self._entries:
            raise ValueError(f"channel {name!r} needs at least one window")

    def append(self, value: float) -> None:
        """Feed one raw reading into every window of this channel."""
        for _, buf in self._entries:
            buf.append(value)

    def averages(self) -> List[Optional[float]]:
        """Return the average of each window, ``None`` where no sample exists yet."""
        result: List[Optional[float]] = []
        for _, buf in self._entries:
            try:
                result.append(buf.average())
            except EmptyBuffer:
                result.append(None)
        return result

    def get(self, label: str) -> Optional[RingBuffer]:
        for window, buf in self._entries:
            if window.label == label:
                return buf
        return None

    @property
    def windows(self) -> List[Window]:
        return [window for window, _ in self._entries]

    @property
    def buffers(self) -> List[RingBuffer]:
        return [buf for _, buf in self._entries]

    def __iter__(self) -> Iterator[Tuple[Window, RingBuffer]]:
        return iter(self._entries)

    def __repr__(self) -> str:
        labels = ", ".join(window.label for window, _ in self._entries)
        return f"ChannelWindows({self.name!r}, [{labels}])"


class ChannelRegistry:
    """Mapping of channel name -> :class:`ChannelWindows`, in display order."""

    def __init__(self, channels: Iterable[ChannelName], windows: Iterable[Window]) -> None:
        window_list = list(windows)
        self._channels: Dict[ChannelName, ChannelWindows] = {}
        for name in channels:
            if name in self._channels:
                raise ValueError(f"duplicate channel {name!r}")
            self._channels[name] = ChannelWindows(name, window_list)

    @classmethod
    def from_config(cls, config: "MonitorConfig") -> "ChannelRegistry":
        windows = [
            Window(item.label, calculate_capacity(item.seconds, config.interval_s))
            for item in config.windows
        ]
        return cls((channel.name for channel in config.channels), windows)

    def append(self, channel: ChannelName, value: float) -> None:
        try:
            group = self._channels[channel]
        except KeyError:
            raise KeyError(f"unknown channel {channel!r}") from None
        group.append(value)

    def feed(self, readings: Mapping[ChannelName, float]) -> None:
        """
        Append one reading per registered channel.

        All channels are checked before any buffer is touched so a partial
        tick never leaves the windows out of step.
        """
        missing = [name for name in self._channels if name not in readings]
        if missing:
            raise KeyError(f"no reading for channel(s): {', '.join(missing)}")
        for name, group in self._channels.items():
            group.append(readings[name])

    def get(self, channel: ChannelName) -> Optional[ChannelWindows]:
        return self._channels.get(channel)

    def names(self) -> List[ChannelName]:
        return list(self._channels)

    def items(self) -> List[Tuple[ChannelName, ChannelWindows]]:
        return list(self._channels.items())

    def ready(self) -> bool:
        """True once every buffer holds at least one sample."""
        return all(
            len(buf) > 0 for group in self._channels.values() for buf in group.buffers
        )

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, channel: object) -> bool:
        return channel in self._channels
