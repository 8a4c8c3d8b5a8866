from __future__ import annotations

from collections.abc import Iterator


class InvalidCapacity(ValueError):
    """Raised when a buffer is constructed with a non-positive capacity."""


class EmptyBuffer(LookupError):
    """Raised when an aggregate is requested from a buffer with no samples."""


class RingBuffer:
    """
    Fixed-size ring buffer of float samples.

    Overwrites the oldest entry when full and reports the arithmetic mean of
    whatever it currently holds. ``head`` points at the oldest sample and
    ``tail`` at the slot the next sample will be written to.
    """

    __slots__ = ("_capacity", "_data", "_head", "_tail", "_size", "_full")

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise InvalidCapacity(f"capacity must be an integer, got {capacity!r}")
        if capacity <= 0:
            raise InvalidCapacity(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._data: list[float] = [0.0] * capacity
        self._head = 0
        self._tail = 0
        self._size = 0
        self._full = False

    # ------------------------------------------------------------------ mutation
    def append(self, value: float) -> None:
        """Insert ``value``, evicting the oldest sample if the buffer is full."""
        if self._full:
            self._head = (self._head + 1) % self._capacity
        else:
            self._size += 1

        self._data[self._tail] = float(value)
        self._tail = (self._tail + 1) % self._capacity
        self._full = self._size == self._capacity

    # ------------------------------------------------------------------ views
    def snapshot(self) -> list[float]:
        """Return the logical contents, oldest first, as a new list."""
        return list(self)

    def average(self) -> float:
        """
        Return the arithmetic mean of the current contents.

        Raises
        ------
        EmptyBuffer
            If no sample has been inserted yet.
        """
        if self._size == 0:
            raise EmptyBuffer("buffer is empty")

        total = 0.0
        for value in self:
            total += value
        return total / self._size

    def latest(self) -> float | None:
        """Return the newest sample, or ``None`` if the buffer is empty."""
        if self._size == 0:
            return None
        return self[-1]

    # ------------------------------------------------------------------ properties
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_full(self) -> bool:
        return self._full

    @property
    def head(self) -> int:
        return self._head

    @property
    def tail(self) -> int:
        return self._tail

    # ------------------------------------------------------------------ dunder
    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index: int) -> float:
        """Support buf[i] and buf[-1] indexing over the *logical* contents."""
        size = self._size
        if size == 0:
            raise IndexError("RingBuffer is empty")

        if index < 0:
            index += size

        if index < 0 or index >= size:
            raise IndexError("RingBuffer index out of range")

        return self._data[(self._head + index) % self._capacity]

    def __iter__(self) -> Iterator[float]:
        for i in range(self._size):
            yield self._data[(self._head + i) % self._capacity]

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self._capacity}, size={self._size})"
