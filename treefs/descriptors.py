"""File descriptor table for open tree entries.

Maps small integer fds to the ``Entry`` they were opened on. Slots 0-2 are
never handed out so tree fds cannot be mistaken for the standard streams.
"""

from __future__ import annotations

import heapq
import threading

from .entry import Entry
from .errors import BadDescriptor

RESERVED_SLOTS = 3


class DescriptorTable:
    """Thread-safe descriptor table.

    By default the table is append-only: every allocation gets a fresh
    slot at the end, and released slots are never handed out again. With
    ``recycle=True`` the lowest released slot is reused first.
    """

    def __init__(self, recycle: bool = False) -> None:
        self._lock = threading.Lock()
        self._slots: list[Entry | None] = [None] * RESERVED_SLOTS
        self._free: list[int] = []
        self.recycle = recycle

    def allocate(self, entry: Entry) -> int:
        """Bind ``entry`` to a new descriptor and return it."""
        with self._lock:
            if self.recycle and self._free:
                fd = heapq.heappop(self._free)
                self._slots[fd] = entry
                return fd

            self._slots.append(entry)
            return len(self._slots) - 1

    def get(self, fd: int) -> Entry | None:
        """Look up a descriptor. Returns None for empty or unknown slots."""
        if fd < RESERVED_SLOTS or fd >= len(self._slots):
            return None
        return self._slots[fd]

    def release(self, fd: int) -> None:
        """Clear a descriptor slot.

        Raises:
            BadDescriptor: If the slot is not currently open.
        """
        with self._lock:
            if self.get(fd) is None:
                raise BadDescriptor(None, f"Bad file descriptor: {fd}")
            self._slots[fd] = None
            if self.recycle:
                heapq.heappush(self._free, fd)

    def __contains__(self, fd: int) -> bool:
        return self.get(fd) is not None

    def __len__(self) -> int:
        """Number of slots ever allocated, reserved ones included."""
        return len(self._slots)

    @property
    def open_count(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)
