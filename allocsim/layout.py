"""Allocation layouts, address arithmetic and a simulated address space."""

from __future__ import annotations

import threading
from dataclasses import dataclass

HEAP_SIZE = 1024 * 1024
"""Size in bytes of the heap each allocator manages."""

PAGE_SIZE = 1024 * 4
"""Size in bytes of one page of the simulated address space."""

ISIZE_MAX = (1 << 63) - 1
"""Largest size a layout may have once rounded up to its alignment."""

_ADDRESS_SPACE_START = 0x1000_0000
_ADDRESS_SPACE_END = 1 << 47


class AllocError(MemoryError):
    """Raised when an allocator cannot satisfy a request."""


def _is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def align_up(addr: int, align: int) -> int:
    """Round ``addr`` up to the next multiple of ``align`` (a power of two)."""
    if not _is_power_of_two(align):
        raise ValueError(f"alignment must be a power of two, got {align}")
    return (addr + align - 1) & ~(align - 1)


@dataclass(frozen=True)
class Layout:
    """The size and alignment of a requested block of memory."""

    size: int
    align: int

    def __post_init__(self) -> None:
        if not _is_power_of_two(self.align):
            raise ValueError(f"alignment must be a power of two, got {self.align}")
        if self.size < 0:
            raise ValueError(f"size must not be negative, got {self.size}")
        if align_up(self.size, self.align) > ISIZE_MAX:
            raise ValueError("size rounded up to alignment overflows")

    def align_to(self, align: int) -> Layout:
        """Return a layout with at least the given alignment."""
        return Layout(self.size, max(self.align, align))

    def pad_to_align(self) -> Layout:
        """Return a layout whose size is rounded up to a multiple of its alignment."""
        return Layout(align_up(self.size, self.align), self.align)


class _AddressSpace:
    """Hands out non-overlapping, page-aligned address ranges."""

    def __init__(self, start: int, end: int) -> None:
        self._lock = threading.Lock()
        self._next_base = start
        self._end = end
        self._mappings: dict[int, int] = {}

    def map(self, size: int) -> int:
        if size <= 0:
            raise ValueError(f"mapping size must be positive, got {size}")
        length = align_up(size, PAGE_SIZE)
        with self._lock:
            base = self._next_base
            if base + length > self._end:
                raise AllocError("Failed to build memory mapped area")
            self._next_base = base + length
            self._mappings[base] = size
        return base

    def unmap(self, base: int, size: int) -> None:
        with self._lock:
            mapped = self._mappings.get(base)
            if mapped is None:
                raise ValueError(f"no region is mapped at {base:#x}")
            if mapped != size:
                raise ValueError(
                    f"region at {base:#x} has size {mapped}, not {size}"
                )
            del self._mappings[base]


_address_space = _AddressSpace(_ADDRESS_SPACE_START, _ADDRESS_SPACE_END)


def map_region(size: int) -> int:
    """Reserve a fresh page-aligned region of ``size`` bytes and return its base."""
    return _address_space.map(size)


def unmap_region(base: int, size: int) -> None:
    """Release a region previously returned by :func:`map_region`."""
    _address_space.unmap(base, size)