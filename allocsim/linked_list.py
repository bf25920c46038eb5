"""A first-fit allocator keeping its free regions in an address-ordered list."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass

from allocsim.layout import HEAP_SIZE, AllocError, Layout, align_up, map_region

NODE_SIZE = 16
"""Bytes a free-list node occupies; also the minimum block size and alignment."""


@dataclass
class _Region:
    start: int
    size: int

    @property
    def end(self) -> int:
        return self.start + self.size


def _region_start(region: _Region) -> int:
    return region.start


class LinkedListAllocator:
    """Allocates first-fit from address-sorted free regions, merging neighbours on free."""

    def __init__(self) -> None:
        self._regions: list[_Region] = []
        self.initialized = False

    def init(self) -> None:
        """Map the heap and make it one free region."""
        base = map_region(HEAP_SIZE)
        self._add_free_region(base, HEAP_SIZE)
        self.initialized = True

    def _add_free_region(self, address: int, size: int) -> None:
        if align_up(address, NODE_SIZE) != address:
            raise ValueError(f"region at {address:#x} is not {NODE_SIZE}-byte aligned")
        if size < NODE_SIZE:
            raise ValueError(f"region of {size} bytes cannot hold a free-list node")

        index = bisect_left(self._regions, address, key=_region_start)
        self._regions.insert(index, _Region(address, size))

        new = self._regions[index]
        if index + 1 < len(self._regions) and new.end == self._regions[index + 1].start:
            new.size += self._regions.pop(index + 1).size
        if index > 0 and self._regions[index - 1].end == address:
            self._regions[index - 1].size += self._regions.pop(index).size

    @staticmethod
    def _alloc_from_region(region: _Region, size: int, align: int) -> int | None:
        alloc_start = align_up(region.start, align)
        alloc_end = alloc_start + size
        if alloc_end > region.end:
            return None
        excess = region.end - alloc_end
        if 0 < excess < NODE_SIZE:
            return None
        return alloc_start

    def _find_region(self, size: int, align: int) -> tuple[_Region, int] | None:
        for index, region in enumerate(self._regions):
            alloc_start = self._alloc_from_region(region, size, align)
            if alloc_start is not None:
                del self._regions[index]
                return region, alloc_start
        return None

    @staticmethod
    def _size_align(layout: Layout) -> tuple[int, int]:
        adjusted = layout.align_to(NODE_SIZE).pad_to_align()
        return max(adjusted.size, NODE_SIZE), adjusted.align

    def alloc(self, layout: Layout) -> int:
        """Return the address of a block fitting ``layout``, mapping the heap on first use."""
        size, align = self._size_align(layout)
        if not self.initialized:
            self.init()
        found = self._find_region(size, align)
        if found is None:
            raise AllocError(f"no free region fits {layout.size} bytes")
        region, alloc_start = found
        alloc_end = alloc_start + size
        excess = region.end - alloc_end
        if excess > 0:
            self._add_free_region(alloc_end, excess)
        return alloc_start

    def dealloc(self, address: int, layout: Layout) -> None:
        """Return a block to the free list, merging it with adjacent free regions."""
        size, _ = self._size_align(layout)
        self._add_free_region(address, size)

    def free_bytes(self) -> int:
        """Total size of all free regions."""
        return sum(region.size for region in self._regions)

    def bytes_allocated(self) -> int:
        """Heap bytes not on the free list."""
        return HEAP_SIZE - self.free_bytes()