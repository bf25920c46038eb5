"""A bump allocator: hands out memory linearly and resets when everything is freed."""

from __future__ import annotations

from allocsim.layout import HEAP_SIZE, AllocError, Layout, align_up, map_region


class BumpAllocator:
    """Advances a pointer per allocation; reclaims the heap once no block is live."""

    def __init__(self) -> None:
        self.heap_start = 0
        self.heap_end = 0
        self.next = 0
        self.allocations = 0

    def init(self) -> None:
        """Map the heap and point the allocator at its start."""
        base = map_region(HEAP_SIZE)
        self.heap_start, self.heap_end, self.next = base, base + HEAP_SIZE, base

    def alloc(self, layout: Layout) -> int:
        """Bump past an aligned block, mapping the heap on first use."""
        if not self.heap_start:
            self.init()
        start = align_up(self.next, layout.align)
        end = start + layout.size
        if end > self.heap_end:
            raise AllocError(f"out of memory allocating {layout.size} bytes")
        self.next = end
        self.allocations += 1
        return start

    def dealloc(self, address: int, layout: Layout) -> None:
        """Count one block as freed; rewind the pointer when none remain."""
        if not self.allocations:
            raise ValueError("dealloc called with no live allocations")
        self.allocations -= 1
        if not self.allocations:
            self.next = self.heap_start

    def bytes_allocated(self) -> int:
        """Distance from the heap start to the bump pointer."""
        return self.next - self.heap_start