"""An allocator serving small requests from per-size free lists of fixed blocks."""

from __future__ import annotations

from allocsim.layout import HEAP_SIZE, Layout
from allocsim.linked_list import LinkedListAllocator

BLOCK_SIZES: tuple[int, ...] = (8, 16, 32, 64, 128, 256, 512, 1024, 2048)
"""Block sizes served from free lists; each is a power of two and doubles as the alignment."""


def list_index(layout: Layout) -> int | None:
    """Index of the smallest block size that fits ``layout``, or None if none does."""
    required = max(layout.size, layout.align)
    return next(
        (index for index, size in enumerate(BLOCK_SIZES) if size >= required),
        None,
    )


class FixedSizeBlockAllocator:
    """Serves small blocks from per-size free lists and larger ones from a fallback."""

    def __init__(self) -> None:
        self._free_blocks: list[list[int]] = [[] for _ in BLOCK_SIZES]
        self.fallback_allocator = LinkedListAllocator()

    def init(self) -> None:
        """Map the heap used by the fallback allocator."""
        self.fallback_allocator.init()

    def alloc(self, layout: Layout) -> int:
        """Return the address of a block fitting ``layout``."""
        index = list_index(layout)
        if index is None:
            return self.fallback_allocator.alloc(layout)
        free = self._free_blocks[index]
        if free:
            return free.pop()
        block_size = BLOCK_SIZES[index]
        return self.fallback_allocator.alloc(Layout(block_size, block_size))

    def dealloc(self, address: int, layout: Layout) -> None:
        """Put a block back on its size's free list, or return it to the fallback."""
        index = list_index(layout)
        if index is None:
            self.fallback_allocator.dealloc(address, layout)
        else:
            self._free_blocks[index].append(address)

    def bytes_allocated(self) -> int:
        """Heap bytes held neither on the block free lists nor by the fallback's free list."""
        fixed_free = sum(
            size * len(blocks) for size, blocks in zip(BLOCK_SIZES, self._free_blocks)
        )
        return HEAP_SIZE - (fixed_free + self.fallback_allocator.free_bytes())