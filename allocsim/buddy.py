"""A binary buddy allocator over a fixed-size heap."""

from __future__ import annotations

from allocsim.layout import HEAP_SIZE, AllocError, Layout, align_up, map_region

NODE_SIZE = 8
"""Bytes a free-list node occupies; every free block must be able to hold one."""


def _is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def _next_power_of_two(value: int) -> int:
    return 1 if value <= 1 else 1 << (value - 1).bit_length()


def _trailing_zeros(value: int) -> int:
    return (value & -value).bit_length() - 1


class BuddyAllocator:
    """Splits power-of-two blocks on demand and merges freed buddies back together."""

    def __init__(self, min_block_size: int = 64, orders: int = 14) -> None:
        if not _is_power_of_two(min_block_size):
            raise ValueError(
                f"minimum block size must be a power of two, got {min_block_size}"
            )
        if orders < 1:
            raise ValueError(f"orders must be at least 1, got {orders}")
        self.min_block_size = min_block_size
        self.orders = orders
        self._free_lists: list[list[int]] = [[] for _ in range(orders)]
        self.heap_start = 0
        self.initialized = False

    def _block_size(self, order: int) -> int:
        return self.min_block_size << order

    def init(self) -> None:
        """Map the heap and place its two top-order halves on the free list."""
        if self.min_block_size << self.orders != HEAP_SIZE:
            raise ValueError("orders must equal log2(HEAP_SIZE / min_block_size)")
        self.heap_start = map_region(HEAP_SIZE)
        top = self.orders - 1
        self._add_free_block(self.heap_start, top)
        self._add_free_block(self.heap_start + HEAP_SIZE // 2, top)
        self.initialized = True

    def _add_free_block(self, address: int, order: int) -> None:
        if align_up(address, NODE_SIZE) != address:
            raise ValueError(f"block at {address:#x} is not {NODE_SIZE}-byte aligned")
        if self._block_size(order) < NODE_SIZE:
            raise ValueError("block too small to hold a free-list node")
        self._free_lists[order].append(address)

    def _split_block(self, order: int) -> int | None:
        if order >= self.orders:
            return None
        free = self._free_lists[order]
        if free:
            return free.pop()
        address = self._split_block(order + 1)
        if address is None:
            return None
        self._add_free_block(address + self._block_size(order), order)
        return address

    def orders_index(self, layout: Layout) -> int | None:
        """Order of the smallest block that fits ``layout``, or None if it is too large."""
        required = max(layout.size, layout.align, self.min_block_size)
        if required > self._block_size(self.orders - 1):
            return None
        return _trailing_zeros(_next_power_of_two(required)) - _trailing_zeros(
            self.min_block_size
        )

    def alloc(self, layout: Layout) -> int:
        """Return the address of a block fitting ``layout``, mapping the heap on first use."""
        if not self.initialized:
            self.init()
        order = self.orders_index(layout)
        if order is None:
            raise AllocError(f"request of {layout.size} bytes exceeds the largest block")
        address = self._split_block(order)
        if address is None:
            raise AllocError(f"no free block of order {order} or above")
        return address

    def dealloc(self, address: int, layout: Layout) -> None:
        """Free a block, merging it with its buddy for as long as the buddy is free."""
        order = self.orders_index(layout)
        if order is None:
            raise ValueError(f"layout of {layout.size} bytes was never allocatable")
        while order < self.orders - 1:
            size = self._block_size(order)
            buddy = self.heap_start + ((address - self.heap_start) ^ size)
            free = self._free_lists[order]
            if buddy not in free:
                break
            free.remove(buddy)
            address = min(address, buddy)
            order += 1
        self._add_free_block(address, order)

    def bytes_allocated(self) -> int:
        """Heap bytes not held on any free list."""
        free_bytes = sum(
            self._block_size(order) * len(blocks)
            for order, blocks in enumerate(self._free_lists)
        )
        return HEAP_SIZE - free_bytes