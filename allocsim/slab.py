"""Page-backed slabs of equal-sized slots and a cache that routes between them."""

from __future__ import annotations

from allocsim.layout import PAGE_SIZE, map_region, unmap_region

NODE_SIZE = 8
"""Bytes a free-list node occupies; the smallest slot a slab hands out."""


class Slab:
    """One page divided into equal slots, handed out from a free list."""

    def __init__(self, object_size: int) -> None:
        if object_size < 0:
            raise ValueError(f"object size must not be negative, got {object_size}")
        if object_size >= PAGE_SIZE:
            raise ValueError("Cannot allocate memory for types larger than OS page size")
        self.object_size = object_size
        self._base = map_region(PAGE_SIZE)
        self._stride = max(object_size, NODE_SIZE)
        self._num_slots = PAGE_SIZE // self._stride
        # The free list is a stack; the lowest slot sits on top so it is handed out first.
        self._free = [
            self._base + slot * self._stride for slot in reversed(range(self._num_slots))
        ]
        self.used = 0
        self._released = False

    def __enter__(self) -> Slab:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def is_full(self) -> bool:
        """True when every slot is in use."""
        return self.used >= self._num_slots

    def is_empty(self) -> bool:
        """True when no slot is in use."""
        return self.used == 0

    def num_slots(self) -> int:
        """Number of slots the page holds."""
        return self._num_slots

    def start_addr(self) -> int:
        """Base address of the page backing this slab."""
        return self._base

    def contains(self, address: int) -> bool:
        """True if ``address`` falls within this slab's page."""
        return self._base <= address < self._base + PAGE_SIZE

    def alloc(self) -> int | None:
        """Take a free slot and return its address, or None if the slab is full."""
        if not self._free:
            return None
        self.used += 1
        return self._free.pop()

    def dealloc(self, address: int) -> None:
        """Return the slot at ``address`` to the free list."""
        if not self.contains(address):
            raise ValueError(f"address {address:#x} does not belong to this slab")
        if self.used == 0:
            raise ValueError("dealloc called on a slab with no slots in use")
        self._free.append(address)
        self.used -= 1

    def release(self) -> None:
        """Unmap the page backing this slab."""
        unmap_region(self._base, PAGE_SIZE)
        self._released = True


class SlabCache:
    """Allocates objects of one size from slabs kept on full, partial and empty lists."""

    def __init__(self, object_size: int) -> None:
        self.object_size = object_size
        self.full: list[Slab] = []
        self.empty: list[Slab] = []
        self.partial: list[Slab] = []

    def alloc(self) -> int:
        """Return the address of a fresh slot, preferring partial, then empty slabs."""
        if self.partial:
            slab = self.partial.pop()
        elif self.empty:
            slab = self.empty.pop()
        else:
            slab = Slab(self.object_size)
        address = slab.alloc()
        if address is None:
            raise RuntimeError("slab taken from a non-full list had no free slot")
        if slab.is_full():
            self.full.append(slab)
        else:
            self.partial.append(slab)
        return address

    def dealloc(self, address: int) -> None:
        """Free the slot at ``address`` and move its slab to the list it now belongs on."""
        slab = (
            self._remove_containing(self.partial, address)
            or self._remove_containing(self.full, address)
            or self._remove_containing(self.empty, address)
        )
        if slab is None:
            raise ValueError("pointer not owned by this cache")
        slab.dealloc(address)
        if slab.is_empty():
            self.empty.append(slab)
        else:
            self.partial.append(slab)

    @staticmethod
    def _remove_containing(slabs: list[Slab], address: int) -> Slab | None:
        for index in reversed(range(len(slabs))):
            if slabs[index].contains(address):
                return slabs.pop(index)
        return None