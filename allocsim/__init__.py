"""Simulated memory allocators: bump, linked list, fixed-size block, buddy and slab."""

__version__ = "0.1.0"
__all__ = ["bench", "buddy", "bump", "fixed_size_block", "layout", "linked_list", "locked", "slab"]