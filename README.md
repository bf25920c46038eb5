# allocsim

Memory allocators modelled over a simulated address space. Every allocator
hands out integer addresses inside a heap region. You can study the
allocation strategies and their bookkeeping this way without touching real memory.

## Allocators

- `allocsim.bump.BumpAllocator` moves a pointer forward for each allocation.
  It rewinds to the start of the heap once every allocation has been freed.
- `allocsim.linked_list.LinkedListAllocator` allocates first-fit from a list
  of free regions. The list is sorted by address, and adjacent free regions
  are merged on release.
- `allocsim.fixed_size_block.FixedSizeBlockAllocator` keeps a free list for
  each block size: 8, 16, 32, 64, 128, 256, 512, 1024 and 2048 bytes. It gets
  new blocks, and anything larger than 2048 bytes, from a `LinkedListAllocator`.
- `allocsim.buddy.BuddyAllocator(min_block_size=64, orders=14)` hands out
  power-of-two blocks. It splits larger blocks on allocation and merges a
  freed block with its buddy for as long as the buddy is free.
  `min_block_size << orders` must equal the heap size.
- `allocsim.slab.Slab(object_size)` is one page divided into equal slots.
  `allocsim.slab.SlabCache(object_size)` keeps slabs on `full`, `partial` and
  `empty` lists and moves each slab between them as slots are taken and freed.

The heap allocators (bump, linked list, fixed-size block and buddy) have these
methods in common:

- `alloc(layout)` returns an address. It maps the heap on first use.
- `dealloc(address, layout)` frees a block.
- `bytes_allocated()` reports how much of the heap is in use.

Each of them manages a heap of `allocsim.layout.HEAP_SIZE` bytes (1 MiB).

When a request cannot be met, the allocator raises `allocsim.layout.AllocError`,
which is a subclass of `MemoryError`.

`allocsim.locked.Locked` wraps any heap allocator so that several threads can
share it. It offers the same `alloc`, `dealloc` and `bytes_allocated` methods,
and `lock()` is a context manager that yields the wrapped allocator.

`allocsim.layout` also provides the following:

- `Layout(size, align)` with `align_to` and `pad_to_align`.
- `align_up(addr, align)`.
- `map_region(size)` and `unmap_region(base, size)`, which hand out page-aligned
  ranges of the simulated address space. The page size is `PAGE_SIZE`, 4 KiB.

## Example

```python
from allocsim.buddy import BuddyAllocator
from allocsim.layout import Layout
from allocsim.locked import Locked

heap = Locked(BuddyAllocator(64, 14))
layout = Layout(size=8, align=8)
address = heap.alloc(layout)
print(heap.bytes_allocated())   # 64
heap.dealloc(address, layout)
print(heap.bytes_allocated())   # 0
```

Slab caches take an object size instead of a layout:

```python
from allocsim.slab import SlabCache

cache = SlabCache(2048)          # two slots per 4 KiB page
first = cache.alloc()
second = cache.alloc()           # the slab is now on cache.full
cache.dealloc(first)
cache.dealloc(second)            # the slab is now on cache.empty
```

A `Slab` can also be used as a context manager. It unmaps its page on exit.

## Benchmarks

`allocsim-bench` times three allocation patterns against one allocator wrapped
in `Locked`:

- many small allocations,
- a long-lived allocation held alongside short-lived ones,
- mixed sizes of 1, 4, 256 and 2048 bytes.

```
allocsim-bench
allocsim-bench --allocator linked-list --iterations 10000
```

`--allocator` takes one of `buddy` (the default), `bump`, `fixed-size-block`
or `linked-list`. `--iterations` defaults to 100000.

The same benchmarks can be called from Python:

- `allocsim.bench.bench_many_small(allocator, label, iterations)`
- `allocsim.bench.bench_long_lived(allocator, label, iterations)`
- `allocsim.bench.bench_mixed_sizes(allocator, label, iterations)`

Each one prints its timing and returns the seconds taken.

## What it does not do

The allocators only keep track of addresses. No memory is reserved, read or
written behind those addresses, and the package cannot be installed as the
memory allocator of a running Python process.

## Tests

```
pip install -e ".[test]"
pytest
```