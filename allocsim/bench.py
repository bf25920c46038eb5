"""Timing benchmarks that drive an allocator through typical allocation patterns."""

from __future__ import annotations

import argparse
import time
from collections.abc import Callable, Iterable, Sequence
from itertools import cycle, islice, repeat
from typing import Protocol

from allocsim.buddy import BuddyAllocator
from allocsim.bump import BumpAllocator
from allocsim.fixed_size_block import FixedSizeBlockAllocator
from allocsim.layout import Layout
from allocsim.linked_list import LinkedListAllocator
from allocsim.locked import Locked

ITERATIONS = 100_000

_USIZE = Layout(8, 8)
_MIXED_LAYOUTS = (Layout(1, 1), Layout(4, 4), Layout(8 * 32, 8), Layout(8 * 256, 8))

_ALLOCATORS: dict[str, Callable[[], object]] = {
    "buddy": lambda: BuddyAllocator(64, 14),
    "bump": BumpAllocator,
    "fixed-size-block": FixedSizeBlockAllocator,
    "linked-list": LinkedListAllocator,
}


class _Allocator(Protocol):
    def alloc(self, layout: Layout) -> int: ...

    def dealloc(self, address: int, layout: Layout) -> None: ...


def _format_duration(seconds: float) -> str:
    for scale, unit, digits in ((1, "s", 6), (1e-3, "ms", 6), (1e-6, "µs", 3)):
        if seconds >= scale:
            return f"{seconds / scale:.{digits}f}{unit}"
    return f"{seconds * 1e9:.0f}ns"


def _timed(label: str, name: str, run: Callable[[], None]) -> float:
    start = time.perf_counter()
    run()
    elapsed = time.perf_counter() - start
    print(f"{label}: {name} took {_format_duration(elapsed)}")
    return elapsed


def _churn(allocator: _Allocator, layouts: Iterable[Layout]) -> None:
    for layout in layouts:
        allocator.dealloc(allocator.alloc(layout), layout)


def bench_many_small(
    allocator: _Allocator, label: str, iterations: int = ITERATIONS
) -> float:
    """Allocate and immediately free one word ``iterations`` times; return seconds taken."""
    return _timed(label, "many_small", lambda: _churn(allocator, repeat(_USIZE, iterations)))


def bench_long_lived(
    allocator: _Allocator, label: str, iterations: int = ITERATIONS
) -> float:
    """Like :func:`bench_many_small` while one word stays allocated throughout."""

    def run() -> None:
        long_lived = allocator.alloc(_USIZE)
        _churn(allocator, repeat(_USIZE, iterations))
        allocator.dealloc(long_lived, _USIZE)

    return _timed(label, "long_lived", run)


def bench_mixed_sizes(
    allocator: _Allocator, label: str, iterations: int = ITERATIONS
) -> float:
    """Cycle through 1, 4, 256 and 2048 byte allocations, freeing each at once."""
    layouts = islice(cycle(_MIXED_LAYOUTS), iterations)
    return _timed(label, "mixed_sizes", lambda: _churn(allocator, layouts))


def main(argv: Sequence[str] | None = None) -> int:
    """Run all three benchmarks against the chosen allocator."""
    parser = argparse.ArgumentParser(description="Benchmark a simulated allocator.")
    parser.add_argument(
        "--allocator",
        choices=sorted(_ALLOCATORS),
        default="buddy",
        help="allocator to benchmark (default: buddy)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=ITERATIONS,
        help=f"iterations per benchmark (default: {ITERATIONS})",
    )
    args = parser.parse_args(argv)
    if args.iterations < 0:
        parser.error("--iterations must not be negative")

    allocator = Locked(_ALLOCATORS[args.allocator]())
    for bench in (bench_many_small, bench_long_lived, bench_mixed_sizes):
        bench(allocator, "allocator", args.iterations)
    return 0