"""A mutual-exclusion wrapper that makes an allocator safe to share between threads."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from allocsim.layout import Layout

A = TypeVar("A")
R = TypeVar("R")


class Locked(Generic[A]):
    """Holds a value and hands it out to one thread at a time."""

    def __init__(self, inner: A) -> None:
        self._inner = inner
        self._mutex = threading.Lock()

    @contextmanager
    def lock(self) -> Iterator[A]:
        """Block until the value is free, then yield it for exclusive use."""
        with self._mutex:
            yield self._inner

    def _apply(self, action: Callable[[A], R]) -> R:
        with self.lock() as inner:
            return action(inner)

    def alloc(self, layout: Layout) -> int:
        """Allocate through the wrapped allocator while holding the lock."""
        return self._apply(lambda inner: inner.alloc(layout))

    def dealloc(self, address: int, layout: Layout) -> None:
        """Free through the wrapped allocator while holding the lock."""
        self._apply(lambda inner: inner.dealloc(address, layout))

    def bytes_allocated(self) -> int:
        """Report the wrapped allocator's usage while holding the lock."""
        return self._apply(lambda inner: inner.bytes_allocated())