import pytest

from allocsim.buddy import BuddyAllocator
from allocsim.layout import HEAP_SIZE, AllocError, Layout
from allocsim.locked import Locked

ITERATIONS = 20_000
HALF = HEAP_SIZE // 2
WORD = Layout(8, 8)


@pytest.fixture
def buddy():
    return BuddyAllocator(64, 14)


def _bounce(target, layout, rounds):
    """Alloc-then-free ``rounds`` times; the addresses handed out, in order."""
    handed_out = []
    for _ in range(rounds):
        handed_out.append(target.alloc(layout))
        target.dealloc(handed_out[-1], layout)
    return handed_out


@pytest.mark.parametrize(
    "size, align, expected",
    [
        (1, 1, 0),
        (64, 8, 0),
        (65, 1, 1),
        (8, 4096, 6),
        (8000, 8, 7),
        (HALF, 8, 13),
        (HALF + 1, 1, None),
    ],
)
def test_orders_index(buddy, size, align, expected):
    assert buddy.orders_index(Layout(size, align)) == expected


def test_simple_allocation(buddy):
    shared = Locked(buddy)
    assert shared.alloc(Layout(4, 4)) == buddy.heap_start + HALF
    assert shared.bytes_allocated() == 64


def test_split_hands_out_adjacent_buddies(buddy):
    first = buddy.alloc(WORD)
    assert buddy.alloc(WORD) == first + 64


def test_dealloc_merges_back_to_full_heap(buddy):
    addresses = [buddy.alloc(WORD) for _ in range(5)]
    assert buddy.bytes_allocated() == 5 * 64
    for address in addresses:
        buddy.dealloc(address, WORD)
    assert buddy.bytes_allocated() == 0


def test_large_vec(buddy):
    layout = Layout(8000, 8)
    address = buddy.alloc(layout)
    assert (address - buddy.heap_start) % 8192 == 0
    assert buddy.bytes_allocated() == 8192
    buddy.dealloc(address, layout)
    assert buddy.bytes_allocated() == 0


def test_aligned_request(buddy):
    assert buddy.alloc(Layout(8, 4096)) % 4096 == 0


def test_many_boxes(buddy):
    shared = Locked(buddy)
    first = _bounce(shared, WORD, 1)[0]
    assert set(_bounce(shared, WORD, ITERATIONS)) == {first}
    assert shared.bytes_allocated() == 0


def test_many_boxes_long_lived(buddy):
    shared = Locked(buddy)
    long_lived = shared.alloc(WORD)
    assert long_lived not in _bounce(shared, WORD, ITERATIONS)
    assert shared.bytes_allocated() == 64
    shared.dealloc(long_lived, WORD)
    assert shared.bytes_allocated() == 0


def test_heap_exhaustion(buddy):
    halves = {buddy.alloc(Layout(HALF, 8)) for _ in range(2)}
    assert halves == {buddy.heap_start, buddy.heap_start + HALF}
    with pytest.raises(AllocError):
        buddy.alloc(WORD)


def test_request_larger_than_top_order(buddy):
    with pytest.raises(AllocError):
        buddy.alloc(Layout(HALF + 1, 8))


def test_dealloc_unallocatable_layout(buddy):
    buddy.init()
    with pytest.raises(ValueError):
        buddy.dealloc(buddy.heap_start, Layout(HEAP_SIZE, 8))


def test_mismatched_orders_rejected():
    with pytest.raises(ValueError):
        BuddyAllocator(64, 13).init()


def test_min_block_size_must_be_power_of_two():
    with pytest.raises(ValueError):
        BuddyAllocator(48, 14)


def test_init_leaves_heap_free(buddy):
    buddy.init()
    assert buddy.initialized
    assert buddy.bytes_allocated() == 0