import pytest

from allocsim.bench import (
    bench_long_lived,
    bench_many_small,
    bench_mixed_sizes,
    main,
)
from allocsim.buddy import BuddyAllocator
from allocsim.bump import BumpAllocator
from allocsim.linked_list import LinkedListAllocator
from allocsim.locked import Locked


@pytest.mark.parametrize(
    "bench, make_allocator, label, name, iterations",
    [
        (bench_many_small, lambda: BuddyAllocator(64, 14), "buddy", "many_small", 200),
        (bench_long_lived, BumpAllocator, "bump", "long_lived", 100),
        (bench_mixed_sizes, LinkedListAllocator, "ll", "mixed_sizes", 40),
    ],
)
def test_benchmark_reports_and_frees_everything(
    bench, make_allocator, label, name, iterations, capsys
):
    allocator = Locked(make_allocator())
    elapsed = bench(allocator, label, iterations)
    assert capsys.readouterr().out.startswith(f"{label}: {name} took ")
    assert elapsed >= 0
    assert allocator.bytes_allocated() == 0


def test_main_runs_all_benchmarks(capsys):
    assert main(["--iterations", "50"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split(" took ")[0] for line in lines] == [
        "allocator: many_small",
        "allocator: long_lived",
        "allocator: mixed_sizes",
    ]


@pytest.mark.parametrize("name", ["buddy", "bump", "fixed-size-block", "linked-list"])
def test_main_accepts_every_allocator(name, capsys):
    assert main(["--allocator", name, "--iterations", "20"]) == 0
    assert len(capsys.readouterr().out.splitlines()) == 3


@pytest.mark.parametrize(
    "argv",
    [["--allocator", "nonexistent"], ["--iterations", "-1"]],
)
def test_main_rejects_bad_arguments(argv):
    with pytest.raises(SystemExit):
        main(argv)