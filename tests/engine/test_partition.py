from __future__ import annotations

import pytest

from dax_crawler.engine.partition import chunk, non_empty_partitions, partition
from dax_crawler.errors import ConfigurationError


@pytest.mark.parametrize("parts", [1, 2, 3, 5, 8])
@pytest.mark.parametrize("size", [0, 1, 2, 7, 10, 23])
def test_partition_sizes_balanced_and_complete(size: int, parts: int) -> None:
    identifiers = [f"ISIN{i:04d}" for i in range(size)]
    slices = partition(identifiers, parts)
    assert len(slices) == parts
    lengths = [len(s) for s in slices]
    assert sum(lengths) == size
    assert max(lengths) - min(lengths) <= 1
    assert [item for s in slices for item in s] == identifiers


def test_first_partitions_carry_the_remainder() -> None:
    assert [len(s) for s in partition(list("abcdefg"), 3)] == [3, 2, 2]


def test_empty_partitions_are_skipped() -> None:
    assert non_empty_partitions(["a", "b"], 4) == [["a"], ["b"]]


def test_partition_rejects_zero_parts() -> None:
    with pytest.raises(ConfigurationError):
        partition(["a"], 0)


def test_chunk_keeps_final_smaller_group() -> None:
    assert chunk(list("abcde"), 2) == [["a", "b"], ["c", "d"], ["e"]]
    assert chunk(list("ab"), 5) == [["a", "b"]]
    assert chunk([], 3) == []


def test_chunk_rejects_invalid_group_size() -> None:
    with pytest.raises(ConfigurationError):
        chunk(["a"], 0)
