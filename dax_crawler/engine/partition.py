"""Split identifier sets into worker partitions and request groups."""

from __future__ import annotations

from typing import Sequence

from ..errors import ConfigurationError


def partition(identifiers: Sequence[str], parts: int) -> list[list[str]]:
    """Split ``identifiers`` into ``parts`` ordered slices.

    Slice sizes differ by at most one; the first ``len(identifiers) % parts``
    slices carry the extra element. Slices may be empty when there are fewer
    identifiers than parts.
    """

    if parts < 1:
        raise ConfigurationError(f"parallelism must be >= 1, got {parts}")
    items = list(identifiers)
    base, extra = divmod(len(items), parts)
    slices: list[list[str]] = []
    start = 0
    for index in range(parts):
        size = base + (1 if index < extra else 0)
        slices.append(items[start : start + size])
        start += size
    return slices


def non_empty_partitions(identifiers: Sequence[str], parts: int) -> list[list[str]]:
    return [part for part in partition(identifiers, parts) if part]


def chunk(identifiers: Sequence[str], size: int) -> list[list[str]]:
    """Group identifiers into request-sized batches; the last one may be smaller."""

    if size < 1:
        raise ConfigurationError(f"request group size must be >= 1, got {size}")
    items = list(identifiers)
    return [items[i : i + size] for i in range(0, len(items), size)]


__all__ = ["chunk", "non_empty_partitions", "partition"]
