"""Round-robin proxy rotation over a fixed, shuffled endpoint list."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Iterable, Optional


class ProxyRotator:
    """Circular proxy provider.

    The endpoint list is shuffled once and never mutated afterwards, so
    rotators handed to different workers can share it; each rotator keeps its
    own cursor.
    """

    def __init__(self, proxies: Iterable[str] | None = None, shuffle: bool = True) -> None:
        endpoints = [p.strip() for p in (proxies or ()) if p and p.strip()]
        if shuffle:
            random.shuffle(endpoints)
        self._proxies: tuple[str, ...] = tuple(endpoints)
        self._index = 0

    @classmethod
    def from_file(cls, file_path: Path, shuffle: bool = True) -> "ProxyRotator":
        lines: list[str] = []
        if file_path.exists():
            lines = file_path.read_text(encoding="utf-8").splitlines()
        return cls(lines, shuffle=shuffle)

    @property
    def empty(self) -> bool:
        return not self._proxies

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self._proxies

    def next(self) -> Optional[str]:
        if not self._proxies:
            return None
        proxy = self._proxies[self._index % len(self._proxies)]
        self._index += 1
        return proxy

    def fork(self) -> "ProxyRotator":
        """Return a rotator over the same endpoints with a fresh cursor."""

        clone = ProxyRotator.__new__(ProxyRotator)
        clone._proxies = self._proxies
        clone._index = 0
        return clone

    def __len__(self) -> int:
        return len(self._proxies)


__all__ = ["ProxyRotator"]
