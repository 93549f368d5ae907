"""Entity wrapping the raw data fetched for one security."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable


class Stock:
    """One finance security built from a raw record and the URL it came from.

    The basic properties (``name``, ``wkn``, ``isin`` ...) return ``None``
    unless the raw record is a mapping carrying that key; subclasses override
    them for source-specific layouts::

        class ConsorsStock(Stock):
            @property
            def isin(self):
                return self.data["Info"]["ISIN"]
    """

    BASIC_PROPERTIES = ("name", "wkn", "isin", "branch", "sector", "country", "symbol", "currency")

    def __init__(self, data: Any, url: str | None = None) -> None:
        self.data = data
        self.url = url

    def _lookup(self, key: str) -> Any:
        if isinstance(self.data, Mapping):
            return self.data.get(key)
        return None

    @property
    def name(self) -> str | None:
        return self._lookup("name")

    @property
    def wkn(self) -> str | None:
        return self._lookup("wkn")

    @property
    def isin(self) -> str | None:
        return self._lookup("isin")

    @property
    def branch(self) -> str | None:
        return self._lookup("branch")

    @property
    def sector(self) -> str | None:
        return self._lookup("sector")

    @property
    def country(self) -> str | None:
        return self._lookup("country")

    @property
    def symbol(self) -> str | None:
        return self._lookup("symbol")

    @property
    def currency(self) -> str | None:
        return self._lookup("currency")

    def identity(self) -> str | None:
        return self.isin

    def available(self) -> bool:
        return self.data is not None and bool(self.isin)

    def exec(self, func: Callable[..., Any], stock: "Stock | None" = None) -> Any:
        return func(self, stock or self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(isin={self.isin!r}, url={self.url!r})"


__all__ = ["Stock"]
