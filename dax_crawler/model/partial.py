"""Partial views on a stock's raw data."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Iterable, Iterator


class Partial:
    """Information about one aspect of a stock (prices, screener, events ...)."""

    def __init__(self, data: Any) -> None:
        self.data = data

    def available(self) -> bool:
        return bool(self.data)

    def age_in_days(self) -> int | None:
        return self.diff_in_days(datetime.now())

    def __getitem__(self, key: str) -> Any:
        try:
            value = getattr(self, key)
            return value() if callable(value) else value
        except Exception:  # noqa: BLE001
            return None

    def exec(self, func: Callable[..., Any], stock: Any = None) -> Any:
        return func(self, stock)

    # ------------------------------------------------------------------
    def prune(self, obj: Any) -> Any:
        """Drop ``None`` entries; return ``None`` when nothing is left."""

        if not self.available():
            return None
        if isinstance(obj, list):
            if all(item is None for item in obj):
                obj = []
        elif isinstance(obj, dict):
            obj = {k: v for k, v in obj.items() if v is not None}
        return obj if obj else None

    def diff_in_days(self, value: Any) -> int | None:
        if not self.available() or value is None:
            return None
        if isinstance(value, (int, float)):
            day = datetime.fromtimestamp(value).date()
        elif isinstance(value, str):
            day = datetime.fromisoformat(value).date()
        elif isinstance(value, datetime):
            day = value.date()
        elif isinstance(value, date):
            day = value
        else:
            return None
        return (date.today() - day).days

    @staticmethod
    def validate_price(value: Any) -> Any:
        return value if value and value > 0 else None


class MultiPartial(Partial):
    """1:n association between a stock and items such as events."""

    def __init__(self, data: Iterable[Any] | None, partial_class: type[Partial]) -> None:
        items = (partial_class(item) for item in (data or []))
        self.items = [item for item in items if item.available()]
        super().__init__(data)

    def __iter__(self) -> Iterator[Partial]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def available(self) -> bool:
        return bool(self.items)

    def __getitem__(self, key: str) -> list[Any]:
        return [item[key] for item in self.items]

    def exec(self, func: Callable[..., Any], stock: Any = None) -> list[Any]:
        return [item.exec(func, stock) for item in self.items]


__all__ = ["MultiPartial", "Partial"]
