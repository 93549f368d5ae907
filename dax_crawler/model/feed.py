"""Declarative feeds mapping stock partials to named kpis."""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Mapping, Sequence

KpiFunc = Callable[[Any, Any], Any]


def kpi(name: str | None = None, *, source: str | None = None) -> Callable[[KpiFunc], KpiFunc]:
    """Mark a function as a complex kpi evaluated against ``stock.<source>``.

    The function receives ``(partial, stock)``; without ``source`` the partial
    is the stock itself. The kpi name defaults to the function name.
    """

    def decorator(func: KpiFunc) -> KpiFunc:
        func._kpi = (name or func.__name__, source)  # type: ignore[attr-defined]
        return func

    return decorator


class Feed:
    """Base class for stock feeds.

    A feed is made of meta tags, simple 1:1 kpis copied from partials and
    complex kpis computed by decorated functions::

        class ScreenerFeed(Feed):
            age_from = "screener"
            meta = {"currency": lambda stock: "EUR"}
            kpis_from = {"screener": ("per", "risk", "interest")}

            @kpi(source="risk")
            def volatility(partial, stock):
                return partial.volatility(1)
    """

    age_from: ClassVar[str | None] = None
    meta: ClassVar[Mapping[str, Callable[[Any], Any]]] = {}
    kpis_from: ClassVar[Mapping[str, Sequence[str]]] = {}
    complex_kpis: ClassVar[dict[str, tuple[str | None, KpiFunc]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        nodes = dict(cls.complex_kpis)
        for attr, value in list(vars(cls).items()):
            marker = getattr(value, "_kpi", None)
            if marker is None:
                continue
            name, source = marker
            nodes[name] = (source, value)
            # keep the plain function out of method binding
            setattr(cls, attr, staticmethod(value))
        cls.complex_kpis = nodes

    @classmethod
    def feed_name(cls) -> str:
        name = cls.__name__
        if name.endswith("Feed") and len(name) > len("Feed"):
            name = name[: -len("Feed")]
        return name.lower()

    def generate(self, stock: Any, source: str | None) -> dict[str, Any] | None:
        kpis = self.kpis(stock)
        if not kpis:
            return None
        meta = self.metas(stock)
        meta.update(source=source, feed=self.feed_name())
        kpis["meta"] = meta
        return kpis

    # ------------------------------------------------------------------
    def age_in_days(self, stock: Any) -> Any:
        if not self.age_from:
            return None
        return getattr(stock, self.age_from).age_in_days()

    def metas(self, stock: Any) -> dict[str, Any]:
        nodes: dict[str, Any] = {"age": self.age_in_days(stock)}
        for name, func in self.meta.items():
            nodes[name] = func(stock)
        return nodes

    def kpis(self, stock: Any) -> dict[str, Any]:
        values = self.simple_kpis(stock)
        values.update(self.complex_kpis_for(stock))
        return values

    def simple_kpis(self, stock: Any) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name, keys in self.kpis_from.items():
            partial = getattr(stock, name)
            if not partial.available():
                continue
            for key in keys:
                _store(values, key, partial[key])
        return values

    def complex_kpis_for(self, stock: Any) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name, (scope, func) in self.complex_kpis.items():
            partial = getattr(stock, scope) if scope else stock
            if not partial.available():
                continue
            _store(values, name, partial.exec(func, stock))
        return values


class MultiFeed(Feed):
    """Feed over a multi partial; kpis are transposed into a list of items."""

    def generate(self, stock: Any, source: str | None) -> dict[str, Any] | None:
        feed = super().generate(stock, source)
        if not feed:
            return None
        meta = feed.pop("meta")
        columns = {k: v if isinstance(v, list) else [v] for k, v in feed.items()}
        size = len(next(iter(columns.values()))) if columns else 0
        items = [
            {k: v[i] for k, v in columns.items() if i < len(v) and _present(v[i])}
            for i in range(size)
        ]
        return {"items": items, "meta": {**meta, "multi": True}}


def _present(value: Any) -> bool:
    return value is not None and value is not False


def _store(values: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        values[key] = value


__all__ = ["Feed", "MultiFeed", "kpi"]
