"""Field to URL rules and the builder that applies them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, Union

from ..errors import MissingUrlRule

Target = Union[str, Sequence[str]]
UrlRule = Callable[["UrlContext", "str | None", Target], "str | None"]


@dataclass(frozen=True, slots=True)
class UrlContext:
    """Read-only session values a rule may use to build its URL."""

    base_url: str = ""


class UrlRuleRegistry:
    """Field-specific URL rules plus an optional default rule.

    Rules are registered with :meth:`register`; passing no field registers the
    default rule used for every field without its own rule::

        rules = UrlRuleRegistry()

        @rules.register()
        def any_field(ctx, field, isin):
            return f"{ctx.base_url}/{field}/{isin}"
    """

    def __init__(self) -> None:
        self._rules: dict[str | None, UrlRule] = {}

    def add(self, field: str | None, rule: UrlRule) -> "UrlRuleRegistry":
        if not callable(rule):
            raise TypeError("URL rule must be callable")
        self._rules[field] = rule
        return self

    def register(self, field: str | None = None) -> Callable[[UrlRule], UrlRule]:
        def decorator(rule: UrlRule) -> UrlRule:
            self.add(field, rule)
            return rule

        return decorator

    @property
    def default(self) -> UrlRule | None:
        return self._rules.get(None)

    def specs(self) -> dict[str | None, UrlRule]:
        return dict(self._rules)

    def resolve(self, field: str | None) -> UrlRule:
        rule = self._rules.get(field) or self._rules.get(None)
        if rule is None:
            raise MissingUrlRule(field)
        return rule

    def validate(self, fields: Iterable[str]) -> None:
        for field in fields:
            self.resolve(field)


class UrlBuilder:
    """Map (field, identifier group) pairs to request URLs."""

    def __init__(
        self,
        rules: UrlRuleRegistry,
        context: UrlContext | None = None,
        group_size: int = 1,
    ) -> None:
        self.rules = rules
        self.context = context or UrlContext()
        self.group_size = group_size

    def urls_for(self, group: Sequence[str], fields: Iterable[str]) -> list[str]:
        target: Target = group[0] if self.group_size == 1 else list(group)
        urls: list[str] = []
        for field in fields:
            url = self.rules.resolve(field)(self.context, field, target)
            if url and url not in urls:
                urls.append(url)
        return urls

    def urls_for_groups(self, groups: Iterable[Sequence[str]], fields: Sequence[str]) -> list[str]:
        urls: list[str] = []
        seen: set[str] = set()
        for group in groups:
            for url in self.urls_for(group, fields):
                if url not in seen:
                    seen.add(url)
                    urls.append(url)
        return urls


__all__ = ["Target", "UrlBuilder", "UrlContext", "UrlRule", "UrlRuleRegistry"]
