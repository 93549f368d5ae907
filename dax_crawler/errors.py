"""Exceptions raised before a scrape session performs any I/O."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid scraper configuration detected at session start."""


class MissingUrlRule(ConfigurationError):
    """No field-specific or default URL rule is registered for a field."""

    def __init__(self, field: str | None) -> None:
        self.field = field
        super().__init__(f"Don't know how to build url for field {field!r}")


__all__ = ["ConfigurationError", "MissingUrlRule"]
