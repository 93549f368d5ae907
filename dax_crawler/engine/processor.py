"""Response processing: records → stocks → persistence, with per-worker counting."""

from __future__ import annotations

from typing import Any, Callable, Protocol

import structlog

from ..config import ContentType
from .fetcher import FetchResponse
from .parser import parse_body


class Entity(Protocol):
    def available(self) -> bool: ...

    def identity(self) -> str | None: ...


EntityFactory = Callable[[Any, str], Entity]
Persist = Callable[[Entity], bool]


class ResponseProcessor:
    """Completion handler for the request engine.

    Each persisted stock is counted once per worker: identities already
    counted are still forwarded to ``persist`` but do not raise the count.
    """

    def __init__(
        self,
        content_type: ContentType | str,
        stock_factory: EntityFactory,
        persist: Persist,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.content_type = ContentType(content_type)
        self.stock_factory = stock_factory
        self.persist = persist
        self.logger = logger or structlog.get_logger("dax_crawler.processor")
        self.seen: set[str] = set()
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def __call__(self, response: FetchResponse) -> int:
        if not response.success:
            self.logger.warning(
                "request_failed",
                url=response.url,
                status=response.status_code,
                timed_out=response.timed_out,
                error=response.error,
            )
            return 0

        added = 0
        for record in parse_body(response, self.content_type, self.logger):
            stock = self.stock_factory(record, response.url)
            identity = stock.identity() if stock.available() else None
            if not identity:
                self.logger.debug("stock_skipped", url=response.url)
                continue
            if not self.persist(stock):
                continue
            if identity in self.seen:
                continue
            self.seen.add(identity)
            self._count += 1
            added += 1
            self.logger.debug("stock_persisted", url=response.url, identity=identity)
        return added


__all__ = ["Entity", "EntityFactory", "Persist", "ResponseProcessor"]
