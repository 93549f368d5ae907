"""JSON serializer turning a stock and its feeds into one document."""

from __future__ import annotations

import json
import time
from typing import Any, ClassVar, Sequence

from .feed import Feed
from .stock import Stock


class Serializer:
    """Serialize stocks through the configured feeds.

    Feeds that produce nothing are left out; when no feed produces anything
    the stock is not serialized at all (``serialize`` returns ``None``) unless
    ``include_raw`` is set, in which case the raw record is embedded instead.
    """

    feeds: ClassVar[Sequence[type[Feed]]] = ()
    source: ClassVar[str | None] = None
    include_raw: ClassVar[bool] = False
    version: ClassVar[int] = 1

    def __init__(self) -> None:
        self._feeds = [feed_class() for feed_class in self.feeds if issubclass(feed_class, Feed)]

    def serialize(self, stock: Stock) -> str | None:
        analyses = [
            result
            for result in (feed.generate(stock, self.source) for feed in self._feeds)
            if result is not None
        ]
        if not analyses and not self.include_raw:
            return None
        data: dict[str, Any] = {
            "source": self.source,
            "created_at": int(time.time()),
            "version": self.version,
            "basic": self.basic_data(stock),
            "feeds": analyses,
        }
        if self.include_raw:
            data["url"] = stock.url
            data["raw"] = stock.data
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)

    @staticmethod
    def basic_data(stock: Stock) -> dict[str, Any]:
        basic = {prop: getattr(stock, prop) for prop in Stock.BASIC_PROPERTIES if prop != "currency"}
        basic["type"] = 1
        return {k: v for k, v in basic.items() if v is not None}


class RawSerializer(Serializer):
    """Serializer used when no feeds are configured: keeps the raw record."""

    source = "raw"
    include_raw = True


__all__ = ["RawSerializer", "Serializer"]
