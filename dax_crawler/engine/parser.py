"""Turn completed responses into raw records according to the content type."""

from __future__ import annotations

import json
from typing import Any

import structlog
from selectolax.parser import HTMLParser

from ..config import ContentType
from .fetcher import FetchResponse


def parse_body(
    response: FetchResponse,
    content_type: ContentType | str,
    logger: structlog.BoundLogger | None = None,
) -> list[Any]:
    """Return the raw records carried by ``response``.

    Unsuccessful responses yield no records. JSON bodies that fail to parse
    yield no records either; HTML/XML parser errors propagate to the caller.
    """

    if not response.success:
        return []
    kind = ContentType(content_type)
    if kind is ContentType.JSON:
        try:
            data = parse_json(response.text)
        except ValueError as exc:
            (logger or structlog.get_logger("dax_crawler.parser")).warning(
                "response_parse_failed", url=response.url, error=str(exc)
            )
            return []
    elif kind in (ContentType.HTML, ContentType.XML):
        data = parse_html(response.text)
    else:
        data = response.text
    return data if isinstance(data, list) else [data]


def parse_json(text: str) -> Any:
    return json.loads(text)


def parse_html(text: str) -> HTMLParser:
    return HTMLParser(text)


__all__ = ["parse_body", "parse_html", "parse_json"]
