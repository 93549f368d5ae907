from __future__ import annotations

from selectolax.parser import HTMLParser

from dax_crawler.config import ContentType
from dax_crawler.engine.fetcher import FetchResponse
from dax_crawler.engine.parser import parse_body
from dax_crawler.engine.processor import ResponseProcessor
from dax_crawler.model import Stock

URL = "http://stocks.test/api/PriceV1/US30303M1027"


def ok(text: str) -> FetchResponse:
    return FetchResponse(url=URL, status_code=200, text=text)


class HtmlStock(Stock):
    @property
    def isin(self):
        node = self.data.css_first("span.isin")
        return node.text() if node is not None else None


def test_parse_body_by_content_type() -> None:
    assert parse_body(ok('[{"isin": "A"}, {"isin": "B"}]'), "json") == [{"isin": "A"}, {"isin": "B"}]
    assert parse_body(ok('{"isin": "A"}'), ContentType.JSON) == [{"isin": "A"}]
    assert parse_body(ok("busy"), "json") == []
    assert parse_body(ok("busy"), "text") == ["busy"]
    records = parse_body(ok("<html><body>busy</body></html>"), "html")
    assert len(records) == 1 and isinstance(records[0], HTMLParser)
    assert isinstance(parse_body(ok("<stock/>"), "xml")[0], HTMLParser)


def test_parse_body_ignores_failed_responses() -> None:
    assert parse_body(FetchResponse(URL, 503, '{"isin": "A"}'), "json") == []
    assert parse_body(FetchResponse.failed(URL, "timeout", timed_out=True), "text") == []


def test_processor_counts_persisted_stocks() -> None:
    persisted: list[Stock] = []
    processor = ResponseProcessor("json", Stock, lambda stock: persisted.append(stock) or True)
    added = processor(ok('[{"isin": "A"}, {"isin": "B"}]'))
    assert added == 2
    assert processor.count == 2
    assert [stock.isin for stock in persisted] == ["A", "B"]
    assert all(stock.url == URL for stock in persisted)


def test_processor_forwards_but_does_not_recount_seen_identities() -> None:
    persisted: list[str] = []
    processor = ResponseProcessor("json", Stock, lambda stock: persisted.append(stock.isin) or True)
    processor(ok('{"isin": "A", "price": 1}'))
    processor(ok('{"isin": "A", "price": 2}'))
    assert processor.count == 1
    assert persisted == ["A", "A"]
    assert processor.seen == {"A"}


def test_processor_skips_stocks_without_identity() -> None:
    calls: list[Stock] = []
    processor = ResponseProcessor("json", Stock, lambda stock: calls.append(stock) or True)
    processor(ok('[{"name": "no isin"}, null, {"isin": ""}]'))
    assert processor.count == 0
    assert calls == []


def test_processor_only_counts_confirmed_writes() -> None:
    processor = ResponseProcessor("json", Stock, lambda stock: stock.isin != "B")
    processor(ok('[{"isin": "A"}, {"isin": "B"}]'))
    assert processor.count == 1
    assert processor.seen == {"A"}


def test_processor_ignores_failed_responses() -> None:
    processor = ResponseProcessor("text", Stock, lambda stock: True)
    assert processor(FetchResponse.failed(URL, "refused")) == 0
    assert processor(FetchResponse(URL, 500, "oops")) == 0
    assert processor.count == 0


def test_processor_with_html_documents() -> None:
    processor = ResponseProcessor("html", HtmlStock, lambda stock: True)
    processor(ok('<div><span class="isin">DE0007164600</span></div>'))
    processor(ok("<div>busy</div>"))
    assert processor.count == 1
    assert processor.seen == {"DE0007164600"}
