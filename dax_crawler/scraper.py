"""Scraper: bulk-fetch stock data for a list of ISINs across configured fields.

Example::

    rules = UrlRuleRegistry()

    @rules.register()
    def any_field(ctx, field, isin):
        return f"{ctx.base_url}/{field}/{isin}"

    config = ScraperConfig(base_url="https://example.com/api", content_type="json")
    Scraper(config, rules).fields("PriceV1").run(["US30303M1027"])
"""

from __future__ import annotations

from typing import Callable, Sequence

import structlog

from .config import ScraperConfig
from .engine.exporter import BaseExporter, DropBoxExporter, SQLiteExporter
from .engine.fetcher import RequestEngine, RequestSpec, TransportFactory
from .engine.partition import chunk
from .engine.processor import ResponseProcessor
from .engine.urls import UrlBuilder, UrlContext, UrlRuleRegistry
from .gear import BatchJob, Gear
from .infra import ProxyRotator
from .logging_conf import worker_logger
from .model import RawSerializer, Serializer, Stock

SQLITE_FILENAME = "stocks.db"


class Scraper:
    """Composition root wiring config, URL rules, entity model and the gear."""

    def __init__(
        self,
        config: ScraperConfig | None = None,
        rules: UrlRuleRegistry | None = None,
        stock_class: type[Stock] = Stock,
        serializer_class: type[Serializer] | None = None,
        exporter_factory: Callable[[], BaseExporter] | None = None,
        transport_factory: TransportFactory | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config or ScraperConfig()
        self.rules = rules or UrlRuleRegistry()
        self.stock_class = stock_class
        self.serializer_class = serializer_class or RawSerializer
        self.exporter_factory = exporter_factory
        self.transport_factory = transport_factory
        self.logger = logger or structlog.get_logger("dax_crawler.scraper")
        self.proxies = ProxyRotator(self.config.proxies)
        self.url_builder = UrlBuilder(
            self.rules,
            UrlContext(base_url=self.config.base_url),
            group_size=self.config.request_group_size,
        )
        self.gear = Gear(self.config, self.scrape, logger=self.logger)

    def fields(self, *names: str) -> "Scraper":
        """Return a scraper for the same setup fetching ``names`` by default."""

        flat: list[str] = []
        for name in names:
            flat.extend([name] if isinstance(name, str) else list(name))
        return self.with_config(self.config.with_overrides(fields=tuple(flat)))

    def with_config(self, config: ScraperConfig) -> "Scraper":
        return Scraper(
            config,
            self.rules,
            stock_class=self.stock_class,
            serializer_class=self.serializer_class,
            exporter_factory=self.exporter_factory,
            transport_factory=self.transport_factory,
            logger=self.logger,
        )

    def run(self, identifiers: Sequence[str], fields: Sequence[str] | None = None) -> int:
        """Scrape ``identifiers`` and return the number of persisted stocks.

        Raises ``ConfigurationError`` (e.g. ``MissingUrlRule``) before any
        request is made; network and data problems only lower the count.
        """

        selected = tuple(fields) if fields is not None else self.config.fields
        self.rules.validate(selected)
        if not identifiers:
            return 0
        if not selected:
            self.logger.warning("no_fields_selected", identifiers=len(identifiers))
        if self.exporter_factory is None:
            self.config.drop_box.mkdir(parents=True, exist_ok=True)
        return self.gear.run_batch(identifiers, selected)

    # ------------------------------------------------------------------
    def requests_for(self, job: BatchJob, rotator: ProxyRotator) -> list[RequestSpec]:
        groups = chunk(job.identifiers, self.config.request_group_size)
        urls = self.url_builder.urls_for_groups(groups, job.fields)
        return [RequestSpec(url, self.config.request_timeout, rotator.next()) for url in urls]

    def scrape(self, job: BatchJob) -> int:
        """Worker body: fetch every (group, field) URL of ``job`` and count stocks."""

        logger = worker_logger(job.index)
        specs = self.requests_for(job, self.proxies.fork())
        logger.debug("requests_built", requests=len(specs))
        with self.open_exporter() as exporter:
            processor = ResponseProcessor(
                self.config.content_type, self.stock_class, exporter.persist, logger=logger
            )
            engine = RequestEngine(
                job.concurrency,
                processor,
                transport_factory=self.transport_factory,
                headers=self.config.headers,
                logger=logger,
            )
            engine.run(specs)
        return processor.count

    def open_exporter(self) -> BaseExporter:
        if self.exporter_factory is not None:
            return self.exporter_factory()
        serializer = self.serializer_class()
        if self.config.output_format == "sqlite":
            return SQLiteExporter(self.config.drop_box / SQLITE_FILENAME, serializer)
        return DropBoxExporter(self.config.drop_box, serializer)


__all__ = ["Scraper"]
