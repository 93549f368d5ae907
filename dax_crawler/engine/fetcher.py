"""Bounded-concurrency HTTP request engine."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable

import httpx
import structlog

TransportFactory = Callable[["str | None"], httpx.AsyncBaseTransport]


@dataclass(frozen=True, slots=True)
class RequestSpec:
    """One outbound request: URL, per-request timeout and optional proxy."""

    url: str
    timeout: float
    proxy: str | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper handed to the response processor."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)
    error: str | None = None
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.error is None and not self.timed_out and 200 <= self.status_code < 300

    @classmethod
    def failed(cls, url: str, error: str, timed_out: bool = False) -> "FetchResponse":
        return cls(url=url, status_code=0, text="", error=error, timed_out=timed_out)


class RequestEngine:
    """Issue queued requests with at most ``concurrency`` of them in flight.

    Every request completes exactly once (success, timeout or transport
    error) and each completion is handed to ``on_complete`` from the drain
    loop. Failed requests are not retried.
    """

    def __init__(
        self,
        concurrency: int,
        on_complete: Callable[[FetchResponse], object],
        transport_factory: TransportFactory | None = None,
        headers: dict[str, str] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.concurrency = max(1, int(concurrency))
        self.on_complete = on_complete
        self.transport_factory = transport_factory
        self.headers = dict(headers or {})
        self.logger = logger or structlog.get_logger("dax_crawler.fetcher")

    def run(self, specs: Iterable[RequestSpec]) -> int:
        """Block until every request has completed; return the completion count."""

        queued = list(specs)
        if not queued:
            return 0
        return asyncio.run(self._drain(queued))

    # ------------------------------------------------------------------
    async def _drain(self, specs: list[RequestSpec]) -> int:
        semaphore = asyncio.Semaphore(self.concurrency)
        clients: dict[str | None, httpx.AsyncClient] = {}
        completed = 0
        try:
            tasks = [
                asyncio.create_task(self._issue(spec, semaphore, clients)) for spec in specs
            ]
            for task in asyncio.as_completed(tasks):
                response = await task
                self._dispatch(response)
                completed += 1
        finally:
            for client in clients.values():
                await client.aclose()
        return completed

    async def _issue(
        self,
        spec: RequestSpec,
        semaphore: asyncio.Semaphore,
        clients: dict[str | None, httpx.AsyncClient],
    ) -> FetchResponse:
        async with semaphore:
            try:
                client = self._client_for(spec.proxy, clients)
                response = await asyncio.wait_for(
                    client.get(spec.url, timeout=spec.timeout), timeout=spec.timeout
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                return FetchResponse.failed(spec.url, str(exc) or "timeout", timed_out=True)
            except httpx.HTTPError as exc:
                return FetchResponse.failed(spec.url, str(exc) or exc.__class__.__name__)
            except Exception as exc:  # noqa: BLE001
                # unusable proxy or client setup failure costs this request only
                self.logger.warning(
                    "request_setup_failed",
                    url=spec.url,
                    proxy=spec.proxy,
                    error=str(exc),
                    error_type=exc.__class__.__name__,
                )
                return FetchResponse.failed(spec.url, str(exc) or exc.__class__.__name__)
            return FetchResponse(
                url=str(response.url),
                status_code=response.status_code,
                text=response.text,
                headers=dict(response.headers),
            )

    def _client_for(
        self, proxy: str | None, clients: dict[str | None, httpx.AsyncClient]
    ) -> httpx.AsyncClient:
        client = clients.get(proxy)
        if client is None:
            kwargs: dict = {"follow_redirects": True, "headers": self.headers or None}
            if self.transport_factory is not None:
                kwargs["transport"] = self.transport_factory(proxy)
            elif proxy:
                kwargs["proxy"] = proxy
            client = httpx.AsyncClient(**kwargs)
            clients[proxy] = client
        return client

    def _dispatch(self, response: FetchResponse) -> None:
        try:
            self.on_complete(response)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning(
                "response_processing_failed",
                url=response.url,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )


__all__ = ["FetchResponse", "RequestEngine", "RequestSpec", "TransportFactory"]
