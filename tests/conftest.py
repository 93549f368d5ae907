"""Shared fixtures: session configs, URL rules and stub transports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from dax_crawler.config import ConfigLocator, ConfigRepository, ScraperConfig
from dax_crawler.engine.urls import UrlRuleRegistry

API_BASE = "http://stocks.test/api"


def isin_from(request: httpx.Request) -> str:
    return request.url.path.rstrip("/").rsplit("/", 1)[-1]


def json_stock(request: httpx.Request) -> httpx.Response:
    """Answer every request with a JSON record for the requested ISIN."""

    return httpx.Response(200, json={"isin": isin_from(request), "name": "Stock"})


def transport_for(handler: Callable[[httpx.Request], Any]) -> Callable[[str | None], httpx.MockTransport]:
    return lambda _proxy: httpx.MockTransport(handler)


@pytest.fixture
def config_factory(tmp_path: Path) -> Callable[..., ScraperConfig]:
    def _builder(**overrides: Any) -> ScraperConfig:
        base: dict[str, Any] = {
            "base_url": API_BASE,
            "content_type": "json",
            "fields": ("PriceV1",),
            "drop_box": tmp_path / "stocks",
            "request_timeout": 5,
            "process_timeout": 10,
        }
        base.update(overrides)
        return ScraperConfig(**base)

    return _builder


@pytest.fixture
def rules() -> UrlRuleRegistry:
    registry = UrlRuleRegistry()

    @registry.register()
    def _any_field(ctx, field, target):
        ids = target if isinstance(target, str) else ",".join(target)
        return f"{ctx.base_url}/{field}/{ids}"

    return registry


@pytest.fixture
def drop_box_entries(tmp_path: Path) -> Callable[[], list[dict]]:
    def _entries() -> list[dict]:
        return [
            json.loads(path.read_text(encoding="utf-8"))
            for path in sorted((tmp_path / "stocks").glob("*.json"))
        ]

    return _entries


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("DAX_CRAWLER_HOME", str(tmp_path))
    return ConfigRepository(ConfigLocator(project_root=tmp_path))
