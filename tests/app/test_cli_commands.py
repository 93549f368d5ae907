from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from dax_crawler.app import app, default_rules
from dax_crawler.engine.urls import UrlContext


class StubScraper:
    instances: list["StubScraper"] = []

    def __init__(self, config, rules) -> None:
        self.config = config
        self.rules = rules
        self.calls: list[list[str]] = []
        StubScraper.instances.append(self)

    def run(self, isins) -> int:
        self.calls.append(list(isins))
        return len(isins)


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("DAX_CRAWLER_HOME", str(tmp_path))
    StubScraper.instances = []
    return tmp_path


def write_roles(home: Path, text: str) -> None:
    config_dir = home / "config"
    config_dir.mkdir()
    (config_dir / "scrape.yml").write_text(text, encoding="utf-8")


def test_run_passes_options_to_scraper(home, monkeypatch) -> None:
    monkeypatch.setattr("dax_crawler.app.Scraper", StubScraper)
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["run", "US30303M1027", "US0231351067", "-f", "PriceV1", "--parallel", "2", "--content-type", "json"],
    )
    assert result.exit_code == 0, result.stdout
    assert "Run summary" in result.stdout
    (scraper,) = StubScraper.instances
    assert scraper.calls == [["US30303M1027", "US0231351067"]]
    assert scraper.config.parallelism == 2
    assert scraper.config.fields == ("PriceV1",)
    assert scraper.config.content_type.value == "json"


def test_run_merges_role_file(home, monkeypatch) -> None:
    write_roles(
        home,
        "consors:\n"
        "  :fields: [':PriceV1', ':ScreenerV1']\n"
        "  parallel_requests: 3\n"
        "  base_url: http://stocks.test/api\n",
    )
    monkeypatch.setattr("dax_crawler.app.Scraper", StubScraper)
    result = CliRunner().invoke(app, ["run", "US30303M1027", "--role", "consors", "--parallel", "4"])
    assert result.exit_code == 0, result.stdout
    config = StubScraper.instances[0].config
    assert config.fields == ("PriceV1", "ScreenerV1")
    assert config.parallelism == 4
    assert config.base_url == "http://stocks.test/api"


def test_config_show_renders_role(home) -> None:
    write_roles(home, "consors:\n  parallel_requests: 3\n  stocks_per_request: 5\n")
    result = CliRunner().invoke(app, ["config", "show", "--role", "consors"])
    assert result.exit_code == 0, result.stdout
    assert "consors" in result.stdout
    assert "request_group_size" in result.stdout
    assert "parallelism" in result.stdout


def test_unknown_role_exits_with_configuration_error(home) -> None:
    write_roles(home, "consors: {}\n")
    result = CliRunner().invoke(app, ["config", "show", "--role", "missing"])
    assert result.exit_code == 2
    assert "Configuration error" in result.stdout


def test_invalid_option_exits_with_configuration_error(home) -> None:
    result = CliRunner().invoke(app, ["run", "US30303M1027", "--parallel", "0"])
    assert result.exit_code == 2
    assert "Configuration error" in result.stdout


def test_default_rules_join_base_url_field_and_isins() -> None:
    rule = default_rules().resolve("PriceV1")
    ctx = UrlContext(base_url="http://stocks.test/api/")
    assert rule(ctx, "PriceV1", "US30303M1027") == "http://stocks.test/api/PriceV1/US30303M1027"
    assert rule(ctx, "PriceV1", ["A", "B"]) == "http://stocks.test/api/PriceV1/A,B"


def test_proxy_file_is_appended_to_proxies(home, monkeypatch) -> None:
    proxy_file = home / "proxies.txt"
    proxy_file.write_text("http://p2:8080\n\nhttp://p3:8080\n", encoding="utf-8")
    monkeypatch.setattr("dax_crawler.app.Scraper", StubScraper)
    result = CliRunner().invoke(
        app,
        ["run", "US30303M1027", "--proxy", "http://p1:8080", "--proxy-file", str(proxy_file)],
    )
    assert result.exit_code == 0, result.stdout
    assert StubScraper.instances[0].config.proxies == (
        "http://p1:8080",
        "http://p2:8080",
        "http://p3:8080",
    )


def test_non_mapping_role_exits_with_configuration_error(home) -> None:
    write_roles(home, "consors:\n  - PriceV1\n")
    result = CliRunner().invoke(app, ["run", "US30303M1027", "--role", "consors"])
    assert result.exit_code == 2
    assert "Configuration error" in result.stdout
