"""Typer CLI entrypoint for dax-crawler."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, ContentType, ScraperConfig
from .engine.urls import Target, UrlContext, UrlRuleRegistry
from .infra import ProxyRotator
from .logging_conf import configure_logging
from .scraper import Scraper

app = typer.Typer(
    help="dax-crawler command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Inspect scrape configuration",
    no_args_is_help=True,
    rich_markup_mode=None,
)
app.add_typer(config_app, name="config")

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    verbose: bool = False


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    return AppState(repository=ConfigRepository(), verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def default_rules() -> UrlRuleRegistry:
    """``{base_url}/{field}/{isin}``; groups are joined with commas."""

    rules = UrlRuleRegistry()

    @rules.register()
    def _any_field(ctx: UrlContext, field: str | None, target: Target) -> str:
        ids = target if isinstance(target, str) else ",".join(target)
        return "/".join(part.strip("/") for part in (ctx.base_url, field or "", ids) if part)

    return rules


def load_rules(spec: str | None) -> UrlRuleRegistry:
    if not spec:
        return default_rules()
    module_name, _, attr = spec.partition(":")
    module = importlib.import_module(module_name)
    rules = getattr(module, attr or "rules")
    if callable(rules) and not isinstance(rules, UrlRuleRegistry):
        rules = rules()
    if not isinstance(rules, UrlRuleRegistry):
        raise typer.BadParameter(f"{spec} is not a UrlRuleRegistry", param_hint="--rules")
    return rules


def _render_config(config: ScraperConfig, title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("key", style="cyan", no_wrap=True)
    table.add_column("value", style="green", overflow="fold")
    for key, value in config.model_dump(mode="json").items():
        table.add_row(key, str(value))
    return table


def _render_summary(total: int, requested: int, config: ScraperConfig) -> Table:
    table = Table(title="Run summary", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("ISINs", justify="right")
    table.add_column("Persisted", justify="right", style="green")
    table.add_column("Workers", justify="right")
    table.add_column("Output", overflow="fold")
    table.add_row(
        str(requested),
        str(total),
        str(config.parallelism),
        f"{config.output_format} → {config.drop_box}",
    )
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Scrape the given ISINs and persist the results.")
def run(
    ctx: typer.Context,
    isins: List[str] = typer.Argument(..., help="ISIN numbers to scrape."),
    role: Optional[str] = typer.Option(None, "--role", help="Role section of config/scrape.yml."),
    field: Optional[List[str]] = typer.Option(None, "--field", "-f", help="Field to fetch (repeatable)."),
    parallel: Optional[int] = typer.Option(None, "--parallel", help="Worker processes."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="In-flight requests in total."),
    per_request: Optional[int] = typer.Option(None, "--per-request", help="ISINs per request."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Global timeout in seconds."),
    request_timeout: Optional[float] = typer.Option(None, "--request-timeout", help="Per-request timeout in seconds."),
    content_type: Optional[ContentType] = typer.Option(None, "--content-type", help="Response body type."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Prefix used by URL rules."),
    proxy: Optional[List[str]] = typer.Option(None, "--proxy", help="Proxy endpoint (repeatable)."),
    proxy_file: Optional[Path] = typer.Option(None, "--proxy-file", help="File with one proxy endpoint per line."),
    drop_box: Optional[Path] = typer.Option(None, "--drop-box", help="Output directory."),
    rules: Optional[str] = typer.Option(None, "--rules", help="URL rules as module:attribute."),
) -> None:
    state = _get_state(ctx)
    proxies = list(proxy or [])
    if proxy_file is not None:
        proxies.extend(ProxyRotator.from_file(proxy_file, shuffle=False).endpoints)
    try:
        config = state.repository.load_role(
            role,
            fields=field or None,
            parallelism=parallel,
            concurrency_cap=concurrency,
            request_group_size=per_request,
            process_timeout=timeout,
            request_timeout=request_timeout,
            content_type=content_type,
            base_url=base_url,
            proxies=proxies or None,
            drop_box=drop_box,
        )
        scraper = Scraper(config, load_rules(rules))
        total = scraper.run(isins)
    # ConfigurationError and pydantic ValidationError are both ValueErrors
    except (ValueError, KeyError) as exc:
        console.print(f"Configuration error: {exc}", style="red", markup=False)
        raise typer.Exit(code=2) from exc
    console.print(_render_summary(total, len(isins), config))


@config_app.command("show", help="Print the resolved configuration.")
def config_show(
    ctx: typer.Context,
    role: Optional[str] = typer.Option(None, "--role", help="Role section of config/scrape.yml."),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.repository.load_role(role)
    except (ValueError, KeyError) as exc:
        console.print(f"Configuration error: {exc}", style="red", markup=False)
        raise typer.Exit(code=2) from exc
    console.print(_render_config(config, f"Role · {role or 'default'}"))


__all__ = ["AppState", "app", "build_state", "default_rules", "load_rules"]
