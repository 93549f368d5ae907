"""Pydantic models describing one scrape session."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..errors import ConfigurationError

PROXY_SCHEMES = ("http", "https", "socks5", "socks5h")


class ContentType(str, Enum):
    """How response bodies are turned into raw records."""

    JSON = "json"
    HTML = "html"
    XML = "xml"
    TEXT = "text"


class ScraperConfig(BaseModel):
    """Immutable settings shared by the orchestrator and all of its workers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    parallelism: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices("parallelism", "parallel_requests"),
        description="Number of worker processes.",
    )
    concurrency_cap: int = Field(
        default=200,
        ge=1,
        validation_alias=AliasChoices("concurrency_cap", "concurrent_requests"),
        description="In-flight requests across all workers.",
    )
    request_group_size: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices("request_group_size", "stocks_per_request"),
        description="Identifiers addressed by a single request.",
    )
    request_timeout: float = Field(default=30.0, gt=0)
    process_timeout: float = Field(default=20.0, gt=0)
    content_type: ContentType = ContentType.TEXT
    proxies: tuple[str, ...] = ()
    fields: tuple[str, ...] = ()
    base_url: str = ""
    drop_box: Path = Field(default=Path("tmp/stocks"))
    output_format: Literal["json", "sqlite"] = "json"
    start_method: Literal["fork", "spawn", "forkserver"] = "fork"
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("proxies", mode="before")
    @classmethod
    def _strip_proxies(cls, value: Any) -> tuple[str, ...]:
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            value = [value]
        proxies = tuple(str(p).strip() for p in value if str(p).strip())
        for proxy in proxies:
            try:
                scheme = httpx.URL(proxy).scheme
            except httpx.InvalidURL as exc:
                raise ConfigurationError(f"Invalid proxy URL {proxy!r}: {exc}") from exc
            if scheme not in PROXY_SCHEMES:
                raise ConfigurationError(
                    f"Unsupported proxy scheme in {proxy!r}; expected one of {', '.join(PROXY_SCHEMES)}"
                )
        return proxies

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_fields(cls, value: Any) -> tuple[str, ...]:
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return (value.lstrip(":"),)
        return tuple(str(f).lstrip(":") for f in value)

    @field_validator("content_type", mode="before")
    @classmethod
    def _coerce_content_type(cls, value: Any) -> Any:
        if value is None:
            return ContentType.TEXT
        if isinstance(value, str):
            return value.lstrip(":").lower()
        return value

    @field_validator("drop_box", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    def worker_concurrency(self, active_workers: int) -> int:
        """Split the concurrency cap evenly across the active workers."""

        return max(1, self.concurrency_cap // max(1, active_workers))

    def with_overrides(self, **overrides: Any) -> "ScraperConfig":
        """Return a validated copy with ``overrides`` applied (``None`` values ignored)."""

        payload = self.model_dump()
        payload.update({k: v for k, v in overrides.items() if v is not None})
        return ScraperConfig.model_validate(payload)


__all__ = ["ContentType", "ScraperConfig"]
