"""Configuration loading helpers for role-based scrape settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .models import ScraperConfig

CONFIG_EXTENSIONS = (".yml", ".yaml", ".json")
SCRAPE_CONFIG_STEM = "scrape"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _normalise_keys(payload: dict) -> dict:
    # Ruby-style symbol keys (":fields") are accepted for older role files.
    return {str(key).lstrip(":"): value for key, value in payload.items()}


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the project root and the config directory below it."""

    project_root: Path | None = None
    config_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("DAX_CRAWLER_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.config_dir = (root / "config").resolve()
        self.logs_dir = (root / "logs").resolve()

    def scrape_config_path(self) -> Path | None:
        for suffix in CONFIG_EXTENSIONS:
            candidate = self.config_dir / f"{SCRAPE_CONFIG_STEM}{suffix}"
            if candidate.exists():
                return candidate
        return None


class ConfigRepository:
    """Read role sections out of ``config/scrape.yml``."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: dict | None = None

    def roles(self) -> dict[str, dict]:
        if self._cache is None:
            path = self.locator.scrape_config_path()
            self._cache = _read_file(path) if path else {}
        return self._cache

    def has_config_file(self) -> bool:
        return self.locator.scrape_config_path() is not None

    def load_role(self, role: str | None = None, **overrides: Any) -> ScraperConfig:
        """Build the session config for ``role``.

        A missing config file yields the defaults; a config file without the
        requested role is an error.
        """

        payload: dict[str, Any] = {}
        if role is not None and self.has_config_file():
            roles = self.roles()
            if role not in roles:
                raise KeyError(f"Role {role!r} not found in {self.locator.scrape_config_path()}")
            section = roles[role] or {}
            if not isinstance(section, dict):
                raise ValueError(f"Role {role!r} must contain a mapping")
            payload.update(_normalise_keys(section))
        payload.update({k: v for k, v in overrides.items() if v is not None})
        return ScraperConfig.model_validate(payload)


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository"]
