"""Concurrent bulk scraper for per-stock financial data."""

from .config import ContentType, ScraperConfig
from .errors import ConfigurationError, MissingUrlRule
from .scraper import Scraper

__all__ = ["ConfigurationError", "ContentType", "MissingUrlRule", "Scraper", "ScraperConfig"]

__version__ = "0.3.0"
