"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import ContentType, ScraperConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "ContentType",
    "ScraperConfig",
]
