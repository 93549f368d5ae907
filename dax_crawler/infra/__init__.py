"""Infra layer utilities."""

from .proxy_pool import ProxyRotator

__all__ = ["ProxyRotator"]
