"""Engine components: partition → url build → fetch → process → export."""

from .fetcher import FetchResponse, RequestEngine, RequestSpec
from .partition import chunk, non_empty_partitions, partition
from .processor import ResponseProcessor
from .urls import UrlBuilder, UrlContext, UrlRuleRegistry

__all__ = [
    "FetchResponse",
    "RequestEngine",
    "RequestSpec",
    "ResponseProcessor",
    "UrlBuilder",
    "UrlContext",
    "UrlRuleRegistry",
    "chunk",
    "non_empty_partitions",
    "partition",
]
