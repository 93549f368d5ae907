"""Entity model: stocks, partials, feeds and their serializer."""

from .feed import Feed, MultiFeed, kpi
from .partial import MultiPartial, Partial
from .serializer import RawSerializer, Serializer
from .stock import Stock

__all__ = [
    "Feed",
    "MultiFeed",
    "MultiPartial",
    "Partial",
    "RawSerializer",
    "Serializer",
    "Stock",
    "kpi",
]
