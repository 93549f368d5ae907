"""Exporter Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...model import Serializer, Stock


class BaseExporter(ABC):
    """Uniform persistence contract used by the response processor."""

    def __init__(self, serializer: Serializer) -> None:
        self.serializer = serializer

    def persist(self, stock: Stock) -> bool:
        """Serialize and write ``stock``; ``False`` when nothing was written."""

        payload = self.serializer.serialize(stock)
        if payload is None:
            return False
        return self.write(stock, payload)

    @abstractmethod
    def write(self, stock: Stock, payload: str) -> bool:
        """Persist a serialized stock."""

    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""

    def __enter__(self) -> "BaseExporter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.flush()
        self.close()


__all__ = ["BaseExporter"]
