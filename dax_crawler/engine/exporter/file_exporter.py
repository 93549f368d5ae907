"""Drop box exporter writing one JSON file per stock."""

from __future__ import annotations

import re
import uuid
from pathlib import Path

import structlog

from ...model import Serializer, Stock
from .base import BaseExporter


class DropBoxExporter(BaseExporter):
    """Write each serialized stock to ``<drop_box>/<isin>-<uuid>.json``."""

    def __init__(
        self,
        drop_box: Path,
        serializer: Serializer,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        super().__init__(serializer)
        self.drop_box = Path(drop_box)
        self.drop_box.mkdir(parents=True, exist_ok=True)
        self.logger = logger or structlog.get_logger("dax_crawler.exporter")

    def filename_for(self, stock: Stock) -> str:
        slug = re.sub(r"[^0-9A-Za-z_.-]+", "_", str(stock.identity() or "stock")).strip("_")
        return f"{slug or 'stock'}-{uuid.uuid4()}.json"

    def write(self, stock: Stock, payload: str) -> bool:
        path = self.drop_box / self.filename_for(stock)
        try:
            path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            self.logger.error("drop_box_write_failed", path=str(path), error=str(exc))
            return False
        return True

    def close(self) -> None:
        return


__all__ = ["DropBoxExporter"]
