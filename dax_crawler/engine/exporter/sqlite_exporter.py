"""Export serialized stocks to a SQLite table."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

from ...model import Serializer, Stock
from .base import BaseExporter


class SQLiteExporter(BaseExporter):
    """Keep the latest serialized payload per stock identity."""

    def __init__(
        self,
        path: Path,
        serializer: Serializer,
        table: str = "stocks",
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        super().__init__(serializer)
        self.path = Path(path)
        self.table = table
        self.logger = logger or structlog.get_logger("dax_crawler.exporter")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # worker processes share the file; wait on locks instead of failing fast
        self.conn = sqlite3.connect(self.path, timeout=30)
        self.conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                isin TEXT PRIMARY KEY,
                url TEXT,
                payload TEXT NOT NULL
            )
            """
        )
        self.conn.commit()

    def write(self, stock: Stock, payload: str) -> bool:
        try:
            self.conn.execute(
                f"INSERT OR REPLACE INTO {self.table}(isin, url, payload) VALUES (?, ?, ?)",
                (stock.identity(), stock.url, payload),
            )
        except sqlite3.Error as exc:
            self.logger.error("sqlite_write_failed", isin=stock.identity(), error=str(exc))
            return False
        return True

    def flush(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        self.conn.commit()
        self.conn.close()


__all__ = ["SQLiteExporter"]
