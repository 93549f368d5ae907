import json
import sqlite3

from dax_crawler.engine.exporter import DropBoxExporter, SQLiteExporter
from dax_crawler.model import RawSerializer, Serializer, Stock


def test_drop_box_exporter_writes_one_file_per_stock(tmp_path):
    exporter = DropBoxExporter(tmp_path / "box", RawSerializer())
    assert exporter.persist(Stock({"isin": "US30303M1027"}))
    assert exporter.persist(Stock({"isin": "US30303M1027"}))
    exporter.close()
    files = sorted((tmp_path / "box").glob("US30303M1027-*.json"))
    assert len(files) == 2
    assert json.loads(files[0].read_text(encoding="utf-8"))["basic"]["isin"] == "US30303M1027"


def test_drop_box_exporter_skips_unserializable_stock(tmp_path):
    exporter = DropBoxExporter(tmp_path / "box", Serializer())
    assert not exporter.persist(Stock({"isin": "US30303M1027"}))
    assert list((tmp_path / "box").iterdir()) == []


def test_sqlite_exporter_keeps_latest_payload(tmp_path):
    with SQLiteExporter(tmp_path / "stocks.db", RawSerializer()) as exporter:
        assert exporter.persist(Stock({"isin": "A", "v": 1}, "http://x/1"))
        assert exporter.persist(Stock({"isin": "A", "v": 2}, "http://x/2"))
    conn = sqlite3.connect(tmp_path / "stocks.db")
    rows = conn.execute("SELECT isin, url, payload FROM stocks").fetchall()
    conn.close()
    assert len(rows) == 1
    assert rows[0][1] == "http://x/2"
    assert json.loads(rows[0][2])["raw"]["v"] == 2
