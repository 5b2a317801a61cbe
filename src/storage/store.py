"""Flat JSON record store, one file per collection.

Each collection is a list of records persisted as ``<data_dir>/<name>.json``.
Every operation reads the whole file and writes it back, so the last write
wins. A ``Store`` is an explicit session: open it once at the composition
root, hand it to whatever needs records, close it on shutdown.
"""

import json
import uuid
from pathlib import Path
from typing import Any

from src.utils.errors import StoreClosedError
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

COLLECTIONS = ("users", "portfolios", "watchlists", "alerts", "transactions")


def generate_id() -> str:
    return uuid.uuid4().hex


class Collection:
    def __init__(self, store: "Store", name: str):
        self._store = store
        self.name = name

    @property
    def path(self) -> Path:
        return self._store.data_dir / f"{self.name}.json"

    def _load(self) -> list[dict[str, Any]]:
        self._store.ensure_open()
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            logger.warning("Collection %s is not a list, treating as empty", self.name)
            return []
        return data

    def _save(self, records: list[dict[str, Any]]) -> None:
        self._store.ensure_open()
        tmp = self.path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(records, f, default=str, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def list(self, filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """All records whose fields equal every key in filter."""
        records = self._load()
        if not filter:
            return records
        return [r for r in records if all(r.get(k) == v for k, v in filter.items())]

    def find_one(self, filter: dict[str, Any]) -> dict[str, Any] | None:
        matches = self.list(filter)
        return matches[0] if matches else None

    def get_by_id(self, record_id: str) -> dict[str, Any] | None:
        return next((r for r in self._load() if r.get("id") == record_id), None)

    def insert(self, record: dict[str, Any]) -> str:
        """Store a copy of the record under a fresh id and return the id."""
        records = self._load()
        record_id = generate_id()
        records.append({**record, "id": record_id})
        self._save(records)
        logger.debug("Inserted %s into %s", record_id, self.name)
        return record_id

    def update(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Merge fields into the record. Returns the updated record, or None if missing."""
        records = self._load()
        for i, r in enumerate(records):
            if r.get("id") == record_id:
                records[i] = {**r, **fields, "id": record_id}
                self._save(records)
                return records[i]
        return None

    def delete(self, record_id: str) -> bool:
        records = self._load()
        remaining = [r for r in records if r.get("id") != record_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        logger.debug("Deleted %s from %s", record_id, self.name)
        return True


class Store:
    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "Store":
        if not self._open:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._open = True
            logger.info("Store opened at %s", self.data_dir)
        return self

    def close(self) -> None:
        if self._open:
            self._open = False
            logger.info("Store closed")

    def ensure_open(self) -> None:
        if not self._open:
            raise StoreClosedError(f"Store at {self.data_dir} is not open")

    def collection(self, name: str) -> Collection:
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        self.ensure_open()
        return Collection(self, name)

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()
