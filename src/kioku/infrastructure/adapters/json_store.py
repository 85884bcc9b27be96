"""
JSON Mastery Store — Infrastructure adapter for a local JSON document.

Implements MasteryStore by keeping every record in a single file.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict
from pathlib import Path
from typing import Any

from kioku.domain.mastery.models import ItemId, MasteryRecord, parse_item_id
from kioku.domain.mastery.ports import MasteryStore, StoreError

logger = logging.getLogger(__name__)

STORE_FORMAT_VERSION = 1


def _key(item_id: ItemId) -> str:
    return str(item_id)


class JsonFileMasteryStore(MasteryStore):
    """
    Stores records as {"version": 1, "items": {"<item_id>": {"item_id": ..., ...}}}.

    The payload keeps the caller's item_id so an id like "007" never comes
    back as 7. Documents without it fall back to parsing the key.

    The whole document is rewritten on every put via a temp file and
    os.replace, so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self, item_id: ItemId) -> MasteryRecord | None:
        raw = self._load().get(_key(item_id))
        if raw is None:
            return None
        return self._decode(_key(item_id), raw)

    def put(self, record: MasteryRecord) -> None:
        items = self._load()
        items[_key(record.item_id)] = asdict(record)
        self._write(items)

    def all(self) -> list[MasteryRecord]:
        return [self._decode(key, raw) for key, raw in self._load().items()]

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read mastery store {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("items"), dict):
            raise StoreError(f"Malformed mastery store {self.path}: missing 'items'")
        return data["items"]

    def _write(self, items: dict[str, dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {"version": STORE_FORMAT_VERSION, "items": items}

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Could not write mastery store {self.path}: {e}") from e

        logger.debug(f"Wrote {len(items)} records to {self.path}")

    def _decode(self, key: str, raw: dict[str, Any]) -> MasteryRecord:
        try:
            fields = dict(raw)
            item_id = fields.pop("item_id", None)
            if item_id is None:
                item_id = parse_item_id(key)
            return MasteryRecord(item_id=item_id, **fields)
        except TypeError as e:
            raise StoreError(f"Malformed record for item {key}: {e}") from e


class InMemoryMasteryStore(MasteryStore):
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, records: list[MasteryRecord] | None = None):
        self._records: dict[str, MasteryRecord] = {
            _key(r.item_id): r for r in records or []
        }

    def get(self, item_id: ItemId) -> MasteryRecord | None:
        return self._records.get(_key(item_id))

    def put(self, record: MasteryRecord) -> None:
        self._records[_key(record.item_id)] = record

    def all(self) -> list[MasteryRecord]:
        return list(self._records.values())
