"""Cart persistence for the storefront

The cart lives in a single named slot of a small file-backed key/value
store, scoped to this device. It is never synced anywhere else.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..models.cart import CartEntry

logger = logging.getLogger(__name__)


class LocalStorage:
    """String slots persisted as one JSON object on disk"""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Local storage at {self.path} is unreadable, starting empty: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise


class CartStore:
    """Loads, saves and clears the persisted cart"""

    def __init__(self, storage: LocalStorage, key: str = "storefront_cart"):
        self.storage = storage
        self.key = key

    def load(self) -> list[CartEntry]:
        """
        Load the saved cart.

        A corrupt slot is discarded and an empty cart returned. Entries
        that are incomplete or have a non-positive quantity are dropped.
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            logger.info("No saved cart found")
            return []

        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, list):
                raise ValueError(f"expected a list, got {type(parsed).__name__}")
        except ValueError as e:
            logger.error(f"Error loading saved cart, discarding it: {e}")
            self.storage.remove_item(self.key)
            return []

        entries: list[CartEntry] = []
        seen: set[str] = set()
        for item in parsed:
            entry = self._parse_entry(item)
            if entry is None:
                logger.warning(f"Invalid cart item removed: {item!r}")
                continue
            if entry.product_id in seen:
                logger.warning(f"Duplicate cart item removed: {entry.product_id}")
                continue
            seen.add(entry.product_id)
            entries.append(entry)

        logger.info(f"Cart loaded: {len(entries)} valid items")
        return entries

    def save(self, entries: list[CartEntry]) -> None:
        """Persist the whole cart"""
        payload = [entry.model_dump(mode="json") for entry in entries]
        self.storage.set_item(self.key, json.dumps(payload))
        logger.debug(f"Cart saved: {len(entries)} items")

    def clear(self) -> None:
        """Remove the saved cart"""
        self.storage.remove_item(self.key)

    @staticmethod
    def _parse_entry(item: Any) -> Optional[CartEntry]:
        if not isinstance(item, dict):
            return None
        if not item.get("product_id") or not item.get("product"):
            return None
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            return None
        try:
            return CartEntry.model_validate(item)
        except ValidationError:
            return None
