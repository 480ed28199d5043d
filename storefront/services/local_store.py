"""
Persistent Local Storage

Durable key/value storage for the shopper's device, and the guest cart
kept in it. Every write replaces the whole document atomically, so a
reader never sees a half-written cart.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from ..models.cart import Cart

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    String key/value store backed by one JSON document on disk.

    Usage:
        storage = LocalStorage(".storefront/local_storage.json")
        storage.set_item("access_token", "eyJ...")
        token = storage.get_item("access_token")
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Local storage at {self.path} is unreadable, starting empty: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Local storage at {self.path} is not a mapping, starting empty")
            return {}
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)


class LocalCartStore:
    """Guest cart persisted under a single well-known storage key"""

    def __init__(self, storage: LocalStorage, key: str = "storefront_cart"):
        self.storage = storage
        self.key = key

    def load(self) -> Cart:
        """Read the guest cart; a missing or corrupt entry is an empty cart"""
        raw = self.storage.get_item(self.key)
        if raw is None:
            return Cart()

        try:
            return Cart.model_validate_json(raw)
        except ModelValidationError as e:
            logger.warning(f"Failed to read cart from storage, using empty cart: {e}")
            return Cart()

    def save(self, cart: Cart) -> None:
        self.storage.set_item(self.key, cart.model_dump_json())

    def clear(self) -> None:
        self.storage.remove_item(self.key)
