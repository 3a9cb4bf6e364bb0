"""
Entity store persisted as JSON files, one file per collection.

Each collection lives under a namespaced key (``uniq_bookings_v1`` and
so on) and is rewritten in full after every mutation, replacing the file
atomically so a crash never leaves half a collection on disk.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from fieldservice.schemas.booking_schema import Booking
from fieldservice.schemas.customer_schema import Customer
from fieldservice.schemas.technician_schema import Technician
from fieldservice.store.base import COLLECTIONS
from fieldservice.store.memory import InMemoryStore

logger = logging.getLogger(__name__)

_ADAPTERS: dict[str, TypeAdapter] = {
    "bookings": TypeAdapter(list[Booking]),
    "technicians": TypeAdapter(list[Technician]),
    "customers": TypeAdapter(list[Customer]),
}


def storage_key(prefix: str, collection: str, version: int = 1) -> str:
    """Build the namespaced key for a collection, e.g. ``uniq_bookings_v1``."""
    return f"{prefix}_{collection}_v{version}"


class JsonFileStore(InMemoryStore):
    """InMemoryStore that mirrors every collection to ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: str, key_prefix: str = "uniq", key_version: int = 1) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._paths = {
            name: self.data_dir / f"{storage_key(key_prefix, name, key_version)}.json"
            for name in COLLECTIONS
        }
        self._load()

    def path_for(self, collection: str) -> Path:
        return self._paths[collection]

    def _load(self) -> None:
        self._bookings = self._read("bookings")
        self._booking_index = {b.id: b for b in self._bookings}
        self._technicians = self._read("technicians")
        self._technician_index = {t.id: t for t in self._technicians}
        self._customers = self._read("customers")
        logger.info(
            "Loaded %d bookings, %d technicians, %d customers from %s",
            len(self._bookings), len(self._technicians), len(self._customers), self.data_dir,
        )

    def _read(self, collection: str) -> list:
        path = self._paths[collection]
        if not path.exists():
            return []
        try:
            return _ADAPTERS[collection].validate_json(path.read_bytes())
        except (OSError, PydanticValidationError) as exc:
            logger.warning("Ignoring unreadable %s at %s: %s", collection, path, exc)
            return []

    def _on_change(self, collection: str) -> None:
        items = {
            "bookings": self._bookings,
            "technicians": self._technicians,
            "customers": self._customers,
        }[collection]
        payload = _ADAPTERS[collection].dump_json(items, indent=2)
        path = self._paths[collection]
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            logger.exception("Failed to persist %s to %s", collection, path)
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
