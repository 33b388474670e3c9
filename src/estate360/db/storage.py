"""Record store interface and the JSON flat-file implementation."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from estate360.exceptions import StorageUnavailableError
from estate360.logging import get_logger
from estate360.models import PropertyRecord

logger = get_logger(__name__)


class PropertyStore(Protocol):
    """Whole-collection persistence for property records.

    Implementations load and save the full ordered collection; callers do
    read-modify-write cycles on top. No locking is implied.
    """

    async def load_all(self) -> list[PropertyRecord]: ...

    async def save_all(self, records: Sequence[PropertyRecord]) -> None: ...

    async def close(self) -> None: ...


def records_from_json(items: Any, source: str) -> list[PropertyRecord]:
    """Validate a decoded JSON array into records.

    Raises:
        StorageUnavailableError: If the payload is not an array of valid records.
    """
    if not isinstance(items, list):
        raise StorageUnavailableError(f"{source} does not contain a JSON array")
    records = []
    for position, item in enumerate(items):
        try:
            records.append(PropertyRecord.model_validate(item))
        except ValidationError as e:
            raise StorageUnavailableError(
                f"{source} holds an invalid record at position {position}: {e}"
            ) from e
    return records


class JsonFileStore:
    """Property records kept as one JSON array in a flat file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize the store.

        Args:
            path: JSON file holding the record array. It and its parent
                directory are created on first access.
        """
        self.path = Path(path)

    def _ensure_file(self) -> None:
        """Create the parent directory and an empty collection if missing."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.write_text("[]", encoding="utf-8")
                logger.info("record_store_initialized", path=str(self.path))
        except OSError as e:
            raise StorageUnavailableError(f"Cannot initialize {self.path}: {e}") from e

    def _read(self) -> list[PropertyRecord]:
        self._ensure_file()
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {self.path}: {e}") from e
        if not raw.strip():
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"{self.path} is not valid JSON: {e}") from e
        return records_from_json(items, str(self.path))

    def _write(self, records: Sequence[PropertyRecord]) -> None:
        self._ensure_file()
        payload = json.dumps(
            [r.to_json_dict() for r in records], indent=2, ensure_ascii=False
        )
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}") from e

    async def load_all(self) -> list[PropertyRecord]:
        """Load every record, provisioning an empty store if none exists."""
        return await asyncio.to_thread(self._read)

    async def save_all(self, records: Sequence[PropertyRecord]) -> None:
        """Replace the stored collection atomically (temp file + rename)."""
        await asyncio.to_thread(self._write, list(records))
        logger.debug("record_store_saved", path=str(self.path), count=len(records))

    async def close(self) -> None:
        """Nothing to release for a flat file."""
