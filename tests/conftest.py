"""Shared pytest fixtures."""

import gc
import os
import sys
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
import structlog
from hypothesis import HealthCheck, settings

from estate360.config import Settings
from estate360.db import JsonFileStore, PropertyRepository
from estate360.models import PropertyRecord, UploadedFile
from estate360.uploads import UploadManager

FIXED_MS = 1_700_000_000_000


def pytest_configure(config: pytest.Config) -> None:
    """Force line-buffered stdout when piped."""
    if hasattr(sys.stdout, "reconfigure") and not sys.stdout.isatty():
        sys.stdout.reconfigure(line_buffering=True)
    if hasattr(sys.stderr, "reconfigure") and not sys.stderr.isatty():
        sys.stderr.reconfigure(line_buffering=True)


# Hypothesis settings profiles for different environments
settings.register_profile("fast", max_examples=10)
settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture(autouse=True)
def _isolate_settings_from_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent the local .env file from leaking into test Settings instances."""
    monkeypatch.setattr(
        Settings,
        "model_config",
        {**Settings.model_config, "env_file": None},
    )


@pytest.fixture(autouse=True)
def _reset_structlog() -> Any:
    """Undo logging configuration bound to a test's (later closed) capture stream."""
    yield
    structlog.reset_defaults()
    for name, module in list(sys.modules.items()):
        if not name.startswith("estate360"):
            continue
        proxy = getattr(module, "logger", None)
        if isinstance(proxy, structlog._config.BoundLoggerLazyProxy):
            proxy.__dict__.pop("bind", None)


@pytest.fixture(autouse=True)
def _cleanup_aiosqlite_threads():
    """Safety net: stop aiosqlite worker threads leaked by unclosed stores."""
    yield

    from aiosqlite.core import Connection

    gc.collect()
    leaked = False
    for obj in gc.get_objects():
        if isinstance(obj, Connection) and obj._connection is not None:
            leaked = True
            obj.stop()

    if leaked:
        import warnings

        warnings.warn(
            "Test leaked aiosqlite connection(s); add 'await store.close()' to fixture teardown",
            ResourceWarning,
            stacklevel=1,
        )


class TickingClock:
    """ISO timestamp source that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 3, 1, 9, 0, tzinfo=UTC)
        self.calls = 0

    def __call__(self) -> str:
        value = self.current
        self.current += timedelta(seconds=1)
        self.calls += 1
        return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "properties.json"


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    return tmp_path / "public" / "uploads"


@pytest.fixture
def json_store(store_path: Path) -> JsonFileStore:
    return JsonFileStore(store_path)


@pytest.fixture
def upload_manager(uploads_dir: Path) -> UploadManager:
    return UploadManager(uploads_dir, clock=lambda: FIXED_MS)


@pytest_asyncio.fixture
async def repository(
    json_store: JsonFileStore, upload_manager: UploadManager, clock: TickingClock
) -> AsyncGenerator[PropertyRepository, None]:
    repo = PropertyRepository(json_store, upload_manager, clock=clock)
    yield repo
    await repo.close()


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """A complete create payload for a hill-station cottage."""
    return {
        "title": "Lake-view cottage in Bhimtal",
        "price": "95,00,000",
        "location": "Bhimtal, Nainital, Uttarakhand",
        "description": "Two-storey stone cottage overlooking the lake.",
        "category": "buy",
        "propertyType": "Cottage",
        "specs": {"bedrooms": "3", "bathrooms": "2", "area": "1800 sq ft"},
        "features": ["Lake view", "Fireplace"],
        "amenities": ["Parking"],
    }


@pytest.fixture
def make_record() -> Callable[..., PropertyRecord]:
    """Factory for records with sensible defaults; keyword args override."""

    def _make(**overrides: Any) -> PropertyRecord:
        data: dict[str, Any] = {
            "id": "p-1",
            "title": "Test listing",
            "price": "50,00,000",
            "location": "Dehradun, Uttarakhand",
            "description": "A listing.",
            "category": "buy",
            "propertyType": "House",
            "specs": {"bedrooms": "2", "bathrooms": "1", "area": "1200 sq ft"},
            "createdAt": "2025-01-01T00:00:00.000Z",
            "updatedAt": "2025-01-01T00:00:00.000Z",
        }
        data.update(overrides)
        return PropertyRecord.model_validate(data)

    return _make


@pytest.fixture
def jpeg_file() -> UploadedFile:
    return UploadedFile(
        filename="Front View.JPG", data=b"\xff\xd8\xff" + b"0" * 64, content_type="image/jpeg"
    )


@pytest.fixture
def video_file() -> UploadedFile:
    return UploadedFile(
        filename="walkthrough.mp4",
        data=b"\x00\x00\x00\x18ftyp" + b"1" * 64,
        content_type="video/mp4",
    )
