"""Tests for the JSON flat-file record store."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from estate360.db import JsonFileStore
from estate360.exceptions import StorageUnavailableError
from estate360.models import PropertyRecord


class TestJsonFileStoreLoad:
    @pytest.mark.asyncio
    async def test_missing_file_is_provisioned(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "properties.json"
        store = JsonFileStore(path)

        assert await store.load_all() == []
        assert path.read_text(encoding="utf-8") == "[]"

    @pytest.mark.asyncio
    async def test_empty_file_is_empty_collection(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text("  \n", encoding="utf-8")

        assert await JsonFileStore(store_path).load_all() == []

    @pytest.mark.asyncio
    async def test_loads_records_in_order(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text(
            json.dumps([{"id": "b", "title": "B"}, {"id": "a", "title": "A"}]), encoding="utf-8"
        )

        records = await JsonFileStore(store_path).load_all()

        assert [r.id for r in records] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text("[{not json", encoding="utf-8")

        with pytest.raises(StorageUnavailableError, match="not valid JSON"):
            await JsonFileStore(store_path).load_all()
        assert store_path.read_text(encoding="utf-8") == "[{not json"

    @pytest.mark.asyncio
    async def test_non_array_raises(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text('{"id": "a"}', encoding="utf-8")

        with pytest.raises(StorageUnavailableError, match="JSON array"):
            await JsonFileStore(store_path).load_all()

    @pytest.mark.asyncio
    async def test_legacy_shapes_load_alongside_valid_records(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text(
            json.dumps(
                [
                    {"id": "a", "title": "Valid", "features": ["Lawn"]},
                    {"id": "b", "title": "Legacy", "features": "Garden", "images": None},
                ]
            ),
            encoding="utf-8",
        )

        records = await JsonFileStore(store_path).load_all()

        assert [r.id for r in records] == ["a", "b"]
        assert records[1].features == ["Garden"]

    @pytest.mark.asyncio
    async def test_invalid_record_raises_with_position(self, store_path: Path) -> None:
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps([{"id": "ok"}, {"title": "no id"}]), encoding="utf-8")

        with pytest.raises(StorageUnavailableError, match="position 1"):
            await JsonFileStore(store_path).load_all()

    @pytest.mark.asyncio
    async def test_unwritable_parent_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(StorageUnavailableError):
            await JsonFileStore(blocker / "properties.json").load_all()


class TestJsonFileStoreSave:
    @pytest.mark.asyncio
    async def test_save_then_load(
        self, json_store: JsonFileStore, make_record: Callable[..., PropertyRecord]
    ) -> None:
        records = [make_record(id="one"), make_record(id="two", title="Second")]

        await json_store.save_all(records)
        loaded = await json_store.load_all()

        assert [r.id for r in loaded] == ["one", "two"]
        assert loaded[1].title == "Second"

    @pytest.mark.asyncio
    async def test_file_is_indented_utf8(
        self,
        json_store: JsonFileStore,
        store_path: Path,
        make_record: Callable[..., PropertyRecord],
    ) -> None:
        await json_store.save_all([make_record(price="₹ 45 Lakh")])

        raw = store_path.read_text(encoding="utf-8")
        assert "₹ 45 Lakh" in raw
        assert raw.startswith('[\n  {\n    "id": "p-1"')

    @pytest.mark.asyncio
    async def test_no_temp_files_left_behind(
        self,
        json_store: JsonFileStore,
        store_path: Path,
        make_record: Callable[..., PropertyRecord],
    ) -> None:
        await json_store.save_all([make_record()])
        await json_store.save_all([make_record(), make_record(id="p-2")])

        assert sorted(p.name for p in store_path.parent.iterdir()) == ["properties.json"]

    @pytest.mark.asyncio
    async def test_round_trip_preserves_unknown_attributes(self, store_path: Path) -> None:
        original = [
            {
                "id": "legacy",
                "title": "Old listing",
                "bedrooms": "2",
                "agent": {"name": "R. Negi"},
                "specs": {"bedrooms": "2", "floors": "3"},
            }
        ]
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps(original), encoding="utf-8")
        store = JsonFileStore(store_path)

        await store.save_all(await store.load_all())

        assert json.loads(store_path.read_text(encoding="utf-8")) == original

    @pytest.mark.asyncio
    async def test_save_empty_collection(
        self,
        json_store: JsonFileStore,
        store_path: Path,
        make_record: Callable[..., PropertyRecord],
    ) -> None:
        await json_store.save_all([make_record()])
        await json_store.save_all([])

        assert json.loads(store_path.read_text(encoding="utf-8")) == []

    @pytest.mark.asyncio
    async def test_close_is_noop(self, json_store: JsonFileStore) -> None:
        await json_store.close()
        assert await json_store.load_all() == []
