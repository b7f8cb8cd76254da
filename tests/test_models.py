"""Tests for entry and file metadata models."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from cdn_store._models import Entry, FileInfo


class TestEntryFromJson:
    def test_full_record(self) -> None:
        entry = Entry.from_json(
            {
                "entryid": "e-1",
                "path": "repositories/foo/a",
                "content_hash": "abc",
                "content_size": 12,
                "content_type": "application/offset+octet-stream",
                "last_modified": "2024-01-01T12:00:00Z",
            }
        )
        assert entry.entry_id == "e-1"
        assert entry.path == "repositories/foo/a"
        assert entry.content_hash == "abc"
        assert entry.content_size == 12
        assert entry.last_modified == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_naive_timestamp_is_utc(self) -> None:
        entry = Entry.from_json({"entryid": "e", "last_modified": "2024-01-01T00:00:00"})
        assert entry.last_modified is not None
        assert entry.last_modified.tzinfo == timezone.utc

    def test_missing_optional_fields(self) -> None:
        entry = Entry.from_json({"entryid": "e"})
        assert entry.path == ""
        assert entry.content_size == 0
        assert entry.last_modified is None
        assert entry.content_type is None

    def test_missing_entry_id(self) -> None:
        with pytest.raises(KeyError):
            Entry.from_json({"path": "x"})

    @pytest.mark.parametrize("entry_id", [None, ""])
    def test_null_or_empty_entry_id(self, entry_id: object) -> None:
        with pytest.raises(KeyError, match="entryid"):
            Entry.from_json({"entryid": entry_id, "path": "x"})

    def test_frozen(self) -> None:
        entry = Entry(entry_id="e", path="p")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.path = "q"  # type: ignore[misc]


class TestFileInfo:
    def test_never_a_directory_by_default(self) -> None:
        info = FileInfo(path="/a", size=1, modified_at=None)
        assert info.is_dir is False
