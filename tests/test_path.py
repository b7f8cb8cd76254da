"""Tests for bucket derivation and path translation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cdn_store._context import repository_name, use_repository
from cdn_store._errors import InvalidConfiguration, InvalidPath
from cdn_store._path import BucketResolver, bucket_from_path, from_remote_path, staging_path, to_remote_path

if TYPE_CHECKING:
    from pathlib import Path


class TestBucketFromPath:
    """The bucket is the first segment after the ``repositories`` marker."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/repositories/foo/_uploads/bar/baz", "foo"),
            ("/repositories/foo/", "foo"),
            ("/docker/registry/v2/repositories/foo/_uploads/bar/baz", "foo"),
            ("/docker/registry/v2/repositories/foo/", "foo"),
            ("/docker/registry/v2/repositories/foo", "foo"),
            ("/repositories//foo/_manifests", "foo"),
        ],
    )
    def test_bucket(self, path: str, expected: str) -> None:
        assert bucket_from_path(path) == expected

    @pytest.mark.parametrize("path", ["/repositories/", "", "/repositories", "/docker/registry/v2/blobs/sha256/ab"])
    def test_missing_bucket(self, path: str) -> None:
        with pytest.raises(InvalidPath, match="Could not parse bucket") as info:
            bucket_from_path(path)
        assert info.value.path == path


class TestRemotePathTranslation:
    def test_to_remote_strips_leading_separator(self) -> None:
        assert to_remote_path("/repositories/foo/a") == "repositories/foo/a"

    def test_to_remote_keeps_relative(self) -> None:
        assert to_remote_path("a/b") == "a/b"

    def test_from_remote_prepends_one_separator(self) -> None:
        assert from_remote_path("repositories/foo/a") == "/repositories/foo/a"
        assert from_remote_path("/already") == "/already"


class TestStagingPath:
    """Staging files mirror the storage path under the staging root."""

    def test_mirrors_hierarchy(self, tmp_path: Path) -> None:
        result = staging_path(tmp_path, "/repositories/foo/_uploads/abc/data")
        assert result == tmp_path.resolve() / "repositories" / "foo" / "_uploads" / "abc" / "data"

    def test_rejects_escape(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidPath, match="escapes"):
            staging_path(tmp_path, "/../../etc/passwd")

    def test_rejects_null_byte(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidPath, match="null"):
            staging_path(tmp_path, "/a\0b")

    def test_rejects_empty(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidPath):
            staging_path(tmp_path, "/")


class TestBucketResolver:
    def test_path_source(self) -> None:
        assert BucketResolver("path").resolve("/repositories/bar/x") == "bar"

    def test_context_source(self) -> None:
        resolver = BucketResolver("context")
        with use_repository("ctx-bucket"):
            assert resolver.resolve("/anything/at/all") == "ctx-bucket"

    def test_context_source_missing_name(self) -> None:
        resolver = BucketResolver("context")
        with pytest.raises(InvalidPath, match="context"):
            resolver.resolve("/repositories/foo/x")

    def test_context_is_reset_after_block(self) -> None:
        with use_repository("tmp"):
            assert repository_name.get() == "tmp"
        assert repository_name.get() is None

    def test_unknown_source(self) -> None:
        with pytest.raises(InvalidConfiguration, match="bucket source"):
            BucketResolver("header")
