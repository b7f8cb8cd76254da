"""Bucket/path resolution between storage paths and remote entry paths."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from cdn_store._context import repository_name
from cdn_store._errors import InvalidConfiguration, InvalidPath

SEPARATOR: Final = "/"
REPOSITORY_MARKER: Final = "repositories"

BUCKET_SOURCES: Final = ("path", "context")


def bucket_from_path(path: str) -> str:
    """Return the first segment after the ``repositories`` marker.

    ``"/docker/registry/v2/repositories/foo/_uploads/bar"`` maps to ``"foo"``.

    :raises InvalidPath: If the path has no segment after the marker.
    """
    segments = path.split(SEPARATOR)
    for i, segment in enumerate(segments):
        if segment != REPOSITORY_MARKER:
            continue
        for candidate in segments[i + 1 :]:
            if candidate:
                return candidate
        break
    raise InvalidPath("Could not parse bucket from path", path=path)


def to_remote_path(path: str) -> str:
    """Strip the leading separator; remote entry paths never carry one."""
    return path.lstrip(SEPARATOR)


def from_remote_path(remote: str) -> str:
    """Re-prepend the separator stripped by the remote representation."""
    return SEPARATOR + remote.lstrip(SEPARATOR)


def staging_path(root: Path, path: str) -> Path:
    """Mirror ``path`` under the staging ``root``.

    :raises InvalidPath: If the path is empty, contains a null byte, or escapes ``root``.
    """
    if "\0" in path:
        raise InvalidPath("Path contains null byte", path=path)
    rel = to_remote_path(path.replace("\\", SEPARATOR))
    if not rel:
        raise InvalidPath("Path is empty after normalization", path=path)
    base = root.resolve()
    resolved = (base / rel).resolve()
    try:
        resolved.relative_to(base)
    except ValueError:
        raise InvalidPath("Path escapes staging directory", path=path) from None
    if resolved == base:
        raise InvalidPath("Path resolves to the staging directory itself", path=path)
    return resolved


class BucketResolver:
    """Derives the bucket for a storage path.

    :param source: ``"path"`` to parse the bucket out of the path, or
        ``"context"`` to use the request-scoped repository name.
    :raises InvalidConfiguration: If ``source`` is unknown.
    """

    def __init__(self, source: str = "path") -> None:
        if source not in BUCKET_SOURCES:
            raise InvalidConfiguration(f"Unknown bucket source {source!r}. Expected one of: {list(BUCKET_SOURCES)}")
        self._source = source

    @property
    def source(self) -> str:
        return self._source

    def __repr__(self) -> str:
        return f"BucketResolver(source={self._source!r})"

    def resolve(self, path: str) -> str:
        """Return the bucket for ``path``.

        :raises InvalidPath: If no bucket can be determined.
        """
        if self._source == "path":
            return bucket_from_path(path)
        name = repository_name.get()
        if not name:
            raise InvalidPath("Could not determine bucket from context", path=path)
        return name
