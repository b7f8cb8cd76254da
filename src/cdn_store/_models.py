"""Immutable entry and metadata models."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Mapping


def _parse_timestamp(value: object) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclasses.dataclass(frozen=True)
class Entry:
    """The remote service's record for one object.

    :param entry_id: Opaque identifier; the address for content operations.
    :param path: Path within the bucket, without a leading separator.
    :param content_hash: Hex-encoded MD5 of the full object body.
    :param content_size: Object size in bytes.
    :param last_modified: Last modification time, if reported.
    :param content_type: MIME type recorded on the entry, if reported.
    """

    entry_id: str
    path: str
    content_hash: str = ""
    content_size: int = 0
    last_modified: datetime | None = None
    content_type: str | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Entry:
        """Build an entry from a decoded remote JSON object.

        :raises KeyError: If ``entryid`` is missing, null or empty.
        """
        entry_id = data.get("entryid")
        if entry_id is None or entry_id == "":
            raise KeyError("entryid")
        return cls(
            entry_id=str(entry_id),
            path=str(data.get("path") or ""),
            content_hash=str(data.get("content_hash") or ""),
            content_size=int(data.get("content_size") or 0),
            last_modified=_parse_timestamp(data.get("last_modified")),
            content_type=data.get("content_type"),
        )


@dataclasses.dataclass(frozen=True)
class FileInfo:
    """Metadata snapshot returned by ``stat``.

    :param path: The storage path that was queried.
    :param size: Size in bytes.
    :param modified_at: Last modification time, if known.
    :param is_dir: Whether the path is a directory. Remote entries never are.
    """

    path: str
    size: int
    modified_at: datetime | None
    is_dir: bool = False
