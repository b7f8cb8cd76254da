"""In-memory content delivery API served through ``httpx.MockTransport``."""

from __future__ import annotations

import hashlib
import json
import uuid
from collections import Counter
from typing import Any

import httpx

BUCKET = "foo"
ROOT = "/docker/registry/v2/repositories/foo"
LAST_MODIFIED = "2024-01-01T12:00:00Z"


class FakeContentDelivery:
    """Just enough of the entry API for the driver to run against.

    Entries live per bucket, keyed by their remote path (no leading slash).
    Failures can be injected per operation: ``lookup``, ``upsert``,
    ``upload``, ``content``, ``delete`` and ``diff``.
    """

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, dict[str, Any]]] = {}
        self.blobs: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.calls: Counter[str] = Counter()
        self.forged_upload_hash: str | None = None
        self._failures: dict[str, tuple[int, str, int]] = {}
        self._broken: set[str] = set()

    # region: setup helpers

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, operation: str, *, status: int = 500, reason: str = "boom", after: int = 0) -> None:
        """Answer ``operation`` with ``status`` once it has been called ``after`` times."""
        self._failures[operation] = (status, reason, after)

    def break_connection(self, operation: str) -> None:
        """Raise a connection error for every ``operation`` request."""
        self._broken.add(operation)

    def heal(self) -> None:
        self._failures.clear()
        self._broken.clear()
        self.forged_upload_hash = None

    def seed(self, bucket: str, path: str, data: bytes) -> dict[str, Any]:
        """Store ``data`` as a committed entry at ``path``."""
        entry = self._upsert_entry(bucket, path.lstrip("/"), hashlib.md5(data).hexdigest(), len(data))
        self.blobs[entry["entryid"]] = data
        return entry

    def content_at(self, bucket: str, path: str) -> bytes | None:
        entry = self.buckets.get(bucket, {}).get(path.lstrip("/"))
        if entry is None:
            return None
        return self.blobs.get(entry["entryid"])

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    # endregion

    def _upsert_entry(self, bucket: str, path: str, content_hash: str, size: int) -> dict[str, Any]:
        entries = self.buckets.setdefault(bucket, {})
        entry = entries.get(path)
        if entry is None:
            entry = {"entryid": uuid.uuid4().hex, "path": path}
            entries[path] = entry
        entry.update(
            {
                "content_hash": content_hash,
                "content_size": size,
                "content_type": "application/offset+octet-stream",
                "last_modified": LAST_MODIFIED,
            }
        )
        return entry

    def _find(self, bucket: str, entry_id: str) -> dict[str, Any] | None:
        for entry in self.buckets.get(bucket, {}).values():
            if entry["entryid"] == entry_id:
                return entry
        return None

    @staticmethod
    def _operation(method: str, rest: list[str]) -> str:
        if rest == ["entry_by_path"]:
            return "lookup" if method == "GET" else "upsert"
        if rest == ["diff", "releases", "entries"]:
            return "diff"
        if len(rest) == 3 and rest[0] == "entries" and rest[2] == "content":
            return "upload" if method == "PUT" else "content"
        if len(rest) == 2 and rest[0] == "entries" and method == "DELETE":
            return "delete"
        return "unknown"

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        bucket, rest = parts[3], parts[4:]
        op = self._operation(request.method, rest)
        self.calls[op] += 1

        if op in self._broken:
            raise httpx.ConnectError("connection refused", request=request)
        if op in self._failures:
            status, reason, after = self._failures[op]
            if self.calls[op] > after:
                return httpx.Response(status, json={"reason": reason})

        params = request.url.params
        if op == "lookup":
            entry = self.buckets.get(bucket, {}).get(params["path"])
            if entry is None:
                return httpx.Response(404, json={"reason": "entry not found"})
            return httpx.Response(200, json=entry)

        if op == "upsert":
            body = json.loads(request.content)
            entry = self._upsert_entry(bucket, params["path"], body["content_hash"], body["content_size"])
            return httpx.Response(200, json=entry)

        if op == "upload":
            entry = self._find(bucket, rest[1])
            if entry is None:
                return httpx.Response(404, json={"reason": "entry not found"})
            data = request.content
            self.blobs[entry["entryid"]] = data
            upload_hash = self.forged_upload_hash or hashlib.md5(data).hexdigest()
            return httpx.Response(204, headers={"Upload-Hash": upload_hash})

        if op == "content":
            data = self.blobs.get(rest[1])
            if data is None:
                return httpx.Response(404, json={"reason": "content not found"})
            range_header = request.headers.get("Range")
            if range_header:
                start = int(range_header.removeprefix("bytes=").rstrip("-"))
                return httpx.Response(206, content=data[start:])
            return httpx.Response(200, content=data)

        if op == "delete":
            entry = self._find(bucket, rest[1])
            if entry is None:
                return httpx.Response(404, json={"reason": "entry not found"})
            del self.buckets[bucket][entry["path"]]
            self.blobs.pop(entry["entryid"], None)
            return httpx.Response(204)

        if op == "diff":
            if bucket not in self.buckets:
                return httpx.Response(404, json={"reason": "bucket not found"})
            prefix = params.get("path", "")
            page, per_page = int(params["page"]), int(params["per_page"])
            matching = [e for p, e in self.buckets[bucket].items() if p.startswith(prefix)]
            start = (page - 1) * per_page
            return httpx.Response(200, json=matching[start : start + per_page])

        return httpx.Response(400, json={"reason": f"unsupported request {request.method} {request.url.path}"})
