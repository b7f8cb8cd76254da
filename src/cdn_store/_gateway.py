"""Remote entry gateway, the only module that talks to the content delivery API."""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO
from urllib.parse import quote

import httpx

from cdn_store._errors import (
    IntegrityMismatch,
    NotFound,
    RemoteError,
    StorageError,
    TransportError,
    UnexpectedResponse,
)
from cdn_store._models import Entry

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

log = logging.getLogger(__name__)

CONTENT_TYPE_OCTET_STREAM = "application/offset+octet-stream"
UPLOAD_HASH_HEADER = "Upload-Hash"


class _ResponseStream(io.RawIOBase):
    """Raw stream over a streamed ``httpx.Response`` body. Closing it closes the response."""

    def __init__(self, response: httpx.Response, *, path: str, driver: str) -> None:
        super().__init__()
        self._response = response
        self._chunks = response.iter_bytes()
        self._pending = b""
        self._path = path
        self._driver = driver

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.RequestError as exc:
                raise TransportError(f"Reading content failed: {exc}", path=self._path, driver=self._driver) from exc
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class EntryGateway:
    """Entry operations against one content delivery deployment.

    The client must already carry the base URL and credentials; the gateway
    only builds bucket-scoped requests and normalizes the answers into
    ``cdn_store`` errors. Nothing is retried.

    :param client: Configured ``httpx.Client``.
    :param driver: Driver name reported on raised errors.
    """

    def __init__(self, client: httpx.Client, *, driver: str = "cdn") -> None:
        self._client = client
        self._driver = driver

    def __repr__(self) -> str:
        return f"EntryGateway(base_url={str(self._client.base_url)!r})"

    def close(self) -> None:
        self._client.close()

    # region: error mapping

    @contextmanager
    def _errors(self, path: str) -> Iterator[None]:
        """Map ``httpx`` request failures to ``TransportError``."""
        try:
            yield
        except StorageError:
            raise
        except httpx.RequestError as exc:
            raise TransportError(f"Request failed: {exc}", path=path, driver=self._driver) from exc

    @staticmethod
    def _reason(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict) and body.get("reason"):
            return str(body["reason"])
        return response.text

    def _check(self, response: httpx.Response, path: str, expected: tuple[int, ...] = (200,)) -> None:
        status = response.status_code
        if status == httpx.codes.NOT_FOUND:
            raise NotFound(f"Not found: {path}", path=path, driver=self._driver)
        if status >= 500:
            reason = self._reason(response)
            raise RemoteError(
                f"Unexpected error: {reason!r}",
                path=path,
                driver=self._driver,
                reason=reason,
                status_code=status,
            )
        if status not in expected:
            raise UnexpectedResponse(
                f"Unexpected response: {status}",
                path=path,
                driver=self._driver,
                status_code=status,
            )

    def _entry(self, response: httpx.Response, path: str) -> Entry:
        try:
            body = response.json()
            return Entry.from_json(body)
        except (ValueError, KeyError, TypeError, AttributeError):
            raise UnexpectedResponse(
                "Failed to determine entry ID from response",
                path=path,
                driver=self._driver,
                status_code=response.status_code,
            ) from None

    # endregion

    # region: urls

    # Path parameters are percent-encoded; "/", "?" and "#" must stay inside their segment.

    @staticmethod
    def _entry_by_path_url(bucket: str) -> str:
        return f"/api/v1/buckets/{quote(bucket, safe='')}/entry_by_path/"

    @staticmethod
    def _entry_url(bucket: str, entry_id: str) -> str:
        return f"/api/v1/buckets/{quote(bucket, safe='')}/entries/{quote(entry_id, safe='')}/"

    @staticmethod
    def _content_url(bucket: str, entry_id: str) -> str:
        return f"/api/v1/buckets/{quote(bucket, safe='')}/entries/{quote(entry_id, safe='')}/content/"

    @staticmethod
    def _diff_entries_url(bucket: str) -> str:
        return f"/api/v1/buckets/{quote(bucket, safe='')}/diff/releases/entries/"

    # endregion

    # region: entries

    def get_entry_by_path(self, bucket: str, path: str) -> Entry:
        """Look up the entry stored at ``path``.

        :raises NotFound: If the bucket holds no entry at ``path``.
        """
        log.debug("Looking up entry bucket=%s path=%s", bucket, path)
        with self._errors(path):
            response = self._client.get(self._entry_by_path_url(bucket), params={"path": path})
        if response.status_code == httpx.codes.NOT_FOUND:
            log.warning("No entry found for bucket=%s path=%s", bucket, path)
        self._check(response, path)
        return self._entry(response, path)

    def create_or_update_entry(
        self,
        bucket: str,
        path: str,
        *,
        content_hash: str,
        content_size: int,
        content_type: str = CONTENT_TYPE_OCTET_STREAM,
    ) -> str:
        """Create the entry at ``path``, or update it in place, and return its id.

        :raises UnexpectedResponse: If the response carries no entry id.
        """
        log.debug("Upserting entry bucket=%s path=%s size=%d", bucket, path, content_size)
        with self._errors(path):
            response = self._client.post(
                self._entry_by_path_url(bucket),
                params={"path": path, "updateIfExists": "true"},
                json={
                    "content_hash": content_hash,
                    "content_size": content_size,
                    "content_type": content_type,
                },
            )
        self._check(response, path)
        return self._entry(response, path).entry_id

    def delete_entry(self, bucket: str, entry_id: str, *, path: str = "") -> None:
        """Delete one entry. Only ``204 No Content`` counts as success."""
        log.debug("Deleting entry bucket=%s entry=%s", bucket, entry_id)
        with self._errors(path):
            response = self._client.delete(self._entry_url(bucket, entry_id))
        self._check(response, path, expected=(httpx.codes.NO_CONTENT,))

    def diff_entries(self, bucket: str, path: str, *, page: int, per_page: int) -> list[Entry]:
        """Fetch one page of entries whose path starts with ``path``.

        An empty list marks the end of the listing.
        """
        log.debug("Listing entries bucket=%s path=%s page=%d per_page=%d", bucket, path, page, per_page)
        with self._errors(path):
            response = self._client.get(
                self._diff_entries_url(bucket),
                params={"path": path, "page": page, "per_page": per_page},
            )
        self._check(response, path)
        try:
            body = response.json()
        except ValueError:
            raise UnexpectedResponse(
                "Entry listing is not valid JSON", path=path, driver=self._driver, status_code=response.status_code
            ) from None
        if not body:
            return []
        if not isinstance(body, list):
            raise UnexpectedResponse(
                "Entry listing is not a list", path=path, driver=self._driver, status_code=response.status_code
            )
        try:
            return [Entry.from_json(item) for item in body]
        except (ValueError, KeyError, TypeError, AttributeError):
            raise UnexpectedResponse(
                "Malformed entry in listing", path=path, driver=self._driver, status_code=response.status_code
            ) from None

    # endregion

    # region: content

    def upload_content(
        self,
        bucket: str,
        entry_id: str,
        content: bytes | Iterable[bytes],
        *,
        content_hash: str,
        content_size: int,
        path: str = "",
    ) -> None:
        """Upload the body of an entry and verify the echoed digest.

        :raises IntegrityMismatch: If the ``Upload-Hash`` header differs from ``content_hash``.
        """
        log.debug("Uploading content bucket=%s entry=%s size=%d", bucket, entry_id, content_size)
        with self._errors(path):
            response = self._client.put(
                self._content_url(bucket, entry_id),
                content=content,
                headers={
                    "Content-Type": CONTENT_TYPE_OCTET_STREAM,
                    "Content-Length": str(content_size),
                },
            )
        self._check(response, path, expected=(200, 201, 204))
        upload_hash = response.headers.get(UPLOAD_HASH_HEADER, "")
        if upload_hash != content_hash:
            raise IntegrityMismatch(
                f"Upload hash mismatch: expected {content_hash!r} got {upload_hash!r}",
                path=path,
                driver=self._driver,
                expected=content_hash,
                actual=upload_hash,
            )

    def get_content(self, bucket: str, entry_id: str, *, path: str = "") -> bytes:
        """Download the full body of an entry."""
        log.debug("Fetching content bucket=%s entry=%s", bucket, entry_id)
        with self._errors(path):
            response = self._client.get(self._content_url(bucket, entry_id))
        self._check(response, path)
        return response.content

    def open_content(self, bucket: str, entry_id: str, *, offset: int = 0, path: str = "") -> BinaryIO:
        """Open the body of an entry as a stream, starting at ``offset``.

        The ``Range`` header is only sent for a positive offset.
        """
        headers = {"Range": f"bytes={offset}-"} if offset > 0 else {}
        log.debug("Streaming content bucket=%s entry=%s offset=%d", bucket, entry_id, offset)
        request = self._client.build_request("GET", self._content_url(bucket, entry_id), headers=headers)
        with self._errors(path):
            response = self._client.send(request, stream=True)
        try:
            if response.status_code not in (200, 206):
                with self._errors(path):
                    response.read()
                self._check(response, path, expected=(200, 206))
        except BaseException:
            response.close()
            raise
        stream = _ResponseStream(response, path=path, driver=self._driver)
        return io.BufferedReader(stream)  # type: ignore[return-value]

    # endregion
