"""Buffered commit writer: stages bytes on local disk and publishes them on commit."""

from __future__ import annotations

import hashlib
import io
import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, BinaryIO

from cdn_store._driver import FileWriter
from cdn_store._errors import (
    AlreadyCancelled,
    AlreadyClosed,
    AlreadyCommitted,
    CommitFailed,
    StorageError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from types import TracebackType

    from cdn_store._gateway import EntryGateway

log = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class BufferedCommitWriter(FileWriter):
    """Writer backed by a staging file that is uploaded as one entry on commit.

    The remote needs the digest and size of an entry before it accepts the
    bytes, so nothing is streamed to it while writing. :meth:`commit` makes
    the staging file durable, digests it, creates or updates the entry and
    uploads the file. Not safe for concurrent use.

    :param file: Staging file opened for reading and writing, positioned at its end.
    :param staging: Location of the staging file, removed on commit or cancel.
    :param gateway: Gateway used at commit time.
    :param bucket: Bucket holding the entry.
    :param path: Storage path the content is published under.
    :param remote_path: Entry path as the remote spells it.
    :param size: Bytes already present in the staging file.
    :param driver: Driver name reported on raised errors.
    """

    def __init__(
        self,
        file: BinaryIO,
        staging: Path,
        gateway: EntryGateway,
        *,
        bucket: str,
        path: str,
        remote_path: str,
        size: int = 0,
        driver: str = "cdn",
    ) -> None:
        self._file = file
        self._staging = staging
        self._gateway = gateway
        self._bucket = bucket
        self._path = path
        self._remote_path = remote_path
        self._size = size
        self._driver = driver
        self._closed = False
        self._committed = False
        self._cancelled = False

    def __repr__(self) -> str:
        return f"BufferedCommitWriter(path={self._path!r}, size={self._size}, state={self.state!r})"

    @property
    def state(self) -> str:
        """``committed``, ``cancelled``, ``closed`` or ``open``."""
        if self._committed:
            return "committed"
        if self._cancelled:
            return "cancelled"
        if self._closed:
            return "closed"
        return "open"

    @property
    def staging(self) -> Path:
        return self._staging

    @property
    def size(self) -> int:
        return self._size

    def _check_open(self) -> None:
        if self._closed:
            raise AlreadyClosed("Writer already closed", path=self._path, driver=self._driver)
        if self._committed:
            raise AlreadyCommitted("Writer already committed", path=self._path, driver=self._driver)
        if self._cancelled:
            raise AlreadyCancelled("Writer already cancelled", path=self._path, driver=self._driver)

    def write(self, data: bytes) -> int:
        self._check_open()
        n = self._file.write(data)
        self._size += n
        return n

    def close(self) -> None:
        self._check_open()
        self._file.flush()
        os.fsync(self._file.fileno())
        self._file.close()
        self._closed = True

    def cancel(self) -> None:
        self._check_open()
        self._cancelled = True
        self._file.close()
        self._staging.unlink(missing_ok=True)
        log.info("Cancelled write to %s", self._path)

    # region: commit

    @contextmanager
    def _step(self, step: str) -> Iterator[None]:
        try:
            yield
        except (OSError, StorageError) as exc:
            log.warning("Commit of %s failed during %s: %s", self._path, step, exc)
            raise CommitFailed(f"{step}: {exc}", path=self._path, driver=self._driver, step=step) from exc

    def _chunks(self) -> Iterator[bytes]:
        while chunk := self._file.read(_CHUNK_SIZE):
            yield chunk

    def _digest(self) -> tuple[str, int]:
        self._file.seek(0, io.SEEK_SET)
        digest = hashlib.md5()  # noqa: S324
        size = 0
        for chunk in self._chunks():
            digest.update(chunk)
            size += len(chunk)
        return digest.hexdigest(), size

    def _publish(self) -> tuple[str, int]:
        with self._step("flush"):
            self._file.flush()
            os.fsync(self._file.fileno())
        with self._step("digest"):
            content_hash, size = self._digest()
        with self._step("create_entry"):
            entry_id = self._gateway.create_or_update_entry(
                self._bucket, self._remote_path, content_hash=content_hash, content_size=size
            )
        with self._step("upload"):
            self._file.seek(0, io.SEEK_SET)
            self._gateway.upload_content(
                self._bucket,
                entry_id,
                self._chunks(),
                content_hash=content_hash,
                content_size=size,
                path=self._path,
            )
        return content_hash, size

    def commit(self) -> None:
        """Publish the staging file as the entry for this writer's path.

        On failure the writer stays open, the staging file is kept and the
        write cursor is returned to the end of the staged bytes.

        :raises CommitFailed: If a sub-step fails; the cause is chained.
        """
        self._check_open()
        try:
            content_hash, size = self._publish()
        except CommitFailed:
            self._file.seek(0, io.SEEK_END)
            raise
        self._committed = True
        self._file.close()
        self._staging.unlink(missing_ok=True)
        log.info("Committed %s to bucket=%s (%d bytes, md5=%s)", self._path, self._bucket, size, content_hash)

    # endregion

    def __enter__(self) -> BufferedCommitWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.state != "open":
            return
        if exc_type is not None:
            self.cancel()
        else:
            self.close()
