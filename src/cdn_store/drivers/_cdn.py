"""Content delivery driver: flat, path-addressed storage over a remote entry store."""

from __future__ import annotations

import builtins
import hashlib
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, ClassVar

import httpx

from cdn_store._capabilities import Capability, CapabilitySet
from cdn_store._config import API_KEY_ENV, ENVIRONMENTS
from cdn_store._driver import StorageDriver
from cdn_store._errors import InvalidConfiguration, InvalidPath, NotFound
from cdn_store._gateway import EntryGateway
from cdn_store._models import FileInfo
from cdn_store._path import BucketResolver, from_remote_path, staging_path, to_remote_path
from cdn_store._writer import BufferedCommitWriter

if TYPE_CHECKING:
    from cdn_store._models import Entry
    from cdn_store._types import Parameters, URLOptions, WalkFn

log = logging.getLogger(__name__)

_CDN_CAPABILITIES = CapabilitySet({c for c in Capability if c not in (Capability.URL_FOR, Capability.WALK)})

DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 30.0


class ContentDeliveryDriver(StorageDriver):
    """Storage driver backed by a content delivery service's entry API.

    Content is addressed remotely by entry id; this driver resolves storage
    paths to entries, stages streamed writes on local disk and publishes
    them in two phases (entry upsert with digest and size, then upload).

    :param apikey: API key, sent as the password of basic auth. Falls back to
        the ``CDN_STORE_API_KEY`` environment variable.
    :param environment: Deployment environment, one of ``prod`` or ``stage``.
    :param staging_root: Directory for staging files (default: ``<tmp>/cdn-store``).
    :param page_size: Entries requested per listing page.
    :param bucket_source: ``"path"`` or ``"context"``; see :class:`BucketResolver`.
    :param timeout: HTTP timeout in seconds.
    :param transport: Optional ``httpx`` transport (e.g. ``httpx.MockTransport``).
    :raises InvalidConfiguration: If a setting is missing or unknown.
    """

    driver_name: ClassVar[str] = "cdn"

    def __init__(
        self,
        apikey: str | None = None,
        environment: str = "",
        *,
        staging_root: str | os.PathLike[str] | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        bucket_source: str = "path",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        key = apikey or os.environ.get(API_KEY_ENV, "")
        if not key.strip():
            raise InvalidConfiguration("No API key provided", driver=self.driver_name)
        if not environment:
            raise InvalidConfiguration("No environment provided", driver=self.driver_name)
        if environment not in ENVIRONMENTS:
            raise InvalidConfiguration(
                f"Invalid environment {environment!r}. Known environments: {sorted(ENVIRONMENTS)}",
                driver=self.driver_name,
            )
        if not isinstance(page_size, int) or page_size <= 0:
            raise InvalidConfiguration(
                f"page_size must be a positive integer, got {page_size!r}", driver=self.driver_name
            )
        if timeout <= 0:
            raise InvalidConfiguration(f"timeout must be positive, got {timeout!r}", driver=self.driver_name)

        self._environment = environment
        self._base_url = ENVIRONMENTS[environment]
        self._page_size = page_size
        self._resolver = BucketResolver(bucket_source)
        self._staging_root = Path(staging_root) if staging_root else Path(tempfile.gettempdir()) / "cdn-store"
        client = httpx.Client(
            base_url=self._base_url,
            auth=httpx.BasicAuth("", key),
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "cdn-store"},
        )
        self._gateway = EntryGateway(client, driver=self.driver_name)

    @classmethod
    def from_parameters(cls, parameters: Parameters) -> ContentDeliveryDriver:
        """Build a driver from a generic configuration mapping.

        ``apikey`` and ``environment`` are required; the remaining keys map
        to keyword arguments of the constructor.
        """
        options: dict[str, Any] = dict(parameters)
        apikey = options.pop("apikey", None)
        environment = options.pop("environment", None)
        return cls(
            apikey="" if apikey is None else str(apikey),
            environment="" if environment is None else str(environment),
            **options,
        )

    def __repr__(self) -> str:
        return f"ContentDeliveryDriver(environment={self._environment!r}, bucket_source={self._resolver.source!r})"

    @property
    def name(self) -> str:
        return self.driver_name

    @property
    def capabilities(self) -> CapabilitySet:
        return _CDN_CAPABILITIES

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def staging_root(self) -> Path:
        return self._staging_root

    # region: entry helpers

    def _lookup(self, path: str) -> tuple[str, Entry]:
        bucket = self._resolver.resolve(path)
        entry = self._gateway.get_entry_by_path(bucket, to_remote_path(path))
        return bucket, entry

    def _entries(self, bucket: str, path: str) -> builtins.list[Entry]:
        """Collect every entry under ``path``, page by page, until a page comes back empty."""
        remote = to_remote_path(path)
        entries: builtins.list[Entry] = []
        page = 1
        while True:
            batch = self._gateway.diff_entries(bucket, remote, page=page, per_page=self._page_size)
            if not batch:
                break
            entries.extend(batch)
            page += 1
        log.debug("Listed %d entries under %s in %d page(s)", len(entries), path, page - 1)
        return entries

    # endregion

    # region: content

    def get_content(self, path: str) -> bytes:
        bucket, entry = self._lookup(path)
        return self._gateway.get_content(bucket, entry.entry_id, path=path)

    def put_content(self, path: str, data: bytes) -> None:
        bucket = self._resolver.resolve(path)
        content_hash = hashlib.md5(data).hexdigest()  # noqa: S324
        entry_id = self._gateway.create_or_update_entry(
            bucket, to_remote_path(path), content_hash=content_hash, content_size=len(data)
        )
        self._gateway.upload_content(
            bucket, entry_id, data, content_hash=content_hash, content_size=len(data), path=path
        )

    def reader(self, path: str, offset: int = 0) -> BinaryIO:
        if offset < 0:
            raise InvalidPath(f"Negative read offset: {offset}", path=path, driver=self.name)
        bucket, entry = self._lookup(path)
        return self._gateway.open_content(bucket, entry.entry_id, offset=offset, path=path)

    def writer(self, path: str, append: bool = False) -> BufferedCommitWriter:
        bucket = self._resolver.resolve(path)
        staging = staging_path(self._staging_root, path)
        staging.parent.mkdir(parents=True, exist_ok=True)
        staging.touch(exist_ok=True)
        file = open(staging, "r+b")  # noqa: SIM115
        try:
            if append:
                size = file.seek(0, io.SEEK_END)
            else:
                file.truncate(0)
                size = 0
        except BaseException:
            file.close()
            raise
        return BufferedCommitWriter(
            file,
            staging,
            self._gateway,
            bucket=bucket,
            path=path,
            remote_path=to_remote_path(path),
            size=size,
            driver=self.name,
        )

    # endregion

    # region: metadata and listing

    def stat(self, path: str) -> FileInfo:
        _bucket, entry = self._lookup(path)
        return FileInfo(path=path, size=entry.content_size, modified_at=entry.last_modified, is_dir=False)

    def list(self, path: str) -> builtins.list[str]:
        bucket = self._resolver.resolve(path)
        return [from_remote_path(entry.path) for entry in self._entries(bucket, path)]

    # endregion

    # region: move and delete

    def move(self, src: str, dst: str) -> None:
        """Copy ``src`` to ``dst``, then delete ``src``. Not atomic.

        The delete removes every entry whose path starts with ``src``, so a
        ``dst`` that extends ``src`` (``a`` to ``ab``) is deleted as well.
        """
        # No server-side copy or rename: download, upload, then delete.
        content = self.get_content(src)
        self.put_content(dst, content)
        self.delete(src)
        log.info("Moved %s to %s (%d bytes)", src, dst, len(content))

    def delete(self, path: str) -> None:
        bucket = self._resolver.resolve(path)
        try:
            entries = self._entries(bucket, path)
        except NotFound:
            log.debug("Nothing to delete under %s", path)
            return
        for entry in entries:
            self._gateway.delete_entry(bucket, entry.entry_id, path=from_remote_path(entry.path))
        log.info("Deleted %d entries under %s", len(entries), path)

    # endregion

    # region: unsupported

    def url_for(self, path: str, options: URLOptions = None) -> str:
        # Signed download URLs need a bucket access token this driver does not hold.
        self.capabilities.require(Capability.URL_FOR, driver=self.name, path=path)
        raise NotImplementedError("url_for")

    def walk(self, path: str, visitor: WalkFn) -> None:
        self.capabilities.require(Capability.WALK, driver=self.name, path=path)
        raise NotImplementedError("walk")

    # endregion

    def close(self) -> None:
        self._gateway.close()
