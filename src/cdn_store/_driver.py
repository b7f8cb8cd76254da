"""Storage driver and file writer abstract base classes defining the driver contract."""

from __future__ import annotations

import abc
import builtins
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from types import TracebackType

    from cdn_store._capabilities import CapabilitySet
    from cdn_store._models import FileInfo
    from cdn_store._types import URLOptions, WalkFn


class FileWriter(abc.ABC):
    """Writer whose content becomes visible only after :meth:`commit`.

    A writer is driven by one caller, sequentially. Once committed or
    cancelled it rejects every further write, commit and cancel.
    """

    @abc.abstractmethod
    def write(self, data: bytes) -> int:
        """Append ``data`` and return the number of bytes accepted.

        :raises AlreadyClosed: If the writer was closed.
        :raises AlreadyCommitted: If the writer was committed.
        :raises AlreadyCancelled: If the writer was cancelled.
        """

    @property
    @abc.abstractmethod
    def size(self) -> int:
        """Number of bytes written so far."""

    @abc.abstractmethod
    def close(self) -> None:
        """Make buffered bytes durable locally without publishing them.

        :raises AlreadyClosed: If called twice.
        """

    @abc.abstractmethod
    def cancel(self) -> None:
        """Discard everything written so far."""

    @abc.abstractmethod
    def commit(self) -> None:
        """Publish everything written so far."""


class StorageDriver(abc.ABC):
    """Abstract base class for all storage drivers.

    Paths are absolute, ``/``-separated storage paths. Driver-native
    exceptions must never leak; they are mapped to ``cdn_store`` errors.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Registration name of this driver (e.g. ``'cdn'``)."""

    @property
    @abc.abstractmethod
    def capabilities(self) -> CapabilitySet:
        """Declared capabilities of this driver."""

    @abc.abstractmethod
    def get_content(self, path: str) -> bytes:
        """Return the full content stored at ``path``.

        :raises NotFound: If nothing is stored at ``path``.
        """

    @abc.abstractmethod
    def put_content(self, path: str, data: bytes) -> None:
        """Store ``data`` at ``path``, replacing any previous content."""

    @abc.abstractmethod
    def reader(self, path: str, offset: int = 0) -> BinaryIO:
        """Open the content at ``path`` for streaming, starting at ``offset``.

        :raises NotFound: If nothing is stored at ``path``.
        """

    @abc.abstractmethod
    def writer(self, path: str, append: bool = False) -> FileWriter:
        """Return a writer that stores its content at ``path`` on commit.

        :param append: Continue a previously staged, uncommitted write.
        """

    @abc.abstractmethod
    def stat(self, path: str) -> FileInfo:
        """Return metadata for ``path``.

        :raises NotFound: If nothing is stored at ``path``.
        """

    @abc.abstractmethod
    def list(self, path: str) -> builtins.list[str]:
        """Return the paths of all objects stored under ``path``."""

    @abc.abstractmethod
    def move(self, src: str, dst: str) -> None:
        """Move the object at ``src`` to ``dst``.

        :raises NotFound: If ``src`` does not exist.
        """

    @abc.abstractmethod
    def delete(self, path: str) -> None:
        """Delete every object stored at ``path`` and below."""

    @abc.abstractmethod
    def url_for(self, path: str, options: URLOptions = None) -> str:
        """Return a URL from which the content at ``path`` can be downloaded.

        :raises Unsupported: If the driver cannot issue URLs.
        """

    @abc.abstractmethod
    def walk(self, path: str, visitor: WalkFn) -> None:
        """Call ``visitor`` for every object below ``path``.

        :raises Unsupported: If the driver cannot traverse.
        """

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    def __enter__(self) -> StorageDriver:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
