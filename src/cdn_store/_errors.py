"""Normalized error hierarchy for cdn_store."""

from __future__ import annotations

from typing import Optional


class StorageError(Exception):
    """Base class for all cdn_store errors.

    :param message: Human-readable error description.
    :param path: The storage path involved in the error, if any.
    :param driver: The driver name involved, if any.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None, driver: Optional[str] = None) -> None:
        self.path = path
        self.driver = driver
        super().__init__(message)

    def _details(self) -> list[str]:
        details = []
        if self.path is not None:
            details.append(f"path={self.path!r}")
        if self.driver is not None:
            details.append(f"driver={self.driver!r}")
        return details

    def __str__(self) -> str:
        parts = [super().__str__(), *self._details()]
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(self.args[0] if self.args else ""), *self._details()]
        return f"{cls}({', '.join(args)})"


class InvalidConfiguration(StorageError):
    """Raised when a driver is constructed with missing or unknown settings."""


class InvalidPath(StorageError):
    """Raised for paths that cannot be mapped to a bucket or staging location."""


class NotFound(StorageError):
    """Raised when no entry exists at a path or a listed prefix is unknown."""


class RemoteError(StorageError):
    """Raised when the remote service reports an internal failure.

    :param reason: The reason stated by the remote service.
    :param status_code: The HTTP status code of the response.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        driver: Optional[str] = None,
        reason: str = "",
        status_code: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(message, path=path, driver=driver)

    def _details(self) -> list[str]:
        details = super()._details()
        if self.status_code is not None:
            details.append(f"status_code={self.status_code}")
        return details


class UnexpectedResponse(StorageError):
    """Raised when the remote answers with a status or body the driver cannot use.

    :param status_code: The HTTP status code of the response.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        driver: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, path=path, driver=driver)

    def _details(self) -> list[str]:
        details = super()._details()
        if self.status_code is not None:
            details.append(f"status_code={self.status_code}")
        return details


class IntegrityMismatch(StorageError):
    """Raised when the digest echoed by an upload differs from the local digest.

    :param expected: The locally computed hex digest.
    :param actual: The digest reported by the remote.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        driver: Optional[str] = None,
        expected: str = "",
        actual: str = "",
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message, path=path, driver=driver)


class Unsupported(StorageError):
    """Raised when an operation is not supported by a driver.

    :param capability: The name of the unsupported capability.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        driver: Optional[str] = None,
        capability: str = "",
    ) -> None:
        self.capability = capability
        super().__init__(message, path=path, driver=driver)

    def _details(self) -> list[str]:
        details = super()._details()
        if self.capability:
            details.append(f"capability={self.capability!r}")
        return details


class TransportError(StorageError):
    """Raised when the remote cannot be reached. The ``httpx`` error is the ``__cause__``."""


class WriterStateError(StorageError):
    """Raised when a writer is used after reaching a state that forbids the call."""


class AlreadyClosed(WriterStateError):
    """Raised when a writer has already been closed."""


class AlreadyCommitted(WriterStateError):
    """Raised when a writer has already been committed."""


class AlreadyCancelled(WriterStateError):
    """Raised when a writer has already been cancelled."""


class CommitFailed(StorageError):
    """Raised when a commit sub-step fails. The original error is the ``__cause__``.

    :param step: The sub-step that failed: ``flush``, ``digest``, ``create_entry`` or ``upload``.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        driver: Optional[str] = None,
        step: str = "",
    ) -> None:
        self.step = step
        super().__init__(message, path=path, driver=driver)

    def _details(self) -> list[str]:
        details = super()._details()
        if self.step:
            details.append(f"step={self.step!r}")
        return details
