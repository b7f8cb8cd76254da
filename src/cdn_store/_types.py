"""Type aliases used throughout cdn_store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Mapping, Optional

if TYPE_CHECKING:
    from cdn_store._driver import StorageDriver
    from cdn_store._models import FileInfo

Parameters = Mapping[str, object]
WalkFn = Callable[["FileInfo"], None]
DriverFactory = Callable[[Parameters], "StorageDriver"]
URLOptions = Optional[Mapping[str, object]]  # noqa: UP007
