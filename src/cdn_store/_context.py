"""Request-scoped repository name supplied by the host application."""

from __future__ import annotations

import contextlib
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

repository_name: ContextVar[str | None] = ContextVar("cdn_store.repository_name", default=None)


@contextlib.contextmanager
def use_repository(name: str) -> Iterator[None]:
    """Bind ``name`` as the repository for calls made inside the block."""
    token = repository_name.set(name)
    try:
        yield
    finally:
        repository_name.reset(token)
