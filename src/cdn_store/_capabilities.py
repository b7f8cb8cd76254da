"""Capability enum and CapabilitySet."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from cdn_store._errors import Unsupported

if TYPE_CHECKING:
    from collections.abc import Iterator


class Capability(enum.Enum):
    """Operations a driver may support."""

    READ = "read"
    WRITE = "write"
    STREAM_READ = "stream_read"
    STREAM_WRITE = "stream_write"
    STAT = "stat"
    LIST = "list"
    MOVE = "move"
    DELETE = "delete"
    URL_FOR = "url_for"
    WALK = "walk"


class CapabilitySet:
    """Immutable set of capabilities declared by a driver.

    :param capabilities: The set of supported capabilities.
    """

    __slots__ = ("_caps",)
    _caps: frozenset[Capability]

    def __init__(self, capabilities: set[Capability]) -> None:
        object.__setattr__(self, "_caps", frozenset(capabilities))

    def supports(self, cap: Capability) -> bool:
        """Check whether a capability is supported."""
        return cap in self._caps

    def require(self, cap: Capability, *, driver: str = "", path: str | None = None) -> None:
        """Raise if a capability is not supported.

        :raises Unsupported: If the capability is missing.
        """
        if cap not in self._caps:
            raise Unsupported(
                f"Capability '{cap.value}' is not supported",
                path=path,
                driver=driver or None,
                capability=cap.value,
            )

    def __contains__(self, cap: object) -> bool:
        return cap in self._caps

    def __iter__(self) -> Iterator[Capability]:
        return iter(self._caps)

    def __len__(self) -> int:
        return len(self._caps)

    def __repr__(self) -> str:
        names = sorted(c.name for c in self._caps)
        return f"CapabilitySet({{{', '.join(names)}}})"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("CapabilitySet is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("CapabilitySet is immutable")
