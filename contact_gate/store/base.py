"""Rate-limit window store interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class WindowState:
    """Result of one admission check against a client's window."""

    admitted: bool
    limit: int
    count: int
    reset_in: int  # whole seconds until the window resets

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


@runtime_checkable
class WindowStore(Protocol):
    """Fixed-window counter keyed by client identity.

    ``hit`` must check and increment as one atomic step: the admitted
    count for a key never exceeds ``max_requests`` inside a window.
    """

    max_requests: int
    window_seconds: int

    async def hit(self, key: str) -> WindowState: ...

    async def count(self, key: str) -> int: ...

    async def startup(self) -> None: ...

    async def shutdown(self) -> None: ...
