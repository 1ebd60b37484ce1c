"""
Scoped lifetimes for intermediate pipeline buffers.

Masks, grayscale copies, contour sets and matrices created while processing a
single call are registered in a BufferScope. Leaving the scope releases every
buffer that was not explicitly kept, whether the block exits normally or by
exception, so repeated calls on a long-lived session do not accumulate
intermediates.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

logger = logging.getLogger(__name__)


class BufferScope:
    """Registry of named intermediates owned by one pipeline stage."""

    def __init__(self, name: str):
        self.name = name
        self._buffers: Dict[str, Any] = {}
        self.released = 0

    def acquire(self, key: str, buffer: Any) -> Any:
        """Register ``buffer`` under ``key`` and return it unchanged."""
        if key in self._buffers:
            raise KeyError(f"Buffer '{key}' already acquired in scope '{self.name}'")
        self._buffers[key] = buffer
        return buffer

    def get(self, key: str) -> Any:
        return self._buffers[key]

    def keep(self, key: str) -> Any:
        """Detach a buffer so it survives the scope (ownership moves to caller)."""
        return self._buffers.pop(key)

    def release(self, key: str) -> None:
        """Release a single buffer early."""
        if self._buffers.pop(key, None) is not None:
            self.released += 1

    def release_all(self) -> None:
        self.released += len(self._buffers)
        self._buffers.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)


@contextmanager
def buffer_scope(name: str) -> Iterator[BufferScope]:
    """
    Open a BufferScope that is always released on exit.

    Args:
        name: Scope label used in debug logs.

    Example:
        >>> with buffer_scope("preprocess") as scope:
        ...     gray = scope.acquire("gray", to_grayscale(image))
        ...     winner = scope.keep("gray")
    """
    scope = BufferScope(name)
    try:
        yield scope
    finally:
        scope.release_all()
        logger.debug(f"Scope '{scope.name}' released {scope.released} buffer(s)")
