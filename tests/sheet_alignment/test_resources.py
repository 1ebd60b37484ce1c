"""
Unit tests for resources module (scoped buffer lifetimes).
"""

import numpy as np
import pytest

from src.sheet_alignment.resources import BufferScope, buffer_scope


class TestBufferScope:
    """Tests for BufferScope."""

    def test_acquire_returns_buffer(self):
        scope = BufferScope("test")
        buffer = np.zeros(4)

        assert scope.acquire("zeros", buffer) is buffer
        assert "zeros" in scope
        assert len(scope) == 1

    def test_duplicate_key_raises(self):
        scope = BufferScope("test")
        scope.acquire("mask", 1)

        with pytest.raises(KeyError):
            scope.acquire("mask", 2)

    def test_keep_detaches_buffer(self):
        scope = BufferScope("test")
        scope.acquire("winner", "kept")
        scope.acquire("loser", "dropped")

        assert scope.keep("winner") == "kept"
        scope.release_all()

        assert scope.released == 1

    def test_release_single_buffer(self):
        scope = BufferScope("test")
        scope.acquire("a", 1)

        scope.release("a")
        scope.release("missing")

        assert "a" not in scope
        assert scope.released == 1


class TestBufferScopeContext:
    """Tests for the buffer_scope context manager."""

    def test_released_on_normal_exit(self):
        with buffer_scope("normal") as scope:
            scope.acquire("a", 1)
            scope.acquire("b", 2)

        assert len(scope) == 0
        assert scope.released == 2

    def test_released_on_exception(self):
        with pytest.raises(RuntimeError):
            with buffer_scope("failing") as scope:
                scope.acquire("gray", np.ones((3, 3)))
                raise RuntimeError("stage failed")

        assert len(scope) == 0
        assert scope.released == 1

    def test_kept_buffer_survives(self):
        with buffer_scope("keep") as scope:
            scope.acquire("result", [1, 2, 3])
            result = scope.keep("result")

        assert result == [1, 2, 3]
        assert scope.released == 0
