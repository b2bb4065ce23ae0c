"""Compute-once cells backing the lazily populated fields.

A cell runs its factory on first ``get()`` and returns the stored value after
that. ``invalidate()`` drops the value so the next ``get()`` recomputes it.
Cells are not thread-safe: one caller thread populates them.
"""

from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_UNSET = object()


class Once(Generic[T]):
    """Lazily computed value with explicit invalidation."""

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._value: object = _UNSET

    @property
    def computed(self) -> bool:
        return self._value is not _UNSET

    def peek(self) -> Optional[T]:
        """Return the stored value without computing it, or None."""
        if self._value is _UNSET:
            return None
        return self._value  # type: ignore[return-value]

    def get(self) -> T:
        if self._value is _UNSET:
            self._value = self._factory()
        return self._value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        self._value = value

    def invalidate(self) -> None:
        self._value = _UNSET
