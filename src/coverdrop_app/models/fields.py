"""Field-presence marker for partial updates.

``UNSET`` means the caller did not mention a field; ``None`` means the caller
asked to clear it. Update request models default every field to ``UNSET``.
"""

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


class _Unset:
    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def resolve(current: T, patch: Any) -> T:
    """Return ``patch`` when present, otherwise keep ``current``."""
    return current if patch is UNSET else patch
