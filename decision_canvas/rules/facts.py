"""Fact access by dotted path.

Absence is a first-class result: ``get_in`` returns ``MISSING`` instead of
raising, so full and partial evaluation can tell "no such fact" apart from
an explicit ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

Facts = Mapping[str, Any]


class _Missing:
    """Sentinel type for an absent fact."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def is_missing(value: Any) -> bool:
    """Check whether a resolved value is the absent-fact sentinel."""
    return value is MISSING


def get_in(facts: Facts | None, path: str) -> Any:
    """Resolve a dotted path against a fact bag.

    A top-level key equal to the whole path is used as-is, so flat bags like
    ``{"instrument.type": "art"}`` resolve the same as nested ones.

    Returns:
        The value found, or ``MISSING`` when any segment is absent or the
        value at an intermediate segment is not a mapping.
    """
    if not isinstance(facts, Mapping) or not path:
        return MISSING

    if path in facts:
        return facts[path]

    current: Any = facts
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return MISSING
        current = current[segment]
    return current
