"""Condition evaluation.

Applies one comparison operator between a resolved fact and the expected
value. Comparisons that cannot be made (type mismatch, bad pattern) are
non-matches, never errors.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from numbers import Number
from typing import Any

from .facts import Facts, MISSING, get_in
from .schema import Condition, ConditionOp

logger = logging.getLogger(__name__)

# Operators that are meaningful against an absent fact
PRESENCE_OPS: frozenset[ConditionOp] = frozenset({ConditionOp.NIL, ConditionOp.SOME})

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class FactMissing(Exception):
    """Signals that a condition's fact is absent and its operator needs it."""

    def __init__(self, fact_path: str):
        self.fact_path = fact_path
        super().__init__(fact_path)


def requires_presence(op: ConditionOp) -> bool:
    """Whether an operator needs the fact to be present to be evaluated."""
    return op not in PRESENCE_OPS


def describe_condition(condition: Condition) -> str:
    """Human-readable condition text, e.g. ``instrument.type eq "art"``."""
    if condition.op in PRESENCE_OPS:
        return f"{condition.fact} {condition.op.value}"
    try:
        expected = json.dumps(condition.value, sort_keys=True)
    except (TypeError, ValueError):
        expected = repr(condition.value)
    return f"{condition.fact} {condition.op.value} {expected}"


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, (bool, complex))


def _deep_equal(a: Any, b: Any) -> bool:
    """Structural equality where booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(_deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_deep_equal(x, y) for x, y in zip(a, b))
    if type(a) is not type(b) and not (isinstance(a, str) and isinstance(b, str)):
        return False
    return a == b


def _member(item: Any, collection: Any) -> bool:
    if not isinstance(collection, _SEQUENCE_TYPES):
        return False
    return any(_deep_equal(item, candidate) for candidate in collection)


def compare(op: ConditionOp, actual: Any, expected: Any) -> bool:
    """Apply an operator to a resolved value.

    ``actual`` may be ``MISSING``; only ``nil?`` and ``some?`` give a
    meaningful answer for it, every other operator returns False.
    """
    op = ConditionOp(op)

    if op == ConditionOp.NIL:
        return actual is MISSING or actual is None
    if op == ConditionOp.SOME:
        return actual is not MISSING and actual is not None
    if actual is MISSING:
        return False

    if op == ConditionOp.EQ:
        return _deep_equal(actual, expected)
    elif op == ConditionOp.NEQ:
        return not _deep_equal(actual, expected)
    elif op in (ConditionOp.GT, ConditionOp.LT, ConditionOp.GTE, ConditionOp.LTE):
        if not (_is_number(actual) and _is_number(expected)):
            return False
        if op == ConditionOp.GT:
            return actual > expected
        if op == ConditionOp.LT:
            return actual < expected
        if op == ConditionOp.GTE:
            return actual >= expected
        return actual <= expected
    elif op == ConditionOp.IN:
        return _member(actual, expected)
    elif op == ConditionOp.CONTAINS:
        if isinstance(actual, str):
            return isinstance(expected, str) and expected in actual
        return _member(expected, actual)
    elif op == ConditionOp.MATCHES:
        if actual is None or not isinstance(expected, str):
            return False
        try:
            return re.search(expected, str(actual)) is not None
        except re.error as e:
            logger.debug("Invalid pattern %r treated as non-match: %s", expected, e)
            return False

    return False


def evaluate_condition(condition: Condition, facts: Facts) -> bool:
    """Evaluate a condition against facts.

    Raises:
        FactMissing: the fact is absent and the operator requires presence.
    """
    actual = get_in(facts, condition.fact)
    if actual is MISSING and requires_presence(condition.op):
        raise FactMissing(condition.fact)
    return compare(condition.op, actual, condition.value)
