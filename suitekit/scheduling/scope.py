"""Parallel scope values declared on suites and tests."""

from __future__ import annotations

import enum
import re
from typing import Iterable


class ParallelScope(enum.IntFlag):
    """Concurrency eligibility declared on a node.

    Numeric declarations are read against these values, with None as 0;
    runners that number their flags differently must declare scopes by name.
    """

    NONE = 0
    SELF = 1
    CHILDREN = 256
    FIXTURES = 512
    ALL = SELF | CHILDREN


# Fixture scope that makes every contained test parallel outright
ALL_WITH_CHILDREN = ParallelScope.ALL | ParallelScope.CHILDREN

_TOKEN_SPLIT = re.compile(r"[|,+\s]+")

_KNOWN_BITS = ParallelScope.SELF | ParallelScope.CHILDREN | ParallelScope.FIXTURES


def _from_int(value: int) -> ParallelScope:
    if value < 0 or value & ~int(_KNOWN_BITS):
        raise ValueError(f"Unknown parallel scope value: {value}")
    return ParallelScope(value)


def parse_scope(value: str | int | ParallelScope) -> ParallelScope:
    """Parse a declared scope value.

    Accepts flag names in any case, combined with ``|``, ``,`` or ``+``
    (``"All|Children"``, ``"Self, Children"``), or an integer value.

    Raises:
        ValueError: If a token is not a known scope name, or a number sets
            bits outside the known flags.
    """
    if isinstance(value, ParallelScope):
        return value
    if isinstance(value, int):
        return _from_int(value)

    text = str(value).strip()
    if text.isdigit():
        return _from_int(int(text))

    scope = ParallelScope.NONE
    for token in _TOKEN_SPLIT.split(text):
        if not token:
            continue
        try:
            scope |= ParallelScope[token.upper()]
        except KeyError:
            raise ValueError(f"Unknown parallel scope: {token!r}") from None
    return scope


def first_declared_scope(values: Iterable[str]) -> ParallelScope:
    """Return the scope from the first declared value (NONE if none)."""
    for value in values:
        return parse_scope(value)
    return ParallelScope.NONE


def has_parallel_scope(scope: ParallelScope) -> bool:
    return scope != ParallelScope.NONE
