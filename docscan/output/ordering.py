"""Deterministic key ordering for serialized output.

Natural ordering compares runs of digits by value and everything else
case-insensitively, so ``file2`` sorts before ``file10``.
"""

import re
from collections.abc import Iterable

_DIGIT_RUN = re.compile(r"(\d+)")
_INTEGER = re.compile(r"^[+-]?\d+$")


def natural_key(value: str) -> tuple[tuple[tuple[int, int | str], ...], str]:
    """Sort key implementing natural, case-insensitive ordering.

    Digit runs sort before text at the same position. The original string is
    the final tie-breaker so distinct keys never compare equal.
    """
    chunks: list[tuple[int, int | str]] = []
    for i, part in enumerate(_DIGIT_RUN.split(value)):
        if i % 2:
            chunks.append((0, int(part)))
        elif part:
            chunks.append((1, part.casefold()))
    return tuple(chunks), value


def is_integer_key(value: str) -> bool:
    return bool(_INTEGER.match(value))


def ordered_keys(keys: Iterable[str]) -> list[str]:
    """Order mapping keys for output.

    All-integer key sets sort by numeric value; anything else sorts
    naturally.
    """
    keys = list(keys)
    if keys and all(is_integer_key(key) for key in keys):
        return sorted(keys, key=lambda key: (int(key), key))
    return sorted(keys, key=natural_key)
