"""Arithmetic in GF(2^8) with the QR reduction polynomial 0x11D."""

from __future__ import annotations

from typing import List, Sequence, Tuple

PRIMITIVE = 0x11D


def _build_tables() -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    log = [0] * 256
    antilog = [0] * 256
    value = 1
    for i in range(255):
        antilog[i] = value
        log[value] = i
        value <<= 1
        if value > 0xFF:
            value ^= PRIMITIVE
    antilog[255] = antilog[0]
    return tuple(log), tuple(antilog)


# log[0] is undefined and left at 0; callers must test for zero first.
LOG, ANTILOG = _build_tables()


def multiply(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return ANTILOG[(LOG[a] + LOG[b]) % 255]


def divide(dividend: int, divisor: int) -> int:
    if divisor == 0:
        raise ZeroDivisionError("division by zero in GF(256)")
    if dividend == 0:
        return 0
    return ANTILOG[(LOG[dividend] - LOG[divisor] + 255) % 255]


def exp(x: int) -> int:
    """Return alpha**x, where alpha = 2 generates the field."""
    return ANTILOG[x % 255]


def poly_multiply(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Multiply two polynomials given as coefficient lists, highest degree first."""
    result = [0] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        for j, y in enumerate(b):
            result[i + j] ^= multiply(x, y)
    return result
