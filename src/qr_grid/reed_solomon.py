"""Reed-Solomon error correction codewords for QR data blocks."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence, Tuple

from . import gf256


@lru_cache(maxsize=None)
def generator_polynomial(degree: int) -> Tuple[int, ...]:
    """Return the product of ``(x - alpha**i)`` for ``i`` in ``range(degree)``.

    Coefficients are ordered from the highest power down, so the leading
    coefficient is always 1.
    """
    if degree <= 0 or degree > 255:
        raise ValueError("Degree out of range")
    coefficients: List[int] = [1]
    for i in range(degree):
        coefficients = gf256.poly_multiply(coefficients, [1, gf256.exp(i)])
    return tuple(coefficients)


def syndromes(data: Sequence[int], degree: int) -> List[int]:
    """Return the ``degree`` parity codewords of ``data``.

    This is the remainder of ``data * x**degree`` divided by the generator
    polynomial, i.e. systematic Reed-Solomon encoding.
    """
    generator = generator_polynomial(degree)
    buffer = list(data) + [0] * degree
    for offset in range(len(data)):
        lead = buffer[offset]
        if lead == 0:
            continue
        for i, coefficient in enumerate(generator):
            buffer[offset + i] ^= gf256.multiply(coefficient, lead)
    return buffer[-degree:]


class ReedSolomonGenerator:
    """Parity generator bound to a fixed degree."""

    def __init__(self, degree: int):
        self.degree = degree
        self.coefficients = generator_polynomial(degree)

    def remainder(self, data: Sequence[int]) -> List[int]:
        return syndromes(data, self.degree)
