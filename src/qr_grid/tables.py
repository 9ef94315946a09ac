"""Static capacity data for QR versions 1-40 (ISO/IEC 18004)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import List, Mapping, Union

from .errors import ConfigurationError, UnsupportedVersionError

MIN_VERSION = 1
MAX_VERSION = 40


class CorrectionLevel(str, Enum):
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"

    @property
    def ordinal(self) -> int:
        """Position in order of increasing redundancy."""
        return "LMQH".index(self.value)

    @property
    def format_id(self) -> int:
        """Two-bit identifier written into the format information."""
        return {
            CorrectionLevel.M: 0,
            CorrectionLevel.L: 1,
            CorrectionLevel.H: 2,
            CorrectionLevel.Q: 3,
        }[self]


class Mode(str, Enum):
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"
    BINARY = "binary"
    KANJI = "kanji"

    @property
    def indicator(self) -> int:
        return {
            Mode.NUMERIC: 0b0001,
            Mode.ALPHANUMERIC: 0b0010,
            Mode.BINARY: 0b0100,
            Mode.KANJI: 0b1000,
        }[self]

    def count_bits(self, version: int) -> int:
        """Width of the character-count field for ``version``."""
        tier = 0 if version < 10 else (1 if version < 27 else 2)
        return {
            Mode.NUMERIC: (10, 12, 14),
            Mode.ALPHANUMERIC: (9, 11, 13),
            Mode.BINARY: (8, 16, 16),
            Mode.KANJI: (8, 10, 12),
        }[self][tier]


# Indexed by version - 1, then by CorrectionLevel.ordinal (L, M, Q, H).
_ECC_CODEWORDS_PER_BLOCK = (
    (7, 10, 13, 17), (10, 16, 22, 28), (15, 26, 18, 22), (20, 18, 26, 16),
    (26, 24, 18, 22), (18, 16, 24, 28), (20, 18, 18, 26), (24, 22, 22, 26),
    (30, 22, 20, 24), (18, 26, 24, 28), (20, 30, 28, 24), (24, 22, 26, 28),
    (26, 22, 24, 22), (30, 24, 20, 24), (22, 24, 30, 24), (24, 28, 24, 30),
    (28, 28, 28, 28), (30, 26, 28, 28), (28, 26, 26, 26), (28, 26, 30, 28),
    (28, 26, 28, 30), (28, 28, 30, 24), (30, 28, 30, 30), (30, 28, 30, 30),
    (26, 28, 30, 30), (28, 28, 28, 30), (30, 28, 30, 30), (30, 28, 30, 30),
    (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30),
    (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30),
    (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30), (30, 28, 30, 30),
)

_NUM_ERROR_CORRECTION_BLOCKS = (
    (1, 1, 1, 1), (1, 1, 1, 1), (1, 1, 2, 2), (1, 2, 2, 4), (1, 2, 4, 4),
    (2, 4, 4, 4), (2, 4, 6, 5), (2, 4, 6, 6), (2, 5, 8, 8), (4, 5, 8, 8),
    (4, 5, 8, 11), (4, 8, 10, 11), (4, 9, 12, 16), (4, 9, 16, 16), (6, 10, 12, 18),
    (6, 10, 17, 16), (6, 11, 16, 19), (6, 13, 18, 21), (7, 14, 21, 25), (8, 16, 20, 25),
    (8, 17, 23, 25), (9, 17, 23, 34), (9, 18, 25, 30), (10, 20, 27, 32), (12, 21, 29, 35),
    (12, 23, 34, 37), (12, 25, 34, 40), (13, 26, 35, 42), (14, 28, 38, 45), (15, 29, 40, 48),
    (16, 31, 43, 51), (17, 33, 45, 54), (18, 35, 48, 57), (19, 37, 51, 60), (19, 38, 53, 63),
    (20, 40, 56, 66), (21, 43, 59, 70), (22, 45, 62, 74), (24, 47, 65, 77), (25, 49, 68, 81),
)


@dataclass(frozen=True)
class ErrorCorrectionInfo:
    blocks: int
    codewords: int

    @property
    def codewords_per_block(self) -> int:
        return self.codewords // self.blocks


@dataclass(frozen=True)
class LevelCapacity:
    codewords: int
    bits: int
    numeric: int
    alphanumeric: int
    binary: int
    kanji: int
    error_correction: ErrorCorrectionInfo

    def characters(self, mode: Mode) -> int:
        return getattr(self, mode.value)


@dataclass(frozen=True)
class VersionProfile:
    version: int
    total_codewords: int
    levels: Mapping[CorrectionLevel, LevelCapacity]

    @property
    def size(self) -> int:
        return symbol_size(self.version)

    def capacity(self, level: CorrectionLevel) -> LevelCapacity:
        return self.levels[level]


def check_version(version: object) -> int:
    if isinstance(version, bool) or not isinstance(version, int):
        raise UnsupportedVersionError(f"unsupported version: {version!r}")
    if not MIN_VERSION <= version <= MAX_VERSION:
        raise UnsupportedVersionError(f"unsupported version: {version}")
    return version


def correction_level(value: Union[str, CorrectionLevel]) -> CorrectionLevel:
    """Return the :class:`CorrectionLevel` named by ``value``."""
    try:
        return CorrectionLevel(value.upper() if isinstance(value, str) else value)
    except ValueError as exc:
        raise ConfigurationError(f"unsupported ecc level: {value!r}") from exc


def symbol_size(version: int) -> int:
    return 17 + 4 * check_version(version)


def alignment_positions(version: int) -> List[int]:
    """Row/column coordinates of alignment pattern centers for ``version``."""
    check_version(version)
    if version == 1:
        return []
    num = version // 7 + 2
    step = (version * 8 + num * 3 + 5) // (num * 4 - 4) * 2
    last = symbol_size(version) - 7
    result = [last - i * step for i in range(num - 1)]
    result.append(6)
    return result[::-1]


def _raw_data_modules(version: int) -> int:
    # Modules left after finder, timing, alignment, format and version areas.
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num = version // 7 + 2
        result -= (25 * num - 10) * num - 55
        if version >= 7:
            result -= 36
    return result


def _max_characters(mode: Mode, version: int, bits: int) -> int:
    available = bits - 4 - mode.count_bits(version)
    if mode is Mode.NUMERIC:
        count = available // 10 * 3
        rest = available % 10
        if rest >= 7:
            count += 2
        elif rest >= 4:
            count += 1
    elif mode is Mode.ALPHANUMERIC:
        count = available // 11 * 2
        if available % 11 >= 6:
            count += 1
    elif mode is Mode.BINARY:
        count = available // 8
    else:
        count = available // 13
    return max(0, min(count, (1 << mode.count_bits(version)) - 1))


@lru_cache(maxsize=None)
def version_profile(version: int) -> VersionProfile:
    """Return the immutable capacity profile of ``version``."""
    check_version(version)
    total = _raw_data_modules(version) // 8
    levels = {}
    for level in CorrectionLevel:
        blocks = _NUM_ERROR_CORRECTION_BLOCKS[version - 1][level.ordinal]
        ecc = _ECC_CODEWORDS_PER_BLOCK[version - 1][level.ordinal] * blocks
        codewords = total - ecc
        bits = codewords * 8
        levels[level] = LevelCapacity(
            codewords=codewords,
            bits=bits,
            numeric=_max_characters(Mode.NUMERIC, version, bits),
            alphanumeric=_max_characters(Mode.ALPHANUMERIC, version, bits),
            binary=_max_characters(Mode.BINARY, version, bits),
            kanji=_max_characters(Mode.KANJI, version, bits),
            error_correction=ErrorCorrectionInfo(blocks=blocks, codewords=ecc),
        )
    return VersionProfile(version=version, total_codewords=total, levels=MappingProxyType(levels))
