"""Module grid construction: function patterns, data placement, masking."""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .errors import CapacityError, ConfigurationError
from .tables import CorrectionLevel, alignment_positions, check_version, correction_level, symbol_size, version_profile

Grid = List[List[int]]

FINDER_PATTERN = (
    (1, 1, 1, 1, 1, 1, 1),
    (1, 0, 0, 0, 0, 0, 1),
    (1, 0, 1, 1, 1, 0, 1),
    (1, 0, 1, 1, 1, 0, 1),
    (1, 0, 1, 1, 1, 0, 1),
    (1, 0, 0, 0, 0, 0, 1),
    (1, 1, 1, 1, 1, 1, 1),
)

ALIGNMENT_PATTERN = (
    (1, 1, 1, 1, 1),
    (1, 0, 0, 0, 1),
    (1, 0, 1, 0, 1),
    (1, 0, 0, 0, 1),
    (1, 1, 1, 1, 1),
)

# Each mask is the smallest tile that repeats across the whole grid.
MASKS = {
    0: (
        (1, 0),
        (0, 1),
    ),
    1: (
        (1, 1),
        (0, 0),
    ),
    2: (
        (1, 0, 0),
        (1, 0, 0),
        (1, 0, 0),
    ),
    3: (
        (1, 0, 0),
        (0, 0, 1),
        (0, 1, 0),
    ),
    4: (
        (1, 1, 1, 0, 0, 0),
        (1, 1, 1, 0, 0, 0),
        (0, 0, 0, 1, 1, 1),
        (0, 0, 0, 1, 1, 1),
    ),
    5: (
        (1, 1, 1, 1, 1, 1),
        (1, 0, 0, 0, 0, 0),
        (1, 0, 0, 1, 0, 0),
        (1, 0, 1, 0, 1, 0),
        (1, 0, 0, 1, 0, 0),
        (1, 0, 0, 0, 0, 0),
    ),
    6: (
        (1, 1, 1, 1, 1, 1),
        (1, 1, 1, 0, 0, 0),
        (1, 1, 0, 1, 1, 0),
        (1, 0, 1, 0, 1, 0),
        (1, 0, 1, 1, 0, 1),
        (1, 0, 0, 0, 1, 1),
    ),
    7: (
        (1, 0, 1, 0, 1, 0),
        (0, 0, 0, 1, 1, 1),
        (1, 0, 0, 0, 1, 1),
        (0, 1, 0, 1, 0, 1),
        (1, 1, 1, 0, 0, 0),
        (0, 1, 1, 1, 0, 0),
    ),
}

FORMAT_GENERATOR = 0b10100110111
FORMAT_MASK = 0b101010000010010
VERSION_GENERATOR = 0b1111100100101

# Values used by the debug view for reserved cells.
RESERVED_DARK = -1
RESERVED_LIGHT = -3


class Stage(Enum):
    STRUCTURAL = "structural"
    DATA_PLACED = "data-placed"
    FINAL = "final"


def check_mask(mask: object) -> int:
    if isinstance(mask, bool) or not isinstance(mask, int) or mask not in MASKS:
        raise ConfigurationError(f"unsupported mask: {mask!r}")
    return mask


def format_bits(level: CorrectionLevel, mask: int) -> int:
    """BCH(15,5) format information for ``level`` and ``mask``, already masked."""
    data = (level.format_id << 3) | mask
    rem = data << 10
    for i in range(4, -1, -1):
        if (rem >> (i + 10)) & 1:
            rem ^= FORMAT_GENERATOR << i
    return ((data << 10) | rem) ^ FORMAT_MASK


def version_bits(version: int) -> int:
    """BCH(18,6) version information."""
    rem = version << 12
    for i in range(5, -1, -1):
        if (rem >> (i + 12)) & 1:
            rem ^= VERSION_GENERATOR << i
    return (version << 12) | rem


def apply_tile(grid: Grid, mask: int, skip=None) -> None:
    """XOR the tile of ``mask`` over ``grid`` in place.

    Cells for which ``skip(row, col)`` is true are left untouched.
    """
    tile = MASKS[check_mask(mask)]
    height = len(tile)
    width = len(tile[0])
    for row, line in enumerate(grid):
        for col in range(len(line)):
            if skip is not None and skip(row, col):
                continue
            line[col] ^= tile[row % height][col % width]


class MatrixBuilder:
    """Builds the module grid of one symbol.

    The function patterns are drawn on construction. :meth:`place_data` and
    :meth:`apply_mask` must then be called once each, in that order.
    """

    def __init__(self, version: int, level: Union[str, CorrectionLevel] = CorrectionLevel.L):
        self.version = check_version(version)
        self.level = correction_level(level)
        self.size = symbol_size(self.version)
        self.modules: Grid = [[0] * self.size for _ in range(self.size)]
        self.mask: Optional[int] = None
        positions = alignment_positions(self.version)
        self._alignment_centers = [
            (row, col) for row in positions for col in positions if not self._in_finder_zone(row, col)
        ]
        self._alignment_cells = frozenset(
            (row + dy, col + dx)
            for row, col in self._alignment_centers
            for dy in range(-2, 3)
            for dx in range(-2, 3)
        )
        self._draw_finder_patterns()
        self._draw_timing_patterns()
        self._draw_alignment_patterns()
        self._draw_version_info()
        self.stage = Stage.STRUCTURAL

    @property
    def max_bits_data(self) -> int:
        return version_profile(self.version).total_codewords * 8

    # Reserved areas

    def _in_finder_zone(self, row: int, col: int) -> bool:
        size = self.size
        if row < 8 and col < 8:
            return True
        if row < 8 and col >= size - 8:
            return True
        if row >= size - 8 and col < 8:
            return True
        return False

    def _in_timing(self, row: int, col: int) -> bool:
        size = self.size
        if row == 6 and 7 < col < size - 8:
            return True
        if col == 6 and 7 < row < size - 8:
            return True
        return False

    def _in_alignment(self, row: int, col: int) -> bool:
        return (row, col) in self._alignment_cells

    def _in_format_info(self, row: int, col: int) -> bool:
        size = self.size
        if row == 8 and (col <= 8 or col >= size - 8):
            return True
        if col == 8 and (row <= 8 or row >= size - 8):
            return True
        return False

    def _in_version_info(self, row: int, col: int) -> bool:
        if self.version < 7:
            return False
        size = self.size
        if row <= 5 and size - 11 <= col <= size - 9:
            return True
        if col <= 5 and size - 11 <= row <= size - 9:
            return True
        return False

    def is_reserved(self, row: int, col: int) -> bool:
        """True if ``(row, col)`` belongs to a function pattern or metadata area."""
        return (
            self._in_finder_zone(row, col)
            or self._in_timing(row, col)
            or self._in_alignment(row, col)
            or self._in_format_info(row, col)
            or self._in_version_info(row, col)
        )

    # Function patterns

    def _draw(self, figure: Sequence[Sequence[int]], top: int, left: int) -> None:
        for dy, line in enumerate(figure):
            for dx, bit in enumerate(line):
                self.modules[top + dy][left + dx] = bit

    def _draw_finder_patterns(self) -> None:
        far = self.size - 7
        for top, left in ((0, 0), (0, far), (far, 0)):
            self._draw(FINDER_PATTERN, top, left)

    def _draw_timing_patterns(self) -> None:
        for i in range(8, self.size - 8):
            bit = 1 if i % 2 == 0 else 0
            self.modules[6][i] = bit
            self.modules[i][6] = bit

    def _draw_alignment_patterns(self) -> None:
        for row, col in self._alignment_centers:
            self._draw(ALIGNMENT_PATTERN, row - 2, col - 2)

    def _draw_version_info(self) -> None:
        if self.version < 7:
            return
        bits = version_bits(self.version)
        for i in range(18):
            bit = (bits >> i) & 1
            a = self.size - 11 + i % 3
            b = i // 3
            self.modules[b][a] = bit
            self.modules[a][b] = bit

    def _draw_format_info(self, mask: int) -> None:
        size = self.size
        bits = format_bits(self.level, mask)

        def bit(i: int) -> int:
            return (bits >> i) & 1

        # Around the top-left finder.
        for i in range(6):
            self.modules[i][8] = bit(i)
        self.modules[7][8] = bit(6)
        self.modules[8][8] = bit(7)
        self.modules[8][7] = bit(8)
        for i in range(9, 15):
            self.modules[8][14 - i] = bit(i)
        # Split between the top-right and bottom-left finders.
        for i in range(8):
            self.modules[8][size - 1 - i] = bit(i)
        for i in range(8, 15):
            self.modules[size - 15 + i][8] = bit(i)
        self.modules[size - 8][8] = 1

    # Data

    def data_positions(self) -> Iterator[Tuple[int, int]]:
        """Yield the non-reserved cells in zigzag placement order."""
        size = self.size
        row = col = size - 1
        upward = True
        while col >= 0:
            for dx in range(2):
                if col - dx >= 0 and not self.is_reserved(row, col - dx):
                    yield row, col - dx
            if upward and row == 0 or not upward and row == size - 1:
                upward = not upward
                col -= 2
                if col == 6:
                    col -= 1
            else:
                row += -1 if upward else 1

    def place_data(self, bits: Sequence[int]) -> None:
        if self.stage is not Stage.STRUCTURAL:
            raise RuntimeError("data has already been placed")
        if len(bits) > self.max_bits_data:
            raise CapacityError("bits", self.version, self.level.value, self.max_bits_data, len(bits))
        for (row, col), bit in zip(self.data_positions(), bits):
            self.modules[row][col] = bit
        self.stage = Stage.DATA_PLACED

    def apply_mask(self, mask: int = 0) -> None:
        """XOR ``mask`` into the data area and write the format information."""
        check_mask(mask)
        if self.stage is not Stage.DATA_PLACED:
            raise RuntimeError("mask must be applied once, after data placement")
        self._draw_format_info(mask)
        apply_tile(self.modules, mask, skip=self.is_reserved)
        self.mask = mask
        self.stage = Stage.FINAL

    def get_matrix(self) -> Grid:
        return [row[:] for row in self.modules]

    def reserved_view(self) -> Grid:
        """Copy of the grid with reserved cells marked negative for debugging."""
        view = self.get_matrix()
        for row in range(self.size):
            for col in range(self.size):
                if self.is_reserved(row, col):
                    view[row][col] = RESERVED_DARK if view[row][col] else RESERVED_LIGHT
        return view
