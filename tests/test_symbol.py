"""End-to-end symbol building, checked against the qrcode package."""

import pytest
import qrcode
from qrcode import constants, util

from qr_grid import build_symbol, detect_version
from qr_grid.errors import CapacityError, ConfigurationError, UnsupportedVersionError
from qr_grid.matrix import FINDER_PATTERN
from qr_grid.symbol import SymbolOptions
from qr_grid.tables import CorrectionLevel, Mode

QRCODE_LEVELS = {
    "L": constants.ERROR_CORRECT_L,
    "M": constants.ERROR_CORRECT_M,
    "Q": constants.ERROR_CORRECT_Q,
    "H": constants.ERROR_CORRECT_H,
}

QRCODE_MODES = {
    Mode.NUMERIC: util.MODE_NUMBER,
    Mode.ALPHANUMERIC: util.MODE_ALPHA_NUM,
    Mode.BINARY: util.MODE_8BIT_BYTE,
}


def reference_grid(text, version, level, mask, mode):
    qr = qrcode.QRCode(
        version=version,
        error_correction=QRCODE_LEVELS[level],
        border=0,
        mask_pattern=mask,
    )
    qr.add_data(util.QRData(text, mode=QRCODE_MODES[mode]))
    qr.make(fit=False)
    return [[int(bool(cell)) for cell in row] for row in qr.get_matrix()]


class TestAgainstReference:
    """Grids must match the qrcode package for the same version, level, mask and mode."""

    @pytest.mark.parametrize(
        "text, level, mask, min_version, mode",
        [
            ("HELLO WORLD", "Q", 0, 1, Mode.ALPHANUMERIC),
            ("HELLO WORLD", "M", 3, 1, Mode.ALPHANUMERIC),
            ("01234567", "M", 2, 1, Mode.NUMERIC),
            ("https://example.com/some/path?q=1", "L", 5, 1, Mode.BINARY),
            ("héllo wörld", "H", 7, 1, Mode.BINARY),
            ("3141592653589793238462643383279502884197", "Q", 4, 5, Mode.NUMERIC),
            ("MIXED BLOCKS 5Q", "Q", 1, 5, Mode.ALPHANUMERIC),
            ("version info " * 8, "M", 6, 7, Mode.BINARY),
            ("A" * 300, "H", 2, 1, Mode.ALPHANUMERIC),
            ("large symbol " * 40, "L", 0, 15, Mode.BINARY),
        ],
    )
    def test_grid_matches_qrcode(self, text, level, mask, min_version, mode):
        symbol = build_symbol(text, correction_level=level, mask=mask, min_version=min_version)
        expected = reference_grid(text, symbol.version, level, mask, mode)
        assert [list(row) for row in symbol.grid] == expected


class TestBuildSymbol:

    def test_hello_world_quartile(self):
        symbol = build_symbol("HELLO WORLD", correction_level="Q", mask=0)
        assert symbol.version == 1
        assert symbol.size == 21
        assert [tuple(row[:7]) for row in symbol.grid[:7]] == list(FINDER_PATTERN)

    def test_defaults(self):
        symbol = build_symbol("hello")
        assert symbol.correction_level is CorrectionLevel.L
        assert symbol.mask == 0

    def test_grid_is_read_only(self):
        symbol = build_symbol("read only")
        with pytest.raises(TypeError):
            symbol.grid[0][0] = 1  # type: ignore[index]

    def test_values_are_binary(self):
        symbol = build_symbol("binary values", correction_level="H", mask=6)
        assert {cell for row in symbol.grid for cell in row} == {0, 1}

    def test_identical_inputs_give_identical_grids(self):
        first = build_symbol("same input", correction_level="M", mask=4, min_version=3)
        second = build_symbol("same input", correction_level="M", mask=4, min_version=3)
        assert first.grid == second.grid

    def test_min_version_raises_version(self):
        symbol = build_symbol("tiny", min_version=10)
        assert symbol.version == 10
        assert symbol.size == 57

    def test_detected_version_wins_over_smaller_minimum(self):
        symbol = build_symbol("x" * 100, min_version=2)
        assert symbol.version == detect_version("x" * 100, "L")

    def test_max_bits_data(self):
        assert build_symbol("1").max_bits_data == 26 * 8
        assert build_symbol("1").icon_area == 31

    def test_options_object(self):
        options = SymbolOptions(correction_level=CorrectionLevel.H, mask=2)
        symbol = build_symbol("with options", options)
        assert (symbol.correction_level, symbol.mask) == (CorrectionLevel.H, 2)

    def test_options_and_kwargs_are_exclusive(self):
        with pytest.raises(TypeError):
            build_symbol("x", SymbolOptions(), mask=1)


class TestIconPolicy:
    """An icon needs version 2 or more and at least level Q."""

    def test_icon_upgrades_low_levels_and_version(self):
        symbol = build_symbol("icon", correction_level="L", icon=True)
        assert symbol.correction_level is CorrectionLevel.Q
        assert symbol.version >= 2

    def test_icon_upgrades_medium(self):
        assert build_symbol("icon", correction_level="M", icon=True).correction_level is CorrectionLevel.Q

    def test_icon_keeps_high(self):
        assert build_symbol("icon", correction_level="H", icon=True).correction_level is CorrectionLevel.H

    def test_icon_keeps_larger_minimum(self):
        assert build_symbol("icon", min_version=5, icon=True).version == 5


class TestDetectVersion:

    def test_first_version_that_fits(self):
        assert detect_version("a" * 17, "L") == 1
        assert detect_version("a" * 18, "L") == 2

    def test_mode_affects_capacity(self):
        assert detect_version("1" * 41, "L") == 1
        assert detect_version("A" * 26, "L") == 2

    def test_too_long_for_any_version(self):
        with pytest.raises(UnsupportedVersionError):
            detect_version("a" * 2954, "L")


class TestErrors:

    def test_unsupported_level(self):
        with pytest.raises(ConfigurationError):
            build_symbol("x", correction_level="Z")

    @pytest.mark.parametrize("mask", [-1, 8])
    def test_unsupported_mask(self, mask):
        with pytest.raises(ConfigurationError):
            build_symbol("x", mask=mask)

    def test_unsupported_min_version(self):
        with pytest.raises(UnsupportedVersionError):
            build_symbol("x", min_version=41)

    def test_errors_are_value_errors(self):
        assert issubclass(CapacityError, ValueError)
        assert issubclass(ConfigurationError, ValueError)


class TestSymbolOptionsFromMapping:

    def test_parses_strings(self):
        options = SymbolOptions.from_mapping({"minVersion": "3", "correctionLevel": "h", "mask": "5", "icon": "true"})
        assert options == SymbolOptions(min_version=3, correction_level=CorrectionLevel.H, mask=5, icon=True)

    def test_empty_values_use_defaults(self):
        assert SymbolOptions.from_mapping({"mask": "", "minVersion": None}) == SymbolOptions()

    def test_bad_integer(self):
        with pytest.raises(ConfigurationError):
            SymbolOptions.from_mapping({"mask": "five"})

    def test_resolved_is_identity_without_icon(self):
        options = SymbolOptions(mask=3)
        assert options.resolved() is options


class TestMatrixViews:

    def test_border(self):
        symbol = build_symbol("border")
        matrix = symbol.get_matrix(border=4)
        assert len(matrix) == symbol.size + 8
        assert matrix[0] == [0] * (symbol.size + 8)
        assert matrix[4][4:4 + symbol.size] == list(symbol.grid[0])

    def test_debug_grid_is_separate(self):
        symbol = build_symbol("debug")
        debug = symbol.debug_grid()
        assert debug[0][0] == -1
        assert symbol.grid[0][0] == 1

    def test_to_text(self):
        text = build_symbol("text").to_text(dark="#", light=".")
        lines = text.splitlines()
        assert len(lines) == 21
        assert lines[0].startswith("#######.")
