"""Version selection and symbol assembly."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple, Union

from .encoder import Encoder, data_length, detect_mode
from .errors import ConfigurationError, UnsupportedVersionError
from .matrix import MatrixBuilder, check_mask
from .tables import MAX_VERSION, MIN_VERSION, CorrectionLevel, check_version, version_profile
from .tables import correction_level as parse_level

logger = logging.getLogger(__name__)

# Share of the data modules a centered icon may cover.
ICON_AREA_RATIO = 0.15


def detect_version(content: str, level: Union[str, CorrectionLevel] = CorrectionLevel.L) -> int:
    """Return the smallest version whose capacity holds ``content``."""
    level = parse_level(level)
    mode = detect_mode(content)
    length = data_length(content, mode)
    for version in range(MIN_VERSION, MAX_VERSION + 1):
        if length <= version_profile(version).capacity(level).characters(mode):
            return version
    raise UnsupportedVersionError(
        f"no version can hold {length} {mode.value} characters at ecc level {level.value}"
    )


def _parse_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{label} must be an integer") from exc


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class SymbolOptions:
    min_version: int = MIN_VERSION
    correction_level: CorrectionLevel = CorrectionLevel.L
    mask: int = 0
    icon: bool = False

    def __post_init__(self) -> None:
        check_version(self.min_version)
        object.__setattr__(self, "correction_level", parse_level(self.correction_level))
        check_mask(self.mask)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "SymbolOptions":
        """Build options from loosely typed input such as query strings or JSON."""
        def pick(*keys: str) -> Any:
            for key in keys:
                value = payload.get(key)
                if value not in (None, ""):
                    return value
            return None

        min_version = pick("minVersion", "min_version")
        level = pick("correctionLevel", "correction_level", "errorCorrection", "ecc")
        mask = pick("mask")
        return cls(
            min_version=MIN_VERSION if min_version is None else _parse_int(min_version, "minimum version"),
            correction_level=CorrectionLevel.L if level is None else level,
            mask=0 if mask is None else _parse_int(mask, "mask"),
            icon=_parse_bool(pick("icon") or False),
        )

    def resolved(self) -> "SymbolOptions":
        """Apply the icon policy: version 2 or more, and at least level Q."""
        if not self.icon:
            return self
        level = self.correction_level
        if level in (CorrectionLevel.L, CorrectionLevel.M):
            level = CorrectionLevel.Q
        return SymbolOptions(
            min_version=max(self.min_version, 2),
            correction_level=level,
            mask=self.mask,
            icon=True,
        )


@dataclass(frozen=True)
class Symbol:
    """A finished QR symbol. The grid is immutable."""

    content: str
    version: int
    correction_level: CorrectionLevel
    mask: int
    grid: Tuple[Tuple[int, ...], ...] = field(repr=False)
    _reserved: Tuple[Tuple[int, ...], ...] = field(repr=False, compare=False)

    @property
    def size(self) -> int:
        return len(self.grid)

    @property
    def max_bits_data(self) -> int:
        return version_profile(self.version).total_codewords * 8

    @property
    def icon_area(self) -> int:
        """Number of modules a centered icon may occupy."""
        return int(self.max_bits_data * ICON_AREA_RATIO)

    def get_matrix(self, border: int = 0) -> List[List[int]]:
        """Copy of the grid surrounded by ``border`` light modules."""
        if border <= 0:
            return [list(row) for row in self.grid]
        new_size = self.size + border * 2
        result = [[0] * new_size for _ in range(new_size)]
        for y, row in enumerate(self.grid):
            for x, value in enumerate(row):
                result[y + border][x + border] = value
        return result

    def debug_grid(self) -> List[List[int]]:
        """Grid copy where reserved cells are negative (-1 dark, -3 light)."""
        return [list(row) for row in self._reserved]

    def to_text(self, dark: str = "##", light: str = "  ", border: int = 0) -> str:
        return "\n".join(
            "".join(dark if value else light for value in row)
            for row in self.get_matrix(border)
        )


def build_symbol(content: str, options: Optional[SymbolOptions] = None, **kwargs: Any) -> Symbol:
    """Encode ``content`` into a :class:`Symbol`.

    Options may be given as a :class:`SymbolOptions` or as keyword arguments
    (``min_version``, ``correction_level``, ``mask``, ``icon``).
    """
    if options is None:
        options = SymbolOptions(**kwargs)
    elif kwargs:
        raise TypeError("pass either options or keyword arguments, not both")
    resolved = options.resolved()
    if resolved != options:
        logger.debug(
            "icon requested: level %s -> %s, minimum version %d -> %d",
            options.correction_level.value,
            resolved.correction_level.value,
            options.min_version,
            resolved.min_version,
        )
    level = resolved.correction_level
    version = max(detect_version(content, level), resolved.min_version)

    encoder = Encoder(version, level)
    bits = encoder.encode(content)
    builder = MatrixBuilder(version, level)
    builder.place_data(bits)
    builder.apply_mask(resolved.mask)
    logger.debug(
        "built version %d-%s symbol (%s mode, mask %d, %d bits)",
        version,
        level.value,
        detect_mode(content).value,
        resolved.mask,
        len(bits),
    )
    return Symbol(
        content=content,
        version=version,
        correction_level=level,
        mask=resolved.mask,
        grid=tuple(tuple(row) for row in builder.modules),
        _reserved=tuple(tuple(row) for row in builder.reserved_view()),
    )
