"""Exceptions raised while building QR symbols."""

from __future__ import annotations


class QrError(ValueError):
    """Base class for every error raised by :mod:`qr_grid`."""


class ConfigurationError(QrError):
    """An option (level, mask, mode, version) is not supported."""


class UnsupportedVersionError(ConfigurationError):
    """The version is outside 1..40 or no version can hold the content."""


class CapacityError(QrError):
    """The content does not fit the chosen version, level and mode."""

    def __init__(self, mode: str, version: int, level: str, limit: int, length: int):
        self.mode = mode
        self.version = version
        self.level = level
        self.limit = limit
        self.length = length
        super().__init__(
            f"data is too long for version {version}, ecc level {level} and mode {mode}: "
            f"max length {limit}, given length {length}"
        )
