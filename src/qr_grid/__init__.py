"""QR symbol encoding: text in, module grid out."""

from .encoder import Encoder, detect_mode, encode, get_capacity
from .errors import CapacityError, ConfigurationError, QrError, UnsupportedVersionError
from .matrix import MatrixBuilder
from .symbol import Symbol, SymbolOptions, build_symbol, detect_version
from .tables import CorrectionLevel, Mode, symbol_size, version_profile

__all__ = [
    "CapacityError",
    "ConfigurationError",
    "CorrectionLevel",
    "Encoder",
    "MatrixBuilder",
    "Mode",
    "QrError",
    "Symbol",
    "SymbolOptions",
    "UnsupportedVersionError",
    "build_symbol",
    "detect_mode",
    "detect_version",
    "encode",
    "get_capacity",
    "symbol_size",
    "version_profile",
]
