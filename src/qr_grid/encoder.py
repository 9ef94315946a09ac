"""Bit stream encoding: mode selection, padding, blocks and interleaving."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Union

from .errors import CapacityError, ConfigurationError
from .reed_solomon import ReedSolomonGenerator
from .tables import CorrectionLevel, Mode, check_version, correction_level, version_profile

ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"

PAD_CODEWORDS = (0xEC, 0x11)

_NUMERIC = re.compile(r"[0-9]*")
_ALPHANUMERIC = re.compile(r"[0-9A-Z $%*+\-./:]*")

SUPPORTED_MODES = (Mode.NUMERIC, Mode.ALPHANUMERIC, Mode.BINARY)


def detect_mode(text: str) -> Mode:
    """Return the most compact mode able to represent ``text``.

    Kanji text is not recognised and falls back to binary.
    """
    if _NUMERIC.fullmatch(text):
        return Mode.NUMERIC
    if _ALPHANUMERIC.fullmatch(text):
        return Mode.ALPHANUMERIC
    return Mode.BINARY


def data_length(text: str, mode: Mode) -> int:
    """Value of the character-count field: bytes for binary, characters otherwise."""
    if mode is Mode.BINARY:
        return len(text.encode("utf-8"))
    return len(text)


def check_mode(mode: Union[str, Mode]) -> Mode:
    try:
        mode = Mode(mode)
    except ValueError as exc:
        raise ConfigurationError(f"unsupported mode: {mode!r}") from exc
    if mode not in SUPPORTED_MODES:
        raise ConfigurationError(f"unsupported mode: {mode.value}")
    return mode


def get_capacity(version: int, level: Union[str, CorrectionLevel], mode: Union[str, Mode]) -> int:
    """Maximum content length for ``version``, ``level`` and ``mode``."""
    check_version(version)
    level = correction_level(level)
    mode = check_mode(mode)
    return version_profile(version).capacity(level).characters(mode)


class BitBuffer:
    def __init__(self) -> None:
        self.bits: List[int] = []

    def __len__(self) -> int:
        return len(self.bits)

    def append_bits(self, value: int, length: int) -> None:
        for i in reversed(range(length)):
            self.bits.append((value >> i) & 1)

    def append_terminator(self, capacity_bits: int) -> None:
        terminator = max(0, min(4, capacity_bits - len(self.bits)))
        self.bits.extend([0] * terminator)
        extra = (8 - len(self.bits) % 8) % 8
        self.bits.extend([0] * extra)

    def append_padding(self, capacity_bits: int) -> None:
        """Fill up to ``capacity_bits`` with alternating 0xEC/0x11 codewords."""
        count = (capacity_bits - len(self.bits)) // 8
        for pad in pad_codewords(count):
            self.append_bits(pad, 8)

    def to_codewords(self) -> List[int]:
        codewords = []
        for i in range(0, len(self.bits), 8):
            chunk = 0
            for bit in self.bits[i:i + 8]:
                chunk = (chunk << 1) | bit
            codewords.append(chunk)
        return codewords


def pad_codewords(count: int) -> List[int]:
    return [PAD_CODEWORDS[i % 2] for i in range(count)]


def block_sizes(total: int, blocks: int) -> List[int]:
    """Split ``total`` codewords into ``blocks``; the last blocks get the remainder."""
    size, remainder = divmod(total, blocks)
    return [size + (1 if i >= blocks - remainder else 0) for i in range(blocks)]


def divide_in_blocks(data: Sequence[int], sizes: Sequence[int]) -> List[List[int]]:
    blocks = []
    index = 0
    for size in sizes:
        blocks.append(list(data[index:index + size]))
        index += size
    return blocks


def interleave(data_blocks: Sequence[Sequence[int]], ecc_blocks: Sequence[Sequence[int]]) -> List[int]:
    result: List[int] = []
    for blocks in (data_blocks, ecc_blocks):
        longest = max((len(block) for block in blocks), default=0)
        for i in range(longest):
            for block in blocks:
                if i < len(block):
                    result.append(block[i])
    return result


def codewords_to_bits(codewords: Sequence[int]) -> List[int]:
    return [(codeword >> (7 - i)) & 1 for codeword in codewords for i in range(8)]


class Encoder:
    """Turns text into the final interleaved bit sequence of one symbol."""

    def __init__(self, version: int, level: Union[str, CorrectionLevel] = CorrectionLevel.L):
        self.version = check_version(version)
        self.level = correction_level(level)
        self.profile = version_profile(self.version)
        self.capacity = self.profile.capacity(self.level)

    @property
    def data_bits_capacity(self) -> int:
        return self.capacity.bits

    @property
    def data_block_sizes(self) -> List[int]:
        ecc = self.capacity.error_correction
        return block_sizes(self.capacity.codewords, ecc.blocks)

    @property
    def ecc_block_sizes(self) -> List[int]:
        ecc = self.capacity.error_correction
        return block_sizes(ecc.codewords, ecc.blocks)

    def resolve_mode(self, text: str, mode: Optional[Union[str, Mode]] = None) -> Mode:
        detected = detect_mode(text)
        if mode is None:
            return detected
        mode = check_mode(mode)
        if SUPPORTED_MODES.index(mode) < SUPPORTED_MODES.index(detected):
            raise ConfigurationError(f"text cannot be encoded in {mode.value} mode")
        return mode

    def check_capacity(self, text: str, mode: Mode) -> int:
        length = data_length(text, mode)
        limit = self.capacity.characters(mode)
        if length > limit:
            raise CapacityError(mode.value, self.version, self.level.value, limit, length)
        return length

    def data_codewords(self, text: str, mode: Optional[Union[str, Mode]] = None) -> List[int]:
        """Header, payload, terminator and padding packed into codewords."""
        mode = self.resolve_mode(text, mode)
        length = self.check_capacity(text, mode)
        buffer = BitBuffer()
        buffer.append_bits(mode.indicator, 4)
        buffer.append_bits(length, mode.count_bits(self.version))
        _PAYLOAD_ENCODERS[mode](buffer, text)
        buffer.append_terminator(self.data_bits_capacity)
        buffer.append_padding(self.data_bits_capacity)
        return buffer.to_codewords()

    def encode_codewords(self, text: str, mode: Optional[Union[str, Mode]] = None) -> List[int]:
        data = self.data_codewords(text, mode)
        data_blocks = divide_in_blocks(data, self.data_block_sizes)
        generators: Dict[int, ReedSolomonGenerator] = {}
        ecc_blocks = []
        for block, degree in zip(data_blocks, self.ecc_block_sizes):
            if degree not in generators:
                generators[degree] = ReedSolomonGenerator(degree)
            ecc_blocks.append(generators[degree].remainder(block))
        return interleave(data_blocks, ecc_blocks)

    def encode(self, text: str, mode: Optional[Union[str, Mode]] = None) -> List[int]:
        """Return ``total_codewords * 8`` bits ready for placement."""
        return codewords_to_bits(self.encode_codewords(text, mode))


def _encode_numeric(buffer: BitBuffer, text: str) -> None:
    for i in range(0, len(text), 3):
        group = text[i:i + 3]
        buffer.append_bits(int(group), (4, 7, 10)[len(group) - 1])


def _encode_alphanumeric(buffer: BitBuffer, text: str) -> None:
    for i in range(0, len(text), 2):
        first = ALPHANUMERIC_CHARSET.index(text[i])
        if i + 1 < len(text):
            buffer.append_bits(first * 45 + ALPHANUMERIC_CHARSET.index(text[i + 1]), 11)
        else:
            buffer.append_bits(first, 6)


def _encode_binary(buffer: BitBuffer, text: str) -> None:
    for byte in text.encode("utf-8"):
        buffer.append_bits(byte, 8)


_PAYLOAD_ENCODERS = {
    Mode.NUMERIC: _encode_numeric,
    Mode.ALPHANUMERIC: _encode_alphanumeric,
    Mode.BINARY: _encode_binary,
}


def encode(text: str, version: int, level: Union[str, CorrectionLevel] = CorrectionLevel.L) -> List[int]:
    return Encoder(version, level).encode(text)
