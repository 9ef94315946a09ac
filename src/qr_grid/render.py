"""Raster rendering of symbols with Pillow."""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Union

from PIL import Image, ImageDraw

from .errors import ConfigurationError
from .symbol import Symbol

logger = logging.getLogger(__name__)

MAX_MARGIN_RATIO = 0.2
MAX_RADIUS_RATIO = 0.5

DEBUG_COLORS = {-1: "red", -2: "green", -3: "yellow"}


@dataclass(frozen=True)
class SizeValue:
    """A length given either in pixels or as a percentage of a reference."""

    amount: float = 0.0
    percent: bool = False

    @classmethod
    def parse(cls, value: Union["SizeValue", int, float, str, None]) -> "SizeValue":
        if isinstance(value, SizeValue):
            return value
        if value is None or value == "":
            return cls(0.0)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(float(value))
        if isinstance(value, str):
            text = value.strip().lower()
            percent = text.endswith("%")
            if percent:
                text = text[:-1]
            elif text.endswith("px"):
                text = text[:-2]
            try:
                amount = float(text)
            except ValueError as exc:
                raise ConfigurationError(f"invalid size value: {value!r}") from exc
            return cls(amount, percent)
        raise ConfigurationError(f"invalid size value: {value!r}")

    def resolve(self, reference: float, maximum: Optional[float] = None) -> float:
        value = self.amount / 100.0 * reference if self.percent else self.amount
        value = max(0.0, value)
        if maximum is not None:
            value = min(value, maximum)
        return value


@dataclass(frozen=True)
class RenderOptions:
    image_size: Optional[int] = None
    background: str = "#FFFFFF"
    dark: str = "#000000"
    light: str = "#FFFFFF"
    radius: SizeValue = field(default_factory=SizeValue)
    margin: SizeValue = field(default_factory=SizeValue)
    debug: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius", SizeValue.parse(self.radius))
        object.__setattr__(self, "margin", SizeValue.parse(self.margin))
        if self.image_size is not None and self.image_size <= 0:
            raise ConfigurationError("image size must be positive")


def icon_side(symbol: Symbol) -> int:
    """Side, in modules, of the centered square an icon may cover (always odd)."""
    side = math.isqrt(symbol.icon_area)
    if side % 2 == 0:
        side -= 1
    return max(side, 0)


def render_symbol(
    symbol: Symbol,
    options: Optional[RenderOptions] = None,
    icon: Optional[bytes] = None,
) -> Image.Image:
    options = options or RenderOptions()
    image_size = options.image_size or symbol.size * 10
    module_size = image_size // symbol.size
    if module_size <= 0:
        raise ConfigurationError(f"image size {image_size} is smaller than the symbol ({symbol.size} modules)")
    padding = (image_size % symbol.size) // 2
    margin = options.margin.resolve(module_size, module_size * MAX_MARGIN_RATIO)
    point = module_size - margin
    radius = options.radius.resolve(module_size, point * MAX_RADIUS_RATIO)

    image = Image.new("RGBA", (image_size, image_size), options.background)
    draw = ImageDraw.Draw(image)
    grid = symbol.debug_grid() if options.debug else symbol.grid
    for y, row in enumerate(grid):
        for x, cell in enumerate(row):
            if cell < 0:
                fill = DEBUG_COLORS.get(cell, "yellow")
            else:
                fill = options.dark if cell else options.light
            left = padding + x * module_size
            top = padding + y * module_size
            box = (left, top, left + point - 1, top + point - 1)
            if radius <= 0:
                draw.rectangle(box, fill=fill)
            else:
                draw.rounded_rectangle(box, radius=radius, fill=fill)

    if icon:
        image = add_icon(image, symbol, icon, module_size, options.background)
    return image


def add_icon(image: Image.Image, symbol: Symbol, icon_bytes: bytes, module_size: int, background: str) -> Image.Image:
    try:
        icon = Image.open(io.BytesIO(icon_bytes))
        icon.load()
    except (OSError, ValueError) as exc:
        raise ConfigurationError("icon is not a readable image") from exc

    side = icon_side(symbol) * module_size
    if side <= 0:
        logger.debug("version %d leaves no room for an icon", symbol.version)
        return image
    image = image.convert("RGBA")
    icon = icon.convert("RGBA").resize((side, side), Image.LANCZOS)

    width, height = image.size
    offset = ((width - side) // 2, (height - side) // 2)
    ImageDraw.Draw(image).rectangle(
        (offset[0], offset[1], offset[0] + side - 1, offset[1] + side - 1), fill=background
    )
    image.paste(icon, offset, mask=icon)
    return image


def render_png(symbol: Symbol, options: Optional[RenderOptions] = None, icon: Optional[bytes] = None) -> bytes:
    buffer = io.BytesIO()
    render_symbol(symbol, options, icon).save(buffer, format="PNG")
    return buffer.getvalue()
