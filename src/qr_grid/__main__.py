"""Command line interface for generating QR symbols."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import render
from .errors import QrError
from .symbol import SymbolOptions, build_symbol

# Reserved cells are drawn as ":" (dark) or "." (light).
_DEBUG_CELLS = {1: "##", 0: "  ", -1: "::", -3: ".."}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qr_grid", description="Encode text as a QR symbol")
    data_group = parser.add_mutually_exclusive_group(required=True)
    data_group.add_argument("--text", help="Literal text/URL to encode")
    data_group.add_argument("--file", type=Path, help="Read the payload from a file")

    parser.add_argument("-o", "--output", type=Path, help="Write a PNG image here instead of printing the grid")
    parser.add_argument("--ecc", choices=["L", "M", "Q", "H"], default="L", help="Error correction level")
    parser.add_argument("--mask", type=int, choices=range(8), default=0, help="Mask pattern")
    parser.add_argument("--min-version", type=int, default=1, help="Smallest version to use")
    parser.add_argument("--icon", type=Path, help="Image composited at the center of the PNG")
    parser.add_argument("--size", type=int, help="PNG width/height in pixels (default: 10px per module)")
    parser.add_argument("--radius", default="0", help="Module corner radius, in px or %% of the module size")
    parser.add_argument("--margin", default="0", help="Gap between modules, in px or %% of the module size")
    parser.add_argument("--background", default="#FFFFFF", help="Background color of the PNG")
    parser.add_argument("--border", type=int, default=0, help="Quiet-zone width in modules (text output)")
    parser.add_argument("--debug", action="store_true", help="Highlight reserved modules")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr")
    return parser


def resolve_payload(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.file is not None:
        return args.file.read_text(encoding="utf-8")
    raise SystemExit("No payload provided")


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    payload = resolve_payload(args)
    icon_bytes = args.icon.read_bytes() if args.icon is not None else None

    try:
        options = SymbolOptions(
            min_version=args.min_version,
            correction_level=args.ecc,
            mask=args.mask,
            icon=icon_bytes is not None,
        )
        symbol = build_symbol(payload, options)
        if args.output is None:
            if args.debug:
                text = "\n".join("".join(_DEBUG_CELLS[v] for v in row) for row in symbol.debug_grid())
            else:
                text = symbol.to_text(border=args.border)
            sys.stdout.write(text + "\n")
            return
        render_options = render.RenderOptions(
            image_size=args.size,
            background=args.background,
            radius=args.radius,
            margin=args.margin,
            debug=args.debug,
        )
        args.output.write_bytes(render.render_png(symbol, render_options, icon_bytes))
    except QrError as exc:
        parser.exit(2, f"error: {exc}\n")
    parser.exit(0, f"Saved version {symbol.version}-{symbol.correction_level.value} symbol to {args.output}\n")


if __name__ == "__main__":
    main()
