from __future__ import annotations

import base64
import binascii
import io
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from flask import Flask, jsonify, request, send_file

from qr_grid.render import RenderOptions, render_png
from qr_grid.symbol import Symbol, SymbolOptions, build_symbol

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 4096


@dataclass
class QRRequest:
    data: str
    options: SymbolOptions
    render: RenderOptions
    icon: Optional[bytes]

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "QRRequest":
        data = str(payload.get("data") or "")
        if not data:
            raise ValueError("data must not be empty")

        icon = None
        icon_data_url = payload.get("iconData")
        if isinstance(icon_data_url, str) and icon_data_url:
            icon = decode_data_url(icon_data_url)
            if icon is None:
                raise ValueError("iconData must be a base64 data URL")

        options = SymbolOptions.from_mapping({**payload, "icon": icon is not None})

        image_size = None
        raw_size = payload.get("size")
        if raw_size not in (None, ""):
            try:
                image_size = int(raw_size)  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                raise ValueError("size must be an integer") from exc
            if not 0 < image_size <= MAX_IMAGE_SIZE:
                raise ValueError(f"size must be between 1 and {MAX_IMAGE_SIZE}")

        render = RenderOptions(
            image_size=image_size,
            background=str(payload.get("background") or "#FFFFFF"),
            radius=payload.get("radius") or 0,  # type: ignore[arg-type]
            margin=payload.get("margin") or 0,  # type: ignore[arg-type]
            debug=str(payload.get("debug", "")).lower() in {"1", "true", "yes", "on"},
        )
        return cls(data=data, options=options, render=render, icon=icon)


def request_payload() -> Dict[str, object]:
    if request.method == "GET":
        return {key: value for key, value in request.args.items()}
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {}
    return payload


def decode_data_url(data_url: str) -> Optional[bytes]:
    if not data_url.startswith("data:"):
        return None

    try:
        header, encoded = data_url.split(",", 1)
    except ValueError:
        return None

    if "base64" not in header:
        return None

    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None


def symbol_to_json(symbol: Symbol) -> Dict[str, object]:
    return {
        "version": symbol.version,
        "correctionLevel": symbol.correction_level.value,
        "mask": symbol.mask,
        "size": symbol.size,
        "maxBitsData": symbol.max_bits_data,
        "grid": [list(row) for row in symbol.grid],
    }


def create_app() -> Flask:
    app = Flask(__name__)

    @app.route("/api/qr-matrix", methods=["GET", "POST"])
    def qr_matrix():
        try:
            qr_request = QRRequest.from_payload(request_payload())
            symbol = build_symbol(qr_request.data, qr_request.options)
        except ValueError as exc:
            return jsonify({"message": str(exc)}), 400
        return jsonify(symbol_to_json(symbol))

    @app.route("/api/qr-preview", methods=["GET", "POST"])
    def qr_preview():
        try:
            qr_request = QRRequest.from_payload(request_payload())
            symbol = build_symbol(qr_request.data, qr_request.options)
            png = render_png(symbol, qr_request.render, qr_request.icon)
        except ValueError as exc:
            return jsonify({"message": str(exc)}), 400

        logger.debug("preview for version %d-%s", symbol.version, symbol.correction_level.value)
        return send_file(io.BytesIO(png), mimetype="image/png")

    return app


app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
