"""Rasterizado de SVG con CairoSVG."""

from __future__ import annotations

import cairosvg

from termpix.core.errors import DecodeError
from termpix.decoders.raster import decode_image
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext


def looks_like_svg(data: bytes) -> bool:
    return data.startswith(b"<svg") or data.startswith(b"<?xml")


def decode(data: bytes, extension: str, context: DecodeContext) -> RasterImage:  # noqa: ARG001
    """
    Renderiza el SVG a su tamaño intrínseco y lo devuelve como RGBA.
    """
    try:
        png_data = cairosvg.svg2png(bytestring=data)
    except Exception as exc:
        raise DecodeError(f"Failed to parse SVG: {exc}") from exc
    return decode_image(png_data)
