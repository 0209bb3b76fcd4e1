"""Composición de imágenes con transparencia sobre un fondo opaco.

La mezcla usa aritmética entera truncada por canal:
`out = (src * a + bg * (255 - a)) // 255`. Con a == 255 el resultado es el
píxel original y con a == 0 es el color de fondo.
"""

from __future__ import annotations

import logging
import re

from PIL import Image, ImageMath

from termpix.core.errors import MalformedSelectionError
from termpix.models.color import Color
from termpix.models.raster import RasterImage

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"[0-9a-fA-F]{6}")


def parse_color(text: str) -> Color:
    """
    Lee un color "RRGGBB" (con "#" opcional). El alfa siempre es 255.
    """
    value = text.strip()
    if value.startswith("#"):
        value = value[1:]
    if not _HEX_COLOR.fullmatch(value):
        raise MalformedSelectionError(f"Invalid color format: {text!r}")
    return Color(
        r=int(value[0:2], 16),
        g=int(value[2:4], 16),
        b=int(value[4:6], 16),
        a=255,
    )


def _blend_band(band: Image.Image, alpha: Image.Image, background: int) -> Image.Image:
    # Las bandas "L" se promueven a enteros de 32 bits; "/" entre enteros trunca
    blended = ImageMath.lambda_eval(
        lambda args: (args["src"] * args["alpha"] + background * (255 - args["alpha"])) / 255,
        src=band,
        alpha=alpha,
    )
    return blended.convert("L")


def composite_background(image: RasterImage, color: Color) -> RasterImage:
    """
    Mezcla `image` sobre `color` y devuelve una imagen totalmente opaca.
    """
    if not image.has_transparency():
        return image

    source = image.to_pil()
    red, green, blue, alpha = source.split()
    bands = [
        _blend_band(band, alpha, bg)
        for band, bg in zip((red, green, blue), (color.r, color.g, color.b))
    ]
    opaque = Image.new("L", source.size, 255)
    result = Image.merge("RGBA", (*bands, opaque))
    logger.debug("Composited %sx%s image on %s", image.width, image.height, color.as_tuple())
    return RasterImage.from_pil(result)
