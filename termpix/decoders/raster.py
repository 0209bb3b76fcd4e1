"""Decodificador genérico de imágenes rasterizadas con Pillow."""

from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from termpix.core.errors import DecodeError
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext


def decode_image(data: bytes) -> RasterImage:
    """
    Abre cualquier formato que entienda Pillow (PNG, JPEG, GIF, WebP...).

    En formatos animados sólo se usa el primer fotograma.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return RasterImage.from_pil(img)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Failed to load image: {exc}") from exc


def decode(data: bytes, extension: str, context: DecodeContext) -> RasterImage:  # noqa: ARG001
    return decode_image(data)
