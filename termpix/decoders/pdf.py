"""Rasterizado de páginas PDF con PyMuPDF."""

from __future__ import annotations

import logging
from typing import List

import fitz  # PyMuPDF
from PIL import Image

from termpix.core.config import get_settings
from termpix.core.errors import DecodeError
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext

logger = logging.getLogger(__name__)


def looks_like_pdf(data: bytes) -> bool:
    return data.startswith(b"%PDF")


def _target_width(context: DecodeContext) -> int | None:
    width = context.target_width
    max_width = get_settings().pdf_max_width
    if width is not None and max_width is not None:
        width = min(width, max_width)
    return width


def _render_page(page: "fitz.Page", width: int | None) -> Image.Image:
    """Rasteriza una página (con anotaciones y formularios) a RGBA."""
    zoom = 1.0
    if width and page.rect.width > 0:
        zoom = width / page.rect.width
    pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=True)
    return Image.frombytes("RGBA", (pix.width, pix.height), pix.samples)


def decode(data: bytes, extension: str, context: DecodeContext) -> RasterImage:  # noqa: ARG001
    """
    Renderiza las páginas seleccionadas (todas si no hay selección) y las
    apila verticalmente en una sola imagen.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise DecodeError(f"Failed to open PDF: {exc}") from exc

    try:
        page_count = doc.page_count
        if context.pages is not None:
            if any(i >= page_count for i in context.pages.indices):
                raise DecodeError(f"Page index out of range (must be <= {page_count})")
            selected = list(context.pages.indices)
        else:
            selected = list(range(page_count))

        width = _target_width(context)
        images: List[Image.Image] = []
        for page_index in selected:
            images.append(_render_page(doc.load_page(page_index), width))
    finally:
        doc.close()

    if not images:
        raise DecodeError("No pages found in PDF")

    logger.debug("Rendered %s PDF page(s) at width %s", len(images), width)

    # Lienzo transparente tan ancho como la página más ancha
    canvas = Image.new(
        "RGBA",
        (max(img.width for img in images), sum(img.height for img in images)),
        (0, 0, 0, 0),
    )
    current_y = 0
    for img in images:
        canvas.paste(img, (0, current_y))
        current_y += img.height
    return RasterImage.from_pil(canvas)
