"""Cálculo del tamaño final de la imagen respecto al terminal."""

from __future__ import annotations

import logging
import math

from termpix.models.request import SizeRequest
from termpix.models.terminal import TerminalGeometry

logger = logging.getLogger(__name__)


def _round(value: float) -> int:
    # Redondeo "half away from zero", no el redondeo bancario de round()
    return int(math.floor(value + 0.5))


def _exceeds_terminal(source: tuple[int, int], terminal: TerminalGeometry) -> bool:
    src_w, src_h = source
    return (terminal.width > 0 and src_w > terminal.width) or (
        terminal.height > 0 and src_h > terminal.height
    )


def plan_dimensions(
    source: tuple[int, int],
    request: SizeRequest,
    terminal: TerminalGeometry,
) -> tuple[int, int]:
    """
    Devuelve (ancho, alto) en píxeles para la imagen final.

    Sólo se fija un eje a la vez; el otro se deriva de la proporción de la
    imagen original.
    """
    src_w, src_h = source
    if src_w == 0 or src_h == 0:
        return src_w, src_h

    fill_width = request.fill_width
    fill_height = request.fill_height
    auto_resize = request.auto_resize

    # Si no se pidió nada, ajustamos sólo cuando la imagen no cabe
    if not (request.no_resize or fill_width or fill_height) and _exceeds_terminal(
        source, terminal
    ):
        auto_resize = True

    if auto_resize:
        if src_w / src_h > src_h / src_w:
            fill_width = True
        else:
            fill_height = True

    if request.width is not None:
        width = float(request.width)
        height = src_h * (width / src_w)
    elif request.height is not None:
        height = float(request.height)
        width = src_w * (height / src_h)
    elif fill_width:
        width = float(terminal.width)
        height = src_h * (width / src_w)
    elif fill_height:
        height = float(terminal.height)
        width = src_w * (height / src_h)
    else:
        width, height = float(src_w), float(src_h)

    planned = (max(1, _round(width)), max(1, _round(height)))
    logger.debug("Planned %sx%s -> %sx%s (%s)", src_w, src_h, planned[0], planned[1], request)
    return planned
