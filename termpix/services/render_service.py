"""Prepara la imagen decodificada y la envía al destino de salida."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

import logging

from termpix.core.config import get_settings
from termpix.core.enums import TransmissionMode
from termpix.models.color import Color
from termpix.models.raster import RasterImage
from termpix.models.request import SizeRequest
from termpix.models.terminal import TerminalGeometry
from termpix.services.compositor_service import composite_background
from termpix.services.dimension_service import plan_dimensions
from termpix.services.encoder_service import EncoderService


@dataclass
class RenderResult:
    width: int
    height: int
    resized: bool = False
    composited: bool = False
    frames: int = 0  # 0 cuando se escribe a fichero
    bytes_written: int = 0


class RenderService:
    """
    Redimensiona, compone sobre el fondo (opcional) y codifica una imagen.
    """

    def __init__(
        self,
        terminal: TerminalGeometry,
        size_request: SizeRequest | None = None,
        background: Color | None = None,
        mode: TransmissionMode | None = None,
        to_file: bool = False,
        encoder: EncoderService | None = None,
    ) -> None:
        settings = get_settings()
        self.terminal = terminal
        self.size_request = size_request or SizeRequest()
        self.background = background
        self.mode = mode or settings.transmission_mode
        self.to_file = to_file
        self.resize_filter = settings.resize_filter
        self.encoder = encoder or EncoderService(chunk_size=settings.chunk_size)
        self.logger = logging.getLogger(__name__)

    def prepare(self, image: RasterImage) -> RasterImage:
        """Aplica tamaño y fondo; no escribe nada."""
        width, height = plan_dimensions(image.size, self.size_request, self.terminal)

        final = image
        if width != 0 and height != 0 and (width, height) != image.size:
            final = final.resized(width, height, self.resize_filter)

        if self.background is not None:
            final = composite_background(final, self.background)
        return final

    def render(self, stream: BinaryIO, image: RasterImage) -> RenderResult:
        """
        Escribe la imagen en `stream` y devuelve un resumen de lo hecho.
        """
        final = self.prepare(image)
        result = RenderResult(
            width=final.width,
            height=final.height,
            resized=final.size != image.size,
            composited=self.background is not None,
        )

        if self.to_file:
            result.bytes_written = self.encoder.write_file(stream, final)
        else:
            result.frames = self.encoder.write_terminal(stream, final, self.mode)

        self.logger.debug("Rendered image: %s", result)
        return result
