"""Serialización de imágenes al protocolo gráfico de kitty.

Cada trozo viaja como `ESC _ G <cabecera?> m=<0|1> ; <base64> ESC \\`. La
cabecera (acción, formato y tamaño) sólo aparece en el primer trozo; `m=1`
indica que quedan más trozos y el último lleva `m=0`. Tras el último trozo
se escribe un salto de línea para que el prompt empiece en una línea nueva.

Protocol: https://sw.kovidgoyal.net/kitty/graphics-protocol/
"""

from __future__ import annotations

import base64
import logging
import zlib
from dataclasses import dataclass
from io import BytesIO
from typing import BinaryIO, Iterator

from termpix.core.enums import TransmissionMode
from termpix.core.errors import EncodingError
from termpix.models.raster import RasterImage

logger = logging.getLogger(__name__)

ESCAPE_START = b"\x1b_G"
ESCAPE_END = b"\x1b\\"
CLEAR_COMMAND = ESCAPE_START + b"a=d" + ESCAPE_END

# Códigos de formato del protocolo
FORMAT_PNG = 100
FORMAT_RGBA = 32


@dataclass(frozen=True)
class TransmissionChunk:
    data: str  # trozo de base64
    first: bool
    more: bool  # True si le siguen más trozos


def encode_png(image: RasterImage) -> bytes:
    """Codifica la imagen como PNG (sin metadatos, salida determinista)."""
    buffer = BytesIO()
    image.to_pil().save(buffer, format="PNG")
    return buffer.getvalue()


def build_payload(image: RasterImage, mode: TransmissionMode) -> tuple[str, bytes]:
    """
    Devuelve la cabecera del primer trozo y los bytes a transmitir.
    """
    if mode == TransmissionMode.PNG:
        return f"a=T,f={FORMAT_PNG},", encode_png(image)

    header = f"a=T,f={FORMAT_RGBA},s={image.width},v={image.height},"
    if mode == TransmissionMode.ZLIB:
        try:
            payload = zlib.compress(image.pixels)
        except zlib.error as exc:
            raise EncodingError(f"Failed to compress payload: {exc}") from exc
        return header + "o=z,", payload

    return header, image.pixels


def iter_chunks(encoded: str, chunk_size: int) -> Iterator[TransmissionChunk]:
    """
    Parte el base64 en trozos de `chunk_size` caracteres sin materializar la lista.

    Un payload vacío no produce ningún trozo.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    total = len(encoded)
    if total == 0:
        return

    pos = 0
    first = True
    while True:
        end = min(pos + chunk_size, total)
        yield TransmissionChunk(data=encoded[pos:end], first=first, more=end < total)
        if end >= total:
            return
        pos = end
        first = False


def frame_chunk(chunk: TransmissionChunk, header: str) -> bytes:
    """Envuelve un trozo en su secuencia de escape."""
    control = header if chunk.first else ""
    control += f"m={1 if chunk.more else 0};"
    return ESCAPE_START + control.encode("ascii") + chunk.data.encode("ascii") + ESCAPE_END


def iter_frames(
    image: RasterImage, mode: TransmissionMode, chunk_size: int
) -> Iterator[bytes]:
    """Genera, en orden, todas las tramas de la transmisión (sin el salto final)."""
    header, payload = build_payload(image, mode)
    encoded = base64.standard_b64encode(payload).decode("ascii")
    for chunk in iter_chunks(encoded, chunk_size):
        yield frame_chunk(chunk, header)


class EncoderService:
    """
    Escribe imágenes en un stream binario, como PNG o como transmisión kitty.
    """

    def __init__(self, chunk_size: int = 4096) -> None:
        self.chunk_size = chunk_size

    def write_terminal(
        self, stream: BinaryIO, image: RasterImage, mode: TransmissionMode
    ) -> int:
        """Escribe la transmisión completa y devuelve el número de tramas."""
        frames = 0
        try:
            for frame in iter_frames(image, mode, self.chunk_size):
                stream.write(frame)
                frames += 1
            stream.write(b"\n")
            stream.flush()
        except OSError as exc:
            raise EncodingError(f"Failed to write image to terminal: {exc}") from exc

        logger.debug(
            "Sent %sx%s image as %s in %s frame(s)", image.width, image.height, mode.value, frames
        )
        return frames

    def write_file(self, stream: BinaryIO, image: RasterImage) -> int:
        """Escribe la imagen como PNG tal cual, sin tramas ni escapes."""
        data = encode_png(image)
        try:
            stream.write(data)
            stream.flush()
        except OSError as exc:
            raise EncodingError(f"Failed to write PNG output: {exc}") from exc
        return len(data)

    @staticmethod
    def write_clear(stream: BinaryIO) -> None:
        """Borra las imágenes mostradas en el terminal."""
        try:
            stream.write(CLEAR_COMMAND)
            stream.flush()
        except OSError as exc:
            raise EncodingError(f"Failed to clear terminal images: {exc}") from exc
