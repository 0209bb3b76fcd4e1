"""Detección de formato y reparto a los decodificadores.

El registro es una lista ordenada de `DecoderEntry` (predicado + función de
decodificación). Sólo se registran los decodificadores cuya librería está
instalada; si falta alguna, su rama simplemente no existe. Si ningún
predicado coincide se intenta una decodificación raster genérica y, como
último recurso, se interpreta el contenido como la ruta de otro fichero
(una sola vez, nunca en bucle).
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from termpix.core.enums import InputType
from termpix.core.errors import DecodeError
from termpix.decoders.raster import decode_image
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext

logger = logging.getLogger(__name__)

# Profundidad máxima de "el contenido es una ruta a otro fichero"
MAX_PATH_INDIRECTION = 1

Predicate = Callable[[bytes, str, DecodeContext], bool]
DecodeFn = Callable[[bytes, str, DecodeContext], RasterImage]


class UnrecognizedInputError(DecodeError):
    """Ningún formato reconoció la entrada (candidata a mostrarse como texto)."""


@dataclass(frozen=True)
class DecoderEntry:
    name: str
    input_type: InputType
    matches: Predicate
    decode: DecodeFn


def _forced(context: DecodeContext, input_type: InputType) -> bool:
    return context.input_type == input_type


def _svg_entry(module) -> DecoderEntry:
    return DecoderEntry(
        name="svg",
        input_type=InputType.SVG,
        matches=lambda data, ext, ctx: _forced(ctx, InputType.SVG)
        or ext == "svg"
        or module.looks_like_svg(data),
        decode=module.decode,
    )


def _pdf_entry(module) -> DecoderEntry:
    return DecoderEntry(
        name="pdf",
        input_type=InputType.PDF,
        matches=lambda data, ext, ctx: _forced(ctx, InputType.PDF)
        or ext == "pdf"
        or module.looks_like_pdf(data),
        decode=module.decode,
    )


def _office_entry(module) -> DecoderEntry:
    return DecoderEntry(
        name="office",
        input_type=InputType.OFFICE,
        matches=lambda data, ext, ctx: _forced(ctx, InputType.OFFICE)
        or ext in module.OFFICE_EXTENSIONS,
        decode=module.decode,
    )


def _html_entry(module) -> DecoderEntry:
    return DecoderEntry(
        name="html",
        input_type=InputType.HTML,
        matches=lambda data, ext, ctx: _forced(ctx, InputType.HTML)
        or ext in module.HTML_EXTENSIONS
        or module.is_url(data)
        or module.looks_like_html(data),
        decode=module.decode,
    )


# Orden de prioridad fijo: (módulo decodificador, constructor de la entrada)
_CAPABILITIES = [
    ("termpix.decoders.svg", _svg_entry),
    ("termpix.decoders.pdf", _pdf_entry),
    ("termpix.decoders.office", _office_entry),
    ("termpix.decoders.html", _html_entry),
]


def build_default_registry() -> List[DecoderEntry]:
    """
    Construye la tabla de capacidades disponibles en este entorno.
    """
    registry: List[DecoderEntry] = []
    for module_name, factory in _CAPABILITIES:
        try:
            module = importlib.import_module(module_name)
        except (ImportError, OSError) as exc:
            # Librería (o su dependencia nativa) no instalada: la capacidad no existe
            logger.debug("Decoder %s unavailable: %s", module_name, exc)
            continue
        registry.append(factory(module))
    return registry


class DispatchService:
    """
    Convierte bytes (o un fichero) en una RasterImage eligiendo el decodificador.
    """

    def __init__(
        self,
        registry: Optional[List[DecoderEntry]] = None,
        raster_decoder: Callable[[bytes], RasterImage] = decode_image,
    ) -> None:
        self.registry = build_default_registry() if registry is None else registry
        self.raster_decoder = raster_decoder

    @property
    def available_types(self) -> set[InputType]:
        return {InputType.AUTO, InputType.IMAGE, InputType.TEXT} | {
            entry.input_type for entry in self.registry
        }

    def _entry(self, name: str) -> Optional[DecoderEntry]:
        for entry in self.registry:
            if entry.name == name:
                return entry
        return None

    def load_file(self, path: Path, context: DecodeContext, _depth: int = 0) -> RasterImage:
        """
        Carga un fichero del disco. Las páginas web reciben la ruta, no los
        bytes, para que el navegador resuelva recursos relativos.
        """
        extension = path.suffix.lower().lstrip(".")

        html_entry = self._entry("html")
        path_bytes = str(path).encode("utf-8")
        if html_entry is not None and html_entry.matches(path_bytes, extension, context):
            logger.debug("Dispatching %s to html decoder by path", path)
            return self._run(html_entry, path_bytes, extension, context)

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise DecodeError(f"Failed to open file {path}: {exc}") from exc

        return self.load_data(data, extension, context, _depth=_depth)

    def load_data(
        self, data: bytes, extension: str, context: DecodeContext, _depth: int = 0
    ) -> RasterImage:
        """
        Decodifica `data` siguiendo el orden de prioridad del registro.
        """
        extension = extension.lower().lstrip(".")

        if context.input_type == InputType.TEXT:
            raise DecodeError("Text input not implemented yet", attempted=["text"])

        if context.input_type == InputType.IMAGE:
            return self.raster_decoder(data)

        if context.input_type not in self.available_types:
            raise DecodeError(
                f"Support for {context.input_type.value} input is not available",
                attempted=[context.input_type.value],
            )

        for entry in self.registry:
            if entry.matches(data, extension, context):
                logger.debug("Dispatching input to %s decoder", entry.name)
                return self._run(entry, data, extension, context)

        attempted = ["image"]
        try:
            return self.raster_decoder(data)
        except DecodeError as exc:
            error = exc

        # ¿Es el contenido la ruta de otro fichero? (p.ej. `echo foo.png | termpix`)
        if _depth < MAX_PATH_INDIRECTION:
            path = self._path_from_text(data)
            if path is not None:
                logger.debug("Input looks like a path, loading %s", path)
                return self.load_file(path, context, _depth=_depth + 1)
            attempted.append("path")

        raise UnrecognizedInputError(f"Failed to decode input: {error}", attempted=attempted)

    def _run(
        self, entry: DecoderEntry, data: bytes, extension: str, context: DecodeContext
    ) -> RasterImage:
        try:
            return entry.decode(data, extension, context)
        except DecodeError as exc:
            if exc.attempted:
                raise
            raise DecodeError(str(exc), attempted=[entry.name]) from exc

    @staticmethod
    def _path_from_text(data: bytes) -> Optional[Path]:
        try:
            text = data.decode("utf-8").strip()
        except UnicodeDecodeError:
            return None
        if not text or "\n" in text or "\x00" in text:
            return None
        path = Path(text)
        try:
            return path if path.is_file() else None
        except (OSError, ValueError):
            return None
