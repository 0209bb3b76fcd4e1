"""Enumeraciones compartidas por el pipeline de renderizado."""

from enum import Enum


class InputType(str, Enum):
    """Tipo de entrada forzado por el usuario (o `auto` para detectarlo)."""

    AUTO = "auto"
    IMAGE = "image"
    TEXT = "text"
    SVG = "svg"
    PDF = "pdf"
    HTML = "html"
    OFFICE = "office"


class TransmissionMode(str, Enum):
    """Cómo se codifica el payload enviado al terminal."""

    PNG = "png"
    ZLIB = "zlib"  # RGBA comprimido con deflate
    RAW = "raw"  # RGBA sin comprimir


class OutcomeKind(str, Enum):
    """Resultado de procesar un elemento de entrada."""

    PENDING = "pending"
    SUCCESS = "success"
    DECODE_FAILED = "decode_failed"
    RENDER_FAILED = "render_failed"
    FALLBACK_TEXT = "fallback_text"  # mostrado como texto plano
