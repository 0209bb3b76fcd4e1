"""Vista previa de documentos de Office (xlsx, pptx, docx).

No intentamos reproducir el maquetado original: leemos el contenido con
python-docx, python-pptx y openpyxl, montamos un HTML sencillo y lo
renderizamos con el decodificador de páginas web.
"""

from __future__ import annotations

import logging
import zipfile
from datetime import date, datetime, time
from html import escape
from io import BytesIO
from typing import Any, List, Optional

from docx import Document
from docx.opc.exceptions import PackageNotFoundError as DocxPackageNotFoundError
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pptx import Presentation
from pptx.exc import PackageNotFoundError as PptxPackageNotFoundError

from termpix.core.errors import DecodeError
from termpix.decoders import html as html_decoder
from termpix.models.pages import PageSelection
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext

logger = logging.getLogger(__name__)

OFFICE_EXTENSIONS = {"xlsx", "docx", "pptx"}

# Errores de las librerías al abrir un paquete OOXML roto
_OPEN_ERRORS = (
    zipfile.BadZipFile,
    KeyError,
    ValueError,
    SyntaxError,  # lxml.etree.XMLSyntaxError
    DocxPackageNotFoundError,
    PptxPackageNotFoundError,
    InvalidFileException,
)

_HTML_HEAD = "<html><body style='background:white; color:black; font-family: sans-serif;'>"
_HTML_TAIL = "</body></html>"


# ---------- XLSX ----------


def _format_cell(value: Any) -> str:
    """Texto de una celda ya interpretada por openpyxl (fechas incluidas)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def xlsx_to_html(data: bytes, pages: Optional[PageSelection]) -> str:
    workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    try:
        sheets = workbook.worksheets
        if pages is not None:
            selected = [sheets[i] for i in pages.indices if i < len(sheets)]
        else:
            # Por defecto sólo la primera hoja
            selected = sheets[:1]

        parts = [_HTML_HEAD]
        for sheet in selected:
            parts.append(
                f"<h1>{escape(sheet.title)}</h1><table border='1' style='border-collapse: collapse;'>"
            )
            for row in sheet.iter_rows(values_only=True):
                cells = "".join(
                    f"<td style='padding: 4px;'>{escape(_format_cell(v))}</td>" for v in row
                )
                parts.append(f"<tr>{cells}</tr>")
            parts.append("</table><br/>")
        parts.append(_HTML_TAIL)
        return "".join(parts)
    finally:
        workbook.close()


# ---------- PPTX ----------


def _slide_paragraphs(slide) -> List[str]:
    paragraphs: List[str] = []
    for shape in slide.shapes:
        if shape.has_text_frame:
            paragraphs.extend(p.text for p in shape.text_frame.paragraphs)
        elif shape.has_table:
            for row in shape.table.rows:
                paragraphs.append(" | ".join(cell.text for cell in row.cells))
    return [p for p in paragraphs if p]


def pptx_to_html(data: bytes, pages: Optional[PageSelection]) -> str:
    slides = list(Presentation(BytesIO(data)).slides)
    if pages is not None:
        numbers = [i + 1 for i in pages.indices if i < len(slides)]
    else:
        numbers = list(range(1, len(slides) + 1))

    parts = [_HTML_HEAD]
    for number in numbers:
        text = "<br/>".join(escape(p) for p in _slide_paragraphs(slides[number - 1]))
        parts.append(
            "<div style='border: 1px solid black; padding: 20px; margin: 20px; "
            f"min-height: 400px;'><h2>Slide {number}</h2><p>{text}</p></div>"
        )
    parts.append(_HTML_TAIL)
    return "".join(parts)


# ---------- DOCX ----------


def docx_to_html(data: bytes) -> str:
    document = Document(BytesIO(data))
    parts = [_HTML_HEAD, "<div style='padding: 40px; max-width: 800px;'>"]
    for paragraph in document.paragraphs:
        parts.append(escape(paragraph.text))
        parts.append("<br/><br/>")
    parts.append("</div>")
    parts.append(_HTML_TAIL)
    return "".join(parts)


def office_to_html(data: bytes, extension: str, pages: Optional[PageSelection] = None) -> str:
    """
    Convierte un documento OOXML en un HTML mínimo con su texto.
    """
    if extension not in OFFICE_EXTENSIONS:
        raise DecodeError(f"Unsupported office extension: {extension!r}")

    try:
        if extension == "xlsx":
            return xlsx_to_html(data, pages)
        if extension == "pptx":
            return pptx_to_html(data, pages)
        return docx_to_html(data)
    except _OPEN_ERRORS as exc:
        raise DecodeError(f"Cannot open {extension} document: {exc}") from exc


def decode(data: bytes, extension: str, context: DecodeContext) -> RasterImage:
    document = office_to_html(data, extension, context.pages)
    logger.debug("Converted %s document to %s bytes of HTML", extension, len(document))
    return html_decoder.decode(document.encode("utf-8"), "html", context)
