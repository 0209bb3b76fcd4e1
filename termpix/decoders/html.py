"""Captura de páginas web con Chromium headless (Playwright)."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from termpix.core.config import get_settings
from termpix.core.errors import DecodeError
from termpix.decoders.raster import decode_image
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext

logger = logging.getLogger(__name__)

URL_PREFIXES = ("http://", "https://", "file://")
HTML_EXTENSIONS = {"html", "htm"}


def is_url(data: bytes) -> bool:
    return data.strip().startswith(tuple(p.encode() for p in URL_PREFIXES))


def looks_like_html(data: bytes) -> bool:
    return data.startswith(b"<html") or data.startswith(b"<!DOCTYPE html")


def resolve_url(data: bytes) -> str:
    """
    Decide qué cargar en el navegador: una URL, un fichero local o el HTML
    en línea como `data:` URL.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"HTML input is not valid UTF-8: {exc}") from exc

    stripped = text.strip()
    if stripped.startswith(URL_PREFIXES):
        return stripped

    try:
        path = Path(stripped)
        if stripped and not stripped.startswith("<") and "\n" not in stripped and path.exists():
            return path.resolve().as_uri()
    except (OSError, ValueError):
        # Demasiado largo o con caracteres inválidos para ser una ruta
        pass

    return "data:text/html;base64," + base64.b64encode(data).decode("ascii")


def screenshot(url: str, width: int | None = None) -> bytes:
    """Devuelve una captura PNG de la página completa."""
    settings = get_settings()
    settings.browser_data_dir.mkdir(parents=True, exist_ok=True)

    viewport = {"width": width, "height": 720} if width else None
    with sync_playwright() as pw:
        browser = pw.chromium.launch_persistent_context(
            str(settings.browser_data_dir), headless=True, viewport=viewport
        )
        try:
            page = browser.new_page()
            page.goto(url, wait_until="load")
            page.wait_for_selector("body")
            return page.screenshot(full_page=True, type="png")
        finally:
            browser.close()


def decode(data: bytes, extension: str, context: DecodeContext) -> RasterImage:  # noqa: ARG001
    url = resolve_url(data)
    logger.debug("Rendering web page %s", url[:80])
    try:
        png_data = screenshot(url, context.target_width)
    except PlaywrightError as exc:
        raise DecodeError(f"Failed to render web page: {exc}") from exc
    return decode_image(png_data)
