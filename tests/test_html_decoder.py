import base64
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

pytest.importorskip("playwright")

from termpix.core.errors import DecodeError  # noqa: E402
from termpix.decoders import html  # noqa: E402
from termpix.models.request import DecodeContext  # noqa: E402


def test_url_detection():
    assert html.is_url(b"https://example.com")
    assert html.is_url(b"  http://localhost:8000/\n")
    assert not html.is_url(b"<html></html>")
    assert html.looks_like_html(b"<!DOCTYPE html><html></html>")
    assert not html.looks_like_html(b"<svg/>")


def test_resolve_url_keeps_urls():
    assert html.resolve_url(b" https://example.com/page \n") == "https://example.com/page"


def test_resolve_url_turns_existing_file_into_file_uri(tmp_path: Path):
    page = tmp_path / "index.html"
    page.write_text("<html></html>")
    assert html.resolve_url(str(page).encode()) == page.resolve().as_uri()


def test_resolve_url_inlines_markup():
    markup = b"<html><body>hola</body></html>"
    url = html.resolve_url(markup)
    assert url.startswith("data:text/html;base64,")
    assert base64.b64decode(url.split(",", 1)[1]) == markup


def test_resolve_url_rejects_binary():
    with pytest.raises(DecodeError):
        html.resolve_url(b"\xff\xfe\xfa")


def test_decode_uses_screenshot(monkeypatch):
    buffer = BytesIO()
    Image.new("RGBA", (12, 9), (1, 2, 3, 255)).save(buffer, format="PNG")
    calls = []

    def fake_screenshot(url, width=None):
        calls.append((url, width))
        return buffer.getvalue()

    monkeypatch.setattr(html, "screenshot", fake_screenshot)

    image = html.decode(b"https://example.com", "", DecodeContext(target_width=640))

    assert image.size == (12, 9)
    assert calls == [("https://example.com", 640)]


def test_browser_errors_become_decode_errors(monkeypatch):
    def broken_screenshot(url, width=None):
        raise html.PlaywrightError("browser crashed")

    monkeypatch.setattr(html, "screenshot", broken_screenshot)

    with pytest.raises(DecodeError):
        html.decode(b"https://example.com", "", DecodeContext())
