from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from termpix.core.enums import InputType
from termpix.core.errors import DecodeError
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext
from termpix.services.dispatch_service import (
    DecoderEntry,
    DispatchService,
    UnrecognizedInputError,
    build_default_registry,
)

AUTO = DecodeContext()


def _png_bytes(size=(3, 2), color=(10, 20, 30, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class RecordingDecoder:
    """Decodificador falso que apunta con qué se le llamó."""

    def __init__(self, size=(7, 7)):
        self.calls = []
        self.size = size

    def __call__(self, data, extension, context):
        self.calls.append((data, extension, context))
        w, h = self.size
        return RasterImage(width=w, height=h, pixels=bytes(w * h * 4))


def _entry(name, input_type, prefix, extensions, decoder):
    return DecoderEntry(
        name=name,
        input_type=input_type,
        matches=lambda data, ext, ctx: ctx.input_type == input_type
        or ext in extensions
        or data.startswith(prefix),
        decode=decoder,
    )


@pytest.fixture
def svg_decoder():
    return RecordingDecoder(size=(4, 4))


@pytest.fixture
def html_decoder():
    return RecordingDecoder(size=(6, 6))


@pytest.fixture
def service(svg_decoder, html_decoder):
    registry = [
        _entry("svg", InputType.SVG, b"<svg", {"svg"}, svg_decoder),
        _entry("html", InputType.HTML, b"http://", {"html", "htm"}, html_decoder),
    ]
    return DispatchService(registry=registry)


def test_png_goes_to_raster_decoder(service, svg_decoder):
    image = service.load_data(_png_bytes(), "", AUTO)
    assert image.size == (3, 2)
    assert svg_decoder.calls == []


def test_registry_match_by_content(service, svg_decoder):
    image = service.load_data(b"<svg xmlns='http://www.w3.org/2000/svg'/>", "", AUTO)
    assert image.size == (4, 4)
    assert len(svg_decoder.calls) == 1


def test_registry_match_by_extension(service, svg_decoder):
    service.load_data(b"whatever", ".SVG", AUTO)
    assert svg_decoder.calls[0][1] == "svg"


def test_forced_image_skips_registry(service, svg_decoder):
    context = DecodeContext(input_type=InputType.IMAGE)
    with pytest.raises(DecodeError):
        service.load_data(b"<svg/>", "svg", context)
    assert svg_decoder.calls == []


def test_forced_text_is_not_implemented(service):
    with pytest.raises(DecodeError) as excinfo:
        service.load_data(_png_bytes(), "", DecodeContext(input_type=InputType.TEXT))
    assert not isinstance(excinfo.value, UnrecognizedInputError)
    assert "not implemented" in str(excinfo.value)


def test_forced_unavailable_type_fails(service):
    with pytest.raises(DecodeError) as excinfo:
        service.load_data(b"%PDF-1.4", "", DecodeContext(input_type=InputType.PDF))
    assert excinfo.value.attempted == ("pdf",)


def test_unrecognized_input_lists_attempts(service):
    with pytest.raises(UnrecognizedInputError) as excinfo:
        service.load_data(b"just some words", "", AUTO)
    assert excinfo.value.attempted == ("image", "path")
    assert "Failed to decode input" in str(excinfo.value)


def test_decoder_failure_is_not_unrecognized(html_decoder):
    def failing(data, extension, context):
        raise DecodeError("boom")

    registry = [_entry("svg", InputType.SVG, b"<svg", {"svg"}, failing)]
    with pytest.raises(DecodeError) as excinfo:
        DispatchService(registry=registry).load_data(b"<svg/>", "", AUTO)
    assert not isinstance(excinfo.value, UnrecognizedInputError)
    assert excinfo.value.attempted == ("svg",)


def test_text_naming_a_file_is_followed_once(service, tmp_path: Path):
    image_path = tmp_path / "pic.png"
    image_path.write_bytes(_png_bytes(size=(5, 5)))

    image = service.load_data(f"{image_path}\n".encode(), "", AUTO)

    assert image.size == (5, 5)


def test_path_indirection_does_not_recurse(service, tmp_path: Path):
    target = tmp_path / "pic.png"
    target.write_bytes(_png_bytes())
    pointer = tmp_path / "pointer.txt"
    pointer.write_text(str(target))

    # stdin -> pointer.txt -> pic.png serían dos saltos
    with pytest.raises(UnrecognizedInputError) as excinfo:
        service.load_data(str(pointer).encode(), "", AUTO)
    assert excinfo.value.attempted == ("image",)


def test_load_file_reads_from_disk(service, tmp_path: Path):
    path = tmp_path / "photo.png"
    path.write_bytes(_png_bytes(size=(8, 3)))
    assert service.load_file(path, AUTO).size == (8, 3)


def test_load_file_gives_html_decoder_the_path(service, html_decoder, tmp_path: Path):
    page = tmp_path / "index.html"
    page.write_text("<html><body>hola</body></html>")

    service.load_file(page, AUTO)

    data, extension, _ = html_decoder.calls[0]
    assert data == str(page).encode()
    assert extension == "html"


def test_missing_file_is_a_decode_error(service, tmp_path: Path):
    with pytest.raises(DecodeError) as excinfo:
        service.load_file(tmp_path / "nope.png", AUTO)
    assert not isinstance(excinfo.value, UnrecognizedInputError)


def test_default_registry_keeps_priority_order():
    names = [entry.name for entry in build_default_registry()]
    order = ["svg", "pdf", "office", "html"]
    assert names == [name for name in order if name in names]
