import pytest

from termpix.models.request import SizeRequest
from termpix.models.terminal import TerminalGeometry
from termpix.services.dimension_service import plan_dimensions

TERMINAL = TerminalGeometry(width=800, height=400)


def test_no_resize_keeps_source_size():
    request = SizeRequest(no_resize=True)
    for source in [(1, 1), (640, 480), (5000, 20), (20, 5000), (801, 401)]:
        assert plan_dimensions(source, request, TERMINAL) == source


def test_explicit_width_preserves_aspect():
    assert plan_dimensions((400, 300), SizeRequest(width=200), TERMINAL) == (200, 150)
    assert plan_dimensions((333, 200), SizeRequest(width=100), TERMINAL) == (100, 60)
    # Más grande que el terminal: el ancho explícito manda
    assert plan_dimensions((100, 50), SizeRequest(width=2000), TERMINAL) == (2000, 1000)


def test_explicit_height_preserves_aspect():
    assert plan_dimensions((400, 300), SizeRequest(height=150), TERMINAL) == (200, 150)


def test_explicit_width_applies_with_no_resize():
    request = SizeRequest(width=100, no_resize=True)
    assert plan_dimensions((400, 200), request, TERMINAL) == (100, 50)


def test_rounding_is_half_away_from_zero():
    # 2 * 5 / 4 = 2.5 -> 3 (round() daría 2)
    assert plan_dimensions((4, 2), SizeRequest(width=5), TERMINAL) == (5, 3)


def test_fill_width_and_fill_height():
    assert plan_dimensions((200, 100), SizeRequest(fill_width=True), TERMINAL) == (800, 400)
    assert plan_dimensions((200, 100), SizeRequest(fill_height=True), TERMINAL) == (800, 400)
    assert plan_dimensions((100, 100), SizeRequest(fill_height=True), TERMINAL) == (400, 400)


def test_auto_fit_when_image_exceeds_terminal():
    # Más ancha que alta -> ocupa el ancho
    assert plan_dimensions((1600, 400), SizeRequest(), TERMINAL) == (800, 200)
    # Más alta que ancha -> ocupa el alto
    assert plan_dimensions((400, 1600), SizeRequest(), TERMINAL) == (100, 400)
    # Cuadrada: ninguna proporción es mayor, se elige el alto
    assert plan_dimensions((1000, 1000), SizeRequest(), TERMINAL) == (400, 400)


def test_small_image_is_left_alone():
    assert plan_dimensions((300, 200), SizeRequest(), TERMINAL) == (300, 200)


def test_explicit_auto_resize_scales_up():
    assert plan_dimensions((100, 25), SizeRequest(auto_resize=True), TERMINAL) == (800, 200)


def test_unknown_terminal_axis_does_not_trigger_auto_fit():
    terminal = TerminalGeometry(width=0, height=0)
    assert plan_dimensions((5000, 3000), SizeRequest(), terminal) == (5000, 3000)


def test_zero_sized_source_is_returned_unchanged():
    assert plan_dimensions((0, 10), SizeRequest(fill_width=True), TERMINAL) == (0, 10)


def test_tiny_axis_never_rounds_to_zero():
    assert plan_dimensions((1000, 1), SizeRequest(width=100), TERMINAL) == (100, 1)


def test_size_request_rejects_conflicting_flags():
    with pytest.raises(ValueError):
        SizeRequest(fill_width=True, no_resize=True)
    with pytest.raises(ValueError):
        SizeRequest(width=10, height=10)
    with pytest.raises(ValueError):
        SizeRequest(width=0)
