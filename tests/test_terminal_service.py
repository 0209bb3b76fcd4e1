import os
import shutil

import pytest

from termpix.core.config import Settings
from termpix.models.terminal import TerminalGeometry
from termpix.services.terminal_service import (
    UNKNOWN_WINDOW,
    TerminalService,
    WindowSize,
    resolve_geometry,
)


def _settings() -> Settings:
    return Settings(
        cell_width_px=10,
        cell_height_px=20,
        reserved_rows=2,
        fallback_width=800,
        fallback_height=400,
    )


def test_pixel_size_is_scaled_to_leave_room_for_prompt():
    window = WindowSize(rows=50, columns=200, x_pixels=2000, y_pixels=1000)
    assert resolve_geometry(window, _settings()) == TerminalGeometry(width=2000, height=960)


def test_pixel_height_unscaled_without_columns():
    window = WindowSize(rows=50, columns=0, x_pixels=2000, y_pixels=1000)
    assert resolve_geometry(window, _settings()) == TerminalGeometry(width=2000, height=1000)


def test_pixel_height_unscaled_when_rows_too_few():
    window = WindowSize(rows=2, columns=80, x_pixels=800, y_pixels=40)
    assert resolve_geometry(window, _settings()) == TerminalGeometry(width=800, height=40)


def test_cell_estimate_without_pixels():
    window = WindowSize(rows=40, columns=100, x_pixels=0, y_pixels=0)
    assert resolve_geometry(window, _settings()) == TerminalGeometry(width=1000, height=760)


def test_fixed_fallback_when_nothing_is_known():
    assert resolve_geometry(UNKNOWN_WINDOW, _settings()) == TerminalGeometry(
        width=800, height=400
    )


def test_probe_uses_fallback_when_terminal_does_not_answer(monkeypatch):
    service = TerminalService(settings=_settings())
    monkeypatch.setattr(service, "_candidate_fds", lambda: [])
    monkeypatch.setattr(service, "_tty_window_size", lambda: None)
    monkeypatch.setattr(
        shutil, "get_terminal_size", lambda fallback=(0, 0): os.terminal_size((0, 0))
    )

    assert service.probe() == TerminalGeometry(width=800, height=400)


def test_probe_prefers_ioctl_answer(monkeypatch):
    service = TerminalService(settings=_settings())
    monkeypatch.setattr(service, "_candidate_fds", lambda: [99])
    monkeypatch.setattr(
        service, "_ioctl_window_size", lambda fd: WindowSize(24, 80, 800, 480)
    )

    assert service.probe() == TerminalGeometry(width=800, height=440)


def test_ioctl_on_non_terminal_returns_none():
    pytest.importorskip("fcntl")
    read_fd, write_fd = os.pipe()
    try:
        assert TerminalService(settings=_settings())._ioctl_window_size(read_fd) is None
    finally:
        os.close(read_fd)
        os.close(write_fd)
