"""Consulta del tamaño del terminal en píxeles y celdas.

Nunca falla: si el terminal no responde se usan estimaciones basadas en el
número de filas/columnas y, en último caso, valores fijos de configuración.
"""

from __future__ import annotations

import logging
import os
import shutil
import struct
import sys
from typing import NamedTuple

from termpix.core.config import Settings, get_settings
from termpix.models.terminal import TerminalGeometry

logger = logging.getLogger(__name__)


class WindowSize(NamedTuple):
    rows: int
    columns: int
    x_pixels: int
    y_pixels: int


UNKNOWN_WINDOW = WindowSize(0, 0, 0, 0)


def resolve_geometry(window: WindowSize, settings: Settings | None = None) -> TerminalGeometry:
    """
    Traduce lo que informa el terminal a una superficie de dibujo utilizable.
    """
    settings = settings or get_settings()
    rows, cols = window.rows, window.columns
    reserved = settings.reserved_rows

    if window.x_pixels > 0:
        width = window.x_pixels
    elif cols > 0:
        width = cols * settings.cell_width_px
    else:
        width = settings.fallback_width

    # Dejamos sitio para el siguiente prompt y la línea en blanco tras la imagen
    if window.y_pixels > 0:
        height = window.y_pixels
        if cols > 0 and rows > reserved:
            height = height * (rows - reserved) // rows
    elif rows > reserved:
        height = (rows - reserved) * settings.cell_height_px
    else:
        height = settings.fallback_height

    return TerminalGeometry(width=width, height=height)


class TerminalService:
    """
    Obtiene la geometría del terminal controlador.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def probe(self) -> TerminalGeometry:
        window = self.query_window_size()
        geometry = resolve_geometry(window, self.settings)
        logger.debug("Terminal window %s -> geometry %sx%s", window, geometry.width, geometry.height)
        return geometry

    def query_window_size(self) -> WindowSize:
        """Pregunta al terminal por filas, columnas y píxeles."""
        for fd in self._candidate_fds():
            window = self._ioctl_window_size(fd)
            if window is not None:
                return window

        window = self._tty_window_size()
        if window is not None:
            return window

        # Sin ioctl (p.ej. Windows) sólo conocemos filas y columnas
        size = shutil.get_terminal_size(fallback=(0, 0))
        return WindowSize(size.lines, size.columns, 0, 0)

    def _candidate_fds(self) -> list[int]:
        fds = []
        for stream in (sys.stdout, sys.stdin, sys.stderr):
            try:
                fds.append(stream.fileno())
            except (AttributeError, OSError, ValueError):
                continue
        return fds

    def _ioctl_window_size(self, fd: int) -> WindowSize | None:
        try:
            import fcntl
            import termios
        except ImportError:
            return None

        try:
            packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
        except OSError as exc:
            logger.debug("TIOCGWINSZ failed on fd %s: %s", fd, exc)
            return None

        rows, cols, xpix, ypix = struct.unpack("HHHH", packed)
        return WindowSize(rows, cols, xpix, ypix)

    def _tty_window_size(self) -> WindowSize | None:
        """Último intento: abrir /dev/tty directamente."""
        try:
            fd = os.open("/dev/tty", os.O_RDONLY)
        except OSError:
            return None
        try:
            import fcntl
            import termios

            packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
        except OSError as exc:
            logger.debug("TIOCGWINSZ failed on /dev/tty: %s", exc)
            return None
        finally:
            os.close(fd)
        return WindowSize(*struct.unpack("HHHH", packed))
