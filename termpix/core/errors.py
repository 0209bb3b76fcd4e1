"""Jerarquía de errores de termpix.

Sólo el dispatcher de formatos y el codificador del protocolo producen
errores visibles; el planificador de dimensiones y el compositor son
funciones totales.
"""

from __future__ import annotations

from typing import Iterable


class TermpixError(Exception):
    """Base de todos los errores propios."""


class MalformedSelectionError(TermpixError, ValueError):
    """Rango de páginas o color con formato inválido."""


class DecodeError(TermpixError):
    """Ningún decodificador pudo interpretar los bytes de entrada."""

    def __init__(self, message: str, attempted: Iterable[str] = ()) -> None:
        self.attempted: tuple[str, ...] = tuple(attempted)
        if self.attempted:
            message = f"{message} (tried: {', '.join(self.attempted)})"
        super().__init__(message)


class EncodingError(TermpixError):
    """Fallo al comprimir o escribir la transmisión."""


class ConfigurationError(TermpixError):
    """Configuración inválida; detiene la ejecución completa."""
