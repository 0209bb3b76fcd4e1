"""Parser de rangos de páginas tipo "1-3,34".

Las páginas llegan 1-indexadas (como las ve el usuario) y salen 0-indexadas,
ordenadas y sin duplicados.
"""

from __future__ import annotations

from termpix.core.errors import MalformedSelectionError
from termpix.models.pages import PageSelection


def _parse_page_number(token: str) -> int:
    token = token.strip()
    if not (token.isascii() and token.isdigit()):
        raise MalformedSelectionError(f"Invalid page index: {token!r}")
    return int(token)


def parse_page_range(text: str | None) -> PageSelection | None:
    """
    Convierte la cadena del usuario en una PageSelection.

    Devuelve None si la cadena está vacía o sólo tiene tokens en blanco.
    """
    if text is None:
        return None

    indices: list[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue

        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                raise MalformedSelectionError(f"Invalid page range: {part!r}")
            start = _parse_page_number(bounds[0])
            end = _parse_page_number(bounds[1])
            if start < 1 or end <= start:
                raise MalformedSelectionError(
                    f"Page range must start >= 1 and end > start: {part!r}"
                )
            indices.extend(range(start - 1, end))
        else:
            page = _parse_page_number(part)
            if page < 1:
                raise MalformedSelectionError("Page index must be >= 1")
            indices.append(page - 1)

    if not indices:
        return None
    return PageSelection(indices=tuple(indices))
