"""Selección de páginas ya normalizada."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class PageSelection(BaseModel):
    """
    Índices de página 0-based, ordenados y sin duplicados.

    La ausencia de selección ("todas" o "la de por defecto") se representa
    con `None`, no con una selección vacía.
    """

    indices: tuple[int, ...]

    model_config = ConfigDict(frozen=True)

    @field_validator("indices")
    @classmethod
    def _normalize(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(i < 0 for i in value):
            raise ValueError("Page indices must be >= 0")
        return tuple(sorted(set(value)))

    def __len__(self) -> int:
        return len(self.indices)

    def __contains__(self, index: object) -> bool:
        return index in self.indices
