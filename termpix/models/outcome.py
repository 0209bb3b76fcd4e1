"""Registro del resultado de cada elemento de entrada.

Cada fichero (o stdin) procesado produce un `ItemOutcome`. El orquestador lo
va actualizando en cada paso para poder decidir el código de salida y dejar
trazas útiles en el log.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from termpix.core.enums import OutcomeKind


class ItemOutcome(BaseModel):
    """Estado de un elemento de entrada a lo largo del pipeline."""

    name: str  # Ruta del fichero o "stdin"
    kind: OutcomeKind = OutcomeKind.PENDING
    error_message: Optional[str] = None  # Texto explicando por qué falló
    attempted_formats: list[str] = Field(default_factory=list)

    width: Optional[int] = None  # Tamaño final enviado al terminal
    height: Optional[int] = None

    # Métricas de tiempo por etapa (milisegundos)
    timing_decode_ms: Optional[int] = None
    timing_render_ms: Optional[int] = None

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.SUCCESS, OutcomeKind.FALLBACK_TEXT)

    def mark_success(self, width: int, height: int) -> None:
        """Marca el elemento como mostrado y guarda el tamaño final."""
        self.kind = OutcomeKind.SUCCESS
        self.width = width
        self.height = height
        self.finished_at = datetime.now(timezone.utc)

    def mark_decode_failed(self, error_message: str, attempted: tuple[str, ...] = ()) -> None:
        self.kind = OutcomeKind.DECODE_FAILED
        self.error_message = error_message
        self.attempted_formats = list(attempted)
        self.finished_at = datetime.now(timezone.utc)

    def mark_render_failed(self, error_message: str) -> None:
        self.kind = OutcomeKind.RENDER_FAILED
        self.error_message = error_message
        self.finished_at = datetime.now(timezone.utc)

    def mark_fallback(self) -> None:
        """El contenido se mostró como texto con un visor externo."""
        self.kind = OutcomeKind.FALLBACK_TEXT
        self.finished_at = datetime.now(timezone.utc)
