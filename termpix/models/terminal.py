from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TerminalGeometry(BaseModel):
    """
    Superficie útil de dibujo del terminal, en píxeles.

    Se calcula una vez por proceso y se pasa explícitamente al resto del
    pipeline.
    """

    width: int = Field(ge=0)
    height: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)
