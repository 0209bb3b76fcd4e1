"""Peticiones del usuario que viajan por el pipeline.

`SizeRequest` describe cómo quiere el usuario dimensionar la imagen y
`DecodeContext` agrupa lo que los decodificadores necesitan además de los
bytes de entrada.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from termpix.core.enums import InputType, TransmissionMode
from termpix.models.pages import PageSelection


class SizeRequest(BaseModel):
    """Tamaño explícito y flags de ajuste (mutuamente excluyentes)."""

    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)

    fill_width: bool = False  # ocupar todo el ancho del terminal
    fill_height: bool = False  # ocupar todo el alto del terminal
    auto_resize: bool = False  # elegir el eje según la proporción
    no_resize: bool = False  # no ajustar automáticamente al terminal

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_exclusive(self) -> "SizeRequest":
        flags = [self.fill_width, self.fill_height, self.auto_resize, self.no_resize]
        if sum(flags) > 1:
            raise ValueError("Fit flags are mutually exclusive")
        if self.width is not None and self.height is not None:
            raise ValueError("Only one of width or height can be set")
        return self


class DecodeContext(BaseModel):
    """Parámetros compartidos por todos los decodificadores."""

    input_type: InputType = InputType.AUTO
    pages: Optional[PageSelection] = None
    # Ancho objetivo para formatos vectoriales/paginados (px)
    target_width: Optional[int] = Field(default=None, gt=0)

    model_config = ConfigDict(frozen=True)


class RunOptions(BaseModel):
    """Todo lo que el usuario pidió para una ejecución completa."""

    files: List[Path] = Field(default_factory=list)
    size: SizeRequest = Field(default_factory=SizeRequest)

    background: bool = False  # componer sobre un fondo opaco
    color: Optional[str] = None  # hex RRGGBB; por defecto el de configuración
    mode: Optional[TransmissionMode] = None

    output: Optional[Path] = None  # escribir PNG a fichero en vez de al terminal
    overwrite: bool = False

    input_type: InputType = InputType.AUTO
    pages: Optional[str] = None  # rango tal y como lo escribió el usuario

    print_name: bool = False
    force_tty: bool = False  # ignorar stdin aunque haya datos
    clear: bool = False
