from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Color(BaseModel):
    """
    Color RGBA con canales 0–255.
    """

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)
    a: int = Field(default=255, ge=0, le=255)

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return self.r, self.g, self.b, self.a
