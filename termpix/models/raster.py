"""Imagen rasterizada en memoria (RGBA de 8 bits por canal)."""

from __future__ import annotations

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, model_validator

_RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


class RasterImage(BaseModel):
    """
    Rejilla de píxeles RGBA, fila a fila de arriba a abajo.

    Inmutable: redimensionar o componer devuelve una instancia nueva.
    """

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    pixels: bytes = Field(repr=False)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_buffer(self) -> "RasterImage":
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"Pixel buffer has {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )
        return self

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterImage":
        """Convierte cualquier imagen de Pillow a RGBA."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(width=image.width, height=image.height, pixels=image.tobytes())

    def to_pil(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.pixels)

    def resized(self, width: int, height: int, filter_name: str = "bilinear") -> "RasterImage":
        """Devuelve una copia escalada a exactamente (width, height)."""
        if (width, height) == self.size:
            return self
        resample = _RESAMPLE_FILTERS.get(filter_name.lower())
        if resample is None:
            raise ValueError(f"Unknown resize filter: {filter_name}")
        return RasterImage.from_pil(self.to_pil().resize((width, height), resample))

    def has_transparency(self) -> bool:
        if not self.pixels:
            return False
        low, _ = self.to_pil().getchannel("A").getextrema()
        return low < 255
