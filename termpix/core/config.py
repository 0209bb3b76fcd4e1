"""Carga de configuración de termpix.

Usa `pydantic-settings` para leer valores desde `.env` o variables de
entorno con el prefijo `TERMPIX_`. Cada campo lleva un comentario corto para
que se entienda qué ajusta sin tener que leer el resto del código.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from termpix.core.enums import TransmissionMode


def _default_browser_dir() -> Path:
    return Path.home() / ".local" / "share" / "termpix" / "chromium"


class Settings(BaseSettings):
    """Contenedor tipado para todas las opciones configurables."""

    # Tamaño (en caracteres base64) de cada trozo del protocolo gráfico
    chunk_size: int = 4096

    # Estimaciones cuando el terminal no informa de su tamaño en píxeles
    cell_width_px: int = 10
    cell_height_px: int = 20
    # Líneas reservadas bajo la imagen: el siguiente prompt y una línea en blanco
    reserved_rows: int = 2
    fallback_width: int = 800
    fallback_height: int = 400

    # Fondo por defecto para imágenes con transparencia (hex RRGGBB)
    background_color: str = "FFFFFF"
    transmission_mode: TransmissionMode = TransmissionMode.PNG
    # Filtro de Pillow usado al redimensionar (nearest, bilinear, bicubic, lanczos)
    resize_filter: str = "bilinear"

    # Perfil de Chromium para renderizar páginas web
    browser_data_dir: Path = _default_browser_dir()
    # Límite opcional de ancho al rasterizar PDFs
    pdf_max_width: int | None = None

    # Visores externos para mostrar como texto lo que no se pudo decodificar
    # (lista separada por comas, en orden de preferencia)
    text_viewers: str = "bat,cat"

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="TERMPIX_", case_sensitive=False
    )

    @property
    def text_viewer_list(self) -> list[str]:
        return [v.strip() for v in self.text_viewers.split(",") if v.strip()]


@lru_cache
def get_settings() -> Settings:
    """Crea (y memoriza) la configuración de forma perezosa.

    Sólo se construye una instancia por proceso, evitando relecturas de
    `.env`.
    """

    return Settings()
