"""Destino de salida a fichero con escritura atómica."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from termpix.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class OutputTarget:
    """
    Escribe en un temporal junto al destino y lo mueve a su sitio sólo si
    la ejecución termina bien. Si algo falla, el fichero original (si lo
    había) queda intacto.
    """

    def __init__(self, path: Path, overwrite: bool = False) -> None:
        self.path = path.expanduser().resolve()
        self.overwrite = overwrite
        self._stream: Optional[BinaryIO] = None
        self._temp_path: Optional[Path] = None
        self.committed = False

    def open(self) -> BinaryIO:
        parent = self.path.parent
        if not parent.is_dir():
            raise ConfigurationError(f"Output directory does not exist: {parent}")
        if self.path.exists() and not self.overwrite:
            raise ConfigurationError(
                f"Output file already exists: {self.path} (use --overwrite)"
            )

        try:
            handle = tempfile.NamedTemporaryFile(
                dir=parent, prefix=".termpix-", suffix=".tmp", delete=False
            )
        except OSError as exc:
            raise ConfigurationError(f"Failed to create temp file in {parent}: {exc}") from exc

        self._stream = handle
        self._temp_path = Path(handle.name)
        return handle

    @property
    def stream(self) -> BinaryIO:
        if self._stream is None:
            raise RuntimeError("Output target is not open")
        return self._stream

    def commit(self) -> Path:
        """Mueve el temporal al destino final."""
        self.stream.close()
        os.replace(self._temp_path, self.path)
        self.committed = True
        logger.debug("Wrote output to %s", self.path)
        return self.path

    def discard(self) -> None:
        if self._stream is not None and not self._stream.closed:
            self._stream.close()
        if self._temp_path is not None and not self.committed:
            self._temp_path.unlink(missing_ok=True)

    def __enter__(self) -> "OutputTarget":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.discard()
