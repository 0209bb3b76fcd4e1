"""Muestra como texto plano lo que no se pudo decodificar como imagen."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from termpix.core.config import get_settings
from termpix.core.errors import TermpixError

# Argumentos extra por visor conocido
VIEWER_ARGS: Dict[str, List[str]] = {
    "bat": ["--paging=never", "--style=plain"],
}


class TextViewerService:
    """
    Delega en un visor externo (bat, y si no está, cat).
    """

    def __init__(self, viewers: Optional[List[str]] = None) -> None:
        self.viewers = viewers if viewers is not None else get_settings().text_viewer_list
        self.logger = logging.getLogger(__name__)

    def _command(self, target: str) -> List[str]:
        for viewer in self.viewers:
            executable = shutil.which(viewer)
            if executable is None:
                continue
            return [executable, *VIEWER_ARGS.get(viewer, []), target]
        raise TermpixError(f"No text viewer available (tried: {', '.join(self.viewers)})")

    def show_file(self, path: Path) -> None:
        command = self._command(str(path))
        self.logger.debug("Showing %s as text with %s", path, command[0])
        self._run(command)

    def show_data(self, data: bytes) -> None:
        command = self._command("-")
        self.logger.debug("Showing %s bytes of stdin as text with %s", len(data), command[0])
        self._run(command, data)

    def _run(self, command: List[str], data: Optional[bytes] = None) -> None:
        try:
            subprocess.run(command, input=data, check=True)
        except subprocess.CalledProcessError as exc:
            raise TermpixError(f"{Path(command[0]).name} exited with status {exc.returncode}") from exc
