from __future__ import annotations

import logging
from time import perf_counter
from typing import BinaryIO, Callable, List, Optional, TextIO

from termpix.core.config import get_settings
from termpix.core.errors import (
    ConfigurationError,
    DecodeError,
    EncodingError,
    MalformedSelectionError,
    TermpixError,
)
from termpix.models.color import Color
from termpix.models.outcome import ItemOutcome
from termpix.models.raster import RasterImage
from termpix.models.request import DecodeContext, RunOptions
from termpix.models.terminal import TerminalGeometry
from termpix.services.compositor_service import parse_color
from termpix.services.dispatch_service import DispatchService, UnrecognizedInputError
from termpix.services.encoder_service import EncoderService
from termpix.services.output_service import OutputTarget
from termpix.services.page_range import parse_page_range
from termpix.services.render_service import RenderService
from termpix.services.text_viewer import TextViewerService

logger = logging.getLogger(__name__)


class PipelineService:
    """
    Orquesta una ejecución completa:
    leer entrada -> decodificar -> dimensionar -> fondo -> codificar.

    Los elementos se procesan uno detrás de otro. Un fallo al decodificar o
    renderizar un elemento no detiene los siguientes; un error de
    configuración (`ConfigurationError`) sí.
    """

    def __init__(
        self,
        options: RunOptions,
        terminal: TerminalGeometry,
        stdout: BinaryIO,
        stderr: TextIO,
        stdin: Optional[BinaryIO] = None,
        stdin_available: bool = False,
        dispatch_service: Optional[DispatchService] = None,
        text_viewer: Optional[TextViewerService] = None,
    ) -> None:
        self.options = options
        self.terminal = terminal
        self.stdout = stdout
        self.stderr = stderr
        self.stdin = stdin
        self.stdin_available = stdin_available
        self.dispatch_service = dispatch_service or DispatchService()
        self.text_viewer = text_viewer or TextViewerService()
        self.outcomes: List[ItemOutcome] = []

    # ---------- ENTRADA PRINCIPAL ----------

    def run(self) -> int:
        """
        Procesa todas las entradas y devuelve el código de salida del proceso.
        """
        options = self.options

        if options.clear:
            try:
                EncoderService.write_clear(self.stdout)
            except EncodingError as exc:
                self._error(f"Error: {exc}")
                return 1
            return 0

        # Con -t ignoramos stdin aunque haya datos disponibles
        use_stdin = self.stdin_available and not options.force_tty and self.stdin is not None

        if options.output is not None and not use_stdin and len(options.files) > 1:
            raise ConfigurationError("Cannot specify multiple files with --output")

        if options.pages is not None and not use_stdin and len(options.files) > 1:
            raise ConfigurationError("Cannot specify multiple files with --pages")

        try:
            pages = parse_page_range(options.pages)
        except MalformedSelectionError as exc:
            self._error(f"Error: Invalid page range: {exc}")
            return 1

        try:
            background = self._background_color()
        except MalformedSelectionError as exc:
            self._error(f"Error: {exc}")
            return 1

        if not use_stdin and not options.files:
            self._error("Error: No input files provided and no data piped to stdin.")
            return 1

        context = DecodeContext(
            input_type=options.input_type,
            pages=pages,
            target_width=options.size.width or self.terminal.width or None,
        )

        if options.output is None:
            return self._run_items(self.stdout, context, background, use_stdin, to_file=False)

        with OutputTarget(options.output, overwrite=options.overwrite) as target:
            code = self._run_items(target.stream, context, background, use_stdin, to_file=True)
            if code == 0:
                target.commit()
        return code

    # ---------- ELEMENTOS ----------

    def _run_items(
        self,
        stream: BinaryIO,
        context: DecodeContext,
        background: Optional[Color],
        use_stdin: bool,
        to_file: bool,
    ) -> int:
        renderer = RenderService(
            terminal=self.terminal,
            size_request=self.options.size,
            background=background,
            mode=self.options.mode,
            to_file=to_file,
        )

        if use_stdin:
            data = self.stdin.read()
            outcome = self._process_item(
                name="stdin",
                load=lambda: self.dispatch_service.load_data(data, "", context),
                fallback=None if to_file else lambda: self._show_stdin_as_text(data),
                renderer=renderer,
                stream=stream,
            )
            self.outcomes.append(outcome)
        else:
            for path in self.options.files:
                outcome = self._process_item(
                    name=str(path),
                    load=lambda p=path: self.dispatch_service.load_file(p, context),
                    fallback=None if to_file else lambda p=path: self.text_viewer.show_file(p),
                    renderer=renderer,
                    stream=stream,
                )
                self.outcomes.append(outcome)

        return 0 if all(o.ok for o in self.outcomes) else 1

    def _process_item(
        self,
        name: str,
        load: Callable[[], RasterImage],
        fallback: Optional[Callable[[], None]],
        renderer: RenderService,
        stream: BinaryIO,
    ) -> ItemOutcome:
        outcome = ItemOutcome(name=name)
        if self.options.print_name:
            self.stderr.write(f"{name}\n")
            self.stderr.flush()

        verb = "decoding" if name == "stdin" else "loading"
        decode_started_at = perf_counter()
        try:
            image = load()
        except UnrecognizedInputError as exc:
            # No es una imagen: intentamos mostrarlo como texto
            if fallback is not None:
                try:
                    stream.flush()
                    fallback()
                except (TermpixError, OSError) as fallback_exc:
                    logger.info("Text fallback for %s failed: %s", name, fallback_exc)
                    self._error(f"Error {verb} {name}: {exc} (Fallback failed: {fallback_exc})")
                    outcome.mark_decode_failed(str(exc), exc.attempted)
                    return outcome
                logger.debug("%s shown as text", name)
                outcome.mark_fallback()
                return outcome
            logger.info("Skipping %s: %s", name, exc)
            self._error(f"Error {verb} {name}: {exc}")
            outcome.mark_decode_failed(str(exc), exc.attempted)
            return outcome
        except DecodeError as exc:
            logger.info("Skipping %s: %s", name, exc)
            self._error(f"Error {verb} {name}: {exc}")
            outcome.mark_decode_failed(str(exc), exc.attempted)
            return outcome
        outcome.timing_decode_ms = int((perf_counter() - decode_started_at) * 1000)

        render_started_at = perf_counter()
        try:
            result = renderer.render(stream, image)
        except (EncodingError, ValueError) as exc:
            logger.info("Rendering %s failed: %s", name, exc)
            self._error(f"Error rendering {name}: {exc}")
            outcome.mark_render_failed(str(exc))
            return outcome
        outcome.timing_render_ms = int((perf_counter() - render_started_at) * 1000)

        outcome.mark_success(result.width, result.height)
        logger.debug("Item %s finished: %s", name, outcome.model_dump(exclude_none=True))
        return outcome

    # ---------- HELPERS ----------

    def _background_color(self) -> Optional[Color]:
        if not self.options.background:
            return None
        return parse_color(self.options.color or get_settings().background_color)

    def _show_stdin_as_text(self, data: bytes) -> None:
        try:
            data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TermpixError("stdin is not valid UTF-8 text") from exc
        self.text_viewer.show_data(data)

    def _error(self, message: str) -> None:
        self.stderr.write(f"{message}\n")
        self.stderr.flush()

