"""Punto de entrada de la línea de comandos.

Traduce los argumentos a un `RunOptions`, mide el terminal una sola vez y
delega todo el trabajo en `PipelineService`. Los errores de configuración
se muestran por stderr y terminan el proceso con código 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from termpix.core.config import get_settings
from termpix.core.enums import InputType, TransmissionMode
from termpix.core.errors import ConfigurationError
from termpix.models.request import RunOptions, SizeRequest
from termpix.services.pipeline_service import PipelineService
from termpix.services.terminal_service import TerminalService


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="termpix",
        description="An image viewer for the kitty terminal graphics protocol.",
    )
    parser.add_argument("files", nargs="*", type=Path, metavar="FILES", help="Input files")

    sizing = parser.add_mutually_exclusive_group()
    sizing.add_argument("-w", "--width", type=_positive_int, help="Specify image width")
    # -h queda para --help
    sizing.add_argument("-H", "--height", type=_positive_int, help="Specify image height")
    sizing.add_argument(
        "-f", "--fullwidth", action="store_true", help="Resize image to fill terminal width"
    )
    sizing.add_argument(
        "-F", "--fullheight", action="store_true", help="Resize image to fill terminal height"
    )
    sizing.add_argument("-r", "--resize", action="store_true", help="Resize image to fill terminal")
    sizing.add_argument(
        "-n", "--noresize", action="store_true", help="Disable automatic resizing"
    )

    parser.add_argument(
        "-b", "--background", action="store_true", help="Add background if image is transparent"
    )
    parser.add_argument(
        "-C",
        "--color",
        default=None,
        help=f"Background color as hex string (default: {settings.background_color})",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=[m.value for m in TransmissionMode],
        default=None,
        help=f"Transmission mode (default: {settings.transmission_mode.value})",
    )
    parser.add_argument("-o", "--output", type=Path, help="Output to file as png, instead of kitty")
    parser.add_argument(
        "-x", "--overwrite", action="store_true", help="Overwrite existing output file"
    )
    parser.add_argument(
        "-i",
        "--input",
        choices=[t.value for t in InputType],
        default=None,
        help="Input type (default: auto)",
    )
    parser.add_argument(
        "-P", "--pages", help='Select which pages to render (e.g. "1-3,34")'
    )
    parser.add_argument("-p", "--printname", action="store_true", help="Print file name")
    parser.add_argument(
        "-t", "--tty", action="store_true", help="Force tty (ignore stdin check)"
    )
    parser.add_argument(
        "-c", "--clear", action="store_true", help="Clear terminal (does not print image)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_options(argv: Optional[List[str]] = None) -> tuple[RunOptions, bool]:
    """Devuelve las opciones validadas y si se pidió modo detallado."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.color is not None and not args.background:
        parser.error("argument -C/--color requires -b/--background")
    if args.overwrite and args.output is None:
        parser.error("argument -x/--overwrite requires -o/--output")
    if args.output is not None and args.mode is not None:
        parser.error("argument -o/--output: not allowed with argument -m/--mode")
    if args.input is not None and args.pages is not None:
        parser.error("argument -P/--pages: not allowed with argument -i/--input")

    options = RunOptions(
        files=args.files,
        size=SizeRequest(
            width=args.width,
            height=args.height,
            fill_width=args.fullwidth,
            fill_height=args.fullheight,
            auto_resize=args.resize,
            no_resize=args.noresize,
        ),
        background=args.background,
        color=args.color,
        mode=TransmissionMode(args.mode) if args.mode else None,
        output=args.output,
        overwrite=args.overwrite,
        input_type=InputType(args.input or InputType.AUTO.value),
        pages=args.pages,
        print_name=args.printname,
        force_tty=args.tty,
        clear=args.clear,
    )
    return options, args.verbose


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    options, verbose = parse_options(argv)
    configure_logging(verbose)

    terminal = TerminalService().probe()
    pipeline = PipelineService(
        options=options,
        terminal=terminal,
        stdout=sys.stdout.buffer,
        stderr=sys.stderr,
        stdin=sys.stdin.buffer,
        stdin_available=not sys.stdin.isatty(),
    )

    try:
        return pipeline.run()
    except ConfigurationError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
