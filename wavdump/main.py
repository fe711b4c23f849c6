"""wavdump: write a .wav file that sums several sine harmonics.

Run with: python -m wavdump.main <output> <seconds> <freq> [freq ...] [--debug] [--verify]

Exit codes:
  0  success
  1  invalid arguments (duration, frequency range)
  2  usage error (missing arguments)
  3  the output file could not be created or written
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from riff.probe import WaveFormatError, probe
from riff.wave_writer import CannotCreateError, WriteFailedError
from synth.types import MIN_FREQUENCY

from .config import get_settings
from .pipeline import render
from .request import SynthesisRequest

console = Console()

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2
EXIT_IO = 3

_EPILOG = f"""\
wavdump generates a .wav file by combining several harmonics into a complex signal.

examples:
  wavdump test.wav 5 440 880
  wavdump a.wav 10 1000 2000 3000

frequencies must be integers in the range [{MIN_FREQUENCY} - sample rate / 2] Hz
(22050 Hz at the default 44100 Hz sample rate).
"""


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)-14s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavdump",
        description="Generate a PCM .wav file from a list of harmonic frequencies.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("output", help="output .wav file name")
    parser.add_argument("duration", help="duration of the signal in seconds (greater than 0)")
    parser.add_argument("frequencies", nargs="+", metavar="freq", help="harmonic frequency in Hz")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--verify", action="store_true", default=None,
                        help="Read the header back after writing and print it")
    return parser


def _print_validation_error(err: ValidationError) -> None:
    console.print("[red bold]Invalid arguments to wavdump![/]")
    for e in err.errors():
        field = ".".join(str(p) for p in e["loc"])
        msg = e["msg"].removeprefix("Value error, ")
        if field:
            console.print(f"  [red]{field}[/]: {escape(msg)} [dim](got {escape(repr(e['input']))})[/]")
        else:
            console.print(f"  [red]{escape(msg)}[/]")


def _print_header(path: str) -> None:
    """Show the header fields of the written file."""
    header = probe(path)
    table = Table(title=os.path.basename(path), show_header=True)
    table.add_column("field")
    table.add_column("value", justify="right")
    table.add_row("audio format", str(header.audio_format))
    table.add_row("channels", str(header.channel_count))
    table.add_row("sample rate", str(header.sample_rate))
    table.add_row("byte rate", str(header.byte_rate))
    table.add_row("block align", str(header.block_align))
    table.add_row("bits per sample", str(header.bits_per_sample))
    table.add_row("data size", str(header.data_size))
    table.add_row("duration", f"{header.duration:.2f}s")
    console.print(table)


def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logging.getLogger("wavdump").warning("Could not remove partial file %s: %s", path, e)


def _print_config_error(err: Exception) -> None:
    console.print("[red bold]Invalid wavdump configuration![/]")
    if isinstance(err, ValidationError):
        for e in err.errors():
            field = "WAVDUMP_" + ".".join(str(p) for p in e["loc"]).upper()
            console.print(f"  [red]{field}[/]: {escape(e['msg'])} [dim](got {escape(repr(e['input']))})[/]")
    else:
        console.print(f"  [red]{escape(str(err))}[/]")


def run(args: argparse.Namespace) -> int:
    # pydantic's ValidationError is a ValueError too
    try:
        settings = get_settings()
        audio_format = settings.audio_format()
    except ValueError as e:
        _print_config_error(e)
        return EXIT_INVALID

    try:
        request = SynthesisRequest(
            output_path=args.output,
            duration_seconds=args.duration,
            frequencies=args.frequencies,
            audio_format=audio_format,
        )
    except ValidationError as e:
        _print_validation_error(e)
        return EXIT_INVALID

    try:
        samples = render(request)
    except ValueError as e:
        _print_config_error(e)
        return EXIT_INVALID
    except CannotCreateError as e:
        console.print(f"[red]Could not open file '{escape(e.path)}'![/]")
        console.print(f"[red]Reason: {escape(str(e.reason))}[/]")
        return EXIT_IO
    except WriteFailedError as e:
        console.print(f"[red]Could not write file '{escape(e.path)}'![/]")
        console.print(f"[red]Reason: {escape(str(e.reason))}[/]")
        _remove_partial(request.output_path)
        return EXIT_IO

    console.print(
        f"[green]Wrote {escape(request.output_path)}[/] "
        f"[dim]({samples} samples, {request.duration_seconds}s, "
        f"harmonics: {', '.join(str(f) for f in request.frequencies)} Hz)[/]"
    )

    verify = settings.verify if args.verify is None else args.verify
    if verify:
        try:
            _print_header(request.output_path)
        except (OSError, WaveFormatError) as e:
            console.print(f"[red]Verification failed: {e}[/]")
            return EXIT_IO
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.debug)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
