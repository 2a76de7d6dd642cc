"""dvdchap CLI: DVD-Video chapter extractor for mkvmerge."""

from __future__ import annotations

import sys

import typer
from rich.console import Console
from rich.markup import escape

from dvdchap import __version__
from dvdchap.chapters import emit_disc_chapters
from dvdchap.diagnostics import REPORT_HEADER, DiagnosticBuffer, capture_diagnostics
from dvdchap.errors import OpenError, TitleRangeError, UsageError
from dvdchap.export.mkv_chapters import MatroskaChapterWriter, UidSource
from dvdchap.ifo.disc import open_disc

app = typer.Typer(
    name="dvdchap",
    help="Extract DVD chapter times as a Matroska chapters file",
    add_completion=False,
)
console = Console(stderr=True, soft_wrap=True)

USAGE_HINT = (
    "Usage: dvdchap DISC_PATH [TITLE]\n"
    "If TITLE is not specified or 0, chapters from all titles are output."
)

# Exit status typer uses for bad arguments
_ARGUMENT_ERROR_STATUS = 2


def parse_title_number(value: str | None) -> int:
    """Parse the TITLE argument; 0 means every title."""
    if value is None or value == "":
        return 0
    try:
        number = int(value)
    except ValueError:
        raise UsageError(f"Could not convert {value} to integer") from None
    if number < 0:
        raise UsageError("Title cannot be a negative integer.")
    return number


def _report_diagnostics(diagnostics: DiagnosticBuffer) -> None:
    if not len(diagnostics):
        return
    console.print(REPORT_HEADER, markup=False, highlight=False)
    for line in diagnostics.lines():
        console.print(line, markup=False, highlight=False)


def run(
    disc_path: str,
    title_number: int,
    output: str | None = None,
    verbose: bool = False,
    uid_source: UidSource | None = None,
) -> int:
    """Extract chapters and write them out; return the process exit code.

    Nothing is written unless every requested title succeeded.
    """
    writer = MatroskaChapterWriter(uid_source=uid_source)
    with capture_diagnostics() as diagnostics:
        try:
            with open_disc(disc_path) as disc:
                title_index = None if title_number == 0 else title_number - 1
                emit_disc_chapters(disc, writer, title_index=title_index)
        except TitleRangeError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            _report_diagnostics(diagnostics)
            return 1
        except OpenError as e:
            console.print(f"[red]DVD read error:[/red] {escape(str(e))}")
            _report_diagnostics(diagnostics)
            return 1
        except Exception as e:
            console.print(f"[red]Fatal error:[/red] {escape(str(e) or type(e).__name__)}")
            _report_diagnostics(diagnostics)
            return 1

        if verbose:
            _report_diagnostics(diagnostics)

    if output:
        try:
            path = writer.write(output)
        except OSError as e:
            console.print(f"[red]Error:[/red] Could not write {escape(str(output))}: {escape(str(e))}")
            return 1
        console.print(f"[green]Wrote:[/green] {escape(str(path))}")
    else:
        typer.echo(writer.to_xml(), nl=False)
    return 0


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dvdchap {__version__}")
        raise typer.Exit()


@app.command(context_settings={"ignore_unknown_options": True})
def extract(
    disc: str = typer.Argument(..., help="Path to the disc root or its VIDEO_TS directory"),
    title: str = typer.Argument(None, help="1-based title number (0 or omitted: all titles)"),
    output: str = typer.Option(None, "-o", "--output", help="Write the chapters XML to this file"),
    verbose: bool = typer.Option(
        False,
        "-v",
        "--verbose",
        envvar="DVDCHAP_VERBOSE",
        help="Print disc-reading diagnostics even on success",
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Print the chapters of one or all titles as Matroska chapter XML."""
    try:
        title_number = parse_title_number(title)
    except UsageError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        console.print(USAGE_HINT, markup=False, highlight=False)
        raise typer.Exit(1)

    code = run(disc, title_number, output=output, verbose=verbose)
    if code:
        raise typer.Exit(code)


def main(argv: list[str] | None = None) -> int:
    """Console-script entry point; maps every failure to exit code 1.

    Typer runs in standalone mode and prints its own argument errors; those
    exit with status 2 and are reported as 1 after the usage hint.
    """
    try:
        app(args=argv, prog_name="dvdchap")
    except SystemExit as e:
        code = e.code
    else:
        code = 0
    if not code:
        return 0
    if code == _ARGUMENT_ERROR_STATUS:
        console.print(USAGE_HINT, markup=False, highlight=False)
    return 1


if __name__ == "__main__":
    sys.exit(main())
