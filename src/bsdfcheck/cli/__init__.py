"""
The bsdfcheck command-line interface, built with Typer and Rich.
"""

import logging
from enum import Enum
from typing import Annotated, List, Optional

import typer
from rich.logging import RichHandler

from ._console import error_console, warning
from ..analysis import run_checks
from ..resolver import FileResolver, fresolver


class LogLevel(str, Enum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    NOTSET = "NOTSET"


app = typer.Typer(
    help="Check Helmholtz reciprocity of BSDF data files.",
    pretty_exceptions_enable=False,
    add_completion=False,
)


@app.command()
def cli(
    files: Annotated[
        Optional[List[str]],
        typer.Argument(help="BSDF XML files to check.", show_default=False),
    ] = None,
    path: Annotated[
        Optional[List[str]],
        typer.Option(
            "--path",
            "-p",
            help="Directory searched for input files before the configured "
            "search path. Can be repeated.",
            show_default=False,
        ),
    ] = None,
    threshold: Annotated[
        Optional[float],
        typer.Option(
            min=0.0,
            help="BSDF values at or below this are not checked for "
            "reciprocity (default: 'NEGLIGIBLE_VALUE' setting).",
            show_default=False,
        ),
    ] = None,
    log_level: Annotated[
        LogLevel, typer.Option(help="Set log level.")
    ] = LogLevel.WARNING,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Display version information and exit.",
        ),
    ] = False,
):
    """
    Load BSDF XML files and report on their contents and reciprocity errors.
    """
    if version:
        from bsdfcheck import __version__

        print(f"bsdfcheck version {__version__}")
        raise typer.Exit(0)

    logging.basicConfig(
        level=log_level.name,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, rich_tracebacks=True)],
    )

    resolver = FileResolver(fresolver.paths)
    for directory in reversed(path or []):
        try:
            resolver.prepend(directory)
        except NotADirectoryError as e:
            raise typer.BadParameter(
                f"'{directory}' is not a directory", param_hint="'--path'"
            ) from e

    status = run_checks(
        files or [],
        echo=typer.echo,
        error=warning,
        resolver=resolver,
        threshold=threshold,
    )
    raise typer.Exit(status)


def main():
    app()


if __name__ == "__main__":
    app()
