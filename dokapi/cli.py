"""Cyclopts CLI entrypoint for generating dokapi books.

The ``dokapi`` console script renders a book directory (``dokapi.json`` plus
Markdown content, templates, and assets) into a multi-page website or a
single HTML page, optionally regenerating on every change.

Examples
--------
Generate the website for the book in ``doc`` into ``out/site``:

>>> from dokapi.cli import app
>>> app(["--input", "doc", "--output", "out"])  # doctest: +SKIP

Keep regenerating the single-page output while editing:

>>> app(["-i", "doc", "-o", "out", "-t", "page", "--watch"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import time
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .book import DokapiBook
from .errors import DokapiError
from .log import configure_logging
from .watch import watch as watch_book

app = App(
    name="dokapi",
    help="Generate documentation websites and single pages from Markdown.",
    config=cyclopts.config.Env("DOKAPI_", command=False),  # type: ignore[unknown-argument]
)


def run_once(
    input_dir: Path,
    output_dir: Path,
    output_type: str,
    *,
    refresh_project: bool = False,
    create_missing: bool = False,
    logger: logging.Logger,
) -> list[Path]:
    """Parse the book in ``input_dir`` and generate it once."""
    started = time.perf_counter()
    book = DokapiBook.parse(input_dir, logger=logger)
    written = book.generate(
        output_type,
        output_dir,
        refresh_project=refresh_project,
        create_missing=create_missing,
    )
    logger.info("Generated in %.2fs :)", time.perf_counter() - started)
    return written


@app.default
def generate(
    *,
    input_dir: typ.Annotated[
        Path, Parameter(name=["--input", "-i"], help="Book input directory")
    ],
    output_dir: typ.Annotated[
        Path, Parameter(name=["--output", "-o"], help="Output directory")
    ],
    output_type: typ.Annotated[
        typ.Literal["site", "page"],
        Parameter(name=["--output-type", "-t"], help="Output layout"),
    ] = "site",
    watch: typ.Annotated[
        bool,
        Parameter(
            name=["--watch", "-w"],
            negative=(),
            help="Regenerate whenever the input directory changes",
        ),
    ] = False,
    create_missing: typ.Annotated[
        bool,
        Parameter(
            name=["--create-missing", "-c"],
            negative=(),
            help="Create placeholder files for missing Markdown content",
        ),
    ] = False,
    refresh_project: typ.Annotated[
        bool,
        Parameter(
            name=["--refresh-project", "-r"],
            negative=(),
            help="Clone the remote project again instead of using the cached copy",
        ),
    ] = False,
    stack_trace: typ.Annotated[
        bool,
        Parameter(negative=(), help="Print the stack trace of errors"),
    ] = False,
    verbose: typ.Annotated[
        bool, Parameter(name=["--verbose", "-v"], negative=(), help="Debug logging")
    ] = False,
) -> None:
    """Generate the book found in ``input_dir``.

    Parameters
    ----------
    input_dir : Path
        Directory containing ``dokapi.json``.
    output_dir : Path
        Output root; files land in ``<output_dir>/<output_type>``.
    output_type : {"site", "page"}, optional
        Multi-page website (default) or single HTML page.
    watch : bool, optional
        Keep running and regenerate on changes; failures are logged and do not
        stop the watcher.
    create_missing : bool, optional
        Create ``<!-- todo -->`` placeholders for referenced Markdown files
        that do not exist.
    refresh_project : bool, optional
        Re-clone a remote project.
    stack_trace : bool, optional
        Include the traceback when reporting a failure.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        With status 1 when generation fails outside watch mode.
    """
    logger = configure_logging(verbose)
    logger.info("Dokapi generator:")
    options = {
        "input": input_dir,
        "output": output_dir,
        "outputType": output_type,
        "watch": watch,
        "createMissing": create_missing,
        "refreshProject": refresh_project,
    }
    for name, value in options.items():
        logger.info("%s: %s", name, value)

    def _generate() -> list[Path]:
        return run_once(
            input_dir,
            output_dir,
            output_type,
            refresh_project=refresh_project,
            create_missing=create_missing,
            logger=logger,
        )

    try:
        if watch:
            watch_book(input_dir, _generate, ignore=[output_dir], logger=logger)
        else:
            _generate()
    except (DokapiError, OSError) as exc:
        if stack_trace:
            logger.exception("%s", exc)
        else:
            logger.error("%s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc


def main() -> None:
    """Invoke the Cyclopts application that powers the ``dokapi`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()


__all__ = ["app", "generate", "main", "run_once"]
