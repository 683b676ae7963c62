"""A parsed dokapi book: configuration plus content-tree checks.

Example
-------
>>> from pathlib import Path
>>> from dokapi.book import DokapiBook
>>> book = DokapiBook.parse(Path("doc"))  # doctest: +SKIP
>>> book.generate("site", Path("out"))  # doctest: +SKIP
[PosixPath('out/site/index.html'), ...]
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ._constants import CONTENT_DIR
from .config import load_book_config
from .entries import assign_keys
from .errors import BookConfigError, MissingFileError, OrphanContentError
from .generator import GenerationEngine, strategy_for
from .project import resolve_project_sources

if typ.TYPE_CHECKING:
    from .config import BookConfig

_LOGGER = logging.getLogger("dokapi")


class DokapiBook:
    """Validated book ready to be generated in any output layout."""

    def __init__(
        self, config: BookConfig, *, logger: logging.Logger = _LOGGER
    ) -> None:
        """Assign entry keys and reject unreferenced Markdown files.

        Raises
        ------
        DuplicateEntryKeyError
            If two entries share a key.
        OrphanContentError
            If the content directory holds Markdown files no entry references.
        """
        self.config = config
        self.logger = logger
        assign_keys(config.index)
        self.check_orphan_content()

    @classmethod
    def parse(
        cls, input_dir: Path, *, logger: logging.Logger = _LOGGER
    ) -> DokapiBook:
        """Load ``dokapi.json`` from ``input_dir`` and build the book."""
        logger.info("Parsing book configuration in %s...", input_dir)
        return cls(load_book_config(input_dir), logger=logger)

    @property
    def root_dir(self) -> Path:
        return self.config.root_dir

    def path(self, *parts: str) -> Path:
        """Return ``parts`` resolved inside the book's root directory."""
        return self.root_dir.joinpath(*parts)

    def resolve_content(self, content: str) -> Path:
        """Return the absolute path of a content-relative Markdown file."""
        return self.path(CONTENT_DIR, content)

    def check_orphan_content(self) -> None:
        content_dir = self.path(CONTENT_DIR)
        if not content_dir.is_dir():
            return
        referenced = set(self.config.referenced_content)
        orphans = sorted(
            str(path) for path in content_dir.rglob("*.md") if path not in referenced
        )
        if orphans:
            msg = "Some Markdown files are not referenced:\n" + "\n".join(orphans)
            raise OrphanContentError(msg)

    def check_markdown_files(self, create_missing: bool = False) -> None:
        """Ensure every referenced Markdown file exists.

        With ``create_missing`` each absent file is created holding a
        ``<!-- todo: <file name> -->`` placeholder.

        Raises
        ------
        MissingFileError
            If a referenced file is absent and ``create_missing`` is false, or
            a referenced path is not a regular file.
        """
        self.logger.info(
            "Check all markdown files (creating missing: %s)...", create_missing
        )
        for path in self.config.referenced_content:
            if create_missing and not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(f"<!-- todo: {path.name} -->", encoding="utf-8")
            elif not path.is_file():
                msg = f'Validation error: file "{path}" does not exist.'
                raise MissingFileError(msg)

    def generate(
        self,
        output_type: str,
        output_dir: Path,
        *,
        refresh_project: bool = False,
        create_missing: bool = False,
    ) -> list[Path]:
        """Generate the book as ``output_type`` (``"site"`` or ``"page"``).

        Parameters
        ----------
        output_type : str
            Output layout name.
        output_dir : Path
            Output root; the result lands in ``<output_dir>/<output_type>``.
        refresh_project : bool, optional
            Clone a remote project again even when a cached copy exists.
        create_missing : bool, optional
            Create placeholder files for referenced Markdown that is missing.

        Returns
        -------
        list[Path]
            Paths written by the generation.
        """
        strategy = strategy_for(output_type)
        if output_dir.exists() and not output_dir.is_dir():
            msg = f'Validation error: output "{output_dir}" is not a directory.'
            raise BookConfigError(msg)
        output_dir.mkdir(parents=True, exist_ok=True)

        self.check_markdown_files(create_missing)
        project_dir = resolve_project_sources(
            self.config, output_dir, refresh=refresh_project, logger=self.logger
        )
        engine = GenerationEngine(
            self.config, strategy, output_dir, project_dir, logger=self.logger
        )
        return engine.run()


__all__ = ["DokapiBook"]
