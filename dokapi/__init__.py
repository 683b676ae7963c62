"""Static documentation generator for Markdown books.

A book is a directory holding ``dokapi.json``, Markdown files under
``content/``, HTML templates, and assets. It can be rendered as a website with
one directory per entry or as a single HTML page suitable for printing.

Exports
-------
- ``app``: Cyclopts application behind the ``dokapi`` command.
- ``main``: Convenience function that invokes ``app``.
- ``DokapiBook``: Parsed book with :meth:`~DokapiBook.generate`.
- ``load_book_config``: Parse and validate ``dokapi.json``.

Examples
--------
>>> from pathlib import Path
>>> from dokapi import DokapiBook
>>> DokapiBook.parse(Path("doc")).generate("page", Path("out"))  # doctest: +SKIP
[PosixPath('out/page/index.html'), ...]
"""

from __future__ import annotations

from .book import DokapiBook
from .cli import app, main
from .config import load_book_config

__all__ = ["DokapiBook", "app", "load_book_config", "main"]
