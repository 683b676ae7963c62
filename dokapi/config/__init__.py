"""Load and validate ``dokapi.json`` book configurations.

The loader decodes the JSON file, checks every field the generators rely on,
resolves template, asset, and content paths against the input directory, and
returns a :class:`BookConfig` whose entries are ready to be keyed and indexed.

Examples
--------
>>> from pathlib import Path
>>> from dokapi.config import load_book_config
>>> config = load_book_config(Path("docs"))  # doctest: +SKIP
>>> config.main.name  # doctest: +SKIP
'Introduction'
"""

from dokapi.errors import BookConfigError

from .loader import CONTENT_PATH_PATTERN, load_book_config
from .models import BookConfig

__all__ = ["CONTENT_PATH_PATTERN", "BookConfig", "BookConfigError", "load_book_config"]
