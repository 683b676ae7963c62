"""Shared fixtures that build small dokapi books on disk."""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

import pytest

SITE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<title>{{entry.title}}</title>
<link rel="stylesheet" href="/assets/style.css">
</head>
<body>
<nav id="menu">{{menu}}</nav>
<main id="content">{{entry.html.body}}</main>
<footer>{{entry.previous}} {{entry.next}}</footer>
</body>
</html>
"""

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><link rel="stylesheet" href="/assets/style.css"></head>
<body>
<nav id="menu">{{menu}}</nav>
{{body}}
</body>
</html>
"""

DEFAULT_CONTENT = {
    "intro.md": "# Welcome\n\nRead [the start](/getting-started) first.\n",
    "getting-started.md": (
        "# Getting Started\n\nInstall version {{version}}.\n\n"
        "## Install steps\n\nSee [setup](/setup/#configure) and [below](#install-steps).\n"
    ),
    "guides/setup.md": "# Setup\n\n## Configure\n\nBack to [the intro](/).\n",
    "guides/secret.md": "# Secret\n\nNothing to see.\n",
}

DEFAULT_INDEX: list[dict[str, typ.Any]] = [
    {"name": "Getting Started", "content": "getting-started.md"},
    {
        "name": "Guides",
        "children": [
            {"name": "Setup", "content": "guides/setup.md"},
            {"name": "Secret", "content": "guides/secret.md", "hidden": True},
        ],
    },
]


class BookFactory(typ.Protocol):
    def __call__(
        self,
        *,
        config: dict[str, typ.Any] | None = None,
        content: dict[str, str] | None = None,
        files: dict[str, str] | None = None,
    ) -> Path: ...


@pytest.fixture
def make_book(tmp_path: Path) -> BookFactory:
    """Return a factory writing a book under ``tmp_path / "book"``.

    ``config`` entries override the default ``dokapi.json`` fields, ``content``
    replaces the Markdown files, and ``files`` adds arbitrary extra files
    relative to the book root.
    """

    def _make(
        *,
        config: dict[str, typ.Any] | None = None,
        content: dict[str, str] | None = None,
        files: dict[str, str] | None = None,
    ) -> Path:
        root = tmp_path / "book"
        root.mkdir(exist_ok=True)
        payload: dict[str, typ.Any] = {
            "name": "Demo Book",
            "main": {"name": "Intro", "content": "intro.md"},
            "siteTemplate": "templates/site.html",
            "pageTemplate": "templates/page.html",
            "assets": "assets",
            "variables": {"version": "1.2.3"},
            "index": DEFAULT_INDEX,
        }
        payload.update(config or {})
        (root / "dokapi.json").write_text(json.dumps(payload), encoding="utf-8")

        extra = {
            "templates/site.html": SITE_TEMPLATE,
            "templates/page.html": PAGE_TEMPLATE,
            "assets/style.css": "body { margin: 0; }\n",
        }
        extra.update(files or {})
        pages = DEFAULT_CONTENT if content is None else content
        extra.update({f"content/{name}": body for name, body in pages.items()})
        for relative, body in extra.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def logger() -> logging.Logger:
    """Return the package logger with propagation enabled for ``caplog``."""
    log = logging.getLogger("dokapi.tests")
    log.setLevel(logging.DEBUG)
    log.propagate = True
    return log
