"""Typed dataclasses describing a dokapi book configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from dokapi._constants import DEFAULT_ANNOTATION, DEFAULT_MAIN_NAME
from dokapi.entries import Entry


@dc.dataclass(slots=True)
class BookConfig:
    """A fully validated ``dokapi.json`` with paths resolved.

    Attributes
    ----------
    root_dir : Path
        Absolute input directory holding ``dokapi.json``.
    name : str
        Book name, also exposed as the ``config.name`` variable.
    main : Entry
        Synthetic root entry (key ``""``), titled with the book name.
    main_label : str
        Label of the root entry in the main menu.
    index : list[Entry]
        Top-level entries in menu order.
    site_template, page_template : Path
        HTML templates for the two output modes.
    assets : Path
        Directory copied verbatim into the output.
    referenced_content : list[Path]
        Absolute paths of every Markdown file named by the config, root first.
    """

    root_dir: Path
    name: str
    main: Entry
    index: list[Entry]
    site_template: Path
    page_template: Path
    assets: Path
    project: str | None = None
    variables: dict[str, str] = dc.field(default_factory=dict)
    numbering: bool = False
    external_links_to_blank: bool = False
    previous_link: str = "Previous"
    next_link: str = "Next"
    annotation: str = DEFAULT_ANNOTATION
    skip_project_variables: bool = False
    source_extensions: tuple[str, ...] = (".js",)
    main_label: str = DEFAULT_MAIN_NAME
    referenced_content: list[Path] = dc.field(default_factory=list)


__all__ = ["BookConfig"]
