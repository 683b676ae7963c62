"""Shared dataclasses used by the generation pipeline."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


@dc.dataclass(slots=True, frozen=True)
class RenderContext:
    """Position of the entry being rendered within the output topology.

    Attributes
    ----------
    path_to_root : str
        Relative path from the entry's output file to the output root
        (``"."`` or ``".."``).
    current_key : str
        Key of the entry being rendered; ``""`` for the root entry.
    """

    path_to_root: str
    current_key: str


@dc.dataclass(slots=True, frozen=True)
class ImageReference:
    """An image referenced from an entry's Markdown.

    Attributes
    ----------
    key : str
        Output filename, namespaced as ``<entry key>__<url>``.
    path : Path
        Absolute path of the source image.
    url : str
        URL as written in the Markdown.
    file : Path
        Markdown file containing the reference.
    content_key : str
        Key of the owning entry.
    """

    key: str
    path: Path
    url: str
    file: Path
    content_key: str


__all__ = ["ImageReference", "RenderContext"]
