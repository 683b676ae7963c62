"""Collect, validate, and copy images referenced from entry Markdown."""

from __future__ import annotations

import logging
import re
import shutil
import typing as typ

from dokapi._constants import IMAGE_KEY_TEMPLATE, IMAGES_DIR
from dokapi.errors import ImageReferenceError
from dokapi.variables import read_source

from .models import ImageReference

if typ.TYPE_CHECKING:
    from pathlib import Path

    from dokapi.entries import Entry

IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")
IMAGE_URL_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

_LOGGER = logging.getLogger("dokapi")


class ImageRegistry:
    """Image references indexed by their namespaced output key."""

    def __init__(self) -> None:
        self._by_key: dict[str, ImageReference] = {}

    def add(self, reference: ImageReference) -> None:
        """Register ``reference``, ignoring exact duplicates.

        Raises
        ------
        ImageReferenceError
            If another reference with the same key points at a different file.
        """
        collision = self._by_key.get(reference.key)
        if collision is not None:
            if collision.path == reference.path:
                return
            msg = (
                f'Image "{reference.url}" referenced in "{reference.file}" '
                f'collides with other relative reference from "{collision.file}".'
            )
            raise ImageReferenceError(msg)
        self._by_key[reference.key] = reference

    def get(self, key: str) -> ImageReference | None:
        return self._by_key.get(key)

    def __iter__(self) -> typ.Iterator[ImageReference]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)


def collect_image_references(
    entries: typ.Iterable[Entry],
    resolve_content: typ.Callable[[str], Path],
    *,
    logger: logging.Logger = _LOGGER,
) -> ImageRegistry:
    """Return a registry of every image referenced by ``entries``.

    Images must sit next to the Markdown file that references them. Each one
    is namespaced with its entry key so equally named images of different
    entries do not collide in the flat output directory.

    Parameters
    ----------
    entries : Iterable[Entry]
        Entries to scan; entries without content are skipped.
    resolve_content : Callable[[str], Path]
        Maps an entry's ``content`` to the absolute Markdown path.
    logger : logging.Logger, optional
        Destination for progress messages.

    Raises
    ------
    ImageReferenceError
        If a URL contains a path separator or unsupported characters, the
        image file does not exist, or two references share a key but resolve
        to different files.
    """
    logger.info("Extract image references from markdown files...")
    registry = ImageRegistry()
    for entry in entries:
        if not entry.content:
            continue
        md_path = resolve_content(entry.content)
        body = read_source(md_path)
        for url in IMAGE_PATTERN.findall(body):
            registry.add(_make_reference(entry, md_path, url))
    return registry


def _make_reference(entry: Entry, md_path: Path, url: str) -> ImageReference:
    if "/" in url:
        msg = f'Illegal image URL (contains a "/"): "{url}" in file "{md_path}"'
        raise ImageReferenceError(msg)
    if not IMAGE_URL_PATTERN.match(url):
        msg = f'Invalid image url: "{url}" in file "{md_path}"'
        raise ImageReferenceError(msg)
    path = (md_path.parent / url).resolve()
    if not path.is_file():
        msg = f'Broken image reference "{url}" in file "{md_path}"'
        raise ImageReferenceError(msg)
    key = entry.key or ""
    return ImageReference(
        key=IMAGE_KEY_TEMPLATE.format(entry=key, url=url),
        path=path,
        url=url,
        file=md_path,
        content_key=key,
    )


def copy_images(
    references: typ.Iterable[ImageReference],
    target: Path,
    *,
    logger: logging.Logger = _LOGGER,
) -> list[Path]:
    """Copy each referenced image into ``target/images`` under its key."""
    references = list(references)
    logger.info("Copying %d referenced images...", len(references))
    images_dir = target / IMAGES_DIR
    images_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for reference in references:
        destination = images_dir / reference.key
        shutil.copyfile(reference.path, destination)
        written.append(destination)
    return written


__all__ = ["IMAGE_PATTERN", "ImageRegistry", "collect_image_references", "copy_images"]
