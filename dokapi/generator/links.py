"""Rewrite and validate links for the site and single-page output layouts.

Links are handled in two phases. Before Markdown rendering, root-relative
links (``[text](/key)``), hash-only links, and image URLs are rewritten for the
position of the current entry in the output. After rendering, every ``href``
in the entry body is classified with :func:`classify_link` and internal links
are checked against the set of known entry keys.

Example
-------
>>> from dokapi.generator.links import classify_link
>>> classify_link("../setup/#install")
RelativeInternal(key='setup', anchor='install')
>>> classify_link("setup")
Malformed(url='setup')
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import unescape

from dokapi._constants import IMAGES_DIR, ZERO_WIDTH_SPACE
from dokapi.errors import BrokenLinkError, UnexpectedLinkError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import RenderContext

LINK_MAILTO = re.compile(r"^mailto:\S+$", re.IGNORECASE)
LINK_ABSOLUTE = re.compile(r"^https?://\S+$", re.IGNORECASE)
LINK_HASH = re.compile(r"^#[A-Za-z0-9_=-]*$")
LINK_RELATIVE = re.compile(r"^\.{1,2}/([a-z0-9-]*)(?:/#([A-Za-z0-9_-]+))?$")

HREF_PATTERN = re.compile(r'\shref="([^"]+)"')
PAGE_HREF_PATTERN = re.compile(r'\shref="#([^"_]+?)__([^"]*)"')

MARKDOWN_ROOT_LINK = re.compile(r"(?<!!)(\[[^\]]*\])\(/([a-z0-9/#-]*)\)")
MARKDOWN_HASH_LINK = re.compile(r"(?<!!)(\[[^\]]*\])\(#([A-Za-z0-9_-]+)\)")
MARKDOWN_PAGE_LINK = re.compile(
    r"(?<!!)(\[[^\]]*\])\(/([a-z0-9-]*)/?(?:#([A-Za-z0-9_-]*))?\)"
)
MARKDOWN_IMAGE = re.compile(r"(!\[[^\]]*\])\(([^)]+?)\)")

ROOT_ATTRIBUTE = re.compile(r"""(href|src)=(["'])/(?!/)""", re.IGNORECASE)
EXTERNAL_HREF = re.compile(r"""(href=["']https?://)""", re.IGNORECASE)
HEADING_ANCHOR = re.compile(
    r'<a aria-hidden="true" id="([A-Za-z0-9_-]*)" class="deep-link" '
    r'href="#[A-Za-z0-9_-]*"'
)


@dc.dataclass(slots=True, frozen=True)
class Mailto:
    url: str


@dc.dataclass(slots=True, frozen=True)
class AbsoluteUrl:
    url: str


@dc.dataclass(slots=True, frozen=True)
class HashOnly:
    anchor: str


@dc.dataclass(slots=True, frozen=True)
class RelativeInternal:
    key: str
    anchor: str | None = None


@dc.dataclass(slots=True, frozen=True)
class Malformed:
    url: str


Link = Mailto | AbsoluteUrl | HashOnly | RelativeInternal | Malformed


def classify_link(url: str) -> Link:
    """Return the variant describing ``url`` as found in an ``href``."""
    if LINK_MAILTO.match(url):
        return Mailto(url)
    if LINK_ABSOLUTE.match(url):
        return AbsoluteUrl(url)
    if LINK_HASH.match(url):
        return HashOnly(url[1:])
    if match := LINK_RELATIVE.match(url):
        return RelativeInternal(match.group(1), match.group(2))
    return Malformed(url)


def fix_site_markdown_links(markdown: str, context: RenderContext) -> str:
    """Rewrite links in ``markdown`` for the one-directory-per-entry layout.

    ``[t](/key)`` becomes ``[t](<root>/key)``, ``[t](#anchor)`` becomes
    ``[t](<root>/<current key>/#anchor)`` except on the root entry, and image
    URLs point into the shared images directory.
    """
    root = context.path_to_root
    markdown = MARKDOWN_ROOT_LINK.sub(
        lambda m: f"{m.group(1)}({root}/{m.group(2)})", markdown
    )
    if context.current_key:
        markdown = MARKDOWN_HASH_LINK.sub(
            lambda m: f"{m.group(1)}({root}/{context.current_key}/#{m.group(2)})",
            markdown,
        )
    return fix_image_links(markdown, context)


def fix_page_markdown_links(markdown: str, context: RenderContext) -> str:
    """Rewrite links in ``markdown`` into anchors of the single-page document.

    ``[t](/key)`` and ``[t](/key/#anchor)`` become ``#key__`` and
    ``#key__anchor``; hash-only links are scoped to the current entry.
    """
    markdown = MARKDOWN_HASH_LINK.sub(
        lambda m: f"{m.group(1)}(#{context.current_key}__{m.group(2)})", markdown
    )
    markdown = MARKDOWN_PAGE_LINK.sub(
        lambda m: f"{m.group(1)}(#{m.group(2)}__{m.group(3) or ''})", markdown
    )
    return fix_image_links(markdown, context)


def fix_image_links(markdown: str, context: RenderContext) -> str:
    """Point every image URL at its namespaced copy in the images directory."""
    prefix = f"{context.path_to_root}/{IMAGES_DIR}/{context.current_key}__"
    return MARKDOWN_IMAGE.sub(lambda m: f"{m.group(1)}({prefix}{m.group(2)})", markdown)


def check_site_links(html: str, source: Path | str, entry_keys: set[str]) -> None:
    """Validate every ``href`` of a rendered site entry.

    Raises
    ------
    BrokenLinkError
        If a relative link targets an unknown entry key.
    UnexpectedLinkError
        If an ``href`` has none of the supported shapes.
    """
    for url in map(unescape, HREF_PATTERN.findall(html)):
        match classify_link(url):
            case RelativeInternal(key=key) if key not in entry_keys:
                msg = f'Broken internal link "{url}" (to "{key}") in file "{source}"'
                raise BrokenLinkError(msg)
            case Malformed():
                msg = (
                    f'Unexpected link URL: "{url}" in file "{source}" '
                    '(internal links must start with "/")'
                )
                raise UnexpectedLinkError(msg)
            case _:
                continue


def check_page_links(html: str, source: Path | str, entry_keys: set[str]) -> None:
    """Validate ``#key__anchor`` links of a rendered single-page entry.

    Heading deep links are not namespaced yet at this point and are skipped;
    their own ids may contain ``__``.
    """
    for key, _anchor in PAGE_HREF_PATTERN.findall(HEADING_ANCHOR.sub("", html)):
        if key not in entry_keys:
            msg = f'Broken internal link "{key}" in file "{source}"'
            raise BrokenLinkError(msg)


def fix_links_root(html: str, path_to_root: str) -> str:
    """Make root-relative ``href``/``src`` attributes relative to ``path_to_root``."""
    return ROOT_ATTRIBUTE.sub(
        lambda m: f"{m.group(1)}={m.group(2)}{path_to_root}/", html
    )


def tag_current_links(html: str, key: str) -> str:
    """Add ``class="current"`` to links pointing at the entry ``key``."""
    pattern = re.compile(rf'href="(\.{{1,2}}/{re.escape(key)})"')
    return pattern.sub(r'href="\1" class="current"', html)


def mark_external_links(html: str) -> str:
    """Make absolute http(s) links open in a new browsing context."""
    return EXTERNAL_HREF.sub(
        r'class="external" rel="noopener noreferrer" target="_blank" \1', html
    )


def strip_placeholders(html: str) -> str:
    """Remove the zero-width spaces inserted around editable blocks."""
    return html.replace(ZERO_WIDTH_SPACE, "")


def prefix_heading_anchors(html: str, key: str) -> str:
    """Namespace heading anchors with ``key`` for the single-page document."""
    return HEADING_ANCHOR.sub(
        lambda m: (
            f'<a aria-hidden="true" id="{key}__{m.group(1)}" class="deep-link" '
            f'href="#{key}__{m.group(1)}"'
        ),
        html,
    )


__all__ = [
    "AbsoluteUrl",
    "HashOnly",
    "Link",
    "Mailto",
    "Malformed",
    "RelativeInternal",
    "check_page_links",
    "check_site_links",
    "classify_link",
    "fix_image_links",
    "fix_links_root",
    "fix_page_markdown_links",
    "fix_site_markdown_links",
    "mark_external_links",
    "prefix_heading_anchors",
    "strip_placeholders",
    "tag_current_links",
]
