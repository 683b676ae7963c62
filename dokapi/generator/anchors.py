"""Markdown extension adding GitHub-style deep-link anchors to headings."""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
ANCHOR_PATTERN = re.compile(r"[^\w]+", re.ASCII)


def heading_anchor(text: str) -> str:
    """Return the anchor id used for a heading whose text is ``text``."""
    return ANCHOR_PATTERN.sub("-", text.lower())


class HeadingAnchorExtension(Extension):
    """Prefix every heading with an ``<a class="deep-link">`` anchor.

    ``<h2>Install steps</h2>`` becomes::

        <h2 class="header"><a aria-hidden="true" id="install-steps"
        class="deep-link" href="#install-steps"><span class="deep-link"></span></a>
        Install steps</h2>
    """

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the heading-anchor treeprocessor on the Markdown instance."""
        md.treeprocessors.register(HeadingAnchorTreeprocessor(md), "dokapi_anchors", 15)


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Insert deep-link anchors into heading elements."""

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        """Decorate every heading in the parsed tree."""
        for element in root.iter():
            if element.tag in HEADING_TAGS:
                self._decorate(element)
        return root

    @staticmethod
    def _decorate(heading: Element) -> None:
        anchor_id = heading_anchor("".join(heading.itertext()))
        heading.set("class", "header")
        anchor = etree.Element("a")
        anchor.set("aria-hidden", "true")
        anchor.set("id", anchor_id)
        anchor.set("class", "deep-link")
        anchor.set("href", f"#{anchor_id}")
        span = etree.SubElement(anchor, "span")
        span.set("class", "deep-link")
        span.text = ""
        anchor.tail = heading.text
        heading.text = None
        heading.insert(0, anchor)


__all__ = ["HeadingAnchorExtension", "HeadingAnchorTreeprocessor", "heading_anchor"]
