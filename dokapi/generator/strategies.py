"""Output layouts: one directory per entry, or one concatenated page.

Both layouts are driven by :class:`~dokapi.generator.engine.GenerationEngine`.
They differ only in the hook operations of :class:`OutputStrategy`: where the
output root lies relative to an entry, how Markdown links are rewritten and
rendered links validated, what a content-less entry renders to, which
navigation variables an entry gets, and how the results are written.
"""

from __future__ import annotations

import typing as typ

from dokapi.entries import EntryTree
from dokapi.errors import BookConfigError

from .links import (
    check_page_links,
    check_site_links,
    fix_links_root,
    fix_page_markdown_links,
    fix_site_markdown_links,
    prefix_heading_anchors,
)
from .models import RenderContext

if typ.TYPE_CHECKING:
    from pathlib import Path

    from dokapi.entries import Entry

    from .engine import GenerationEngine

BODY_PLACEHOLDER = "{{body}}"
ENTRY_BODY_REFERENCE = "{{entry.html.body}}"


class OutputStrategy(typ.Protocol):
    """Hooks that specialize the shared generation algorithm."""

    name: str

    def template_path(self, engine: GenerationEngine) -> Path:
        """Return the HTML template file used for entries."""
        ...

    def entry_template(self, engine: GenerationEngine, entry: Entry) -> str:
        """Return the template body an entry's HTML is merged into."""
        ...

    def includes(self, entry: Entry) -> bool:
        """Return whether ``entry`` is written by this layout."""
        ...

    def path_to_root(self, entry: Entry) -> str:
        """Return the relative path from ``entry``'s output to the output root."""
        ...

    def fix_markdown_links(self, markdown: str, context: RenderContext) -> str:
        """Rewrite Markdown links before rendering."""
        ...

    def check_internal_links(
        self, html: str, source: Path | str, entry_keys: set[str]
    ) -> None:
        """Validate the links of a rendered entry body."""
        ...

    def generate_missing_content_html(
        self, engine: GenerationEngine, entry: Entry, context: RenderContext
    ) -> str:
        """Return the body of an entry that has no Markdown file."""
        ...

    def make_entry_variables(
        self, engine: GenerationEngine, entry: Entry
    ) -> dict[str, str]:
        """Return the ``entry.*`` variables for ``entry``."""
        ...

    def postprocess_entry_html(self, entry: Entry, html: str) -> str:
        """Adjust an entry's final HTML."""
        ...

    def write(self, engine: GenerationEngine) -> list[Path]:
        """Render every included entry and persist the output files."""
        ...


class SiteOutput:
    """Multi-file website: ``<key>/index.html`` per entry, root at the top."""

    name = "site"

    def __init__(self) -> None:
        self._template: str | None = None

    def template_path(self, engine: GenerationEngine) -> Path:
        return engine.config.site_template

    def entry_template(self, engine: GenerationEngine, entry: Entry) -> str:
        if self._template is None:
            self._template = engine.read_template(self.template_path(engine))
        return self._template

    def includes(self, entry: Entry) -> bool:
        return True

    def path_to_root(self, entry: Entry) -> str:
        return "." if not entry.key else ".."

    def fix_markdown_links(self, markdown: str, context: RenderContext) -> str:
        return fix_site_markdown_links(markdown, context)

    def check_internal_links(
        self, html: str, source: Path | str, entry_keys: set[str]
    ) -> None:
        check_site_links(html, source, entry_keys)

    def generate_missing_content_html(
        self, engine: GenerationEngine, entry: Entry, context: RenderContext
    ) -> str:
        index = EntryTree.markdown_index(
            entry.children, numbering=engine.config.numbering
        )
        return engine.render_markdown(index, context)

    def make_entry_variables(
        self, engine: GenerationEngine, entry: Entry
    ) -> dict[str, str]:
        root = self.path_to_root(entry)
        variables = engine.entry_variables(entry, root)
        variables["entry.previous"] = engine.nav_link(
            "previous",
            engine.config.previous_link,
            f"{root}/{entry.previous.key}" if entry.previous else None,
        )
        variables["entry.next"] = engine.nav_link(
            "next",
            engine.config.next_link,
            f"{root}/{entry.next.key}" if entry.next else None,
        )
        return variables

    def postprocess_entry_html(self, entry: Entry, html: str) -> str:
        return html

    def write(self, engine: GenerationEngine) -> list[Path]:
        engine.logger.info("Generating HTML content from Markdown templates...")
        written: list[Path] = []
        for entry in engine.tree:
            directory = engine.target / entry.key if entry.key else engine.target
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / "index.html"
            path.write_text(engine.generate_html(entry), encoding="utf-8")
            written.append(path)
        return written


class PageOutput:
    """Single concatenated ``index.html`` with entry-scoped anchors.

    Every entry gets an ``<a id="<key>__">`` heading; internal links become
    ``#<key>__<anchor>`` and heading anchors are prefixed with the entry key
    so the anchors of different entries never clash.
    """

    name = "page"

    def template_path(self, engine: GenerationEngine) -> Path:
        return engine.config.page_template

    def entry_template(self, engine: GenerationEngine, entry: Entry) -> str:
        return engine.env.get_template("page_entry.jinja").render(
            key=entry.key,
            title=entry.title,
            body_placeholder=ENTRY_BODY_REFERENCE,
        )

    def includes(self, entry: Entry) -> bool:
        return not entry.hidden and bool(entry.content)

    def path_to_root(self, entry: Entry) -> str:
        return "."

    def fix_markdown_links(self, markdown: str, context: RenderContext) -> str:
        return fix_page_markdown_links(markdown, context)

    def check_internal_links(
        self, html: str, source: Path | str, entry_keys: set[str]
    ) -> None:
        check_page_links(html, source, entry_keys)

    def generate_missing_content_html(
        self, engine: GenerationEngine, entry: Entry, context: RenderContext
    ) -> str:
        return ""

    def make_entry_variables(
        self, engine: GenerationEngine, entry: Entry
    ) -> dict[str, str]:
        variables = engine.entry_variables(entry, self.path_to_root(entry))
        variables["entry.previous"] = engine.nav_link(
            "previous",
            engine.config.previous_link,
            f"#{entry.previous.key}__" if entry.previous else None,
        )
        variables["entry.next"] = engine.nav_link(
            "next",
            engine.config.next_link,
            f"#{entry.next.key}__" if entry.next else None,
        )
        return variables

    def postprocess_entry_html(self, entry: Entry, html: str) -> str:
        return prefix_heading_anchors(html, entry.key or "")

    def write(self, engine: GenerationEngine) -> list[Path]:
        template_path = self.template_path(engine)
        template = engine.read_template(template_path)
        if BODY_PLACEHOLDER not in template:
            msg = (
                f'Page template "{template_path}" has no '
                f"{BODY_PLACEHOLDER} placeholder."
            )
            raise BookConfigError(msg)
        prefix, suffix = template.split(BODY_PLACEHOLDER, 1)

        context = RenderContext(path_to_root=".", current_key="")
        overrides = {
            "menu": engine.render_markdown(
                engine.tree.markdown_menu(numbering=engine.config.numbering), context
            )
        }

        def _frame(part: str) -> str:
            rendered = engine.templates.render(
                template_path, part, overrides, context, render_markdown=True
            )
            return fix_links_root(rendered, context.path_to_root)

        engine.logger.info("Generating HTML content from Markdown templates...")
        path = engine.target / "index.html"
        with path.open("w", encoding="utf-8") as handle:
            handle.write(_frame(prefix))
            for entry in engine.tree:
                if self.includes(entry):
                    handle.write(engine.generate_html(entry))
            handle.write(_frame(suffix))
        return [path]


STRATEGIES: dict[str, type[SiteOutput] | type[PageOutput]] = {
    SiteOutput.name: SiteOutput,
    PageOutput.name: PageOutput,
}


def strategy_for(output_type: str) -> OutputStrategy:
    """Return a fresh strategy for ``output_type`` (``"site"`` or ``"page"``)."""
    try:
        factory = STRATEGIES[output_type]
    except KeyError as exc:
        known = ", ".join(sorted(STRATEGIES))
        msg = f"Unknown output type: {output_type}. Known output types: {known}"
        raise BookConfigError(msg) from exc
    return factory()


__all__ = [
    "STRATEGIES",
    "OutputStrategy",
    "PageOutput",
    "SiteOutput",
    "strategy_for",
]
