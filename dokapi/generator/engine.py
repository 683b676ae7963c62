"""Shared generation pipeline behind the site and single-page outputs.

:class:`GenerationEngine` prepares everything a book needs before a single
page is written: the entry tree, image references, the variable store, and the
reference integrity check. It then hands control to an
:class:`~dokapi.generator.strategies.OutputStrategy`, which calls back into
:meth:`GenerationEngine.generate_html` for each entry it writes.

Example
-------
>>> from pathlib import Path
>>> from dokapi.book import DokapiBook
>>> from dokapi.generator import GenerationEngine, SiteOutput
>>> book = DokapiBook.parse(Path("doc"))  # doctest: +SKIP
>>> engine = GenerationEngine(book.config, SiteOutput(), Path("out"), None)  # doctest: +SKIP
>>> engine.run()  # doctest: +SKIP
[PosixPath('out/site/index.html'), ...]
"""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from dokapi._constants import CONTENT_DIR, GENERATED_CONTENT
from dokapi.entries import EntryTree
from dokapi.errors import MissingFileError
from dokapi.variables import (
    build_variables,
    check_integrity,
    collect_references,
)

from .images import collect_image_references, copy_images
from .links import (
    fix_links_root,
    mark_external_links,
    strip_placeholders,
    tag_current_links,
)
from .models import RenderContext
from .renderer import HtmlContentRenderer
from .template import TemplateRenderer

if typ.TYPE_CHECKING:
    from dokapi.config import BookConfig
    from dokapi.entries import Entry

    from .strategies import OutputStrategy

_LOGGER = logging.getLogger("dokapi")


class GenerationEngine:
    """Render the entries of a book through an output strategy."""

    def __init__(
        self,
        config: BookConfig,
        strategy: OutputStrategy,
        output_dir: Path,
        project_dir: Path | None,
        *,
        logger: logging.Logger = _LOGGER,
        templates_dir: Path | None = None,
    ) -> None:
        """Prepare variables, images, and templates for ``config``.

        Parameters
        ----------
        config : BookConfig
            Parsed book configuration with entry keys assigned.
        strategy : OutputStrategy
            Output layout; its ``name`` names the target sub-directory.
        output_dir : Path
            Directory receiving ``<strategy name>/``.
        project_dir : Path, optional
            Root of the documented project sources, if any.
        logger : logging.Logger, optional
            Destination for progress messages.
        templates_dir : Path, optional
            Directory containing the Jinja fragments; defaults to the package
            templates.

        Raises
        ------
        DokapiError
            If image references, variables, or references are invalid.
        """
        self.config = config
        self.strategy = strategy
        self.target = output_dir / strategy.name
        self.project_dir = project_dir
        self.logger = logger
        self.tree = EntryTree(
            config.main, config.index, main_label=config.main_label
        )
        self.renderer = HtmlContentRenderer()

        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or default_templates)),
            autoescape=select_autoescape(["html", "xml", "jinja"], default=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )

        self.images = collect_image_references(
            self.tree, self.content_path, logger=logger
        )
        self.variables = build_variables(project_dir, config, logger=logger)
        self.references = collect_references(config.referenced_content)
        check_integrity(self.variables, self.references, logger=logger)
        self.templates = TemplateRenderer(self.variables, self.render_markdown)

    def content_path(self, content: str) -> Path:
        """Return the absolute path of an entry's Markdown file."""
        return self.config.root_dir / CONTENT_DIR / content

    def read_template(self, path: Path) -> str:
        """Return the text of a user-supplied HTML template."""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f'Could not read template "{path}": {exc}'
            raise MissingFileError(msg) from exc

    def render_markdown(self, markdown: str, context: RenderContext) -> str:
        """Rewrite links in ``markdown`` for ``context`` and render it to HTML."""
        return self.renderer.markdown(
            self.strategy.fix_markdown_links(markdown, context)
        )

    def nav_link(self, direction: str, label: str, href: str | None) -> str:
        """Render a previous/next link, disabled when ``href`` is ``None``."""
        template = self.env.get_template("nav_link.jinja")
        return template.render(direction=direction, label=label, href=href).strip()

    def entry_variables(self, entry: Entry, path_to_root: str) -> dict[str, str]:
        """Return the ``entry.*`` variables every layout provides."""
        variables = {
            "entry.key": entry.key or "",
            "entry.title": entry.title,
            "entry.root.path": path_to_root,
        }
        if entry.children:
            variables["entry.menu"] = EntryTree.markdown_index(
                entry.children, numbering=self.config.numbering
            )
        return variables

    def generate_html(self, entry: Entry) -> str:
        """Return the complete HTML of ``entry``.

        The entry's Markdown has its references expanded and links rewritten
        before it is rendered; the resulting body is checked for broken
        internal links and merged into the strategy's entry template.
        """
        key = entry.key or ""
        root = self.strategy.path_to_root(entry)
        context = RenderContext(path_to_root=root, current_key=key)
        overrides = self.strategy.make_entry_variables(self, entry)
        overrides["menu"] = self.render_markdown(
            self.tree.markdown_menu(numbering=self.config.numbering), context
        )

        if entry.content:
            source = self.content_path(entry.content)
            markdown = self.read_template(source)
            expanded = self.templates.render(source, markdown, overrides, context)
            body = self.render_markdown(expanded, context)
        else:
            source = Path(GENERATED_CONTENT)
            body = self.strategy.generate_missing_content_html(self, entry, context)

        self.strategy.check_internal_links(body, source, self.tree.keys)
        overrides["entry.html.body"] = body

        template_path = self.strategy.template_path(self)
        template = fix_links_root(self.strategy.entry_template(self, entry), root)
        html = self.templates.render(
            template_path, template, overrides, context, render_markdown=True
        )
        html = strip_placeholders(tag_current_links(html, key))
        if self.config.external_links_to_blank:
            html = mark_external_links(html)
        return self.strategy.postprocess_entry_html(entry, html)

    def run(self) -> list[Path]:
        """Write the output tree and return the paths of written files."""
        self.logger.info("Generating %s into %s", self.strategy.name, self.target)
        if self.target.exists():
            shutil.rmtree(self.target)
        self.target.mkdir(parents=True)

        written = self.strategy.write(self)

        if self.config.assets.is_dir():
            self.logger.info("Copying assets...")
            assets_target = self.target / self.config.assets.name
            shutil.copytree(self.config.assets, assets_target)
            written.append(assets_target)
        written.extend(copy_images(self.images, self.target, logger=self.logger))
        self.logger.info("Done, %d files written.", len(written))
        return written


__all__ = ["GenerationEngine"]
