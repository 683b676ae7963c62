"""Expand ``{{key}}`` references inside Markdown and HTML templates."""

from __future__ import annotations

import typing as typ

from dokapi._constants import ZERO_WIDTH_SPACE
from dokapi.errors import UnresolvedReferenceError
from dokapi.references import (
    is_file_reference,
    iter_references,
    substitute_references,
)
from dokapi.variables import read_source, resolve_file_reference

if typ.TYPE_CHECKING:
    from pathlib import Path

    from dokapi.variables import VariableStore

    from .models import RenderContext

MarkdownRenderer = typ.Callable[[str, "RenderContext"], str]


class TemplateRenderer:
    """Resolve references against file inclusions, overrides, and variables.

    Parameters
    ----------
    variables : VariableStore
        Book-wide variables.
    render_markdown : Callable[[str, RenderContext], str]
        Renders a Markdown fragment for the given context; used for variables
        flagged as Markdown when the caller asks for rendered output.
    """

    def __init__(
        self, variables: VariableStore, render_markdown: MarkdownRenderer
    ) -> None:
        self.variables = variables
        self._render_markdown = render_markdown

    def render(
        self,
        template_path: Path,
        body: str,
        overrides: typ.Mapping[str, str] | None = None,
        context: RenderContext | None = None,
        *,
        render_markdown: bool = False,
    ) -> str:
        """Return ``body`` with every non-escaped reference substituted.

        Each key is resolved once, in priority order: file inclusion
        (``file:``/``editfile:``, relative to ``template_path``), then
        ``overrides``, then the variable store. All occurrences are replaced in
        a single pass.

        Raises
        ------
        UnresolvedReferenceError
            If a key matches no inclusion, override, or variable.
        FileReferenceError
            If an inclusion does not name an existing regular file.
        """
        overrides = overrides or {}
        values: dict[str, str] = {}
        for key in iter_references(body):
            if key not in values:
                values[key] = self._resolve(
                    key, template_path, overrides, context, render_markdown
                )
        return substitute_references(body, values.__getitem__)

    def _resolve(
        self,
        key: str,
        template_path: Path,
        overrides: typ.Mapping[str, str],
        context: RenderContext | None,
        render_markdown: bool,
    ) -> str:
        if is_file_reference(key):
            return self._include(template_path, key)
        if key in overrides:
            return overrides[key]
        variable = self.variables.get(key)
        if variable is None:
            msg = (
                f'Variable reference "{key}" could not be resolved in '
                f'"{template_path}".'
            )
            raise UnresolvedReferenceError(msg)
        if variable.markdown and render_markdown and context is not None:
            return self._render_markdown(variable.text, context)
        return variable.text

    @staticmethod
    def _include(template_path: Path, reference: str) -> str:
        """Embed a file as a fenced code block or an editable text area."""
        path = resolve_file_reference(template_path, reference)
        extension = path.suffix[1:]
        text = read_source(path)
        if reference.startswith("editfile:"):
            text = text.replace("\n", f"{ZERO_WIDTH_SPACE}\n")
            return f'\n<textarea class="{extension}">\n{text}\n</textarea>\n'
        return f"\n```{extension}\n{text}\n```\n"


__all__ = ["MarkdownRenderer", "TemplateRenderer"]
