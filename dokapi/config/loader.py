"""Load ``dokapi.json`` into typed dataclasses."""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

import msgspec
import msgspec.json as msgspec_json

from dokapi._constants import (
    CONFIG_FILE,
    CONTENT_DIR,
    DEFAULT_ANNOTATION,
    DEFAULT_MAIN_NAME,
)
from dokapi.entries import Entry
from dokapi.errors import BookConfigError

from .helpers import (
    _existing_dir,
    _existing_file,
    _optional_bool,
    _optional_str,
    _require_str,
    _string_list,
    _string_map,
)
from .models import BookConfig

CONTENT_PATH_PATTERN = re.compile(r"^[a-z0-9/-]+\.md$")


def load_book_config(input_dir: Path) -> BookConfig:
    """Load and validate the book configuration stored in ``input_dir``.

    Parameters
    ----------
    input_dir : Path
        Directory containing ``dokapi.json``, the ``content`` folder, the
        templates, and the assets.

    Returns
    -------
    BookConfig
        Parsed configuration with absolute paths and unkeyed entries.

    Raises
    ------
    BookConfigError
        If the input directory or config file is missing, the JSON cannot be
        decoded, or a field is missing or invalid.
    """
    if not input_dir.is_dir():
        msg = f'Validation error: input "{input_dir}" is not a directory.'
        raise BookConfigError(msg)
    root = input_dir.resolve()
    config_path = root / CONFIG_FILE
    try:
        raw = msgspec_json.decode(config_path.read_bytes())
    except OSError as exc:
        msg = f'Could not read file "{config_path}": {exc}'
        raise BookConfigError(msg) from exc
    except msgspec.DecodeError as exc:
        msg = f'Could not parse JSON content of "{config_path}": {exc}'
        raise BookConfigError(msg) from exc
    if not isinstance(raw, dict):
        msg = f'Top-level JSON value of "{config_path}" must be an object.'
        raise BookConfigError(msg)
    payload: dict[str, typ.Any] = raw

    referenced: list[Path] = []

    def _content(value: object, where: str) -> str:
        if not isinstance(value, str) or not CONTENT_PATH_PATTERN.match(value):
            msg = (
                f"Validation error: {where}.content must match "
                f"{CONTENT_PATH_PATTERN.pattern} (got {value!r})."
            )
            raise BookConfigError(msg)
        referenced.append(root / CONTENT_DIR / value)
        return value

    name = _require_str(payload, "name", "book")
    main_label, main_content = _build_main_entry(payload, _content)
    index = _build_index(payload.get("index"), _content)

    return BookConfig(
        root_dir=root,
        name=name,
        main=Entry(name=name, key="", content=main_content),
        main_label=main_label,
        index=index,
        site_template=_existing_file(root, payload, "siteTemplate"),
        page_template=_existing_file(root, payload, "pageTemplate"),
        assets=_existing_dir(root, payload, "assets"),
        project=_optional_str(payload, "project", "book", None),
        variables=_string_map(payload, "variables", "book"),
        numbering=_optional_bool(payload, "numbering", "book"),
        external_links_to_blank=_optional_bool(payload, "externalLinksToBlank", "book"),
        previous_link=_optional_str(payload, "previousLink", "book", "Previous")
        or "Previous",
        next_link=_optional_str(payload, "nextLink", "book", "Next") or "Next",
        annotation=_optional_str(payload, "annotation", "book", DEFAULT_ANNOTATION)
        or DEFAULT_ANNOTATION,
        skip_project_variables=_optional_bool(payload, "skipProjectVariables", "book"),
        source_extensions=tuple(
            _string_list(payload, "sourceExtensions", "book", [".js"])
        ),
        referenced_content=referenced,
    )


def _build_main_entry(
    payload: typ.Mapping[str, typ.Any], content: typ.Callable[[object, str], str]
) -> tuple[str, str]:
    """Return the root entry's menu label and Markdown path.

    Both come from ``main`` or, for older books, the ``description`` field.
    """
    main_raw = payload.get("main")
    if isinstance(main_raw, dict):
        name = _optional_str(main_raw, "name", "book.main", DEFAULT_MAIN_NAME)
        path = content(main_raw.get("content"), "book.main")
    elif "description" in payload:
        name = DEFAULT_MAIN_NAME
        path = content(payload.get("description"), "book.description")
    else:
        msg = "Validation error: book.main.content (or book.description) is required."
        raise BookConfigError(msg)
    return name or DEFAULT_MAIN_NAME, path


def _build_index(
    value: object, content: typ.Callable[[object, str], str]
) -> list[Entry]:
    """Build top-level entries (and their children) from the ``index`` array."""
    if not isinstance(value, list):
        msg = "Validation error: book.index must be an array."
        raise BookConfigError(msg)
    entries: list[Entry] = []
    for position, item in enumerate(value):
        where = f"book.index[{position}]"
        entry = _build_entry(item, where, content, allow_children=True)
        entries.append(entry)
    return entries


def _build_entry(
    item: object,
    where: str,
    content: typ.Callable[[object, str], str],
    *,
    allow_children: bool,
) -> Entry:
    """Build a single entry, validating its name, key, content, and children."""
    if not isinstance(item, dict):
        msg = f"Validation error: {where} must be an object."
        raise BookConfigError(msg)

    name = _require_str(item, "name", where)
    key = item.get("key")
    if key is not None and not isinstance(key, str):
        msg = f"Validation error: {where}.key must be a string."
        raise BookConfigError(msg)
    hidden = _optional_bool(item, "hidden", where)

    children_raw = item.get("children") if allow_children else None
    if children_raw is not None and not isinstance(children_raw, list):
        msg = f"Validation error: {where}.children must be an array."
        raise BookConfigError(msg)

    path: str | None = None
    if item.get("content") is not None or not children_raw:
        path = content(item.get("content"), where)

    children = [
        _build_entry(child, f"{where}.children[{idx}]", content, allow_children=False)
        for idx, child in enumerate(children_raw or [])
    ]
    return Entry(name=name, key=key, content=path, hidden=hidden, children=children)


__all__ = ["CONTENT_PATH_PATTERN", "load_book_config"]
