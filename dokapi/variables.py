"""Variable store: named text fragments substituted into Markdown and templates.

Variables come from four disjoint sources:

* ``/** ... */`` doc comments in the linked project's source files that carry
  the configured annotation (``@dokapi some.key``); their body becomes the
  variable text and is rendered as Markdown.
* String fields of the project's ``package.json`` (``package.<field>``).
* The ``variables`` map of ``dokapi.json`` plus ``config.name``.
* ``now``, the generation timestamp in milliseconds.

Every variable except those extracted from doc comments is *builtin*: it may
stay unused without failing :func:`check_integrity`.

Nested references are resolved exactly once. A variable whose text mentions
``{{other}}`` receives ``other``'s text as it was before resolution, so a chain
``a -> b -> c`` leaves ``{{c}}`` inside ``a``.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import re
import time
import typing as typ
from pathlib import Path

import msgspec
import msgspec.json as msgspec_json

from ._constants import CONFIG_FILE, ENTRY_VARIABLE_PREFIX, PACKAGE_MANIFEST, VENDOR_DIR
from .errors import (
    DuplicateVariableError,
    FileReferenceError,
    IntegrityError,
    ManifestError,
    MissingFileError,
)
from .references import is_file_reference, iter_references, substitute_references

if typ.TYPE_CHECKING:
    from .config import BookConfig

COMMENT_PATTERN = re.compile(r"^/\*\*[\r\n]+([\w\W]+?)\*/", re.MULTILINE)
COMMENT_LINE_SEPARATOR = re.compile(r"[\r\n]+\s*\*[ ]?")
COMMENT_KEY_PATTERN = re.compile(r"^@(\S+)(?:\s+(.+))?$")

_LOGGER = logging.getLogger("dokapi")


@dc.dataclass(slots=True)
class Variable:
    """A named, substitutable text fragment."""

    key: str
    text: str
    file: Path | str
    markdown: bool = False
    builtin: bool = False


@dc.dataclass(slots=True, frozen=True)
class Reference:
    """An occurrence of ``{{key}}`` found in a content file."""

    key: str
    file: Path


@dc.dataclass(slots=True)
class DocComment:
    """A ``/** ... */`` block split into ``@key value`` tags and body lines."""

    file: Path
    keys: dict[str, str | bool]
    lines: list[str]


class VariableStore:
    """Mapping of variable keys to :class:`Variable` with unique keys."""

    def __init__(self, variables: typ.Iterable[Variable] = ()) -> None:
        self._variables: dict[str, Variable] = {}
        for variable in variables:
            self.add(variable)

    def add(self, variable: Variable) -> None:
        """Register ``variable``; redefining an existing key is an error."""
        existing = self._variables.get(variable.key)
        if existing is not None:
            msg = (
                f'Variable "{variable.key}" defined in "{variable.file}" is already '
                f'defined in "{existing.file}".'
            )
            raise DuplicateVariableError(msg)
        self._variables[variable.key] = variable

    def get(self, key: str) -> Variable | None:
        return self._variables.get(key)

    def __getitem__(self, key: str) -> Variable:
        return self._variables[key]

    def __contains__(self, key: object) -> bool:
        return key in self._variables

    def __iter__(self) -> typ.Iterator[Variable]:
        return iter(self._variables.values())

    def __len__(self) -> int:
        return len(self._variables)

    def resolve_nested(self) -> None:
        """Substitute references to other variables, one level deep."""
        snapshot = {key: variable.text for key, variable in self._variables.items()}

        def _lookup(key: str) -> str:
            return snapshot.get(key, f"{{{{{key}}}}}")

        for variable in self._variables.values():
            variable.text = substitute_references(variable.text, _lookup)


def extract_comments(path: Path) -> list[DocComment]:
    """Return every ``/** ... */`` block comment found in ``path``."""
    body = read_source(path)
    comments: list[DocComment] = []
    for match in COMMENT_PATTERN.finditer(body):
        text = match.group(1).strip()
        if text.startswith("*"):
            text = text[1:].strip()
        comment = DocComment(file=path, keys={}, lines=[])
        for line in COMMENT_LINE_SEPARATOR.split(text):
            tag = COMMENT_KEY_PATTERN.match(line)
            if tag:
                comment.keys[tag.group(1)] = tag.group(2) or True
            else:
                comment.lines.append(line)
        comments.append(comment)
    return comments


def iter_source_files(
    root: Path, extensions: typ.Iterable[str], *, excluded: str = VENDOR_DIR
) -> typ.Iterator[Path]:
    """Yield source files under ``root`` matching ``extensions``.

    Directories named ``excluded`` are pruned and symbolic links are skipped.
    """
    suffixes = tuple(extensions)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name != excluded)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if filename.endswith(suffixes) and not path.is_symlink():
                yield path


def build_variables(
    project_dir: Path | None,
    config: BookConfig,
    *,
    logger: logging.Logger = _LOGGER,
) -> VariableStore:
    """Build the variable store for a book.

    Parameters
    ----------
    project_dir : Path or None
        Root of the linked project sources; ``None`` when the book documents
        no project, in which case doc-comment and manifest extraction is
        skipped.
    config : BookConfig
        Book configuration supplying user variables and extraction options.
    logger : logging.Logger, optional
        Destination for progress messages.

    Returns
    -------
    VariableStore
        Store with nested references resolved one level deep.

    Raises
    ------
    ManifestError
        If the project's ``package.json`` is missing or malformed.
    DuplicateVariableError
        If two sources define the same key.
    """
    store = VariableStore()
    config_file = config.root_dir / CONFIG_FILE

    if project_dir is None:
        logger.info("Skipping code variable extraction (no code project).")
    else:
        if not config.skip_project_variables:
            logger.info(
                "Extracting @%s variables from project code...", config.annotation
            )
            for variable in _doc_comment_variables(project_dir, config):
                store.add(variable)
        for variable in _manifest_variables(project_dir / PACKAGE_MANIFEST):
            store.add(variable)
        store.add(
            Variable(
                key="config.name", text=config.name, file=config_file, builtin=True
            )
        )

    for key, text in config.variables.items():
        store.add(Variable(key=key, text=text, file=config_file, builtin=True))

    store.add(
        Variable(
            key="now", text=str(int(time.time() * 1000)), file=config_file, builtin=True
        )
    )
    store.resolve_nested()
    return store


def _doc_comment_variables(
    project_dir: Path, config: BookConfig
) -> typ.Iterator[Variable]:
    for source in iter_source_files(project_dir, config.source_extensions):
        for comment in extract_comments(source):
            key = comment.keys.get(config.annotation)
            if not isinstance(key, str):
                continue
            yield Variable(
                key=key, text="\n".join(comment.lines), file=source, markdown=True
            )


def _manifest_variables(manifest: Path) -> list[Variable]:
    try:
        payload = msgspec_json.decode(manifest.read_bytes())
    except OSError as exc:
        msg = f'Could not read package manifest "{manifest}": {exc}'
        raise ManifestError(msg) from exc
    except msgspec.DecodeError as exc:
        msg = f'Could not parse JSON content of "{manifest}": {exc}'
        raise ManifestError(msg) from exc
    if not isinstance(payload, dict):
        msg = f'Package manifest "{manifest}" must contain a JSON object.'
        raise ManifestError(msg)
    return [
        Variable(key=f"package.{field}", text=value, file=manifest, builtin=True)
        for field, value in payload.items()
        if isinstance(value, str)
    ]


def read_source(path: Path) -> str:
    """Return the UTF-8 text of ``path``.

    Raises
    ------
    MissingFileError
        If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f'Could not read file "{path}": {exc}'
        raise MissingFileError(msg) from exc


def collect_references(files: typ.Iterable[Path]) -> dict[str, Reference]:
    """Map every reference key found in ``files`` to its last occurrence."""
    references: dict[str, Reference] = {}
    for path in files:
        for key in iter_references(read_source(path)):
            references[key] = Reference(key=key, file=path)
    return references


def resolve_file_reference(referrer: Path, reference: str) -> Path:
    """Return the file targeted by a ``file:``/``editfile:`` reference.

    The target is resolved relative to the directory containing ``referrer``.

    Raises
    ------
    FileReferenceError
        If the target does not exist or is not a regular file.
    """
    target = (referrer.parent / reference.split(":", 1)[1]).resolve()
    if not target.exists():
        msg = (
            f'Could not resolve file reference: "{reference}" for "{referrer}": '
            f"no such file {target}"
        )
        raise FileReferenceError(msg)
    if not target.is_file():
        msg = f'Target of file reference: "{reference}" in "{referrer}" is not a file.'
        raise FileReferenceError(msg)
    return target


def check_integrity(
    variables: VariableStore,
    references: typ.Mapping[str, Reference],
    *,
    logger: logging.Logger = _LOGGER,
) -> None:
    """Check that references and variables match, reporting every problem.

    References in the ``entry.`` namespace are computed per page and skipped.
    File-inclusion references must point at existing files. Every other
    reference must name a variable, and every non-builtin variable must be
    referenced at least once.

    Raises
    ------
    IntegrityError
        Carrying one message per violation.
    """
    logger.info("Checking variables/references integrity...")
    errors: list[str] = []
    for reference in references.values():
        if reference.key.startswith(ENTRY_VARIABLE_PREFIX):
            continue
        if is_file_reference(reference.key):
            try:
                resolve_file_reference(reference.file, reference.key)
            except FileReferenceError as exc:
                errors.append(str(exc))
        elif reference.key not in variables:
            errors.append(
                f'Reference "{reference.key}" used in "{reference.file}" '
                "is never defined."
            )
    for variable in variables:
        if variable.builtin:
            continue
        if variable.key not in references:
            errors.append(
                f'Variable "{variable.key}" defined in "{variable.file}" '
                "is never used."
            )
    if errors:
        raise IntegrityError(errors)


__all__ = [
    "DocComment",
    "DuplicateVariableError",
    "Reference",
    "Variable",
    "VariableStore",
    "build_variables",
    "check_integrity",
    "collect_references",
    "extract_comments",
    "iter_source_files",
    "read_source",
    "resolve_file_reference",
]
