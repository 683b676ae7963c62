r"""Locate mustache-style ``{{key}}`` references in Markdown and templates.

A reference is a key wrapped in double braces. Prefixing the opening braces
with a backslash escapes it: ``\{{key}}`` is left alone by every consumer.
Keys must match :data:`VALID_REFERENCE`; the ``file:`` and ``editfile:``
prefixes mark file-inclusion references that embed another file instead of a
variable.

Example
-------
>>> from dokapi.references import iter_references
>>> list(iter_references("{{abc}}{{def}} \\{{ghi}}"))
['abc', 'def']
"""

from __future__ import annotations

import re
import typing as typ

from .errors import InvalidReferenceError

REFERENCE_PATTERN = re.compile(r"(?P<escape>\\?)\{\{(?P<key>[^}]+?)\}\}")
VALID_REFERENCE = re.compile(r"^(?:file:|editfile:)?[a-z0-9.]+$")
FILE_REFERENCE_PREFIXES = ("file:", "editfile:")


def _validate(key: str) -> str:
    if not VALID_REFERENCE.match(key):
        msg = (
            f'Invalid reference format: "{key}", '
            f"must match {VALID_REFERENCE.pattern}."
        )
        raise InvalidReferenceError(msg)
    return key


def iter_references(body: str, *, escaped: bool = False) -> typ.Iterator[str]:
    """Yield every reference key in ``body`` from left to right.

    Parameters
    ----------
    body : str
        Text to scan.
    escaped : bool, optional
        Yield escaped references instead of skipping them. Escaped keys are
        not validated.

    Raises
    ------
    InvalidReferenceError
        If a non-escaped key does not match :data:`VALID_REFERENCE`.
    """
    for match in REFERENCE_PATTERN.finditer(body):
        key = match.group("key")
        if match.group("escape"):
            if escaped:
                yield key
            continue
        yield _validate(key)


def for_references(
    body: str, callback: typ.Callable[[str], object], *, escaped: bool = False
) -> None:
    """Invoke ``callback`` once per reference occurrence in ``body``."""
    for key in iter_references(body, escaped=escaped):
        callback(key)


def is_file_reference(key: str) -> bool:
    """Return ``True`` for ``file:`` and ``editfile:`` references."""
    return key.startswith(FILE_REFERENCE_PREFIXES)


def substitute_references(body: str, resolve: typ.Callable[[str], str]) -> str:
    """Replace each non-escaped reference with ``resolve(key)`` in one pass.

    Text returned by ``resolve`` is inserted verbatim and never scanned again,
    so a replacement value containing ``{{...}}`` stays as written.
    """

    def _repl(match: re.Match[str]) -> str:
        if match.group("escape"):
            return match.group(0)
        return resolve(_validate(match.group("key")))

    return REFERENCE_PATTERN.sub(_repl, body)


__all__ = [
    "FILE_REFERENCE_PREFIXES",
    "REFERENCE_PATTERN",
    "VALID_REFERENCE",
    "for_references",
    "is_file_reference",
    "iter_references",
    "substitute_references",
]
