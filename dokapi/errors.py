"""Exception hierarchy raised while validating and generating a book."""

from __future__ import annotations


class DokapiError(Exception):
    """Base class for every failure that aborts a generation attempt."""


class BookConfigError(DokapiError, ValueError):
    """Raised when ``dokapi.json`` is malformed, incomplete, or inconsistent."""


class DuplicateEntryKeyError(DokapiError):
    """Raised when two index entries resolve to the same key."""


class DuplicateVariableError(DokapiError):
    """Raised when two sources define the same variable key."""


class OrphanContentError(DokapiError):
    """Raised when Markdown files under the content root are not referenced."""


class MissingFileError(DokapiError):
    """Raised when a referenced file does not exist or cannot be read."""


class InvalidReferenceError(DokapiError):
    """Raised when a ``{{reference}}`` does not match the identifier syntax."""


class UnresolvedReferenceError(DokapiError):
    """Raised when a reference has no file, override, or variable behind it."""


class FileReferenceError(DokapiError):
    """Raised when a ``file:``/``editfile:`` reference does not name a file."""


class IntegrityError(DokapiError):
    """Aggregate of every variable/reference inconsistency found in one run."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


class BrokenLinkError(DokapiError):
    """Raised when an internal link points at an unknown entry key."""


class UnexpectedLinkError(DokapiError):
    """Raised when a link URL has none of the supported shapes."""


class ImageReferenceError(DokapiError):
    """Raised for illegal, missing, or colliding image references."""


class ManifestError(DokapiError):
    """Raised when the project's package manifest cannot be read or decoded."""


class ProjectSourceError(DokapiError):
    """Raised when the linked project sources cannot be located or cloned."""


__all__ = [
    "BookConfigError",
    "BrokenLinkError",
    "DokapiError",
    "DuplicateEntryKeyError",
    "DuplicateVariableError",
    "FileReferenceError",
    "ImageReferenceError",
    "IntegrityError",
    "InvalidReferenceError",
    "ManifestError",
    "MissingFileError",
    "OrphanContentError",
    "ProjectSourceError",
    "UnexpectedLinkError",
    "UnresolvedReferenceError",
]
