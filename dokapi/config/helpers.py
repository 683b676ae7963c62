"""Field-level validation helpers shared by the book configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from dokapi.errors import BookConfigError


def _require_str(payload: typ.Mapping[str, typ.Any], field: str, where: str) -> str:
    """Return a required non-empty string field or raise ``BookConfigError``."""
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        msg = f"Validation error: {where}.{field} must be a non-empty string."
        raise BookConfigError(msg)
    return value


def _optional_str(
    payload: typ.Mapping[str, typ.Any], field: str, where: str, default: str | None
) -> str | None:
    """Return an optional string field, stripped, falling back to ``default``."""
    value = payload.get(field)
    if value is None:
        return default
    if not isinstance(value, str):
        msg = f"Validation error: {where}.{field} must be a string."
        raise BookConfigError(msg)
    return value.strip() or default


def _optional_bool(
    payload: typ.Mapping[str, typ.Any], field: str, where: str, *, default: bool = False
) -> bool:
    """Return an optional boolean field, rejecting non-boolean values."""
    value = payload.get(field, default)
    if not isinstance(value, bool):
        msg = f"Validation error: {where}.{field} must be a boolean."
        raise BookConfigError(msg)
    return value


def _string_map(
    payload: typ.Mapping[str, typ.Any], field: str, where: str
) -> dict[str, str]:
    """Return a mapping of strings, defaulting to an empty dict."""
    value = payload.get(field) or {}
    if not isinstance(value, dict):
        msg = f"Validation error: {where}.{field} must be an object."
        raise BookConfigError(msg)
    result: dict[str, str] = {}
    for key, text in value.items():
        if not isinstance(text, str):
            msg = f"Validation error: {where}.{field}.{key} must be a string."
            raise BookConfigError(msg)
        result[str(key)] = text
    return result


def _string_list(
    payload: typ.Mapping[str, typ.Any], field: str, where: str, default: list[str]
) -> list[str]:
    """Return a list of strings, falling back to ``default``."""
    value = payload.get(field)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        msg = f"Validation error: {where}.{field} must be a list of strings."
        raise BookConfigError(msg)
    return list(value)


def _existing_file(root: Path, payload: typ.Mapping[str, typ.Any], field: str) -> Path:
    """Resolve a required file path against ``root`` and check it exists."""
    path = root / _require_str(payload, field, "book")
    if not path.is_file():
        msg = f'Validation error: book.{field} "{path}" is not a file.'
        raise BookConfigError(msg)
    return path.resolve()


def _existing_dir(root: Path, payload: typ.Mapping[str, typ.Any], field: str) -> Path:
    """Resolve a required directory path against ``root`` and check it exists."""
    path = root / _require_str(payload, field, "book")
    if not path.is_dir():
        msg = f'Validation error: book.{field} "{path}" is not a directory.'
        raise BookConfigError(msg)
    return path.resolve()


__all__ = [
    "_existing_dir",
    "_existing_file",
    "_optional_bool",
    "_optional_str",
    "_require_str",
    "_string_list",
    "_string_map",
]
