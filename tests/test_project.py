"""Tests for locating and cloning project sources."""

from __future__ import annotations

import dataclasses as dc
import subprocess
import typing as typ
from pathlib import Path

import pytest

from dokapi import project as project_module
from dokapi.config import load_book_config
from dokapi.errors import ProjectSourceError
from dokapi.project import is_remote_project, resolve_project_sources, split_branch

if typ.TYPE_CHECKING:
    from .conftest import BookFactory


@pytest.mark.parametrize(
    ("locator", "remote"),
    [
        ("git@github.com:acme/widgets.git", True),
        ("https://github.com/acme/widgets.git", True),
        ("ssh://git@example.com/widgets.git#release", True),
        ("../widgets", False),
        ("widgets.git.d", False),
    ],
)
def test_is_remote_project(locator: str, remote: bool) -> None:
    assert is_remote_project(locator) is remote


def test_split_branch() -> None:
    assert split_branch("git@host:a/b.git#develop") == ("git@host:a/b.git", "develop")
    assert split_branch("git@host:a/b.git") == ("git@host:a/b.git", "master")


def test_no_project(make_book: BookFactory, tmp_path: Path) -> None:
    config = load_book_config(make_book())

    assert resolve_project_sources(config, tmp_path) is None


def test_local_project_must_exist(make_book: BookFactory, tmp_path: Path) -> None:
    config = dc.replace(load_book_config(make_book()), project="../missing")

    with pytest.raises(ProjectSourceError, match="is not a directory"):
        resolve_project_sources(config, tmp_path)


def test_remote_project_is_cloned_then_cached(
    make_book: BookFactory, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = dc.replace(
        load_book_config(make_book()), project="git@github.com:acme/widgets.git#v2"
    )
    calls: list[tuple[list[str], Path]] = []

    def fake_run(args: list[str], **kwargs: typ.Any) -> subprocess.CompletedProcess[str]:
        calls.append((args, kwargs["cwd"]))
        return subprocess.CompletedProcess(args, 0, "", "")

    monkeypatch.setattr(project_module.subprocess, "run", fake_run)
    output = tmp_path / "out"

    first = resolve_project_sources(config, output)
    second = resolve_project_sources(config, output)
    resolve_project_sources(config, output, refresh=True)

    assert first == second == output / "project"
    assert len(calls) == 2
    args, cwd = calls[0]
    assert args == [
        "git",
        "clone",
        "--branch=v2",
        "--depth=1",
        "git@github.com:acme/widgets.git",
        ".",
    ]
    assert cwd == output / "project"


def test_clone_failure_raises(
    make_book: BookFactory, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = dc.replace(load_book_config(make_book()), project="git@host:a/b.git")

    def fake_run(args: list[str], **kwargs: typ.Any) -> subprocess.CompletedProcess[str]:
        raise subprocess.CalledProcessError(128, args, "", "fatal: repository not found\n")

    monkeypatch.setattr(project_module.subprocess, "run", fake_run)

    with pytest.raises(ProjectSourceError, match="fatal: repository not found"):
        resolve_project_sources(config, tmp_path)
