"""Locate the source project a book documents, cloning it when remote."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import typing as typ
from pathlib import Path

from .errors import ProjectSourceError

if typ.TYPE_CHECKING:
    from .config import BookConfig

PROJECT_DIR = "project"
DEFAULT_BRANCH = "master"
CLONE_TIMEOUT = 120
REMOTE_PATTERN = re.compile(r"^(?:git@|(?:https?|ssh)://\S+\.git(?:#|$))")

_LOGGER = logging.getLogger("dokapi")


def is_remote_project(project: str) -> bool:
    """Return whether ``project`` names a git repository rather than a folder.

    Examples
    --------
    >>> is_remote_project("git@github.com:acme/widgets.git")
    True
    >>> is_remote_project("https://github.com/acme/widgets.git#develop")
    True
    >>> is_remote_project("../widgets")
    False
    """
    return bool(REMOTE_PATTERN.match(project))


def split_branch(url: str) -> tuple[str, str]:
    """Split a ``url#branch`` project string, defaulting to ``master``."""
    url, _, branch = url.partition("#")
    return url, branch or DEFAULT_BRANCH


def git_clone(url: str, target: Path) -> None:
    """Shallow-clone ``url`` (optionally suffixed with ``#branch``) into ``target``.

    Raises
    ------
    ProjectSourceError
        If ``git`` is unavailable, fails, or exceeds the clone timeout.
    """
    url, branch = split_branch(url)
    if target.exists():
        shutil.rmtree(target)
    target.mkdir(parents=True)
    try:
        subprocess.run(  # noqa: S603
            ["git", "clone", f"--branch={branch}", "--depth=1", url, "."],  # noqa: S607
            cwd=target,
            check=True,
            text=True,
            capture_output=True,
            timeout=CLONE_TIMEOUT,
        )
    except subprocess.CalledProcessError as exc:
        msg = f"Error while cloning: {exc.stderr.strip()}"
        raise ProjectSourceError(msg) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"Timed out after {CLONE_TIMEOUT}s while cloning {url}"
        raise ProjectSourceError(msg) from exc
    except OSError as exc:
        msg = f"Could not run git: {exc}"
        raise ProjectSourceError(msg) from exc


def resolve_project_sources(
    config: BookConfig,
    output_dir: Path,
    *,
    refresh: bool = False,
    logger: logging.Logger = _LOGGER,
) -> Path | None:
    """Return the directory holding the documented project's sources.

    Parameters
    ----------
    config : BookConfig
        Book configuration; its ``project`` field selects the source.
    output_dir : Path
        Output root; remote projects are cloned into ``<output_dir>/project``.
    refresh : bool, optional
        Clone again even when a cached copy exists.
    logger : logging.Logger, optional
        Destination for progress messages.

    Returns
    -------
    Path or None
        ``None`` when the book documents no project.

    Raises
    ------
    ProjectSourceError
        If cloning fails or a local project directory does not exist.
    """
    project = config.project
    if not project:
        return None
    if is_remote_project(project):
        target = output_dir / PROJECT_DIR
        if refresh or not target.exists():
            logger.info("Cloning project code (%s) to %s...", project, target)
            git_clone(project, target)
        else:
            logger.info("Using cached copy of project from %s...", target)
        return target
    local = Path(project)
    if not local.is_absolute():
        local = config.root_dir / local
    logger.info('Using local project sources at "%s".', local)
    if not local.is_dir():
        msg = f'Validation error: config.project "{local}" is not a directory.'
        raise ProjectSourceError(msg)
    return local


__all__ = [
    "git_clone",
    "is_remote_project",
    "resolve_project_sources",
    "split_branch",
]
