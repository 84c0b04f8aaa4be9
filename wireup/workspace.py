"""Scoped acquisition of a cloned working copy."""

from __future__ import annotations

import shutil
import tempfile
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Iterator

from .errors import AcquisitionError
from .git.adapter import GitRunner, run_command
from .logging import get_logger

logger = get_logger("workspace")


def repository_name(repo_url: str) -> str:
    """Last path segment of a clone URL without the ``.git`` suffix."""
    tail = repo_url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    return tail or "repo"


def clone_directory(repo_url: str, base_dir: Path) -> Path:
    stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S")
    return base_dir / f"{repository_name(repo_url)}_integration_{stamp}"


@contextmanager
def acquire_working_copy(
    repo_url: str,
    base_dir: Path | None = None,
    keep: bool = False,
    runner: GitRunner | None = None,
) -> Iterator[Path]:
    """Clone ``repo_url`` and yield the checkout path.

    The checkout is removed when the block exits, however it exits, unless
    ``keep`` is set. A failed clone raises :class:`AcquisitionError` and
    leaves nothing behind to release.
    """
    runner = runner or run_command
    base = Path(base_dir) if base_dir else Path(tempfile.gettempdir())
    base.mkdir(parents=True, exist_ok=True)
    destination = clone_directory(repo_url, base)

    logger.info("Cloning %s into %s", repo_url, destination)
    result = runner(["git", "clone", repo_url, str(destination)], cwd=base)
    if not result.ok:
        if destination.exists():
            shutil.rmtree(destination, ignore_errors=True)
        message = result.stderr.strip() or f"git clone exited with {result.exit_code}"
        raise AcquisitionError(f"Failed to clone {repo_url}: {message}")

    try:
        yield destination
    finally:
        if keep:
            logger.info("Keeping working copy at %s", destination)
        else:
            release_working_copy(destination)


def release_working_copy(path: Path) -> bool:
    """Delete a working copy; failures are logged and reported as False."""
    if not path.exists():
        return True
    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Could not clean up %s: %s", path, exc)
        return False
    logger.info("Cleaned up %s", path)
    return True


__all__ = ["acquire_working_copy", "clone_directory", "release_working_copy", "repository_name"]
