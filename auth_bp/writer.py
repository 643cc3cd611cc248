"""Materialization of rendered artifacts onto the filesystem.

Writes ``(path, content)`` pairs below a project root.  Every path is checked
before the first write, so an unsafe plan writes nothing.  Writes run in a
worker thread in plan order; ``OSError`` from the filesystem propagates
unchanged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from .models import RenderedArtifact


def resolve_target(root: Path, relative: str) -> Path:
    """Return the absolute target of *relative* under *root*.

    Raises:
        ValueError: If *relative* is absolute or escapes *root*.
    """
    posix = PurePosixPath(relative)
    if posix.is_absolute() or not relative:
        raise ValueError(f"Artifact path must be relative: {relative!r}")
    target = (root / Path(*posix.parts)).resolve()
    if target != root and root not in target.parents:
        raise ValueError(f"Artifact path escapes the project root: {relative!r}")
    return target


async def materialize(
    project_root: str | Path, artifacts: Iterable[RenderedArtifact]
) -> list[Path]:
    """Write *artifacts* below *project_root*, overwriting existing files.

    Returns:
        The written paths, in the order given.
    """
    root = Path(project_root).resolve()
    targets = [(resolve_target(root, a.path), a.content) for a in artifacts]

    written: list[Path] = []
    for target, content in targets:
        await asyncio.to_thread(_write_file, target, content)
        written.append(target)
    return written


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
