"""
xref-indexer — filesystem utilities

Purpose
- Atomic writes for a group of files published together.

Functional requirements
- Data is staged in temp files inside the destination directory, fsynced, and only
  then moved into place with ``os.replace``.
- A group write stages every member before replacing any target; a staging failure
  removes all temps and leaves existing targets untouched.

Non-functional requirements
- Standard library only and cross-platform behavior where feasible.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write_many",
]


def atomic_write_many(
    files: Mapping[PathLike, bytes | str], *, encoding: str = "utf-8"
) -> tuple[Path, ...]:
    """
    Write every ``path -> data`` pair so that either all targets are replaced or none.

    Replacement happens only after every temp file has been fully written; the
    remaining window is the sequence of ``os.replace`` calls themselves.
    """

    staged: list[tuple[Path, Path]] = []
    try:
        for raw_path, data in files.items():
            target = Path(raw_path)
            staged.append((_stage(target, data, encoding=encoding), target))

        for temp_path, target in staged:
            os.replace(temp_path, target)
    except BaseException:
        for temp_path, _ in staged:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
        raise

    for parent in sorted({target.parent.resolve() for _, target in staged}):
        _fsync_directory(parent)
    return tuple(target for _, target in staged)


def _stage(target: Path, data: bytes | str, *, encoding: str) -> Path:
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        if isinstance(data, bytes):
            with os.fdopen(fd, "wb") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
        else:
            with os.fdopen(fd, "w", encoding=encoding) as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise
    return temp_path


def _fsync_directory(path: Path) -> None:
    """
    Best-effort directory fsync for metadata durability after ``os.replace``.

    Some platforms/filesystems do not support fsync on directories.
    """

    if os.name == "nt":
        return

    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY

    try:
        dir_fd = os.open(path, flags)
    except OSError:
        return

    try:
        os.fsync(dir_fd)
    except OSError:
        return
    finally:
        os.close(dir_fd)
