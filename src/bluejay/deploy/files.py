"""Filesystem helpers used by the lifecycle sequencer.

Thin wrappers over pathlib/shutil that log what they touch and translate
``OSError`` into ``StorageError``. Copy semantics follow ``cp``: copying
onto an existing directory drops the file inside it.

``write_text`` is atomic: content goes to a temporary file in the target's
directory which then replaces the target, so readers of the Prometheus
target file see either the old or the new content, never a truncated one.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from bluejay.core.errors import StorageError
from bluejay.core.logging import get_logger

logger = get_logger(__name__)


def directory_exists(path: str | Path) -> bool:
    return Path(path).is_dir()


def file_name(path: str | Path) -> str:
    """Return the final path component (``agreements/acme.json`` -> ``acme.json``)."""
    return Path(path).name


def make_dirs(path: str | Path) -> Path:
    """Create ``path`` and its parents; no error if it already exists."""
    target = Path(path)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Cannot create directory {target}: {exc}", cause=exc).with_context(
            path=str(target)
        ) from exc
    logger.debug("fs.mkdir", path=str(target))
    return target


def copy(source: str | Path, destination: str | Path) -> Path:
    """Copy a file or directory tree, overwriting what is already there.

    Returns the path that was written.
    """
    src = Path(source)
    dest = Path(destination)
    try:
        if src.is_dir():
            shutil.copytree(src, dest, dirs_exist_ok=True)
            written = dest
        else:
            if dest.is_dir():
                written = dest / src.name
            else:
                dest.parent.mkdir(parents=True, exist_ok=True)
                written = dest
            if written.exists() and written.resolve() == src.resolve():
                logger.debug("fs.copy_skipped", path=str(src))
                return written
            shutil.copyfile(src, written)
    except OSError as exc:
        raise StorageError(f"Cannot copy {src} to {dest}: {exc}", cause=exc).with_context(
            path=str(src)
        ) from exc
    logger.info("fs.copied", source=str(src), destination=str(written))
    return written


def copy_into(source: str | Path, directory: str | Path) -> Path:
    """Copy a file into ``directory`` (created if missing)."""
    make_dirs(directory)
    return copy(source, directory)


def read_text(path: str | Path) -> str:
    target = Path(path)
    try:
        return target.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Cannot read {target}: {exc}", cause=exc).with_context(
            path=str(target)
        ) from exc


def write_text(path: str | Path, content: str) -> Path:
    """Atomically replace ``path`` with ``content`` (UTF-8)."""
    target = Path(path)
    make_dirs(target.parent)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, target)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise StorageError(f"Cannot write {target}: {exc}", cause=exc).with_context(
            path=str(target)
        ) from exc
    logger.info("fs.written", path=str(target), size=len(content))
    return target
