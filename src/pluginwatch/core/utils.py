"""Path helpers: canonical names, mtimes, safe joins, recursive delete, sizes."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

log = logging.getLogger(__name__)

ARCHIVE_EXTENSIONS = (".jar", ".war")


def is_archive_name(name: str) -> bool:
    """True if *name* ends in a recognised archive extension (case-insensitive)."""
    return name.lower().endswith(ARCHIVE_EXTENSIONS)


def canonical_name(file_name: str) -> str:
    """Strip the 4-character extension and lowercase: 'Foo.JAR' -> 'foo'."""
    return file_name[:-4].lower()


def is_valid_plugin_name(name: str) -> bool:
    """True if *name* can be used as a directory directly under the plugins dir.

    Rejects '', '.', '..' and other dot-prefixed names (those are reserved
    for staging directories), and anything containing a path separator.
    """
    if not name or name.startswith("."):
        return False
    return not any(sep and sep in name for sep in ("/", os.sep, os.altsep, "\0"))


def is_direct_child(path: Path, parent: Path) -> bool:
    """True if *path* normalizes to an immediate child of *parent*."""
    child = Path(os.path.normpath(os.path.abspath(path)))
    return child.parent == Path(os.path.normpath(os.path.abspath(parent)))


def mtime_millis(path: Path) -> int:
    """Last-modified time of *path* in whole milliseconds."""
    return path.stat().st_mtime_ns // 1_000_000


def safe_path(path: str, base: Path) -> Path:
    """Resolve *path* relative to *base*, raising ValueError on traversal."""
    root = base.resolve()
    resolved = (root / path).resolve()
    if root not in resolved.parents and resolved != root:
        raise ValueError(f"Path traversal detected: {path!r} escapes {root}")
    return resolved


def delete_dir(path: Path) -> bool:
    """Recursively delete *path*. Returns True if it no longer exists."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        log.debug("Plugin removal: could not delete %s: %s", path, e)
    return not (path.exists() or path.is_symlink())


def human_size(size: int) -> str:
    """Format bytes to human readable."""
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f}{unit}" if unit != "B" else f"{size}{unit}"
        size /= 1024  # type: ignore
    return f"{size:.1f}TB"
