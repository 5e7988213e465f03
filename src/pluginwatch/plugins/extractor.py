"""ArchiveExtractor: validate a plugin archive and unpack it next to itself."""

from __future__ import annotations

import logging
import os
import shutil
import uuid
import zipfile
from pathlib import Path

from pluginwatch.core.utils import safe_path

from .models import DESCRIPTOR_NAME, MANIFEST_NAME, PluginDescriptor
from .ordering import parse_descriptor

log = logging.getLogger(__name__)

STAGING_MARKER = ".extracting-"


def copy_mtime(source: Path, target: Path) -> None:
    """Give *target* the same modification time as *source*."""
    st = source.stat()
    os.utime(target, ns=(st.st_atime_ns, st.st_mtime_ns))


def read_archive_descriptor(archive_path: Path) -> PluginDescriptor | None:
    """Return the parsed descriptor of *archive_path*, or None if it is not a plugin.

    Raises zipfile.BadZipFile / OSError if the archive can't be opened.
    """
    with zipfile.ZipFile(archive_path) as zf:
        if DESCRIPTOR_NAME not in zf.namelist():
            return None
        text = zf.read(DESCRIPTOR_NAME).decode("utf-8", errors="replace")
    return parse_descriptor(text, default_name=archive_path.stem.lower())


class ArchiveExtractor:
    """Unpack plugin archives into their exploded directories.

    Entries are written into a hidden staging sibling first; the staging
    directory is stamped with the archive's mtime and renamed to the target
    only once every entry has been copied. On failure the staging directory
    is removed, so the target is either complete or absent.
    """

    def extract(self, plugin_name: str, archive_path: Path, target_dir: Path) -> bool | None:
        """Unzip *archive_path* into *target_dir*.

        Returns True once the plugin is in place, None if the archive is not a
        plugin (no plugin.xml), and False if extraction failed. Errors are
        logged, never raised.
        """
        try:
            with zipfile.ZipFile(archive_path) as zf:
                # Ensure that this archive is a plugin.
                if DESCRIPTOR_NAME not in zf.namelist():
                    log.debug("Ignoring %s: no %s entry", archive_path.name, DESCRIPTOR_NAME)
                    return None
                if target_dir.exists():
                    raise FileExistsError(f"target directory already exists: {target_dir}")

                log.debug("Extracting plugin '%s'...", plugin_name)
                suffix = uuid.uuid4().hex[:8]
                staging = target_dir.parent / f".{plugin_name}{STAGING_MARKER}{suffix}"
                staging.mkdir()
                done = False
                try:
                    self._unpack(zf, staging)
                    copy_mtime(archive_path, staging)
                    staging.rename(target_dir)
                    copy_mtime(archive_path, target_dir)
                    done = True
                finally:
                    if not done:
                        shutil.rmtree(staging, ignore_errors=True)
            log.debug("Successfully extracted plugin '%s'.", plugin_name)
            return True
        except Exception as e:
            log.error(
                "An exception occurred while trying to extract plugin '%s': %s",
                plugin_name,
                e,
                exc_info=log.isEnabledFor(logging.DEBUG),
            )
            return False

    def _unpack(self, zf: zipfile.ZipFile, dest_root: Path) -> None:
        for info in zf.infolist():
            # Ignore any manifest.mf entries.
            if info.filename.lower().endswith(MANIFEST_NAME):
                continue
            dest = safe_path(info.filename, dest_root)
            if info.is_dir():
                dest.mkdir(parents=True, exist_ok=True)
                continue
            dest.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as src, open(dest, "wb") as dst:
                shutil.copyfileobj(src, dst)
