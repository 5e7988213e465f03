"""DirectorySynchronizer: one scan-classify-act pass over the plugins directory."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from pluginwatch.core.config import parse_plugin_dirs
from pluginwatch.core.utils import is_archive_name, is_direct_child, is_valid_plugin_name

from .extractor import ArchiveExtractor
from .models import ExplodedPlugin, PluginArchive, SyncReport
from .ordering import exploded_descriptors, resolve_load_order

if TYPE_CHECKING:
    from .registry import PluginRegistry

log = logging.getLogger(__name__)

# Deleting a stale directory is attempted this many times, pausing between attempts.
DELETE_ATTEMPTS = 5
DELETE_RETRY_INTERVAL = 1.0  # seconds


class DirectorySynchronizer:
    """Keep every exploded plugin directory in step with its archive."""

    def __init__(
        self,
        registry: PluginRegistry,
        extractor: ArchiveExtractor | None = None,
        delete_attempts: int = DELETE_ATTEMPTS,
        retry_interval: float = DELETE_RETRY_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.registry = registry
        self.extractor = extractor or ArchiveExtractor()
        self.delete_attempts = delete_attempts
        self.retry_interval = retry_interval
        self.sleep = sleep

    @property
    def plugins_directory(self) -> Path:
        return self.registry.plugins_directory

    def synchronize(self) -> SyncReport:
        """Run one pass: explode new archives, retire stale ones, compute load order."""
        report = SyncReport()
        directory = self.plugins_directory
        if not directory.is_dir() or not os.access(directory, os.R_OK):
            log.error(
                "Unable to process plugins. The plugins directory does not exist "
                "(or is no directory): %s",
                directory,
            )
            report.aborted = True
            return report

        try:
            archives = [
                p
                for p in sorted(directory.iterdir())
                if is_archive_name(p.name) and not p.is_dir()
            ]
        except OSError as e:
            log.error("Unable to list plugins directory %s: %s", directory, e)
            report.aborted = True
            return report

        seen: dict[str, Path] = {}
        for archive_path in archives:
            try:
                archive = PluginArchive.from_path(archive_path)
            except OSError as e:
                log.error("Unable to read plugin archive %s: %s", archive_path, e)
                report.failed.append(archive_path.name)
                continue
            if not is_valid_plugin_name(archive.name):
                log.error(
                    "Ignoring plugin archive %s: %r is not a usable plugin directory name",
                    archive_path.name,
                    archive.name,
                )
                report.failed.append(archive_path.name)
                continue
            if archive.name in seen:
                log.warning(
                    "Archives %s and %s both map to plugin '%s'",
                    seen[archive.name].name,
                    archive_path.name,
                    archive.name,
                )
            seen[archive.name] = archive_path
            try:
                self._sync_archive(archive, report)
            except Exception as e:
                log.error(
                    "Unable to synchronize plugin '%s': %s", archive.name, e, exc_info=True
                )
                report.failed.append(archive.name)

        try:
            descriptors = exploded_descriptors(directory)
        except OSError as e:
            log.error("Unable to list exploded plugins in %s: %s", directory, e)
            report.aborted = True
            return report

        # Parsed and validated for the host; the synchronizer does not use them.
        self.registry.dev_plugin_dirs = parse_plugin_dirs(self.registry.config.plugin_dirs)

        report.load_order = resolve_load_order(descriptors)
        if report.changed:
            log.info(
                "Plugins synchronized: %d extracted, %d stale, %d unchanged",
                len(report.extracted),
                len(report.stale),
                len(report.unchanged),
            )
        self.registry.fire_plugins_monitored(report.load_order)
        return report

    def _sync_archive(self, archive: PluginArchive, report: SyncReport) -> None:
        target = archive.exploded_path

        if target.exists():
            exploded = ExplodedPlugin.from_path(target)
            if exploded.is_stale(archive):
                report.stale.append(archive.name)
                if not self.registry.is_executed():
                    # Nothing has been loaded yet, so the directory can go.
                    self.retire(target)
                else:
                    self.registry.unload_plugin(archive.name)
                    report.unloaded.append(archive.name)
            else:
                report.unchanged.append(archive.name)

        if not target.exists():
            extracted = self.extractor.extract(archive.name, archive.path, target)
            if extracted is None:
                report.skipped.append(archive.name)
            elif extracted:
                report.extracted.append(archive.name)
                self.registry.fire_plugin_extracted(archive.name, target)
            else:
                report.failed.append(archive.name)

    def retire(self, directory: Path) -> bool:
        """Delete a stale exploded directory, retrying while it is locked.

        Gives up after ``delete_attempts`` tries; the directory is then left
        for the next cycle, which will find it stale again.
        """
        if not is_direct_child(directory, self.plugins_directory):
            raise ValueError(
                f"Refusing to delete {directory}: not a plugin directory under "
                f"{self.plugins_directory}"
            )
        for attempt in range(1, self.delete_attempts + 1):
            if self.registry.delete_dir(directory):
                return True
            log.debug(
                "Could not delete %s (attempt %d/%d)", directory, attempt, self.delete_attempts
            )
            if attempt < self.delete_attempts:
                self.sleep(self.retry_interval)
        log.warning(
            "Giving up on deleting stale plugin directory %s after %d attempts",
            directory,
            self.delete_attempts,
        )
        return False

