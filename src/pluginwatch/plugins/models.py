"""Plugin data models: PluginArchive, ExplodedPlugin, PluginDescriptor, SyncReport."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pluginwatch.core.utils import canonical_name, mtime_millis

DESCRIPTOR_NAME = "plugin.xml"
MANIFEST_NAME = "manifest.mf"


@dataclass
class PluginArchive:
    """A packaged plugin (.jar/.war) sitting in the plugins directory."""

    name: str
    path: Path
    modified: int  # milliseconds

    @classmethod
    def from_path(cls, path: Path) -> PluginArchive:
        return cls(name=canonical_name(path.name), path=path, modified=mtime_millis(path))

    @property
    def exploded_path(self) -> Path:
        return self.path.parent / self.name


@dataclass
class ExplodedPlugin:
    """The unpacked working copy of a plugin archive."""

    name: str
    path: Path
    modified: int  # milliseconds

    @classmethod
    def from_path(cls, path: Path) -> ExplodedPlugin:
        return cls(name=path.name, path=path, modified=mtime_millis(path))

    def is_stale(self, archive: PluginArchive) -> bool:
        return self.modified < archive.modified


@dataclass
class PluginDescriptor:
    """Parsed from plugin.xml."""

    name: str
    version: str = ""
    description: str = ""
    author: str = ""
    parent_plugin: str = ""
    requires: list[str] = field(default_factory=list)

    @property
    def dependencies(self) -> list[str]:
        deps = [self.parent_plugin] if self.parent_plugin else []
        deps.extend(r for r in self.requires if r not in deps)
        return deps


@dataclass
class SyncReport:
    """Outcome of one synchronization pass."""

    extracted: list[str] = field(default_factory=list)
    stale: list[str] = field(default_factory=list)
    unloaded: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    load_order: list[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.extracted or self.stale)
