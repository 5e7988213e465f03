"""Plugins: archive extraction, directory synchronization, monitoring, registry."""

from .extractor import ArchiveExtractor, read_archive_descriptor
from .models import ExplodedPlugin, PluginArchive, PluginDescriptor, SyncReport
from .monitor import PluginMonitor
from .ordering import (
    exploded_descriptors,
    parse_descriptor,
    read_descriptor,
    resolve_load_order,
)
from .registry import PluginManagerListener, PluginRegistry
from .synchronizer import DirectorySynchronizer

__all__ = [
    "ArchiveExtractor",
    "DirectorySynchronizer",
    "ExplodedPlugin",
    "PluginArchive",
    "PluginDescriptor",
    "PluginManagerListener",
    "PluginMonitor",
    "PluginRegistry",
    "SyncReport",
    "exploded_descriptors",
    "parse_descriptor",
    "read_archive_descriptor",
    "read_descriptor",
    "resolve_load_order",
]
