"""Load ordering: plugin.xml parsing and a dependency-respecting sort."""

from __future__ import annotations

import heapq
import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from .models import DESCRIPTOR_NAME, PluginDescriptor

log = logging.getLogger(__name__)

# Loaded before everything else whenever its own dependencies allow it.
ADMIN_PLUGIN = "admin"


def parse_descriptor(text: str, default_name: str = "") -> PluginDescriptor:
    """Parse plugin.xml content. Raises ET.ParseError on malformed XML."""
    root = ET.fromstring(text)

    def _text(tag: str) -> str:
        return (root.findtext(tag) or "").strip()

    requires = [
        (el.text or "").strip().lower()
        for el in root.findall("requires/plugin")
        if (el.text or "").strip()
    ]
    return PluginDescriptor(
        name=_text("name") or default_name,
        version=_text("version"),
        description=_text("description"),
        author=_text("author"),
        parent_plugin=_text("parentPlugin").lower(),
        requires=requires,
    )


def read_descriptor(plugin_dir: Path) -> PluginDescriptor | None:
    path = plugin_dir / DESCRIPTOR_NAME
    if not path.is_file():
        return None
    try:
        return parse_descriptor(path.read_text(encoding="utf-8", errors="replace"), plugin_dir.name)
    except (ET.ParseError, OSError) as e:
        log.warning("Unable to read descriptor of plugin '%s': %s", plugin_dir.name, e)
        return None


def _rank(name: str) -> tuple[int, str]:
    return (0 if name == ADMIN_PLUGIN else 1, name)


def resolve_load_order(descriptors: dict[str, PluginDescriptor | None]) -> list[str]:
    """Order plugin names so parents and requirements come before dependents.

    Ties break with the admin plugin first, then alphabetically. Dependencies
    on plugins that are not present are ignored. Plugins caught in a cycle
    are appended alphabetically after everything else.
    """
    names = set(descriptors)
    deps: dict[str, set[str]] = {}
    for name, desc in descriptors.items():
        wanted = desc.dependencies if desc else []
        deps[name] = set()
        for dep in wanted:
            if dep == name:
                continue
            if dep not in names:
                log.debug("Plugin '%s' depends on '%s', which is not installed", name, dep)
                continue
            deps[name].add(dep)

    dependents: dict[str, set[str]] = {n: set() for n in names}
    for name, ds in deps.items():
        for dep in ds:
            dependents[dep].add(name)

    pending = {n: len(ds) for n, ds in deps.items()}
    ready = [_rank(n) for n, count in pending.items() if count == 0]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        _, name = heapq.heappop(ready)
        order.append(name)
        for child in dependents[name]:
            pending[child] -= 1
            if pending[child] == 0:
                heapq.heappush(ready, _rank(child))

    if len(order) < len(names):
        cyclic = sorted(names - set(order))
        log.warning("Circular plugin dependencies between: %s", ", ".join(cyclic))
        order.extend(cyclic)
    return order


def exploded_descriptors(directory: Path) -> dict[str, PluginDescriptor]:
    """Descriptors of every exploded plugin directory under *directory*.

    Hidden entries (including in-progress extractions) and directories
    without a readable plugin.xml are skipped. Raises OSError if the
    directory can't be listed.
    """
    descriptors: dict[str, PluginDescriptor] = {}
    for entry in sorted(directory.iterdir()):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        descriptor = read_descriptor(entry)
        if descriptor is not None:
            descriptors[entry.name] = descriptor
    return descriptors
