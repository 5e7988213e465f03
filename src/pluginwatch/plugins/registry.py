"""PluginRegistry: executed flag, unload seam, lifecycle events, monitor ownership."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pluginwatch.core.config import Config
from pluginwatch.core.utils import delete_dir
from pluginwatch.hooks import execute_hooks

from .monitor import PluginMonitor

log = logging.getLogger(__name__)


class PluginManagerListener:
    """Base class for hosts that react to plugin lifecycle events.

    Override only what you need; every callback defaults to a no-op.
    Callbacks run on the monitor thread, inside the cycle.
    """

    def on_plugin_extracted(self, name: str, directory: Path) -> None:
        pass

    def on_plugin_stale(self, name: str) -> None:
        """The archive of an already-loaded plugin changed; tear down in-memory state."""

    def on_cycle_complete(self, load_order: list[str]) -> None:
        """A monitor cycle finished; *load_order* lists exploded plugins, dependencies first."""


class PluginRegistry:
    """Tracks monitor progress and fans events out to listeners and command hooks."""

    delete_dir = staticmethod(delete_dir)

    def __init__(self, plugins_dir: Path | None = None, config: Config | None = None):
        if config is None:
            config = Config(plugins_dir=plugins_dir)
        self.config = config
        self._plugins_dir = plugins_dir if plugins_dir is not None else config.plugins_directory
        self._executed = False
        self._listeners: list[PluginManagerListener] = []
        self._listeners_lock = threading.Lock()
        self.dev_plugin_dirs: set[Path] = set()
        self.load_order: list[str] = []
        self.monitor = PluginMonitor(self)

    @classmethod
    def from_config(cls, config: Config) -> PluginRegistry:
        return cls(config.plugins_directory, config)

    # ── lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        """Start the plugin monitoring service."""
        self.monitor.start()

    def stop(self) -> None:
        self.monitor.stop()

    @property
    def plugins_directory(self) -> Path:
        return self._plugins_dir

    def is_executed(self) -> bool:
        """True once at least one monitor cycle has completed.

        A true value does not mean every available plugin has been loaded,
        only that the directory has been synchronized at least once.
        """
        return self._executed

    # ── listeners ───────────────────────────────────────────────────

    def add_listener(self, listener: PluginManagerListener) -> None:
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: PluginManagerListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, callback: str, *args) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                getattr(listener, callback)(*args)
            except Exception:
                log.exception("Plugin listener %r failed in %s", listener, callback)

    def _run_hooks(self, event: str, match_value: str, **variables: str) -> None:
        if self.config.hooks.is_empty():
            return
        variables["PLUGINS_DIR"] = str(self._plugins_dir)
        execute_hooks(self.config.hooks, event, match_value, variables)

    # ── events ──────────────────────────────────────────────────────

    def fire_plugin_extracted(self, name: str, directory: Path) -> None:
        log.info("Plugin '%s' extracted to %s", name, directory)
        self._notify("on_plugin_extracted", name, directory)
        self._run_hooks("PluginExtracted", name, PLUGIN_NAME=name, PLUGIN_DIR=str(directory))

    def unload_plugin(self, canonical_name: str) -> None:
        """Ask the host to unload a plugin whose archive has been replaced.

        *canonical_name* is the exploded directory name, not the descriptor's
        human-readable name. Teardown belongs to listeners; the exploded
        directory itself is left in place.
        """
        log.debug("Unloading plugin '%s'...", canonical_name)
        directory = self._plugins_dir / canonical_name
        self._notify("on_plugin_stale", canonical_name)
        self._run_hooks(
            "PluginStale", canonical_name, PLUGIN_NAME=canonical_name, PLUGIN_DIR=str(directory)
        )

    def fire_plugins_monitored(self, load_order: list[str] | None = None) -> None:
        """Record a completed monitor cycle and notify listeners."""
        self.load_order = list(load_order or [])
        self._executed = True
        self._notify("on_cycle_complete", list(self.load_order))
        self._run_hooks("PluginsMonitored", "", PLUGIN_ORDER=",".join(self.load_order))
