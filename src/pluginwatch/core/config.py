"""Configuration: env, settings files, plugin directories, poll interval."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from pluginwatch.hooks import HooksConfig, parse_hooks_config

log = logging.getLogger(__name__)

# Poll intervals in seconds.
DEVELOPMENT_INTERVAL = 5.0
DEFAULT_INTERVAL = 20.0

TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Config:
    home: Path = field(default_factory=Path.cwd)
    plugins_dir: Path | None = None  # explicit override; None = <home>/plugins
    development_mode: bool = False
    plugin_dirs: str = ""  # comma-separated extra plugin source directories
    verbose: bool = False
    hooks: HooksConfig = field(default_factory=HooksConfig)

    @property
    def plugins_directory(self) -> Path:
        if self.plugins_dir is not None:
            return self.plugins_dir
        return self.home / "plugins"

    @property
    def poll_interval(self) -> float:
        return DEVELOPMENT_INTERVAL if self.development_mode else DEFAULT_INTERVAL


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def parse_plugin_dirs(raw: str | None) -> set[Path]:
    """Validate a comma-separated list of extra plugin directories.

    Entries that do not exist or are not directories are logged and dropped.
    """
    dirs: set[Path] = set()
    if not raw:
        return dirs
    for token in raw.split(","):
        entry = token.strip()
        if not entry:
            continue
        try:
            path = Path(entry).expanduser()
            valid = path.is_dir()
        except (OSError, ValueError) as e:
            log.error("Invalid path in extra plugin directories: %r (%s)", entry, e)
            continue
        if valid:
            dirs.add(path)
        else:
            log.error(
                "Unable to use extra plugin directory, it does not exist or is not a "
                "directory: %s (parsed from raw value %r)",
                path,
                entry,
            )
    return dirs


def _apply_settings(config: Config, path: Path) -> None:
    """Apply a single settings.json file to config."""
    if not path.exists():
        return
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        return
    if not isinstance(data, dict):
        log.warning("Ignoring settings file %s: expected a JSON object", path)
        return

    if "pluginsDir" in data and data["pluginsDir"]:
        plugins_dir = Path(data["pluginsDir"]).expanduser()
        config.plugins_dir = plugins_dir if plugins_dir.is_absolute() else config.home / plugins_dir
    if "developmentMode" in data:
        config.development_mode = _to_bool(data["developmentMode"])
    if "pluginDirs" in data:
        raw = data["pluginDirs"]
        config.plugin_dirs = ",".join(raw) if isinstance(raw, list) else str(raw or "")

    config.hooks.merge(parse_hooks_config(data))


def load_config(
    home: str | Path | None = None,
    plugins_dir: str | Path | None = None,
    development_mode: bool | None = None,
    verbose: bool = False,
) -> Config:
    """Load config with priority: CLI args > env > .env > settings.json > defaults."""
    load_dotenv()

    if home is None and (env_home := os.getenv("PLUGINWATCH_HOME")):
        home = env_home
    config = Config(home=Path(home).expanduser() if home else Path.cwd())
    config.verbose = verbose

    _apply_settings(config, config.home / "settings.json")
    _apply_settings(config, config.home / "settings.local.json")

    if env_plugins := os.getenv("PLUGINWATCH_PLUGINS_DIR"):
        config.plugins_dir = Path(env_plugins).expanduser()
    if (env_dev := os.getenv("PLUGINWATCH_DEVELOPMENT_MODE")) is not None:
        config.development_mode = _to_bool(env_dev)
    if (env_dirs := os.getenv("PLUGINWATCH_PLUGIN_DIRS")) is not None:
        config.plugin_dirs = env_dirs

    if plugins_dir:
        config.plugins_dir = Path(plugins_dir).expanduser()
    if development_mode is not None:
        config.development_mode = development_mode

    return config
