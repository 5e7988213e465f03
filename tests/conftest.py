"""Shared fixtures: build plugin archives on disk."""

import logging
import os
import zipfile

import pytest

PLUGIN_XML = "<plugin><name>{name}</name><version>1.0</version></plugin>"


def write_jar(path, entries, mtime=None):
    """Write a zip at *path* with {entry_name: text} and optionally set its mtime (seconds)."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("pluginwatch")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def plugins_dir(tmp_path):
    d = tmp_path / "plugins"
    d.mkdir()
    return d


@pytest.fixture
def make_jar(plugins_dir):
    """Create a plugin archive in the plugins dir; descriptor included unless plugin=False."""

    def _make(filename, files=None, plugin=True, mtime=None, descriptor=None):
        entries = {}
        if plugin:
            stem = filename[:-4].lower()
            entries["plugin.xml"] = descriptor or PLUGIN_XML.format(name=stem)
        entries.update(files or {})
        return write_jar(plugins_dir / filename, entries, mtime)

    return _make
