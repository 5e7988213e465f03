"""Tests for config: defaults, settings files, env overrides, extra plugin dirs."""

import json
import logging

import pytest

from pluginwatch.core.config import (
    DEFAULT_INTERVAL,
    DEVELOPMENT_INTERVAL,
    Config,
    _apply_settings,
    load_config,
    parse_plugin_dirs,
)
from pluginwatch.hooks import HooksConfig

ENV_VARS = (
    "PLUGINWATCH_HOME",
    "PLUGINWATCH_PLUGINS_DIR",
    "PLUGINWATCH_DEVELOPMENT_MODE",
    "PLUGINWATCH_PLUGIN_DIRS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep load_dotenv from picking up a stray .env
    monkeypatch.chdir(tmp_path)


class TestConfigDefaults:
    def test_plugins_directory_under_home(self, tmp_path):
        c = Config(home=tmp_path)
        assert c.plugins_directory == tmp_path / "plugins"

    def test_explicit_plugins_dir(self, tmp_path):
        c = Config(home=tmp_path, plugins_dir=tmp_path / "elsewhere")
        assert c.plugins_directory == tmp_path / "elsewhere"

    def test_default_interval(self):
        assert Config().poll_interval == DEFAULT_INTERVAL == 20.0

    def test_development_interval(self):
        assert Config(development_mode=True).poll_interval == DEVELOPMENT_INTERVAL == 5.0

    def test_default_hooks_empty(self):
        c = Config()
        assert isinstance(c.hooks, HooksConfig)
        assert c.hooks.is_empty()


class TestApplySettings:
    def test_reads_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps(
                {"pluginsDir": "/srv/plugins", "developmentMode": True, "pluginDirs": "/a,/b"}
            )
        )
        config = Config(home=tmp_path)
        _apply_settings(config, path)
        assert str(config.plugins_directory) == "/srv/plugins"
        assert config.development_mode is True
        assert config.plugin_dirs == "/a,/b"

    def test_relative_plugins_dir_is_under_home(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"pluginsDir": "ext"}))
        config = Config(home=tmp_path)
        _apply_settings(config, path)
        assert config.plugins_directory == tmp_path / "ext"

    def test_plugin_dirs_list(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"pluginDirs": ["/a", "/b"]}))
        config = Config(home=tmp_path)
        _apply_settings(config, path)
        assert config.plugin_dirs == "/a,/b"

    def test_hooks(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps({"hooks": {"PluginStale": [{"matcher": "*", "hooks": ["echo x"]}]}})
        )
        config = Config(home=tmp_path)
        _apply_settings(config, path)
        assert config.hooks.rules_for("PluginStale")[0].commands[0].command == "echo x"

    def test_invalid_json_ignored(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("not json")
        config = Config(home=tmp_path)
        with caplog.at_level(logging.WARNING):
            _apply_settings(config, path)
        assert config.development_mode is False
        assert "Ignoring" in caplog.text

    def test_missing_file(self, tmp_path):
        config = Config(home=tmp_path)
        _apply_settings(config, tmp_path / "nope.json")
        assert config.plugin_dirs == ""


class TestLoadConfig:
    def test_home_argument(self, tmp_path):
        config = load_config(home=tmp_path)
        assert config.plugins_directory == tmp_path / "plugins"

    def test_home_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PLUGINWATCH_HOME", str(tmp_path / "h"))
        config = load_config()
        assert config.home == tmp_path / "h"

    def test_local_settings_override(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"developmentMode": True}))
        (tmp_path / "settings.local.json").write_text(json.dumps({"developmentMode": False}))
        assert load_config(home=tmp_path).development_mode is False

    def test_env_overrides_settings(self, tmp_path, monkeypatch):
        (tmp_path / "settings.json").write_text(json.dumps({"developmentMode": False}))
        monkeypatch.setenv("PLUGINWATCH_DEVELOPMENT_MODE", "true")
        monkeypatch.setenv("PLUGINWATCH_PLUGINS_DIR", str(tmp_path / "env-plugins"))
        monkeypatch.setenv("PLUGINWATCH_PLUGIN_DIRS", "/x")
        config = load_config(home=tmp_path)
        assert config.development_mode is True
        assert config.plugins_directory == tmp_path / "env-plugins"
        assert config.plugin_dirs == "/x"

    def test_arguments_override_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PLUGINWATCH_DEVELOPMENT_MODE", "1")
        config = load_config(
            home=tmp_path, plugins_dir=tmp_path / "cli", development_mode=False
        )
        assert config.development_mode is False
        assert config.plugins_directory == tmp_path / "cli"

    def test_falsy_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PLUGINWATCH_DEVELOPMENT_MODE", "no")
        assert load_config(home=tmp_path).development_mode is False


class TestParsePluginDirs:
    def test_empty(self):
        assert parse_plugin_dirs("") == set()
        assert parse_plugin_dirs(None) == set()

    def test_valid_dirs_kept(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.mkdir()
        b.mkdir()
        assert parse_plugin_dirs(f"{a}, {b} ,") == {a, b}

    def test_invalid_entries_dropped_and_logged(self, tmp_path, caplog):
        a = tmp_path / "a"
        a.mkdir()
        f = tmp_path / "file.txt"
        f.write_text("x")
        with caplog.at_level(logging.ERROR):
            result = parse_plugin_dirs(f"{a},{tmp_path / 'missing'},{f}")
        assert result == {a}
        assert "missing" in caplog.text
        assert "file.txt" in caplog.text
