"""Parse the "hooks" section of settings.json into a HooksConfig.

Accepted shape::

    {"hooks": {"PluginStale": [{"matcher": "^search$", "hooks": ["./reload.sh"]}]}}

Each entry under "hooks" is either a command string or
``{"command": ..., "timeout": seconds}``.
"""

from __future__ import annotations

import logging

from .models import HOOK_EVENTS, HookCommand, HookRule, HooksConfig

log = logging.getLogger(__name__)


def parse_hook_command(raw: dict | str) -> HookCommand | None:
    if isinstance(raw, str):
        return HookCommand(command=raw) if raw.strip() else None
    if raw.get("type", "command") != "command":
        log.warning("Ignoring hook of unsupported type %r", raw.get("type"))
        return None
    command = raw.get("command", "")
    if not command:
        return None
    return HookCommand(command=command, timeout=int(raw.get("timeout", 30)))


def parse_hook_rule(raw: dict) -> HookRule:
    commands = []
    for entry in raw.get("hooks", []):
        if isinstance(entry, (dict, str)):
            cmd = parse_hook_command(entry)
            if cmd is not None:
                commands.append(cmd)
    return HookRule(matcher=raw.get("matcher", "*"), commands=commands)


def parse_hooks_config(data: dict) -> HooksConfig:
    """Build a HooksConfig from event keys, at top level or nested under "hooks"."""
    if isinstance(data.get("hooks"), dict):
        data = data["hooks"]

    cfg = HooksConfig()
    for event, rules in data.items():
        if event not in HOOK_EVENTS:
            continue
        if not isinstance(rules, list):
            log.warning("Ignoring hooks for %s: expected a list of rules", event)
            continue
        for raw in rules:
            if isinstance(raw, dict):
                cfg.add(event, parse_hook_rule(raw))
    return cfg
