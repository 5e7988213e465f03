"""Hook data models: HookCommand, HookRule, HooksConfig."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Fired after an archive is exploded, when a loaded plugin's archive changes,
# and at the end of every completed monitor cycle.
HOOK_EVENTS = ("PluginExtracted", "PluginStale", "PluginsMonitored")


@dataclass
class HookCommand:
    """A shell command run when a plugin event fires."""

    command: str
    timeout: int = 30


@dataclass
class HookRule:
    """Commands to run for plugins whose canonical name matches ``matcher``."""

    matcher: str = "*"  # regex searched in the plugin name; "*" matches all
    commands: list[HookCommand] = field(default_factory=list)

    _pattern: re.Pattern | None = field(default=None, init=False, repr=False)

    def matches(self, plugin_name: str) -> bool:
        if self.matcher == "*":
            return True
        if self._pattern is None:
            try:
                self._pattern = re.compile(self.matcher)
            except re.error:
                return self.matcher == plugin_name
        return self._pattern.search(plugin_name) is not None


@dataclass
class HooksConfig:
    """Hook rules keyed by plugin event."""

    rules: dict[str, list[HookRule]] = field(default_factory=dict)

    def rules_for(self, event: str) -> list[HookRule]:
        return self.rules.get(event, [])

    def add(self, event: str, rule: HookRule) -> None:
        if event not in HOOK_EVENTS:
            raise ValueError(f"Unknown plugin event: {event}")
        self.rules.setdefault(event, []).append(rule)

    def merge(self, other: HooksConfig) -> None:
        """Append *other*'s rules after ours; settings files layer this way."""
        for event, rules in other.rules.items():
            for rule in rules:
                self.add(event, rule)

    def is_empty(self) -> bool:
        return not any(self.rules.values())
