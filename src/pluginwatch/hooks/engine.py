"""Hook execution engine: execute_hooks, run_command_hook, HookResult."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field

from .models import HookCommand, HooksConfig

log = logging.getLogger(__name__)


@dataclass
class HookResult:
    """Result of executing hooks for one event."""

    executed: int = 0
    messages: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def expand_variables(command: str, variables: dict[str, str] | None = None) -> str:
    """Substitute ``$NAME`` and ``${NAME}`` occurrences from *variables*."""
    if not variables:
        return command
    # longest names first so $PLUGIN_DIR never eats the prefix of $PLUGIN_DIRS
    for k in sorted(variables, key=len, reverse=True):
        v = variables[k]
        command = command.replace(f"${{{k}}}", v).replace(f"${k}", v)
    return command


def run_command_hook(
    hook: HookCommand, variables: dict[str, str] | None = None
) -> tuple[int, str, str]:
    """Execute a command hook. Returns (exit_code, stdout, stderr)."""
    cmd = expand_variables(hook.command, variables)
    try:
        result = subprocess.run(
            cmd, shell=True, timeout=hook.timeout, capture_output=True, text=True
        )
        return result.returncode, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return -1, "", "hook timed out"
    except Exception as e:
        return -1, "", str(e)


def execute_hooks(
    config: HooksConfig,
    event: str,
    match_value: str = "",
    variables: dict[str, str] | None = None,
) -> HookResult:
    """Execute all matching hooks for an event. Returns combined result."""
    result = HookResult()
    for rule in config.rules_for(event):
        if not rule.matches(match_value):
            continue
        for hook in rule.commands:
            exit_code, stdout, stderr = run_command_hook(hook, variables)
            result.executed += 1
            if stdout.strip():
                result.messages.append(stdout.strip())
            if exit_code != 0:
                reason = stderr.strip() or f"exit code {exit_code}"
                result.failures.append(f"{hook.command}: {reason}")
                log.warning("%s hook for '%s' failed: %s", event, match_value, reason)
    return result
