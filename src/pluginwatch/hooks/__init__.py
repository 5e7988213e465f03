"""Hooks: shell commands fired on plugin lifecycle events."""

from .engine import HookResult, execute_hooks, expand_variables, run_command_hook
from .models import HOOK_EVENTS, HookCommand, HookRule, HooksConfig
from .parser import parse_hook_command, parse_hook_rule, parse_hooks_config

__all__ = [
    "HOOK_EVENTS",
    "HookCommand",
    "HookResult",
    "HookRule",
    "HooksConfig",
    "execute_hooks",
    "expand_variables",
    "parse_hook_command",
    "parse_hook_rule",
    "parse_hooks_config",
    "run_command_hook",
]
