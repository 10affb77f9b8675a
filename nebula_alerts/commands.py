"""Command registry (single source of truth for help + wiring)."""

from __future__ import annotations

from .models.command_spec import CommandSpec

COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        "alerts",
        "/alerts [active|config|test|resolve|trigger|set|channel]",
        "inspect and manage alerts",
        "cmd_alerts",
        aliases=("alert",),
    ),
)

ALERTS_USAGE = "\n".join(
    [
        "/alerts active",
        "/alerts config",
        "/alerts test",
        "/alerts resolve <type> [key=value ...]",
        "/alerts trigger <type> <value> [key=value ...]",
        "/alerts set <type> <field>=<value> ...",
        "/alerts channel <id> on|off",
    ]
)
