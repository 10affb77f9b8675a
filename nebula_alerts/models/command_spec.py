"""Command specification dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    name: str
    usage: str
    description: str
    handler: str
    aliases: tuple[str, ...] = ()
