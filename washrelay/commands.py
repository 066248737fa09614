"""Parsing of user text commands.

A command is a fixed prefix followed by the machine id, with or without a
space in between: "use A1", "useA1", "使用 A1". Prefixes are matched
case-insensitively on the trimmed text.
"""

from dataclasses import dataclass

from washrelay import messages
from washrelay.machine import Register, Release

REGISTER_PREFIXES = ("register", "use", "使用")
RELEASE_PREFIXES = ("pickup", "collect", "取衣")


@dataclass(frozen=True)
class Usage:
    """A recognised command with no machine id."""

    hint: str


@dataclass(frozen=True)
class Help:
    """Text that is not a command."""

    text: str = messages.HELP


Command = Register | Release | Usage | Help


def _strip_prefix(text: str, prefixes: tuple[str, ...]) -> str | None:
    lowered = text.lower()
    for prefix in prefixes:
        if lowered.startswith(prefix):
            return text[len(prefix):].strip()
    return None


def parse_command(text: str, user_id: str) -> Command:
    """Turn message text from ``user_id`` into a machine event or a reply."""
    text = text.strip()

    machine_id = _strip_prefix(text, REGISTER_PREFIXES)
    if machine_id is not None:
        if not machine_id:
            return Usage(messages.REGISTER_USAGE)
        return Register(machine_id, user_id)

    machine_id = _strip_prefix(text, RELEASE_PREFIXES)
    if machine_id is not None:
        if not machine_id:
            return Usage(messages.RELEASE_USAGE)
        return Release(machine_id, user_id)

    return Help()
