"""
Command Extraction
===================
Finds the shell commands a model wants to run inside its free-form reply.

A command line starts (after trimming) with one of two literal markers:

    [cmd:query]  df -h /          → read-only, one confirmation
    [cmd:modify] rm -rf /tmp/x    → state-changing, two confirmations

Every other line is prose. The classification is purely syntactic: the
model picks the label, nothing here second-guesses it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandType(str, Enum):
    """Risk class chosen by the model via its marker."""
    QUERY = "query"
    MODIFY = "modify"


@dataclass(frozen=True)
class Command:
    """A single model-proposed shell command."""
    text: str
    type: CommandType


_MARKERS: dict[str, CommandType] = {
    "[cmd:query]": CommandType.QUERY,
    "[cmd:modify]": CommandType.MODIFY,
}

# Inline markdown the model sometimes wraps around the command
_EMPHASIS_MARKERS: tuple[str, ...] = ("**", "`")


def extract_commands(response: str) -> list[Command]:
    """
    Extract marked commands from a model response, in line order.

    Lines whose marker is followed by nothing (after stripping emphasis)
    are dropped.
    """
    commands: list[Command] = []

    for line in response.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue

        for marker, cmd_type in _MARKERS.items():
            if trimmed.startswith(marker):
                text = _clean(trimmed[len(marker):])
                if text:
                    commands.append(Command(text=text, type=cmd_type))
                break

    return commands


def _clean(candidate: str) -> str:
    for emphasis in _EMPHASIS_MARKERS:
        candidate = candidate.replace(emphasis, "")
    return candidate.strip()
