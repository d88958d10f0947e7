"""
Command Blacklist
==================
Holds the configured forbidden-command patterns.

Two consumers:
  1. The prompts: the formatted list is injected verbatim so the model
     avoids proposing these commands.
  2. The Session: a matching command is never offered for execution.

Pattern forms:
  - "rm *"    → prefix match against the command or its first word
  - "reboot"  → exact match against the command or its first word
  - any other glob is tried against the first word with fnmatch
"""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase

logger = logging.getLogger(__name__)


class BlacklistChecker:
    """Matches commands against the configured blacklist."""

    def __init__(self, patterns: list[str] | tuple[str, ...] = ()) -> None:
        self._patterns: list[str] = [p.strip() for p in patterns if p and p.strip()]

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def is_blacklisted(self, command: str) -> tuple[bool, str]:
        """
        Check a command against every pattern.

        Returns:
            (True, matched_pattern) on a hit, (False, "") otherwise.
        """
        parts = command.split()
        if not parts:
            return False, ""
        base_cmd = parts[0]

        for pattern in self._patterns:
            if pattern.endswith("*"):
                prefix = pattern[:-1]
                if command.startswith(prefix) or base_cmd.startswith(prefix):
                    return self._hit(command, pattern)
            elif command == pattern or base_cmd == pattern:
                return self._hit(command, pattern)

            if fnmatchcase(base_cmd, pattern):
                return self._hit(command, pattern)

        return False, ""

    def format_for_prompt(self) -> str:
        """Render the blacklist for inclusion in a system prompt."""
        if not self._patterns:
            return ""
        return "Command Blacklist:\n- " + "\n- ".join(self._patterns)

    @staticmethod
    def _hit(command: str, pattern: str) -> tuple[bool, str]:
        logger.warning("BLOCKED: command '%s' matched blacklist pattern '%s'", command, pattern)
        return True, pattern
