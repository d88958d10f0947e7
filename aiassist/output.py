"""
Output Truncation
==================
Keeps text that goes back into the model context (or onto the screen)
within a character budget.

Policy: keep the head (60% of the budget) and the tail, drop the middle
and put a notice in its place. Diagnostic output (logs, df, ps) carries
its summary at the top and its most recent events at the bottom.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


# ============================================================
#  BUDGETS
# ============================================================

# Raw piped input: sized for large context windows
PIPE_MAX_CHARS: int = 500_000

# Command output fed into a conversation that keeps growing
OUTPUT_MAX_CHARS: int = 30_000

_HEAD_RATIO: float = 0.6
_NOTICE_RESERVE: int = 100

DEFAULT_NOTICE: str = "omitted {} lines of output"


def truncate_output(text: str, max_chars: int, notice: str = DEFAULT_NOTICE) -> str:
    """
    Truncate ``text`` to roughly ``max_chars`` characters.

    Args:
        text:      The text to bound.
        max_chars: Character budget.
        notice:    Template with one ``{}`` slot for the omitted line count.

    Returns:
        ``text`` unchanged when it fits, otherwise head + notice + tail.
        The result never exceeds ``max_chars`` by more than the notice.
    """
    if len(text) <= max_chars:
        return text

    head_len = int(max_chars * _HEAD_RATIO)
    tail_len = max(max_chars - head_len - _NOTICE_RESERVE, 0)

    head = text[:head_len]
    tail = text[len(text) - tail_len:] if tail_len else ""
    middle = text[head_len:len(text) - tail_len]
    omitted_lines = middle.count("\n")

    logger.info(
        "Truncated %d chars to budget %d (%d lines omitted)",
        len(text), max_chars, omitted_lines,
    )

    return f"{head}\n... [{notice.format(omitted_lines)}] ...\n{tail}"
