"""
Confirmation Gate
==================
Nothing runs on the host without the user saying yes.

  - Query  commands → one confirmation.
  - Modify commands → the same confirmation, then a second, more strongly
    worded one. A "no" at either step short-circuits.

Interrupts are not answers: the ``ask`` callable raises UserAbortError on
Ctrl+C, EOF or "exit", and the gate lets it propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from aiassist.commands import CommandType
from aiassist.i18n import Translator

logger = logging.getLogger(__name__)

# (question, default) -> answer; raises UserAbortError on interrupt
AskFunc = Callable[[str, bool], bool]


class ConfirmationGate:
    """Asks the user to approve a command of a given type."""

    def __init__(self, ask: AskFunc, translator: Translator) -> None:
        self._ask = ask
        self._t = translator

    def confirm(self, command_type: CommandType) -> bool:
        """
        Return True only when every required confirmation was affirmative.

        Raises:
            UserAbortError: If the user interrupts at either prompt.
        """
        if not self._ask(self._t.t("executor.execute_prompt"), False):
            logger.info("User declined %s command", command_type.value)
            return False

        if command_type == CommandType.MODIFY:
            if not self._ask(self._t.t("executor.modify_warning"), False):
                logger.info("User declined modify command at second confirmation")
                return False

        return True
