"""
Session Orchestrator
=====================
Drives one conversation with the model and the local shell.

Flow (interactive turn):
  1. Append the question to the history.
  2. Flatten the history into one context string and ask the model
     (interactive prompt).
  3. Extract marked commands from the answer.
  4. Offer the commands in order; the first one the user approves runs,
     the rest of the batch is discarded.
  5. Append the command and its output to the history and ask the model
     again (continue-analysis prompt).
  6. Repeat from 3 until the model proposes nothing, the user declines
     everything, or the depth limit is hit.

Pipe mode is a single model call on piped data and never executes.

History is a list of langchain-core messages:
  SystemMessage → host facts (rendered without a label, always first)
  HumanMessage  → user questions and executed-command reports
  AIMessage     → model answers
"""

from __future__ import annotations

import asyncio
import logging

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from aiassist.blacklist import BlacklistChecker
from aiassist.commands import Command, extract_commands
from aiassist.config_loader import SessionSettings
from aiassist.confirm import ConfirmationGate
from aiassist.errors import AllProvidersFailedError, UserAbortError
from aiassist.executor import CommandRunner, ExecutionResult
from aiassist.i18n import Translator
from aiassist.output import truncate_output
from aiassist.prompts import SystemPrompts
from aiassist.providers import ProviderManager
from aiassist.ui import TerminalUI

logger = logging.getLogger(__name__)


class Session:
    """
    One conversation: history, the command cycle and pipe analysis.

    All collaborators are injected; the session owns only the history
    and the cancellation event.
    """

    def __init__(
        self,
        manager: ProviderManager,
        runner: CommandRunner,
        gate: ConfirmationGate,
        ui: TerminalUI,
        translator: Translator,
        prompts: SystemPrompts,
        blacklist: BlacklistChecker | None = None,
        settings: SessionSettings | None = None,
        system_context: str = "",
    ) -> None:
        self._manager = manager
        self._runner = runner
        self._gate = gate
        self._ui = ui
        self._t = translator
        self._prompts = prompts
        self._blacklist = blacklist if blacklist is not None else BlacklistChecker()
        self._settings = settings if settings is not None else SessionSettings()
        self._system_context = system_context
        self._cancel_event = asyncio.Event()

        self._history: list[BaseMessage] = []
        if system_context:
            self._history.append(SystemMessage(content=system_context))

    # --- State ---

    @property
    def history(self) -> list[BaseMessage]:
        return list(self._history)

    def cancel(self) -> None:
        """Request cancellation; honoured at the next suspension point."""
        logger.info("Session cancellation requested")
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def render_context(self) -> str:
        """Flatten the history into the single context string sent to the model."""
        user_label = self._t.t("interactive.user_label")
        ai_label = self._t.t("interactive.ai_label")

        parts: list[str] = []
        for message in self._history:
            content = str(message.content)
            if isinstance(message, SystemMessage):
                parts.append(content.rstrip("\n"))
            elif isinstance(message, HumanMessage):
                parts.append(f"[{user_label}]: {content}")
            elif isinstance(message, AIMessage):
                parts.append(f"[{ai_label}]: {content}")
        return "\n\n".join(parts)

    # ============================================================
    #  INTERACTIVE TURN
    # ============================================================

    async def ask(self, question: str) -> None:
        """
        Run one interactive turn, including the command cycle.

        Provider exhaustion is reported and ends the turn; UserAbortError
        propagates.
        """
        self._check_cancelled()
        self._history.append(HumanMessage(content=question))

        try:
            response = await self._think(self._prompts.interactive, self.render_context())
        except AllProvidersFailedError as exc:
            self._report_exhaustion(exc)
            return

        await self._run_command_cycle(extract_commands(response))

    async def _run_command_cycle(self, commands: list[Command]) -> None:
        depth = 0

        while commands:
            if depth > self._settings.max_depth:
                logger.warning("Command analysis depth limit reached (%d)", self._settings.max_depth)
                self._ui.warning(self._t.t("executor.max_depth_reached", self._settings.max_depth))
                return

            command = self._select_command(commands)
            if command is None:
                self._ui.success(self._t.t("interactive.analysis_complete"))
                return

            await self._execute(command)

            self._check_cancelled()
            context = f"{self.render_context()}\n\n{self._t.t('interactive.continue_analysis')}"
            try:
                response = await self._think(self._prompts.continue_analysis, context)
            except AllProvidersFailedError as exc:
                self._report_exhaustion(exc)
                return

            commands = extract_commands(response)
            if commands:
                depth += 1
                logger.info("Analysis proposed %d command(s), depth=%d", len(commands), depth)

    def _select_command(self, commands: list[Command]) -> Command | None:
        """Offer commands in order; return the first approved one."""
        for command in commands:
            blocked, pattern = self._blacklist.is_blacklisted(command.text)
            if blocked:
                self._ui.show_command(command)
                self._ui.error(self._t.t("executor.blacklisted", pattern))
                self._ui.muted(self._t.t("executor.blacklist_hint"))
                continue

            self._check_cancelled()
            self._ui.show_command(command)
            if self._gate.confirm(command.type):
                return command
            self._ui.muted(self._t.t("executor.cancelled"))

        return None

    async def _execute(self, command: Command) -> ExecutionResult:
        with self._ui.thinking(command.text):
            result = await self._runner.execute(command.text)

        if result.error is None:
            self._ui.success(self._t.t("executor.execute_success"))
        else:
            self._ui.error(self._t.t("executor.execute_failed", result.error))

        output = truncate_output(
            result.output, self._settings.output_max_chars, self._t.t("output.truncated"),
        )
        self._ui.show_output(output)

        if not output:
            output = self._t.t("executor.no_output")

        report = (
            f"[{self._t.t('interactive.executed_command')}]\n{command.text}\n\n"
            f"[{self._t.t('interactive.execution_output')}]\n{output}"
        )
        if result.error is not None:
            report += f"\n\n[{self._t.t('interactive.execution_error')}]\n{result.error}"

        self._history.append(HumanMessage(content=report))
        return result

    # ============================================================
    #  PIPE MODE
    # ============================================================

    async def analyze_pipe(self, question: str, data: str) -> str:
        """
        Single-shot analysis of piped data. Never executes anything.

        Raises:
            AllProvidersFailedError: If no provider answered.
        """
        self._check_cancelled()
        data = truncate_output(data, self._settings.pipe_max_chars, self._t.t("output.truncated"))

        prompt = (
            f"{self._t.t('interactive.pipe_user_question')}{question}\n\n"
            f"{self._t.t('interactive.pipe_data')}\n{data}"
        )
        self._history.append(HumanMessage(content=prompt))

        context = f"{self._system_context}\n{prompt}" if self._system_context else prompt
        return await self._think(self._prompts.pipe_analysis, context)

    # ============================================================
    #  HELPERS
    # ============================================================

    async def _think(self, system_prompt: str, context: str) -> str:
        with self._ui.thinking():
            response, provider_key = await self._manager.call_with_fallback(
                system_prompt, context, self._cancel_event,
            )
        self._history.append(AIMessage(content=response))
        self._ui.show_response(provider_key, response)
        return response

    def _report_exhaustion(self, exc: AllProvidersFailedError) -> None:
        logger.error("All providers failed: %s", exc)
        self._ui.error(self._t.t("error.general", exc))

    def _check_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise UserAbortError("session cancelled")
