"""
Terminal UI
============
All terminal input and output goes through TerminalUI.

Components:
  - Rich Console with the application theme
  - Display helpers (responses, commands, output, tables)
  - Prompts (free text, yes/no) that turn interrupts into UserAbortError
  - Thinking indicator around in-flight model calls

Model text is always rendered as plain ``Text`` so brackets such as
``[cmd:query]`` are never interpreted as rich markup.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from aiassist.commands import Command, CommandType
from aiassist.errors import UserAbortError
from aiassist.i18n import Translator
from aiassist.providers import ProviderStatus

logger = logging.getLogger(__name__)

# ============================================================
#  RICH CONSOLE THEME
# ============================================================

THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "prompt": "bold magenta",
    "header": "bold white on blue",
    "muted": "dim",
    "query": "bold green",
    "modify": "bold red",
})

_EXIT_WORDS = ("exit", "quit")
_YES_WORDS = ("y", "yes")

# Built-in REPL commands → i18n key of their description
BUILTIN_COMMANDS: dict[str, str] = {
    "help": "interactive.help_help",
    "history": "interactive.help_history",
    "status": "interactive.help_status",
    "clear": "interactive.help_clear",
    "exit": "interactive.help_exit",
    "quit": "interactive.help_exit",
}


class TerminalUI:
    """Rich-based terminal front end."""

    def __init__(self, translator: Translator, console: Console | None = None) -> None:
        self.console = console if console is not None else Console(theme=THEME)
        self._t = translator

    # --- Messages ---

    def info(self, message: str) -> None:
        self.console.print(Text(message, style="info"))

    def warning(self, message: str) -> None:
        self.console.print(Text(message, style="warning"))

    def error(self, message: str) -> None:
        self.console.print(Text(message, style="error"))

    def success(self, message: str) -> None:
        self.console.print(Text(message, style="success"))

    def muted(self, message: str) -> None:
        self.console.print(Text(message, style="muted"))

    def clear(self) -> None:
        self.console.clear()

    # --- Display helpers ---

    def welcome(self, version: str) -> None:
        banner = Text()
        banner.append(f"{self._t.t('interactive.welcome')} v{version}\n", style="bold cyan")
        banner.append(self._t.t("interactive.help_hint"), style="muted")
        self.console.print(Panel(banner, border_style="cyan", padding=(0, 2)))
        self.console.print()

    def show_response(self, provider_key: str, response: str) -> None:
        """Display a model response, titled with the provider that produced it."""
        self.console.print()
        self.console.print(Panel(
            Text(response),
            title=Text(provider_key),
            title_align="left",
            border_style="cyan",
            padding=(1, 2),
        ))
        self.console.print()

    def show_command(self, command: Command) -> None:
        if command.type == CommandType.MODIFY:
            label, style = self._t.t("executor.modify_command"), "modify"
        else:
            label, style = self._t.t("executor.query_command"), "query"
        line = Text()
        line.append(label + " ", style=style)
        line.append(command.text, style="bold")
        self.console.print(line)

    def show_output(self, output: str) -> None:
        if output:
            self.console.print(Text(output.rstrip("\n")))

    def show_history(self, messages: Sequence[BaseMessage]) -> None:
        conversation = [m for m in messages if isinstance(m, (HumanMessage, AIMessage))]
        if not conversation:
            self.muted(self._t.t("interactive.history_empty"))
            return

        table = Table(
            title=self._t.t("interactive.history_title"),
            title_style="bold cyan",
            show_header=False,
        )
        table.add_column("Role", style="bold yellow", no_wrap=True)
        table.add_column("Content", style="white")

        for message in conversation:
            if isinstance(message, HumanMessage):
                label = self._t.t("interactive.user_label")
            else:
                label = self._t.t("interactive.ai_label")
            table.add_row(label, Text(str(message.content)))

        self.console.print(table)
        self.console.print()

    def show_help(self) -> None:
        table = Table(
            title=self._t.t("interactive.help_title"),
            title_style="bold cyan",
            show_header=False,
        )
        table.add_column("Command", style="bold yellow", min_width=10)
        table.add_column("Description", style="white")

        for name, key in BUILTIN_COMMANDS.items():
            table.add_row(name, self._t.t(key))

        table.add_section()
        table.add_row("...", self._t.t("interactive.help_question"))

        self.console.print(table)
        self.console.print()

    def show_status(self, statuses: Sequence[ProviderStatus], default_model: str = "") -> None:
        table = Table(title=self._t.t("llm.status_title"), title_style="bold cyan")
        table.add_column(self._t.t("llm.status_model"), style="bold yellow")
        table.add_column(self._t.t("llm.status_state"))

        for status in statuses:
            name = status.key
            if default_model and status.key == default_model:
                name = f"{name} {self._t.t('llm.status_default')}"

            if not status.enabled:
                state = Text(self._t.t("llm.status_disabled"), style="muted")
            elif status.rate_limited:
                state = Text(self._t.t("llm.status_unavailable"), style="warning")
            else:
                state = Text(self._t.t("llm.status_available"), style="success")
            table.add_row(name, state)

        self.console.print(table)
        self.console.print()

    # --- Thinking indicator ---

    @contextlib.contextmanager
    def thinking(self, message: str | None = None) -> Iterator[None]:
        """
        Show a spinner while the block runs.

        Leaving the block stops the refresh thread and clears the line
        before returning, so later output never interleaves with it.
        """
        if not self.console.is_terminal:
            yield
            return

        text = message or self._t.t("interactive.thinking")
        with self.console.status(Text(f"{text}...", style="info"), spinner="dots"):
            yield

    # --- Prompts ---

    def ask_text(self, prompt: str) -> str:
        """
        Read one line of input.

        Raises:
            UserAbortError: On Ctrl+C or EOF.
        """
        try:
            return Prompt.ask(
                Text(prompt, style="prompt"), console=self.console,
            ).strip()
        except (KeyboardInterrupt, EOFError) as exc:
            raise UserAbortError("input interrupted") from exc

    def ask_confirm(self, question: str, default: bool = False) -> bool:
        """
        Yes/no question. Only "y"/"yes" approve; empty input takes the default.

        Raises:
            UserAbortError: On Ctrl+C, EOF, or "exit"/"quit".
        """
        hint = "[Y/n]" if default else "[y/N]"
        answer = self.ask_text(f"{question} {hint}").lower()

        if answer in _EXIT_WORDS:
            raise UserAbortError("exit requested at confirmation")
        if not answer:
            return default
        return answer in _YES_WORDS
