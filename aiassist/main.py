"""
Main Application: Entry Point
==============================
The ``aiassist`` console script.

Components Integrated:
  - ConfigLoader      → Reads ~/.aiassist/config.yaml
  - ProviderManager   → Ordered LLM providers with fallback
  - Session           → Question / command / analysis loop
  - TerminalUI        → Rich console, prompts, spinner

Modes:
  - Interactive: ``aiassist [question]`` on a terminal. REPL with
    built-in commands (help, history, status, clear, exit/quit).
  - Pipe: ``some-command | aiassist "question"``. One analysis of the
    piped data, printed, then exit. Nothing is executed.

Exit codes:
  0 → normal exit, including Ctrl+C / EOF / "exit"
  1 → configuration error, or provider exhaustion in pipe mode
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from aiassist import sysinfo
from aiassist.blacklist import BlacklistChecker
from aiassist.config_loader import AppConfig, ConfigLoader
from aiassist.confirm import ConfirmationGate
from aiassist.errors import AllProvidersFailedError, ConfigError, UserAbortError
from aiassist.executor import CommandRunner
from aiassist.i18n import Translator
from aiassist.prompts import build_system_prompts
from aiassist.providers import ProviderManager
from aiassist.session import Session
from aiassist.ui import THEME, TerminalUI

VERSION = "0.1.0"

logger = logging.getLogger("aiassist")

console = Console(theme=THEME)


# ============================================================
#  LOGGING SETUP
# ============================================================

def setup_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING"),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ============================================================
#  ARGUMENTS
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aiassist",
        description="AI shell assistant for server operations.",
        epilog='Pipe mode: some-command | aiassist "what is wrong here?"',
    )
    parser.add_argument("question", nargs="*", help="initial question")
    parser.add_argument("--config", metavar="PATH", help="configuration file")
    parser.add_argument("--version", action="store_true", help="print the version and exit")
    parser.add_argument("--sysinfo", action="store_true", help="show cached system information")
    parser.add_argument(
        "--refresh-sysinfo", action="store_true", help="re-collect system information",
    )
    return parser


# ============================================================
#  BOOTSTRAP
# ============================================================

def show_sysinfo(ui: TerminalUI, translator: Translator, refresh: bool) -> int:
    try:
        info = sysinfo.refresh() if refresh else sysinfo.load_or_collect()
    except OSError as exc:
        ui.error(translator.t("sysinfo.collect_failed", exc))
        return 1

    ui.console.print(Panel(Text(info.format_as_context().rstrip()), border_style="cyan"))
    ui.muted(translator.t("sysinfo.cache_file", sysinfo.SYSINFO_FILE))
    return 0


def load_system_context(ui: TerminalUI, translator: Translator) -> str:
    """Host facts for the first history entry; empty when unavailable."""
    try:
        return sysinfo.load_or_collect().format_as_context()
    except OSError as exc:
        logger.warning("System info unavailable: %s", exc)
        ui.warning(translator.t("sysinfo.collect_failed", exc))
        return ""


def build_session(config: AppConfig, ui: TerminalUI, translator: Translator) -> tuple[Session, ProviderManager]:
    """Wire the collaborators from the loaded configuration."""
    manager = ProviderManager.from_config(
        config,
        on_failure=lambda key, exc: ui.warning(translator.t("llm.provider_failed", key, exc)),
    )
    blacklist = BlacklistChecker(config.blacklist)
    session = Session(
        manager=manager,
        runner=CommandRunner(timeout=config.session.command_timeout_seconds),
        gate=ConfirmationGate(ui.ask_confirm, translator),
        ui=ui,
        translator=translator,
        prompts=build_system_prompts(config.language, blacklist.format_for_prompt()),
        blacklist=blacklist,
        settings=config.session,
        system_context=load_system_context(ui, translator),
    )
    return session, manager


def install_cancel_handler(session: Session) -> None:
    """
    SIGTERM → session cancellation.

    The handler also raises KeyboardInterrupt in the main thread so a
    blocking input read or a running command unwinds immediately.
    """
    def handle_sigterm(signum, frame):
        logger.info("SIGTERM received, cancelling session")
        session.cancel()
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, handle_sigterm)
    except ValueError:
        logger.debug("SIGTERM handler can only be installed from the main thread")


# ============================================================
#  MODES
# ============================================================

async def run_pipe(session: Session, ui: TerminalUI, translator: Translator, question: str) -> int:
    data = sys.stdin.read()
    try:
        await session.analyze_pipe(question, data)
    except AllProvidersFailedError as exc:
        ui.error(translator.t("error.general", exc))
        return 1
    return 0


async def run_interactive(
    session: Session,
    manager: ProviderManager,
    config: AppConfig,
    ui: TerminalUI,
    translator: Translator,
    initial_question: str,
) -> int:
    ui.welcome(VERSION)

    question = initial_question
    while True:
        if not question:
            question = ui.ask_text(translator.t("interactive.input_prompt"))

        if session.cancelled:
            raise UserAbortError("session cancelled")

        if not question:
            continue

        lower = question.lower()

        if lower in ("exit", "quit"):
            ui.info(translator.t("interactive.goodbye"))
            return 0

        if lower == "help":
            ui.show_help()
        elif lower == "history":
            ui.show_history(session.history)
        elif lower == "status":
            ui.show_status(manager.status(), config.default_model)
        elif lower == "clear":
            ui.clear()
            ui.welcome(VERSION)
        else:
            try:
                await session.ask(question)
            except UserAbortError:
                raise
            except Exception as exc:
                logger.exception("Unhandled error in main loop: %s", exc)
                ui.error(translator.t("error.general", exc))

        question = ""


# ============================================================
#  MAIN
# ============================================================

async def async_main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    translator = Translator()
    ui = TerminalUI(translator, console)

    if args.version:
        ui.info(translator.t("version.app_name"))
        ui.muted(translator.t("version.version", VERSION))
        return 0

    if args.sysinfo or args.refresh_sysinfo:
        return show_sysinfo(ui, translator, refresh=args.refresh_sysinfo)

    loader = ConfigLoader(args.config)
    if not loader.config_file.exists():
        ui.error(translator.t("config.not_found", loader.config_file))
        ui.muted(translator.t("config.hint_edit"))
        return 1

    try:
        config = loader.load()
    except ConfigError as exc:
        ui.error(translator.t("config.invalid", exc))
        ui.muted(translator.t("config.hint_edit"))
        return 1

    translator = Translator(config.language)
    ui = TerminalUI(translator, console)

    if not config.enabled_entries():
        ui.error(translator.t("error.no_models"))
        ui.muted(translator.t("config.hint_edit"))
        return 1

    session, manager = build_session(config, ui, translator)
    install_cancel_handler(session)

    question = " ".join(args.question).strip()

    try:
        if not sys.stdin.isatty():
            return await run_pipe(session, ui, translator, question)
        return await run_interactive(session, manager, config, ui, translator, question)
    except UserAbortError:
        ui.info(translator.t("interactive.goodbye"))
        return 0


def main(argv: list[str] | None = None) -> int:
    """Synchronous entry point; bootstraps the async event loop."""
    setup_logging()
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        console.print()
        console.print(Text(Translator().t("interactive.goodbye"), style="info"))
        return 0


if __name__ == "__main__":
    sys.exit(main())
