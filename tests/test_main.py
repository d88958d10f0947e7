import asyncio
import io
import os
import signal
import time

import pytest
from rich.console import Console

from aiassist import main as app
from aiassist.config_loader import AppConfig
from aiassist.confirm import ConfirmationGate
from aiassist.errors import UserAbortError
from aiassist.executor import CommandRunner
from aiassist.i18n import Translator
from aiassist.prompts import build_system_prompts
from aiassist.providers import ProviderManager
from aiassist.session import Session
from aiassist.ui import THEME, TerminalUI


@pytest.fixture
def captured(monkeypatch):
    buffer = io.StringIO()
    monkeypatch.setattr(app, "console", Console(file=buffer, theme=THEME, width=120))
    return buffer


def test_version(captured):
    assert app.main(["--version"]) == 0
    assert app.VERSION in captured.getvalue()


def test_missing_config_exits_with_error(captured, tmp_path):
    missing = tmp_path / "absent.yaml"

    assert app.main(["--config", str(missing)]) == 1
    assert "Configuration file not found" in captured.getvalue()


def test_config_without_models_exits_with_error(captured, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("language: en\nproviders: []\n", encoding="utf-8")

    assert app.main(["--config", str(path)]) == 1
    assert "No models configured" in captured.getvalue()


def test_invalid_config_exits_with_error(captured, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("providers: nope\n", encoding="utf-8")

    assert app.main(["--config", str(path)]) == 1
    assert "Invalid configuration" in captured.getvalue()


def test_parser_joins_question_words():
    args = app.build_parser().parse_args(["why", "is", "disk", "full", "--config", "x.yaml"])

    assert " ".join(args.question) == "why is disk full"
    assert args.config == "x.yaml"


def _repl_session(ui, translator):
    return Session(
        manager=ProviderManager(),
        runner=CommandRunner(),
        gate=ConfirmationGate(ui.ask_confirm, translator),
        ui=ui,
        translator=translator,
        prompts=build_system_prompts("en", ""),
    )


def test_sigterm_cancels_session_and_interrupts_main_thread():
    translator = Translator("en")
    ui = TerminalUI(translator, Console(file=io.StringIO(), theme=THEME))
    session = _repl_session(ui, translator)
    previous = signal.getsignal(signal.SIGTERM)

    try:
        app.install_cancel_handler(session)
        with pytest.raises(KeyboardInterrupt):
            os.kill(os.getpid(), signal.SIGTERM)
            time.sleep(1)
    finally:
        signal.signal(signal.SIGTERM, previous)

    assert session.cancelled


def test_repl_stops_when_cancelled_during_input(captured, monkeypatch):
    translator = Translator("en")
    ui = TerminalUI(translator, app.console)
    session = _repl_session(ui, translator)
    answers = iter(["help"])

    def answer(prompt):
        session.cancel()
        return next(answers)

    monkeypatch.setattr(ui, "ask_text", answer)

    with pytest.raises(UserAbortError):
        asyncio.run(app.run_interactive(
            session, ProviderManager(), AppConfig(), ui, translator, "",
        ))
    assert "Built-in Commands" not in captured.getvalue()
