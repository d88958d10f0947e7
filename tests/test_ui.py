import io

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from rich.console import Console

from aiassist.commands import Command, CommandType
from aiassist.errors import UserAbortError
from aiassist.i18n import Translator
from aiassist.providers import ProviderStatus
from aiassist.ui import THEME, TerminalUI


def _ui():
    buffer = io.StringIO()
    return TerminalUI(Translator("en"), Console(file=buffer, theme=THEME, width=120)), buffer


def _answer(monkeypatch, value):
    def fake_ask(*args, **kwargs):
        if isinstance(value, BaseException):
            raise value
        return value

    monkeypatch.setattr("aiassist.ui.Prompt.ask", fake_ask)


def test_response_is_not_parsed_as_markup():
    ui, buffer = _ui()

    ui.show_response("openai/gpt-4o", "[cmd:query] df -h /\n[bold]literal[/bold]")

    out = buffer.getvalue()
    assert "[cmd:query] df -h /" in out
    assert "[bold]literal[/bold]" in out
    assert "openai/gpt-4o" in out


def test_show_command_labels():
    ui, buffer = _ui()

    ui.show_command(Command("rm -rf /tmp/x", CommandType.MODIFY))
    ui.show_command(Command("uptime", CommandType.QUERY))

    out = buffer.getvalue()
    assert "Modify command (requires confirmation): rm -rf /tmp/x" in out
    assert "Query command: uptime" in out


def test_history_skips_system_facts():
    ui, buffer = _ui()

    ui.show_history([
        SystemMessage(content="[System Environment]"),
        HumanMessage(content="hello"),
        AIMessage(content="hi there"),
    ])

    out = buffer.getvalue()
    assert "hello" in out
    assert "hi there" in out
    assert "System Environment" not in out


def test_empty_history():
    ui, buffer = _ui()

    ui.show_history([SystemMessage(content="facts")])

    assert "No conversation history yet" in buffer.getvalue()


def test_status_table():
    ui, buffer = _ui()

    ui.show_status(
        [
            ProviderStatus("a/one", enabled=True, rate_limited=False),
            ProviderStatus("b/two", enabled=True, rate_limited=True),
            ProviderStatus("c/three", enabled=False, rate_limited=False),
        ],
        default_model="a/one",
    )

    out = buffer.getvalue()
    assert "a/one (default)" in out
    assert "unavailable (rate limited)" in out
    assert "disabled" in out


@pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("n", False), ("", False)])
def test_ask_confirm(monkeypatch, answer, expected):
    ui, _ = _ui()
    _answer(monkeypatch, answer)

    assert ui.ask_confirm("Execute this command?") is expected


def test_ask_confirm_default_yes(monkeypatch):
    ui, _ = _ui()
    _answer(monkeypatch, "")

    assert ui.ask_confirm("Proceed?", default=True) is True


@pytest.mark.parametrize("interrupt", [KeyboardInterrupt(), EOFError(), "exit"])
def test_ask_confirm_interrupts_abort(monkeypatch, interrupt):
    ui, _ = _ui()
    _answer(monkeypatch, interrupt)

    with pytest.raises(UserAbortError):
        ui.ask_confirm("Execute this command?")


def test_thinking_is_silent_off_terminal():
    ui, buffer = _ui()

    with ui.thinking():
        pass

    assert buffer.getvalue() == ""
