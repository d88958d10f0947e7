import pytest

from aiassist.commands import CommandType
from aiassist.confirm import ConfirmationGate
from aiassist.errors import UserAbortError
from aiassist.i18n import Translator


class _ScriptedAsk:
    def __init__(self, *answers):
        self.answers = list(answers)
        self.questions = []

    def __call__(self, question, default):
        self.questions.append(question)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def _gate(ask):
    return ConfirmationGate(ask, Translator("en"))


def test_query_needs_one_yes():
    ask = _ScriptedAsk(True)

    assert _gate(ask).confirm(CommandType.QUERY) is True
    assert len(ask.questions) == 1


def test_modify_needs_two_yes():
    ask = _ScriptedAsk(True, True)

    assert _gate(ask).confirm(CommandType.MODIFY) is True
    assert len(ask.questions) == 2
    assert "Warning" in ask.questions[1]


def test_modify_first_no_short_circuits():
    ask = _ScriptedAsk(False)

    assert _gate(ask).confirm(CommandType.MODIFY) is False
    assert len(ask.questions) == 1


def test_modify_second_no_declines():
    ask = _ScriptedAsk(True, False)

    assert _gate(ask).confirm(CommandType.MODIFY) is False


def test_abort_propagates():
    ask = _ScriptedAsk(True, UserAbortError("ctrl+c"))

    with pytest.raises(UserAbortError):
        _gate(ask).confirm(CommandType.MODIFY)
