import asyncio

from aiassist.executor import CommandRunner, ExecutionStatus


def test_captures_stdout():
    result = asyncio.run(CommandRunner().execute("echo hello"))

    assert result.output == "hello\n"
    assert result.exit_code == 0
    assert result.status == ExecutionStatus.SUCCESS
    assert result.error is None


def test_stderr_is_combined_with_stdout():
    result = asyncio.run(CommandRunner().execute("echo out; echo err 1>&2"))

    assert "out" in result.output
    assert "err" in result.output


def test_shell_features_pass_through():
    result = asyncio.run(CommandRunner().execute("printf 'b\\na\\n' | sort | head -n 1"))

    assert result.output == "a\n"


def test_nonzero_exit_keeps_output():
    result = asyncio.run(CommandRunner().execute("echo partial; exit 3"))

    assert result.output == "partial\n"
    assert result.exit_code == 3
    assert result.status == ExecutionStatus.ERROR
    assert result.error == "exit status 3"


def test_grep_without_match_returns_empty_output_and_error(tmp_path):
    missing = tmp_path / "nonexistent.log"

    result = asyncio.run(CommandRunner().execute(f"grep foo {missing} 2>/dev/null"))

    assert result.output == ""
    assert result.exit_code == 2
    assert result.error is not None


def test_timeout():
    result = asyncio.run(CommandRunner(timeout=0.2).execute("sleep 5"))

    assert result.status == ExecutionStatus.TIMEOUT
    assert "timed out" in result.error
