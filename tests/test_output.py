from aiassist.output import OUTPUT_MAX_CHARS, PIPE_MAX_CHARS, truncate_output


def test_short_text_is_unchanged():
    text = "line 1\nline 2\n"

    assert truncate_output(text, 100) is text


def test_exact_budget_is_unchanged():
    text = "x" * 50

    assert truncate_output(text, 50) == text


def test_keeps_head_and_tail():
    text = "".join(f"line {i:04d}\n" for i in range(1000))

    result = truncate_output(text, 1000)

    assert result.startswith(text[:600])
    assert result.endswith(text[-300:])
    assert "omitted" in result


def test_result_is_bounded_by_budget_plus_notice():
    text = "abc\n" * 20_000
    budget = 2_000

    result = truncate_output(text, budget)

    assert len(result) <= budget + 100


def test_counts_omitted_lines():
    text = "a" * 600 + "\n" * 7 + "b" * 400
    # head 600, tail 300: the middle holds the 7 newlines and 100 b's

    result = truncate_output(text, 1000)

    assert "[omitted 7 lines of output]" in result


def test_custom_notice():
    text = "y\n" * 1000

    result = truncate_output(text, 200, notice="skipped {}")

    assert "... [skipped " in result


def test_pipe_budget_is_larger_than_output_budget():
    assert PIPE_MAX_CHARS > OUTPUT_MAX_CHARS
