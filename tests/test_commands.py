from aiassist.commands import Command, CommandType, extract_commands


def test_extracts_query_and_modify_in_order():
    text = "Found it:\n[cmd:query] df -h /\nsome prose\n[cmd:modify] rm -rf /tmp/x"

    assert extract_commands(text) == [
        Command("df -h /", CommandType.QUERY),
        Command("rm -rf /tmp/x", CommandType.MODIFY),
    ]


def test_marker_must_start_the_line():
    text = "run this: [cmd:query] uptime\nsee [cmd:modify] reboot"

    assert extract_commands(text) == []


def test_leading_whitespace_is_trimmed():
    assert extract_commands("    [cmd:query]   free -m   ") == [
        Command("free -m", CommandType.QUERY),
    ]


def test_markers_are_case_sensitive():
    assert extract_commands("[CMD:QUERY] ls\n[Cmd:modify] rm x") == []


def test_markdown_emphasis_is_stripped():
    text = "[cmd:query] `ps aux`\n[cmd:modify] **systemctl restart nginx**"

    assert extract_commands(text) == [
        Command("ps aux", CommandType.QUERY),
        Command("systemctl restart nginx", CommandType.MODIFY),
    ]


def test_empty_candidates_are_dropped():
    text = "[cmd:query]\n[cmd:modify] ``\n[cmd:query] ****\n[cmd:query] uname -a"

    assert extract_commands(text) == [Command("uname -a", CommandType.QUERY)]


def test_prose_only_yields_nothing():
    assert extract_commands("The disk looks fine.\nNothing else to do.") == []


def test_same_input_same_output():
    text = "[cmd:query] ls -la\n[cmd:modify] touch /tmp/a"

    assert extract_commands(text) == extract_commands(text)


def test_crlf_line_endings():
    assert extract_commands("intro\r\n[cmd:query] id\r\n") == [
        Command("id", CommandType.QUERY),
    ]
