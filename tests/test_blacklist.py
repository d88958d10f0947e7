from aiassist.blacklist import BlacklistChecker


def test_prefix_pattern():
    checker = BlacklistChecker(["rm *"])

    assert checker.is_blacklisted("rm -rf /tmp/x") == (True, "rm *")
    assert checker.is_blacklisted("ls -la") == (False, "")


def test_exact_pattern_matches_base_command():
    checker = BlacklistChecker(["reboot"])

    assert checker.is_blacklisted("reboot") == (True, "reboot")
    assert checker.is_blacklisted("reboot now") == (True, "reboot")
    assert checker.is_blacklisted("rebooter") == (False, "")


def test_glob_on_base_command():
    checker = BlacklistChecker(["mkfs.*"])

    assert checker.is_blacklisted("mkfs.ext4 /dev/sdb1")[0]


def test_empty_command_is_never_blacklisted():
    assert BlacklistChecker(["*"]).is_blacklisted("   ") == (False, "")


def test_blank_patterns_are_ignored():
    checker = BlacklistChecker(["", "  ", "dd *"])

    assert checker.patterns == ["dd *"]


def test_format_for_prompt():
    assert BlacklistChecker(["rm *", "reboot"]).format_for_prompt() == (
        "Command Blacklist:\n- rm *\n- reboot"
    )
    assert BlacklistChecker().format_for_prompt() == ""
