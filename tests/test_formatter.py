from stacksync.cli.formatter import FAILURE_MARKER, SUCCESS_MARKER, OutputFormatter, format_elapsed


def test_format_elapsed():
    assert format_elapsed(0) == "0s"
    assert format_elapsed(7.4) == "7s"
    assert format_elapsed(59.6) == "1m 00s"
    assert format_elapsed(187) == "3m 07s"
    assert format_elapsed(-3) == "0s"


def test_success_and_failure_lines_carry_markers(capsys):
    OutputFormatter.log("Stack started.", severity="success")
    OutputFormatter.log("Stack failed.", severity="failure")

    err = capsys.readouterr().err
    assert f"{SUCCESS_MARKER} Stack started." in err
    assert f"{FAILURE_MARKER} Stack failed." in err


def test_messages_are_not_parsed_as_markup(capsys):
    OutputFormatter.log("listening on [::]:49153 [bold]", severity="info")

    err = capsys.readouterr().err
    assert "[::]:49153 [bold]" in err


def test_debug_lines_follow_configured_level(capsys):
    try:
        OutputFormatter.configure("INFO")
        OutputFormatter.log("hidden detail", severity="debug")
        assert "hidden detail" not in capsys.readouterr().err

        OutputFormatter.configure("debug")
        OutputFormatter.log("shown detail", severity="debug")
        assert "shown detail" in capsys.readouterr().err
    finally:
        OutputFormatter.configure("INFO")


def test_print_data_goes_to_stdout(capsys):
    OutputFormatter.print_data("line [x]")

    captured = capsys.readouterr()
    assert captured.out == "line [x]\n"
    assert captured.err == ""
