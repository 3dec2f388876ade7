import sys

from stacksync.runtime.shell import run_command


def test_run_command_captures_output():
    result = run_command([sys.executable, "-c", "print('hello')"])

    assert result.succeeded is True
    assert result.returncode == 0
    assert result.output.strip() == "hello"


def test_run_command_reports_failure_with_stderr():
    result = run_command([sys.executable, "-c", "import sys; sys.stderr.write('bind: address already in use'); sys.exit(3)"])

    assert result.succeeded is False
    assert result.returncode == 3
    assert "address already in use" in result.diagnostic
    assert "address already in use" in result.summary()


def test_run_command_missing_executable_is_a_failed_result(tmp_path):
    result = run_command([str(tmp_path / "no-such-tool"), "up"])

    assert result.succeeded is False
    assert result.returncode is None
    assert "Could not run" in result.diagnostic


def test_run_command_appends_to_log(tmp_path):
    log_path = tmp_path / "sync.log"
    log_path.write_text("earlier\n")

    result = run_command(
        [sys.executable, "-c", "import sys; print('out'); sys.stderr.write('err\\n')"],
        log_path=log_path,
    )

    assert result.succeeded is True
    content = log_path.read_text()
    assert content.startswith("earlier\n")
    assert "out" in content
    assert "err" in content


def test_run_command_log_failure_points_at_log(tmp_path):
    log_path = tmp_path / "sync.log"

    result = run_command([sys.executable, "-c", "raise SystemExit(2)"], log_path=log_path)

    assert result.succeeded is False
    assert str(log_path) in result.diagnostic


def test_run_command_uses_cwd(tmp_path):
    result = run_command([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)

    assert result.output.strip() == str(tmp_path)
