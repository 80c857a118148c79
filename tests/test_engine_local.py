import subprocess

import pytest

from otsdaq_installer.engines import LocalEngine, Policy
from otsdaq_installer.utils.logging import setup_logging


def test_output_is_written_unlabelled_to_log(tmp_path):
    log_file = tmp_path / "install.log"
    setup_logging(log_file)
    LocalEngine().run(["sh", "-c", "echo hello from sh"], cwd=tmp_path)
    lines = log_file.read_text().splitlines()
    assert "hello from sh" in lines
    assert any("command.run" in line for line in lines)


def test_capture_returns_stdout(tmp_path):
    setup_logging(tmp_path / "install.log")
    result = LocalEngine().run(["sh", "-c", "echo out; echo err >&2"], capture=True)
    assert result.stdout == "out\n"
    assert "err" in (tmp_path / "install.log").read_text()


def test_fatal_failure_raises(tmp_path):
    setup_logging(tmp_path / "install.log")
    with pytest.raises(subprocess.CalledProcessError) as exc:
        LocalEngine().run(["sh", "-c", "exit 3"])
    assert exc.value.returncode == 3


def test_best_effort_failure_is_tolerated(tmp_path):
    log_file = tmp_path / "install.log"
    setup_logging(log_file)
    result = LocalEngine().run(["sh", "-c", "exit 4"], policy=Policy.BEST_EFFORT)
    assert result.returncode == 4
    assert "command.ignored" in log_file.read_text()


def test_missing_executable_is_status_127(tmp_path):
    setup_logging(tmp_path / "install.log")
    result = LocalEngine().run(["no-such-tool-here"], policy=Policy.BEST_EFFORT)
    assert result.returncode == 127
    with pytest.raises(subprocess.CalledProcessError):
        LocalEngine().run(["no-such-tool-here"])


def test_env_is_passed_through(tmp_path):
    setup_logging(tmp_path / "install.log")
    result = LocalEngine().run(
        ["sh", "-c", 'printf %s "$OTS_MARKER"'],
        env={"OTS_MARKER": "42", "PATH": "/usr/bin:/bin"},
        capture=True,
    )
    assert result.stdout == "42"


def test_non_executable_file_is_status_126(tmp_path):
    log_file = tmp_path / "install.log"
    setup_logging(log_file)
    script = tmp_path / "tool.sh"
    script.write_text("#!/bin/sh\nexit 0\n")
    script.chmod(0o644)
    result = LocalEngine().run([str(script)], policy=Policy.BEST_EFFORT)
    assert result.returncode == 126
    assert "command.ignored" in log_file.read_text()


def test_missing_working_directory_is_not_reported_as_missing_command(tmp_path):
    setup_logging(tmp_path / "install.log")
    result = LocalEngine().run(
        ["sh", "-c", "true"], cwd=tmp_path / "gone", policy=Policy.BEST_EFFORT
    )
    assert result.returncode == 126
