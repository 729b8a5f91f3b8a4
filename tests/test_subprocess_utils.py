from __future__ import annotations

import io
import sys

import pytest

from deployer_kit.subprocess_utils import (
    CliNotFoundError,
    CommandError,
    ensure_cli_available,
    run_command,
)


def test_capture_mode_returns_stdout() -> None:
    result = run_command([sys.executable, "-c", "print('hello')"])

    assert result.returncode == 0
    assert result.stdout.strip() == "hello"


def test_nonzero_exit_raises_command_error_with_returncode() -> None:
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]

    with pytest.raises(CommandError) as excinfo:
        run_command(cmd)

    assert excinfo.value.returncode == 3
    assert "boom" in excinfo.value.output
    assert "exit=3" in str(excinfo.value)


def test_stream_mode_echoes_output(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_out = io.StringIO()
    monkeypatch.setattr(sys, "stdout", fake_out)

    result = run_command([sys.executable, "-c", "print('line-1'); print('line-2')"], stream_output=True)

    assert result.returncode == 0
    assert "line-1" in fake_out.getvalue()
    assert "line-2" in result.stdout


def test_stream_mode_failure_keeps_returncode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", io.StringIO())

    with pytest.raises(CommandError) as excinfo:
        run_command([sys.executable, "-c", "import sys; sys.exit(5)"], stream_output=True)

    assert excinfo.value.returncode == 5


def test_missing_binary_raises_cli_not_found() -> None:
    with pytest.raises(CliNotFoundError):
        run_command(["definitely-not-a-real-binary-xyz", "--version"])


def test_ensure_cli_available(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("shutil.which", lambda name: None)

    with pytest.raises(CliNotFoundError) as excinfo:
        ensure_cli_available("gcloud")

    assert "cloud.google.com/sdk" in str(excinfo.value)

    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    assert ensure_cli_available("gcloud") == "/usr/bin/gcloud"
