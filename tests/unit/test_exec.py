"""Tests for blocking and async command runners."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import pytest

from stone_prover.errors import ProverCommandError, ProverSpawnError
from stone_prover.exec import ExecResult, check_result, run_command, run_command_async


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_run_command_captures_output() -> None:
    result = run_command(_python("import sys; print('out'); print('err', file=sys.stderr)"))

    assert result.ok
    assert result.stdout == "out\n"
    assert result.stderr == "err\n"


def test_run_command_async_captures_output() -> None:
    result = asyncio.run(run_command_async(_python("import sys; print('out'); print('err', file=sys.stderr)")))

    assert result.ok
    assert result.stdout == "out\n"
    assert result.stderr == "err\n"


def test_nonzero_exit_raises_command_error_in_both_modes() -> None:
    argv = _python("import sys; print('partial'); sys.stderr.write('bad input'); sys.exit(3)")

    with pytest.raises(ProverCommandError) as sync_info:
        run_command(argv)
    with pytest.raises(ProverCommandError) as async_info:
        asyncio.run(run_command_async(argv))

    for info in (sync_info, async_info):
        assert info.value.returncode == 3
        assert info.value.stdout == "partial\n"
        assert info.value.stderr == "bad input"
        assert info.value.reason_code == "COMMAND_FAILED"
    assert sync_info.value.result == async_info.value.result


def test_check_disabled_returns_failed_result() -> None:
    result = run_command(_python("raise SystemExit(2)"), check=False)

    assert result.returncode == 2
    assert not result.ok


def test_output_content_does_not_decide_success() -> None:
    result = run_command(_python("import sys; sys.stderr.write('error: fatal\\n')"))

    assert result.ok
    assert "fatal" in result.stderr


def test_missing_executable_raises_spawn_error(tmp_path: Path) -> None:
    missing = str(tmp_path / "no-such-prover")

    with pytest.raises(ProverSpawnError) as sync_info:
        run_command([missing, "--out-file", "x"])
    with pytest.raises(ProverSpawnError) as async_info:
        asyncio.run(run_command_async([missing, "--out-file", "x"]))

    assert sync_info.value.argv[0] == missing
    assert async_info.value.reason_code == "SPAWN_FAILED"
    assert isinstance(sync_info.value.__cause__, FileNotFoundError)


def test_non_executable_file_raises_spawn_error(tmp_path: Path) -> None:
    script = tmp_path / "cpu_air_prover"
    script.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    script.chmod(0o644)

    with pytest.raises(ProverSpawnError):
        run_command([str(script)])


def test_check_result_passes_success_through() -> None:
    result = ExecResult(argv=("cpu_air_prover",), returncode=0, stdout="", stderr="")

    assert check_result(result) is result


def test_command_error_message_prefers_stderr() -> None:
    result = ExecResult(argv=("cpu_air_prover", "--out-file", "p.json"), returncode=1, stdout="noise", stderr="bad input\n")

    error = ProverCommandError(result)
    assert str(error) == "command failed (1): cpu_air_prover --out-file p.json\nbad input"


def test_cancelled_async_command_kills_child(tmp_path: Path) -> None:
    pid_file = tmp_path / "pid"
    argv = _python(
        "import os, pathlib, time; "
        f"pathlib.Path({str(pid_file)!r}).write_text(str(os.getpid())); "
        "time.sleep(60)"
    )

    async def _scenario() -> int:
        task = asyncio.create_task(run_command_async(argv))
        for _ in range(200):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return int(pid_file.read_text())

    pid = asyncio.run(_scenario())

    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_raw_output_bytes_are_kept_in_both_modes() -> None:
    argv = _python("import sys; sys.stdout.buffer.write(b'ok\\r\\n'); sys.stderr.buffer.write(b'bad \\xff input')")

    sync_result = run_command(argv)
    async_result = asyncio.run(run_command_async(argv))

    for result in (sync_result, async_result):
        assert result.stdout_bytes == b"ok\r\n"
        assert result.stderr_bytes == b"bad \xff input"
        assert result.stderr == "bad \ufffd input"
    assert sync_result == async_result
