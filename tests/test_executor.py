import asyncio
import sys
import time
from pathlib import Path

import pytest

from mcp_codex_cli.errors import CommandExitError, CommandSpawnError, CommandTimeoutError
from mcp_codex_cli.executor import (
    CommandStatus,
    _drain,
    _finish_readers,
    _StreamBuffer,
    execute_command,
    run_command,
)


def _python(code: str) -> list[str]:
    return ["-c", code]


@pytest.mark.asyncio
async def test_run_command_captures_stdout_and_stderr() -> None:
    outcome = await run_command(
        sys.executable,
        _python("import sys; print('out'); print('err', file=sys.stderr)"),
        timeout=30,
    )

    assert outcome.ok
    assert outcome.status is CommandStatus.SUCCEEDED
    assert outcome.returncode == 0
    assert outcome.stdout == "out\n"
    assert outcome.stderr == "err\n"


@pytest.mark.asyncio
async def test_run_command_passes_arguments_verbatim() -> None:
    outcome = await run_command(
        sys.executable,
        _python("import sys; print(repr(sys.argv[1:]))") + ["a b", "--flag", "Check. Please analyze"],
        timeout=30,
    )

    assert outcome.stdout.strip() == repr(["a b", "--flag", "Check. Please analyze"])


@pytest.mark.asyncio
async def test_run_command_closes_stdin() -> None:
    outcome = await run_command(sys.executable, _python("import sys; print(repr(sys.stdin.read()))"), timeout=30)

    assert outcome.stdout.strip() == "''"


@pytest.mark.asyncio
async def test_run_command_accumulates_large_streamed_output() -> None:
    code = (
        "import sys\n"
        "for i in range(2000):\n"
        "    sys.stdout.buffer.write(('line %d é\\n' % i).encode('utf-8'))\n"
        "    sys.stdout.flush()"
    )
    outcome = await run_command(sys.executable, _python(code), timeout=30)

    lines = outcome.stdout.splitlines()
    assert len(lines) == 2000
    assert lines[0] == "line 0 é"
    assert lines[-1] == "line 1999 é"


@pytest.mark.asyncio
async def test_non_zero_exit_is_failure_even_with_stdout() -> None:
    code = "import sys; print('partial'); print('boom', file=sys.stderr); sys.exit(3)"
    outcome = await run_command(sys.executable, _python(code), timeout=30)

    assert not outcome.ok
    assert outcome.status is CommandStatus.EXITED
    assert outcome.returncode == 3
    assert outcome.stdout == "partial\n"
    assert outcome.stderr == "boom\n"


@pytest.mark.asyncio
async def test_execute_command_raises_exit_error_with_stderr() -> None:
    code = "import sys; print('bad input', file=sys.stderr); sys.exit(1)"
    with pytest.raises(CommandExitError) as exc_info:
        await execute_command(sys.executable, _python(code), timeout=30)

    assert exc_info.value.returncode == 1
    assert "exited with code 1" in str(exc_info.value)
    assert "bad input" in str(exc_info.value)


@pytest.mark.asyncio
async def test_timeout_kills_process() -> None:
    started = time.monotonic()
    outcome = await run_command(
        sys.executable,
        _python("import sys, time; print('started', flush=True); time.sleep(30)"),
        timeout=2,
    )

    assert time.monotonic() - started < 10
    assert outcome.status is CommandStatus.TIMED_OUT
    assert outcome.timeout == 2
    assert outcome.returncode is not None
    assert outcome.stdout == "started\n"

    with pytest.raises(CommandTimeoutError, match="timed out after 2 seconds"):
        outcome.raise_for_status()


@pytest.mark.asyncio
async def test_spawn_failure_for_missing_executable(tmp_path: Path) -> None:
    missing = str(tmp_path / "no-such-codex")
    outcome = await run_command(missing, ["exec"], timeout=30)

    assert outcome.status is CommandStatus.SPAWN_FAILED
    assert outcome.returncode is None
    assert outcome.error

    with pytest.raises(CommandSpawnError, match="Failed to start"):
        await execute_command(missing, ["exec"], timeout=30)


@pytest.mark.asyncio
async def test_cancellation_kills_process() -> None:
    task = asyncio.create_task(run_command(sys.executable, _python("import time; time.sleep(30)"), timeout=60))
    await asyncio.sleep(0.3)
    task.cancel()

    started = time.monotonic()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert time.monotonic() - started < 10


@pytest.mark.asyncio
async def test_concurrent_calls_are_independent() -> None:
    first, second = await asyncio.gather(
        run_command(sys.executable, _python("print('one')"), timeout=30),
        run_command(sys.executable, _python("import sys; print('two', file=sys.stderr); sys.exit(2)"), timeout=30),
    )

    assert first.ok and first.stdout == "one\n"
    assert second.status is CommandStatus.EXITED and second.stderr == "two\n"


@pytest.mark.asyncio
async def test_timeout_keeps_output_written_before_kill() -> None:
    code = "import sys, time\nsys.stdout.write('x' * 200000)\nsys.stdout.flush()\ntime.sleep(30)"
    outcome = await run_command(sys.executable, _python(code), timeout=2)

    assert outcome.status is CommandStatus.TIMED_OUT
    assert outcome.stdout == "x" * 200000


@pytest.mark.asyncio
async def test_finish_readers_drains_pipe_to_eof() -> None:
    stream = asyncio.StreamReader()
    buffer = _StreamBuffer()
    readers = asyncio.gather(_drain(stream, buffer))

    stream.feed_data(b"before kill ")
    asyncio.get_running_loop().call_later(0.05, stream.feed_data, b"tail")
    asyncio.get_running_loop().call_later(0.1, stream.feed_eof)
    await _finish_readers(readers, timeout=5)

    assert readers.done() and not readers.cancelled()
    assert buffer.text() == "before kill tail"


@pytest.mark.asyncio
async def test_finish_readers_gives_up_when_pipe_stays_open() -> None:
    stream = asyncio.StreamReader()
    buffer = _StreamBuffer()
    readers = asyncio.gather(_drain(stream, buffer))
    stream.feed_data(b"partial")

    await _finish_readers(readers, timeout=0.2)

    assert readers.done()
    assert buffer.text() == "partial"
