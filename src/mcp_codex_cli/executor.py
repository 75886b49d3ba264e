"""Subprocess execution with stream capture and a hard timeout."""

from __future__ import annotations

import asyncio
import codecs
import os
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from loguru import logger

from mcp_codex_cli.errors import CommandExitError, CommandSpawnError, CommandTimeoutError

DEFAULT_COMMAND_TIMEOUT_SECONDS = 300.0
READ_CHUNK_SIZE = 4096
KILL_GRACE_SECONDS = 5.0
READER_DRAIN_SECONDS = 2.0


class CommandStatus(StrEnum):
    SUCCEEDED = "succeeded"
    EXITED = "exited"
    TIMED_OUT = "timed_out"
    SPAWN_FAILED = "spawn_failed"


@dataclass(frozen=True)
class CommandOutcome:
    """Final state of one subprocess lifecycle."""

    command: str
    args: tuple[str, ...]
    status: CommandStatus
    stdout: str = ""
    stderr: str = ""
    returncode: int | None = None
    timeout: float | None = None
    error: str | None = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.SUCCEEDED

    def raise_for_status(self) -> None:
        """Raise the matching CommandError if the command did not succeed."""
        match self.status:
            case CommandStatus.SUCCEEDED:
                return
            case CommandStatus.EXITED:
                returncode = self.returncode if self.returncode is not None else -1
                raise CommandExitError(self.command, returncode, self.stderr)
            case CommandStatus.TIMED_OUT:
                raise CommandTimeoutError(self.command, self.timeout or 0.0)
            case CommandStatus.SPAWN_FAILED:
                raise CommandSpawnError(self.command, self.error or "unknown error")


@dataclass
class _StreamBuffer:
    """Accumulates decoded text from one pipe as chunks arrive."""

    decoder: codecs.IncrementalDecoder = field(
        default_factory=lambda: codecs.getincrementaldecoder("utf-8")(errors="replace")
    )
    parts: list[str] = field(default_factory=list)

    def feed(self, chunk: bytes) -> None:
        text = self.decoder.decode(chunk)
        if text:
            self.parts.append(text)

    def text(self) -> str:
        tail = self.decoder.decode(b"", final=True)
        if tail:
            self.parts.append(tail)
        return "".join(self.parts)


async def _drain(stream: asyncio.StreamReader | None, buffer: _StreamBuffer) -> None:
    if stream is None:
        return
    while chunk := await stream.read(READ_CHUNK_SIZE):
        buffer.feed(chunk)


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    try:
        await asyncio.wait_for(process.wait(), timeout=KILL_GRACE_SECONDS)
    except TimeoutError:
        logger.warning("command.kill.unreaped pid={}", process.pid)


async def _finish_readers(readers: asyncio.Future[Any], timeout: float = READER_DRAIN_SECONDS) -> None:
    """Read what is left in the pipes after a kill, giving up after timeout."""
    try:
        await asyncio.wait_for(asyncio.shield(readers), timeout=timeout)
    except TimeoutError:
        readers.cancel()
        await asyncio.gather(readers, return_exceptions=True)


async def run_command(
    command: str,
    args: list[str],
    *,
    timeout: float = DEFAULT_COMMAND_TIMEOUT_SECONDS,
    cwd: str | os.PathLike[str] | None = None,
) -> CommandOutcome:
    """Run command with args and return its outcome.

    Stdin is closed. Stdout and stderr are read concurrently as the process
    writes them and decoded as UTF-8. A single deadline covers the whole run:
    when it expires the process is killed and the outcome is TIMED_OUT.

    Only exit code 0 counts as success. A non-zero exit is EXITED even when
    the process wrote to stdout.
    """
    argv = tuple(args)
    started = time.monotonic()
    logger.debug("command.spawn command={} argc={} timeout={}", command, len(argv), timeout)

    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except (OSError, ValueError) as exc:
        # ValueError: arguments the OS cannot take, e.g. an embedded NUL byte.
        logger.warning("command.spawn.failed command={} error={}", command, exc)
        return CommandOutcome(
            command=command,
            args=argv,
            status=CommandStatus.SPAWN_FAILED,
            error=str(exc),
            duration=time.monotonic() - started,
        )

    stdout = _StreamBuffer()
    stderr = _StreamBuffer()
    readers = asyncio.gather(_drain(process.stdout, stdout), _drain(process.stderr, stderr))

    async def _complete() -> int:
        await asyncio.shield(readers)
        return await process.wait()

    try:
        returncode = await asyncio.wait_for(_complete(), timeout=timeout)
    except TimeoutError:
        await _kill(process)
        await _finish_readers(readers)
        duration = time.monotonic() - started
        logger.warning("command.timeout command={} timeout={} pid={}", command, timeout, process.pid)
        return CommandOutcome(
            command=command,
            args=argv,
            status=CommandStatus.TIMED_OUT,
            stdout=stdout.text(),
            stderr=stderr.text(),
            returncode=process.returncode,
            timeout=timeout,
            duration=duration,
        )
    except asyncio.CancelledError:
        await _kill(process)
        readers.cancel()
        await asyncio.gather(readers, return_exceptions=True)
        raise

    duration = time.monotonic() - started
    status = CommandStatus.SUCCEEDED if returncode == 0 else CommandStatus.EXITED
    logger.info(
        "command.done command={} status={} returncode={} duration={:.2f}s",
        command,
        status,
        returncode,
        duration,
    )
    return CommandOutcome(
        command=command,
        args=argv,
        status=status,
        stdout=stdout.text(),
        stderr=stderr.text(),
        returncode=returncode,
        timeout=timeout,
        duration=duration,
    )


async def execute_command(
    command: str,
    args: list[str],
    *,
    timeout: float = DEFAULT_COMMAND_TIMEOUT_SECONDS,
    cwd: str | os.PathLike[str] | None = None,
) -> CommandOutcome:
    """Run command and raise a CommandError unless it exits with code 0."""
    outcome = await run_command(command, args, timeout=timeout, cwd=cwd)
    outcome.raise_for_status()
    return outcome
