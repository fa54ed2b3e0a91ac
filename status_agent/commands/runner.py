"""
Host Status Agent - Command Runner

Runs external diagnostic binaries with a wall-clock timeout. stdout and stderr
are drained by two independent tasks for the whole life of the process so a
child that fills one pipe never blocks on the other.
"""

import asyncio
import os
import signal
import time
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import structlog

from status_agent.errors import CommandFailedError, CommandLaunchError, CommandTimeoutError

logger = structlog.get_logger(__name__)

# Reported instead of a real exit status when the process was killed on timeout
TIMEOUT_EXIT_CODE = -1

_READ_CHUNK = 64 * 1024

# Seconds to wait for pipes and exit status after a SIGKILL
KILL_GRACE = 2.0


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external process run."""
    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.exit_code == 0


def _kill(process: asyncio.subprocess.Process) -> None:
    """SIGKILL the whole session so children (e.g. under sudo) release the pipes."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
        return
    except ProcessLookupError:
        # Group is empty; only the unreaped leader can be left
        pass
    except PermissionError as e:
        logger.warning("Cannot signal process group", pid=process.pid, error=str(e))
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass
    except PermissionError as e:
        logger.warning("Cannot kill process", pid=process.pid, error=str(e))


async def _drain(stream: Optional[asyncio.StreamReader], buffer: bytearray) -> None:
    """Read a pipe until EOF into a buffer owned by this task."""
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        buffer.extend(chunk)


async def _join(tasks, timeout: float, cancel: bool = False) -> bool:
    """Wait up to timeout for tasks to finish. True if they all did."""
    pending = {task for task in tasks if not task.done()}
    if pending:
        _, pending = await asyncio.wait(pending, timeout=max(timeout, 0))
    if cancel:
        for task in pending:
            task.cancel()
    return not pending


async def run(
    command: Sequence[str],
    timeout: float,
    env: Optional[Mapping[str, str]] = None,
) -> CommandResult:
    """
    Run a command and capture its output.

    Timeout and non-zero exit are reported through the result. Only a launch
    failure raises, as CommandLaunchError.

    The process gets `timeout` seconds to exit and to close its pipes. Once
    that passes its process group is killed, and anything still holding on
    after KILL_GRACE more seconds is abandoned with whatever output arrived.

    Args:
        command: argv tokens, no shell involved.
        timeout: Seconds to wait before the process is killed.
        env: Variables merged over the current environment.
    """
    argv = list(command)
    if not argv:
        raise ValueError("command must not be empty")

    proc_env = None
    if env:
        proc_env = {**os.environ, **env}

    loop = asyncio.get_running_loop()
    start_time = time.monotonic()
    deadline = loop.time() + timeout
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=proc_env,
            start_new_session=True,
        )
    except OSError as e:
        logger.error("Command launch failed", command=argv, error=str(e))
        raise CommandLaunchError(argv[0], str(e)) from e

    stdout_buffer = bytearray()
    stderr_buffer = bytearray()
    drains = [
        asyncio.create_task(_drain(process.stdout, stdout_buffer)),
        asyncio.create_task(_drain(process.stderr, stderr_buffer)),
    ]

    timed_out = False
    killed = False
    try:
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            # returncode may already be set when only leftover children hold the pipes
            timed_out = process.returncode is None
            _kill(process)
            killed = True

        if not killed and not await _join(drains, deadline - loop.time()):
            # Leader exited but something it started still holds a pipe
            _kill(process)
            killed = True
        await _join(drains, KILL_GRACE, cancel=True)

        if process.returncode is None:
            try:
                await asyncio.wait_for(process.wait(), timeout=KILL_GRACE)
            except asyncio.TimeoutError:
                logger.error("Process survived kill", command=argv, pid=process.pid)
    except asyncio.CancelledError:
        # Caller went away; do not leave the child or the drains behind
        _kill(process)
        for task in drains:
            task.cancel()
        raise

    result = CommandResult(
        exit_code=TIMEOUT_EXIT_CODE if timed_out else process.returncode,
        stdout=stdout_buffer.decode("utf-8", errors="replace"),
        stderr=stderr_buffer.decode("utf-8", errors="replace"),
        timed_out=timed_out,
    )

    duration_ms = round((time.monotonic() - start_time) * 1000, 2)
    if timed_out:
        logger.warning("Command timed out", command=argv, timeout=timeout, duration_ms=duration_ms)
    elif killed:
        logger.warning(
            "Command left children holding its output",
            command=argv,
            exit_code=result.exit_code,
            duration_ms=duration_ms,
        )
    else:
        logger.debug("Command finished", command=argv, exit_code=result.exit_code, duration_ms=duration_ms)

    return result


async def run_checked(
    command: Sequence[str],
    timeout: float,
    source: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> CommandResult:
    """Run a command and raise unless it exited cleanly within its timeout."""
    source = source or command[0]
    result = await run(command, timeout, env=env)
    if result.timed_out:
        raise CommandTimeoutError(source, timeout)
    if result.exit_code != 0:
        raise CommandFailedError(source, result.exit_code, result.stderr)
    return result
