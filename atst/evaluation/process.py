# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Bounded execution of external commands.

Every module that shells out goes through here: the compiler and linker,
dos2unix, the preprocessor, nm, extension scripts and the solution's own
binary. The recipe is always the same: spawn with all three standard streams
as pipes, feed stdin, wait with a deadline, and if the deadline passes kill
the process and reap it so nothing is left behind. The caller gets a
CommandResult either way and decides what a timeout means for it.

No shell=True anywhere. Arguments are passed as a list, so a student's
solution name or a flag with odd characters can't turn into a shell command.
"""

import os
import signal
import subprocess
import time
from pathlib import Path
from typing import Optional, Sequence

from atst.evaluation.errors import ExecError
from atst.evaluation.models import CommandResult
from atst.logging.logger import get_logger

logger = get_logger(__name__)

# How long a killed command gets to release its pipes.
KILL_GRACE_SECONDS = 0.5


def run_bounded(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    timeout_ms: Optional[int] = None,
    stdin: Optional[bytes] = None,
) -> CommandResult:
    """
    Run a command, killing it if it outlives `timeout_ms` milliseconds.

    The whole stdin payload is written before we start waiting. A killed
    process is reaped and whatever it managed to print is still returned,
    with `timed_out` set.

    Raises:
        OSError: The command could not be spawned (missing, not executable)
            or its pipes could not be read. Callers map this onto their own
            error type since it means different things for a tool and for a
            student's binary.
    """
    argv = tuple(str(arg) for arg in args)
    timeout = timeout_ms / 1000 if timeout_ms is not None else None
    start = time.monotonic()

    proc = subprocess.Popen(
        argv,
        cwd=str(cwd) if cwd is not None else None,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        start_new_session=True,
    )

    timed_out = False
    try:
        stdout, stderr = proc.communicate(input=stdin, timeout=timeout)
    except subprocess.TimeoutExpired:
        timed_out = True
        _kill_group(proc)
        stdout, stderr = _collect_after_kill(proc)
        logger.warning(
            "Command timed out and was killed",
            extra={"command": argv[0], "timeout_ms": timeout_ms, "cwd": str(cwd)},
        )
    except BaseException:
        _kill_group(proc)
        proc.wait()
        raise

    elapsed = time.monotonic() - start
    logger.debug(
        "Command finished",
        extra={
            "command": argv[0],
            "exit_code": proc.returncode,
            "timed_out": timed_out,
            "elapsed_seconds": round(elapsed, 3),
        },
    )

    return CommandResult(
        args=argv,
        returncode=proc.returncode,
        stdout=stdout or b"",
        stderr=stderr or b"",
        timed_out=timed_out,
        elapsed_seconds=elapsed,
    )


def _kill_group(proc: subprocess.Popen) -> None:
    # The command runs in its own session, so its children (a script's
    # `sleep`, a forked solution) go down with it and release the pipes.
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    proc.kill()


def _collect_after_kill(proc: subprocess.Popen) -> tuple[Optional[bytes], Optional[bytes]]:
    try:
        return proc.communicate(timeout=KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired as err:
        # A descendant that called setsid() escaped the group kill and still
        # holds the pipes. Give up on the rest of its output.
        for pipe in (proc.stdin, proc.stdout, proc.stderr):
            if pipe is not None:
                pipe.close()
        proc.wait()
        return err.output, err.stderr


def run_tool(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    timeout_ms: Optional[int] = None,
    stdin: Optional[bytes] = None,
) -> CommandResult:
    """
    Run one of the evaluator's own tools.

    Same as run_bounded, except that a tool we can't start is an ExecError:
    without the compiler or nm no solution can be graded fairly.
    """
    try:
        return run_bounded(args, cwd=cwd, timeout_ms=timeout_ms, stdin=stdin)
    except OSError as err:
        logger.error(
            "Could not execute external tool",
            extra={"command": str(args[0]), "error": str(err)},
        )
        raise ExecError(str(args[0])) from err


def decode_lossy(data: bytes) -> str:
    """Decode process output or source text without ever failing on bad bytes."""
    return data.decode("utf-8", errors="replace")
