"""
Run one evaluation command as a child process.

stdout and stderr are merged into a single pipe so the captured lines keep the
order in which the child emitted them.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass, field
from typing import IO, Optional, Sequence

logger = logging.getLogger(__name__)

FAILED_STATUS = -1


@dataclass(frozen=True)
class ProcessResult:
    status: int
    lines: list[str] = field(default_factory=list)
    timed_out: bool = False

    def __iter__(self):
        # allows `status, lines = run(...)`
        return iter((self.status, self.lines))


def _split(output: Optional[str]) -> list[str]:
    if not output:
        return []
    return output.splitlines()


def _kill(proc: subprocess.Popen) -> None:
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        proc.kill()


def _stream(proc: subprocess.Popen, progress: IO[str]) -> list[str]:
    assert proc.stdout is not None
    lines = []
    for line in proc.stdout:
        lines.append(line.rstrip("\r\n"))
        progress.write(".")
        progress.flush()
    if lines:
        progress.write("\n")
        progress.flush()
    return lines


def run(
    tokens: Sequence[str],
    timeout: Optional[float] = None,
    progress: Optional[IO[str]] = None,
) -> ProcessResult:
    """
    Spawn ``tokens`` and collect its merged output.

    With a positive ``timeout`` the wait is bounded: on expiry the child's
    process group is killed and the partial output is returned with status -1
    behind a leading ``timeout after ...`` line. Without one, the call blocks
    until the child exits and writes one progress dot per received line.
    """
    cmd = list(tokens)
    bounded = timeout is not None and timeout > 0
    logger.debug("spawning: %s", " ".join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            bufsize=1,
            start_new_session=bounded and os.name == "posix",
        )
    except OSError as e:
        return ProcessResult(FAILED_STATUS, [f"cannot run {cmd[0]}: {e}"])

    with proc:
        if not bounded:
            lines = _stream(proc, progress or sys.stderr)
            return ProcessResult(proc.wait(), lines)

        try:
            out, _ = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill(proc)
            out, _ = proc.communicate()
            logger.warning("timeout after %ss, killed: %s", timeout, " ".join(cmd))
            lines = [f"timeout after {timeout}s: {' '.join(cmd)}"] + _split(out)
            return ProcessResult(FAILED_STATUS, lines, timed_out=True)

        return ProcessResult(proc.returncode, _split(out))
