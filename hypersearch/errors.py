from __future__ import annotations


class HypersearchError(Exception):
    """Base class for every fatal condition of a search run."""


class UsageError(HypersearchError):
    pass


class SpawnError(HypersearchError):
    pass


class SubprocessFailedError(HypersearchError):
    def __init__(self, command: list[str], status: int, lines: list[str]):
        self.command = command
        self.status = status
        self.lines = lines
        output = "\n".join(lines)
        super().__init__(f"command failed with status {status}: {' '.join(command)}\n{output}")


class LossParseError(HypersearchError):
    def __init__(self, command: list[str], lines: list[str]):
        self.command = command
        self.lines = lines
        output = "\n".join(lines)
        super().__init__(
            f"no 'average loss = <number>' line in output of: {' '.join(command)}\n"
            f"--- output ---\n{output}"
        )
