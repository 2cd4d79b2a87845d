"""
Command dispatcher: tokenizes command lines, binds them to session
operations and runs a batch strictly in order.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, TextIO

from ..errors import UnsupportedCommandError
from ..utils.logging import error, log
from .session import RemoteSession

# A bare word with embedded quoted parts, a bare word, or a quoted string.
_TOKEN_RE = re.compile(r"""([^\s'"]([^\s'"]*(['"])(.*?)\3)+[^\s'"]*)|[^\s'"]+|(['"])(.*?)\5""", re.S)
_QUOTED_RE = re.compile(r"""(['"])(.*?)\1""", re.S)

# command name -> (min args, max args), not counting the name itself
ARITY = {
    "ls": (0, 1),
    "get": (1, 2),
    "put": (1, 2),
    "append": (1, 2),
    "rename": (2, 2),
    "delete": (1, 1),
    "cd": (1, 1),
    "mkdir": (1, 1),
    "rmdir": (1, 1),
    "pwd": (0, 0),
}


def tokenize(line: str) -> list[str]:
    """Split *line* shell-style; quotes group words and are not kept."""
    tokens = []
    for m in _TOKEN_RE.finditer(line):
        if m.group(1) is not None:
            tokens.append(_QUOTED_RE.sub(r"\2", m.group(1)))
        elif m.group(6) is not None:
            tokens.append(m.group(6))
        else:
            tokens.append(m.group(0))
    return tokens


@dataclass(frozen=True)
class Command:
    raw: str
    argv: tuple
    operation: str
    args: tuple

    def execute(self, session: RemoteSession) -> Any:
        return getattr(session, self.operation)(*self.args)


def bind(line: str) -> Command:
    """Parse one command line; raises UnsupportedCommandError."""
    argv = tokenize(line)
    if not argv or argv[0] not in ARITY:
        raise UnsupportedCommandError(line)
    low, high = ARITY[argv[0]]
    if not low <= len(argv) - 1 <= high:
        raise UnsupportedCommandError(line)
    return Command(raw=line, argv=tuple(argv), operation=argv[0], args=tuple(argv[1:]))


@dataclass
class TransferOutcome:
    succeeded: int = 0
    message: Optional[str] = None
    outputs: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        result: dict = {"succeed": self.succeeded, "message": self.message}
        for index, value in sorted(self.outputs.items()):
            result[f"output_{index}"] = value
        return result


def run(session: RemoteSession, lines: Iterable[str], throwing: bool = True) -> TransferOutcome:
    """
    Execute *lines* one after another.  Every line is bound before the
    first one runs.  The first failure ends the batch: it propagates when
    *throwing* is set, otherwise its message is captured in the outcome.
    """
    commands = [bind(line) for line in lines]
    log("Executing commands")
    outcome = TransferOutcome()
    try:
        for index, command in enumerate(commands):
            log(f"Execute '{command.raw}'")
            outcome.outputs[index] = command.execute(session)
            outcome.succeeded += 1
    except Exception as exc:
        if throwing:
            raise
        outcome.message = str(exc)
        error(outcome.message)
    return outcome


def read_commands(stream: TextIO) -> list[str]:
    """Command lines from a file: blank lines and '#' comments are skipped."""
    lines = []
    for line in stream:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            lines.append(stripped)
    return lines
