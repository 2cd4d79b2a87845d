"""
Exceptions raised by remotebatch

Transport failures (OSError, paramiko.SSHException, ftplib.Error) are not
wrapped: they reach the caller exactly as the transport raised them.
"""


class RemoteBatchError(Exception):
    """Base class for every error raised by remotebatch itself."""


# ── parse errors (raised before any remote call) ─────────────────────────────

class CommandError(RemoteBatchError):
    """The input cannot be turned into a valid operation."""


class InvalidPathError(CommandError):
    def __init__(self, path: str, message: str = None):
        self.path = path
        super().__init__(message or f"The path {path} is invalid.")


class UnsupportedCommandError(CommandError):
    def __init__(self, line: str):
        self.line = line
        super().__init__(f'Unsupported command "{line}"')


# ── state errors (raised mid-operation) ──────────────────────────────────────

class RemoteStateError(RemoteBatchError):
    """The remote or local tree is not in the shape an operation needs."""


class PathNotFoundError(RemoteStateError):
    def __init__(self, path: str, message: str = None):
        self.path = path
        super().__init__(message or f"The path {path} does not exist.")


class NotADirectoryPathError(RemoteStateError):
    def __init__(self, path: str, message: str = None):
        self.path = path
        super().__init__(message or f"The path {path} is not a directory.")
