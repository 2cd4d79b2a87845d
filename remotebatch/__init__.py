"""
remotebatch  —  scripted batches of commands against a remote directory store
"""
from .core.dispatcher import Command, TransferOutcome, bind, run, tokenize
from .core.navigator import NavigationReceipt, Navigator
from .core.session import RemoteSession
from .errors import (
    CommandError,
    InvalidPathError,
    NotADirectoryPathError,
    PathNotFoundError,
    RemoteBatchError,
    RemoteStateError,
    UnsupportedCommandError,
)

__version__ = "0.1.0"

__all__ = [
    "Command", "TransferOutcome", "bind", "run", "tokenize",
    "NavigationReceipt", "Navigator",
    "RemoteSession",
    "CommandError", "InvalidPathError", "NotADirectoryPathError", "PathNotFoundError",
    "RemoteBatchError", "RemoteStateError", "UnsupportedCommandError",
]
