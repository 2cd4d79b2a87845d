"""
Remote directory service protocol.

Every operation is relative to the connection's current working directory
(the cursor).  Both the SFTP and the FTP backends implement this interface,
and so does the in-memory fake used by the tests.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterable, Optional, Protocol, runtime_checkable

DIRECTORY = "d"
FILE = "-"
SYMLINK = "l"

# Listing markers for the listed directory itself and its parent.
DOT_ENTRIES = (".", "..")


@dataclass(frozen=True)
class DirectoryEntry:
    """One record of a remote listing."""

    name: str
    kind: str
    size: Optional[int] = None
    modified: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.kind == DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind == FILE

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.kind, "size": self.size, "date": self.modified}


def find_entry(entries: Iterable[DirectoryEntry], name: str) -> Optional[DirectoryEntry]:
    return next((e for e in entries if e.name == name), None)


@runtime_checkable
class RemoteDirectoryService(Protocol):
    """Capabilities consumed from a remote store with a single cursor."""

    def connect(self) -> None:
        ...

    def disconnect(self) -> None:
        ...

    def list(self, path: Optional[str] = None) -> list[DirectoryEntry]:
        """List *path*, or the current directory when omitted."""
        ...

    def get(self, name: str, fp: BinaryIO) -> None:
        """Copy the remote file *name* into the writable binary stream *fp*."""
        ...

    def put(self, fp: BinaryIO, name: str) -> None:
        """Store the readable binary stream *fp* as *name*, replacing it."""
        ...

    def append(self, fp: BinaryIO, name: str) -> None:
        """Append the readable binary stream *fp* to *name*."""
        ...

    def delete(self, name: str) -> None:
        ...

    def rename(self, old: str, new: str) -> None:
        ...

    def mkdir(self, name: str) -> None:
        ...

    def rmdir(self, name: str) -> None:
        ...

    def cwd(self, name: str) -> None:
        """Move the cursor into *name*."""
        ...

    def cdup(self) -> None:
        """Move the cursor to its parent."""
        ...

    def pwd(self) -> str:
        """Absolute path of the cursor."""
        ...
