"""
Navigator: moves the remote cursor to a path and knows how to move it back.

The remote store has no absolute addressing for most operations, so every
command first walks the cursor to the directory it works in and afterwards
walks it back.  A move is described by a NavigationReceipt whose ``back``
token is either a hop count (cdup that many times) or the absolute path the
cursor was at before the move started with a jump to the root (or with '..').
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Union

from ..errors import InvalidPathError, NotADirectoryPathError, PathNotFoundError
from ..remote.base import RemoteDirectoryService, find_entry
from ..utils.logging import vlog, warn
from .paths import depth, is_blank, split

BackToken = Union[int, str]


@dataclass
class NavigationReceipt:
    success: bool
    back: BackToken = 0


class Navigator:
    def __init__(self, remote: RemoteDirectoryService):
        self.remote = remote

    def combine(self, segments: Sequence[str]) -> list[str]:
        """
        Rewrite an absolute target relative to the cursor when both share
        more than the root, e.g. /a/b/x seen from /a/b/c/d becomes ../../x.
        """
        segments = list(segments)
        if len(segments) > 1 and segments[0] == "":
            current = self.remote.pwd().rstrip("/").split("/")
            length = len(current)
            if length > 1 and current[0] == "":
                shared = min(len(segments), length)
                index = shared
                for i in range(1, shared):
                    if segments[i] != current[i]:
                        index = i
                        break
                if index > 1:
                    return [".."] * (length - index) + segments[index:]
        return segments

    def root(self) -> str:
        """Move the cursor to the filesystem root; return where it was."""
        current = self.remote.pwd()
        for _ in range(depth(current)):
            self.remote.cdup()
        return current

    def cd(self, path: Union[str, Sequence[str], None], create: bool = True,
           fail_on_missing: bool = True) -> NavigationReceipt:
        """
        Walk the cursor along *path* (a path string or pre-split segments).

        A missing directory is created when *create* is set, raises
        PathNotFoundError when *fail_on_missing* is set, and otherwise ends
        the walk with ``success=False``; the caller still owns the receipt.
        On any error the cursor is moved back before the error propagates.
        """
        if isinstance(path, str):
            label = path
            segments = split(path, False)
        else:
            segments = list(path or [])
            label = "/".join(segments)
        segments = self.combine(segments)

        back: BackToken = 0
        try:
            for i, p in enumerate(segments):
                if is_blank(p):
                    if i != 0:
                        raise InvalidPathError(label)
                    back = self.root()
                elif p == ".":
                    if i != 0:
                        raise InvalidPathError(label)
                elif p == "..":
                    if back == 0:
                        back = self.remote.pwd()
                    elif isinstance(back, int):
                        back -= 1
                    self.remote.cdup()
                else:
                    entry = find_entry(self.remote.list(), p)
                    if entry is None:
                        if create:
                            self.remote.mkdir(p)
                            vlog(f"Created directory {p}")
                        elif fail_on_missing:
                            raise PathNotFoundError(label)
                        else:
                            warn(f"The path {label} does not exist.")
                            return NavigationReceipt(False, back)
                    elif not entry.is_dir:
                        raise NotADirectoryPathError(label)
                    self.remote.cwd(p)
                    if isinstance(back, int):
                        back += 1
        except Exception as exc:
            try:
                self.back(back)
            except Exception as restore_exc:
                warn(f"Could not restore the working directory: {restore_exc}")
            raise exc
        return NavigationReceipt(True, back)

    def back(self, token: Optional[BackToken]):
        """Undo a cd() given its receipt's back token."""
        if token is None:
            return
        if isinstance(token, str):
            segments = self.combine((token.rstrip("/") or "/").split("/"))
            for i, p in enumerate(segments):
                if is_blank(p):
                    if i == 0:
                        self.root()
                    else:
                        break
                elif p == ".":
                    continue
                elif p == "..":
                    self.remote.cdup()
                else:
                    self.remote.cwd(p)
        else:
            for _ in range(token):
                self.remote.cdup()

    @contextmanager
    def visit(self, path: Union[str, Sequence[str], None], create: bool = True,
              fail_on_missing: bool = True) -> Iterator[NavigationReceipt]:
        """cd() for the duration of a with-block; always moves back on exit."""
        receipt = self.cd(path, create, fail_on_missing)
        try:
            yield receipt
        finally:
            self.back(receipt.back)
