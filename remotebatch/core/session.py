"""
RemoteSession: the operations behind the ten batch commands
"""
from __future__ import annotations

import json
from typing import Optional

from ..errors import InvalidPathError
from ..operations.transfer import download, remove_directory, upload
from ..remote.base import RemoteDirectoryService, find_entry
from ..utils.local_storage import LocalStorage
from ..utils.logging import log, vlog, warn
from .navigator import Navigator
from .paths import basename, dirname, is_blank, split


class RemoteSession:
    """
    One remote connection plus the local side of transfers.

    Every operation leaves the cursor where it found it, except cd().
    """

    def __init__(self, remote: RemoteDirectoryService, local: Optional[LocalStorage] = None,
                 navigator: Optional[Navigator] = None):
        self.remote = remote
        self.local = local or LocalStorage()
        self.navigator = navigator or Navigator(remote)

    # ── listing / cursor ───────────────────────────────────────────────────

    def ls(self, path: Optional[str] = None) -> str:
        log("Listing")
        entries = self.remote.list(path)
        for entry in entries:
            vlog(json.dumps(entry.to_dict()))
        return json.dumps([e.to_dict() for e in entries])

    def cd(self, path: str) -> bool:
        self.navigator.cd(path, create=False)
        log(f"Changed working directory to {path}")
        return True

    def pwd(self) -> str:
        path = self.remote.pwd()
        log(f"Current directory {path}")
        return path

    def mkdir(self, path: str) -> bool:
        with self.navigator.visit(path, create=True):
            pass
        log(f"Created directory {path}")
        return True

    def rename(self, old: str, new: str) -> bool:
        self.remote.rename(old, new)
        log(f"Renamed {old} to {new}")
        return True

    # ── transfers ──────────────────────────────────────────────────────────

    def get(self, path: str, dest: Optional[str] = None) -> int:
        """Download a remote file or directory tree; returns files written."""
        override = ""
        if dest is None:
            dest = "."
        elif dest.endswith("/"):
            dest = dest[:-1]
        else:
            override = basename(dest)
            dest = dirname(dest)

        segments = split(path, True)
        if not segments:
            raise InvalidPathError(path, f"Path {path} is invalid.")
        name = segments[-1]
        with self.navigator.visit(segments[:-1], create=False):
            work = self.remote.pwd()
            return download(self, work, name, dest, override)

    def _put(self, append: bool, path: str, dest: Optional[str] = None) -> int:
        if is_blank(dest):
            work = ""
            name = "" if path.endswith("/") else basename(path)
        elif dest.endswith("/"):
            work = dest[:-1] if len(dest) > 1 else dest
            name = "" if path.endswith("/") else basename(path)
        else:
            work = dirname(dest)
            name = basename(dest)

        if is_blank(work):
            return upload(self, append, path, work, name)
        with self.navigator.visit(work, create=True):
            return upload(self, append, path, work, name)

    def put(self, path: str, dest: Optional[str] = None) -> int:
        return self._put(False, path, dest)

    def append(self, path: str, dest: Optional[str] = None) -> int:
        return self._put(True, path, dest)

    # ── removal ────────────────────────────────────────────────────────────

    def _split_target(self, path: str) -> list[str]:
        segments = split(path, False)
        if not segments or segments[-1] == "":
            raise InvalidPathError(path)
        return segments

    def delete(self, path: str) -> int:
        """
        Delete a remote file or directory tree.  A missing target (or
        missing parent) is a warning, not an error; returns files deleted.
        """
        segments = self._split_target(path)
        name = segments[-1]
        result = 0
        with self.navigator.visit(segments[:-1], create=False, fail_on_missing=False) as receipt:
            if receipt.success:
                entry = find_entry(self.remote.list(), name)
                if entry is None:
                    warn(f"The path {path} does not exist.")
                elif entry.is_dir:
                    result += remove_directory(self, name, "/".join(segments))
                    log(f"Deleted directory {path}")
                else:
                    self.remote.delete(name)
                    log(f"Deleted file {path}")
                    result += 1
        return result

    def rmdir(self, path: str) -> int:
        """Remove a remote directory tree; returns files deleted."""
        segments = self._split_target(path)
        with self.navigator.visit(segments[:-1], create=False):
            return remove_directory(self, segments[-1], "/".join(segments))
