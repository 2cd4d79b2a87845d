"""
FTP-backed remote directory service (plain or explicit TLS)
"""
from __future__ import annotations

import ftplib
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from .. import config as _cfg
from ..utils.logging import log, vlog
from .base import DIRECTORY, FILE, SYMLINK, DirectoryEntry

# MLSD "type" facts; cdir/pdir are the listed directory and its parent.
_DIRECTORY_TYPES = ("dir", "cdir", "pdir")
# cdir/pdir names may be full paths, so they are listed under the dot names.
_DOT_NAMES = {"cdir": ".", "pdir": ".."}


def _entry_from_facts(name: str, facts: dict) -> DirectoryEntry:
    kind_fact = facts.get("type", "file").lower()
    name = _DOT_NAMES.get(kind_fact, name)
    if kind_fact in _DIRECTORY_TYPES:
        kind = DIRECTORY
    elif kind_fact.startswith("os.unix=slink"):
        kind = SYMLINK
    else:
        kind = FILE
    size = facts.get("size")
    modified = facts.get("modify")
    if modified:
        # YYYYMMDDHHMMSS[.sss], always UTC
        try:
            modified = datetime.strptime(modified[:14], "%Y%m%d%H%M%S") \
                .replace(tzinfo=timezone.utc).isoformat()
        except ValueError:
            pass
    return DirectoryEntry(name, kind, int(size) if size is not None else None, modified)


class FTPDirectoryService:
    """
    Wraps ftplib.FTP (or FTP_TLS when *secure* is set).
    The cursor is the server-side working directory of the control connection.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 user: Optional[str] = None, password: Optional[str] = None,
                 remote_root: Optional[str] = None, timeout: Optional[int] = None,
                 passive: Optional[bool] = None, secure: bool = False):
        self.host = host or _cfg.HOST
        self.port = port or _cfg.PORT
        self.user = user or _cfg.USER
        self.password = password if password is not None else _cfg.PASSWORD
        self.remote_root = remote_root if remote_root is not None else _cfg.REMOTE_ROOT
        self.timeout = timeout or _cfg.TIMEOUT
        self.passive = _cfg.PASSIVE if passive is None else passive
        self.secure = secure
        self._ftp: Optional[ftplib.FTP] = None

    # ── connection ─────────────────────────────────────────────────────────

    def connect(self):
        if self._ftp:
            return

        scheme = "FTPS" if self.secure else "FTP"
        log(f"[{scheme}] connecting to {self.user}@{self.host}:{self.port} …")
        client = ftplib.FTP_TLS(timeout=self.timeout) if self.secure else ftplib.FTP(timeout=self.timeout)
        client.connect(self.host, self.port)
        client.login(self.user or "anonymous", self.password or "")
        if self.secure:
            client.prot_p()
        client.set_pasv(self.passive)
        if self.remote_root:
            client.cwd(self.remote_root)

        self._ftp = client
        log(f"[{scheme}] connected ✓ ({client.pwd()})")

    def disconnect(self):
        if self._ftp:
            try:
                self._ftp.quit()
            except (OSError, EOFError, ftplib.Error):
                self._ftp.close()
        self._ftp = None
        log("[FTP] disconnected.")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *exc):
        self.disconnect()

    @property
    def ftp(self) -> ftplib.FTP:
        if self._ftp is None:
            raise ConnectionError("FTP session is not connected")
        return self._ftp

    # ── directory service ──────────────────────────────────────────────────

    def list(self, path: Optional[str] = None) -> list[DirectoryEntry]:
        facts = ["type", "size", "modify"]
        return [_entry_from_facts(name, f) for name, f in self.ftp.mlsd(path or "", facts)]

    def get(self, name: str, fp: BinaryIO):
        self.ftp.retrbinary(f"RETR {name}", fp.write)

    def put(self, fp: BinaryIO, name: str):
        self.ftp.storbinary(f"STOR {name}", fp)

    def append(self, fp: BinaryIO, name: str):
        self.ftp.storbinary(f"APPE {name}", fp)

    def delete(self, name: str):
        self.ftp.delete(name)

    def rename(self, old: str, new: str):
        self.ftp.rename(old, new)

    def mkdir(self, name: str):
        self.ftp.mkd(name)

    def rmdir(self, name: str):
        self.ftp.rmd(name)

    def cwd(self, name: str):
        self.ftp.cwd(name)
        vlog(f"[FTP] cwd {name}")

    def cdup(self):
        # ftplib sends CDUP for '..'
        self.ftp.cwd("..")
        vlog("[FTP] cdup")

    def pwd(self) -> str:
        return self.ftp.pwd()
