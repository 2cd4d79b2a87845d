"""
SFTP-backed remote directory service with keep-alive
"""
from __future__ import annotations

import shutil
import stat
from datetime import datetime, timezone
from typing import BinaryIO, Optional

import paramiko

from .. import config as _cfg
from ..utils.logging import log, vlog
from .base import DIRECTORY, FILE, SYMLINK, DirectoryEntry


def _entry_from_attr(attr: paramiko.SFTPAttributes) -> DirectoryEntry:
    mode = attr.st_mode or 0
    if stat.S_ISDIR(mode):
        kind = DIRECTORY
    elif stat.S_ISLNK(mode):
        kind = SYMLINK
    else:
        kind = FILE
    modified = None
    if attr.st_mtime is not None:
        modified = datetime.fromtimestamp(attr.st_mtime, tz=timezone.utc).isoformat()
    return DirectoryEntry(attr.filename, kind, attr.st_size, modified)


class SFTPDirectoryService:
    """
    Wraps paramiko SSHClient + SFTPClient.
    The cursor is the SFTP client's emulated working directory; it is pinned
    to an absolute path right after connecting so pwd() never returns None.
    Sends SSH keep-alives to reduce mid-transfer drops.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 user: Optional[str] = None, key_path: Optional[str] = None,
                 password: Optional[str] = None, remote_root: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.host = host or _cfg.HOST
        self.port = port or _cfg.PORT
        self.user = user or _cfg.USER
        self.key_path = key_path if key_path is not None else _cfg.KEY_PATH
        self.password = password if password is not None else _cfg.PASSWORD
        self.remote_root = remote_root if remote_root is not None else _cfg.REMOTE_ROOT
        self.timeout = timeout or _cfg.TIMEOUT
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    # ── connection ─────────────────────────────────────────────────────────

    def connect(self):
        if self._ssh:
            return

        log(f"[SFTP] connecting to {self.user}@{self.host}:{self.port} …")
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        kw: dict = dict(hostname=self.host, port=self.port, username=self.user,
                        timeout=self.timeout, banner_timeout=30, auth_timeout=30)
        if self.key_path:
            kw["key_filename"] = self.key_path
        if self.password:
            kw["password"] = self.password

        client.connect(**kw)

        # Keep-alive: send a NOP every 30s
        transport = client.get_transport()
        transport.set_keepalive(30)

        self._ssh = client
        self._sftp = client.open_sftp()
        self._sftp.chdir(self.remote_root or ".")
        log(f"[SFTP] connected ✓ ({self._sftp.getcwd()})")

    def _close_quietly(self):
        try:
            if self._sftp:
                self._sftp.close()
        except Exception:
            pass
        try:
            if self._ssh:
                self._ssh.close()
        except Exception:
            pass
        self._ssh = None
        self._sftp = None

    def disconnect(self):
        self._close_quietly()
        log("[SFTP] disconnected.")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *exc):
        self.disconnect()

    @property
    def sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise ConnectionError("SFTP session is not connected")
        return self._sftp

    # ── directory service ──────────────────────────────────────────────────

    def list(self, path: Optional[str] = None) -> list[DirectoryEntry]:
        return [_entry_from_attr(a) for a in self.sftp.listdir_attr(path or ".")]

    def get(self, name: str, fp: BinaryIO):
        self.sftp.getfo(name, fp)

    def put(self, fp: BinaryIO, name: str):
        self.sftp.putfo(fp, name)

    def append(self, fp: BinaryIO, name: str):
        with self.sftp.open(name, "ab") as remote:
            shutil.copyfileobj(fp, remote)

    def delete(self, name: str):
        self.sftp.remove(name)

    def rename(self, old: str, new: str):
        self.sftp.rename(old, new)

    def mkdir(self, name: str):
        self.sftp.mkdir(name)

    def rmdir(self, name: str):
        self.sftp.rmdir(name)

    def cwd(self, name: str):
        self.sftp.chdir(name)
        vlog(f"[SFTP] cwd {self.sftp.getcwd()}")

    def cdup(self):
        self.sftp.chdir("..")
        vlog(f"[SFTP] cwd {self.sftp.getcwd()}")

    def pwd(self) -> str:
        return self.sftp.getcwd()
