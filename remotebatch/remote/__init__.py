"""Remote directory services (SFTP, FTP)"""
from .. import config as _cfg
from .base import DirectoryEntry, RemoteDirectoryService, find_entry
from .ftp import FTPDirectoryService
from .sftp import SFTPDirectoryService

__all__ = [
    "DirectoryEntry", "RemoteDirectoryService", "find_entry",
    "FTPDirectoryService", "SFTPDirectoryService",
    "open_service",
]


def open_service(protocol: str = None) -> RemoteDirectoryService:
    """Build the service for *protocol* (default: config.PROTOCOL); not yet connected."""
    protocol = (protocol or _cfg.PROTOCOL).lower()
    if protocol == "sftp":
        return SFTPDirectoryService()
    if protocol in ("ftp", "ftps"):
        return FTPDirectoryService(secure=protocol == "ftps")
    raise ValueError(f"unsupported protocol: {protocol!r} (expected sftp, ftp or ftps)")
