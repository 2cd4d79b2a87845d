"""Operations (recursive download, upload, removal)"""
from .transfer import download, upload, remove_directory

__all__ = ["download", "upload", "remove_directory"]
