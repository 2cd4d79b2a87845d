"""Utilities (logging, local storage)"""
from .logging import log, vlog, warn, error, set_verbose
from .local_storage import LocalStorage

__all__ = [
    "log", "vlog", "warn", "error", "set_verbose",
    "LocalStorage",
]
