"""Core functionality"""
from .navigator import Navigator, NavigationReceipt
from .session import RemoteSession
from .dispatcher import run, bind, tokenize

__all__ = ["Navigator", "NavigationReceipt", "RemoteSession", "run", "bind", "tokenize"]
