"""
Local file primitives used by the transfer engine
"""
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from .. import config as _cfg

PathLike = Union[str, Path]


class LocalStorage:
    """Local side of a transfer; relative paths resolve against *root*."""

    def __init__(self, root: Optional[PathLike] = None):
        self.root = Path(root) if root is not None else Path(_cfg.LOCAL_ROOT)

    def resolve(self, path: PathLike) -> Path:
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.root / p

    def exists(self, path: PathLike) -> bool:
        return self.resolve(path).exists()

    def is_file(self, path: PathLike) -> bool:
        return self.resolve(path).is_file()

    def is_dir(self, path: PathLike) -> bool:
        return self.resolve(path).is_dir()

    def list_dir(self, path: PathLike) -> list[str]:
        """Child names of a local directory, sorted."""
        return sorted(child.name for child in self.resolve(path).iterdir())

    def make_dir(self, path: PathLike):
        self.resolve(path).mkdir()

    def open_read(self, path: PathLike) -> BinaryIO:
        return open(self.resolve(path), "rb")

    @contextmanager
    def open_write(self, path: PathLike) -> Iterator[BinaryIO]:
        """
        Write through a temporary sibling file; *path* is only replaced once
        the block finishes, so a failed transfer leaves it untouched.
        """
        target = self.resolve(path)
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as fp:
                yield fp
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
