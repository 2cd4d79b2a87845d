"""
Path model: parsing and validation of '/'-separated remote path strings.

A path is split into segments; a leading blank segment marks an absolute
path and a trailing blank segment marks "this is a directory".  '.' is only
accepted as the very first segment and '..' only before any other segment
has been seen, so the parent of every accepted path is unambiguous.
"""
from typing import Optional

from ..errors import InvalidPathError


def is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def split(path: str, allow_trailing_blank: bool = True) -> list[str]:
    """
    Split *path* on '/' and validate the segments.

    The leading '.' is dropped.  A trailing blank segment is kept when
    *allow_trailing_blank* is true and silently dropped otherwise.
    Raises InvalidPathError for anything else that is blank or misplaced.
    """
    parts = path.split("/")
    last = len(parts) - 1
    result: list[str] = []
    seen = False
    for i, p in enumerate(parts):
        if is_blank(p):
            if i > 0:
                if i != last:
                    raise InvalidPathError(path)
                if not allow_trailing_blank:
                    break
            seen = True
        elif p == ".":
            if i > 0:
                raise InvalidPathError(path)
            seen = True
            continue
        elif p == "..":
            if seen:
                raise InvalidPathError(path)
        else:
            seen = True
        result.append(p)
    return result


def dirname(path: Optional[str]) -> str:
    """Everything but the last segment; a path ending in '/' is its own dirname."""
    if is_blank(path) or path == ".":
        return ""
    if path.endswith("/"):
        return path
    return "/".join(path.split("/")[:-1])


def basename(path: Optional[str]) -> str:
    """The last segment, or '' when the path names a directory."""
    if is_blank(path) or path == "." or path.endswith("/"):
        return ""
    return path.split("/")[-1]


def join(directory: Optional[str], name: str) -> str:
    if is_blank(directory):
        return name
    return f"{directory.rstrip('/')}/{name}"


def depth(absolute: str) -> int:
    """Number of levels between *absolute* and the filesystem root."""
    return sum(1 for p in absolute.split("/") if not is_blank(p))
