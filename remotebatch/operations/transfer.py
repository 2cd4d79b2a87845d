"""
Recursive tree transfers: download, upload and recursive remote removal.

Each walk starts in a remote directory, descends one level per
sub-directory and always ascends again before returning, on error paths
too, so callers pair every descent with exactly one ascent.
"""
import os
from typing import TYPE_CHECKING, Optional

from ..core.paths import basename, is_blank, join
from ..errors import InvalidPathError, NotADirectoryPathError, PathNotFoundError
from ..remote.base import DOT_ENTRIES, find_entry
from ..utils.logging import log, vlog

if TYPE_CHECKING:
    from ..core.session import RemoteSession


def download(session: "RemoteSession", work: str, name: str, dest: str,
             override: Optional[str] = None) -> int:
    """
    Copy *name* (or everything, when blank) from the current remote
    directory into the local directory *dest*; *override* renames the
    matched entry.  Returns the number of files written.
    """
    remote, local = session.remote, session.local
    result = 0
    dirs: list[str] = []
    entries = remote.list()
    vlog(f"Elements: {[e.name for e in entries]}")
    for entry in entries:
        if not (is_blank(name) or entry.name == name):
            continue
        target_name = entry.name if is_blank(name) or is_blank(override) else override
        if entry.is_dir:
            dirs.append(entry.name)
        elif entry.is_file:
            target = join(dest, target_name)
            with local.open_write(target) as fp:
                remote.get(entry.name, fp)
            log(f"Downloaded file {join(work, entry.name)} to {target}")
            result += 1

    if not is_blank(name) and not dirs and result == 0:
        raise PathNotFoundError(name, f"Directory or file {name} does not exist.")

    for d in dirs:
        if d in DOT_ENTRIES:
            vlog("Skipping dot directories")
            continue
        directory = join(dest, d if is_blank(name) or is_blank(override) else override)
        remote.cwd(d)
        try:
            if local.exists(directory):
                if not local.is_dir(directory):
                    raise NotADirectoryPathError(directory, f"Path {directory} is not a directory.")
            else:
                local.make_dir(directory)
            result += download(session, join(work, d), "", directory)
        finally:
            remote.cdup()
    return result


def _transfer(session: "RemoteSession", append: bool, path: str, work: str, name: str):
    with session.local.open_read(path) as fp:
        if append:
            session.remote.append(fp, name)
        else:
            session.remote.put(fp, name)
    log(f"{'Appended' if append else 'Uploaded'} file {path} to {join(work, name)}")


def upload(session: "RemoteSession", append: bool, path: str, work: str,
           name: Optional[str] = None) -> int:
    """
    Copy the local file or directory *path* into the current remote
    directory as *name*.  A local directory with a blank *name* has its
    children copied straight into the current directory.  Returns the
    number of files transferred.
    """
    remote, local = session.remote, session.local
    if local.is_file(path):
        _transfer(session, append, path, work, name or basename(path))
        return 1
    if not local.is_dir(path):
        raise InvalidPathError(path, f"Path {path} is invalid.")

    result = 0
    descend = not is_blank(name)
    if descend:
        create = True
        entry = find_entry(remote.list(), name)
        if entry is not None:
            if entry.is_dir:
                if append:
                    create = False
                else:
                    remove_directory(session, name, join(work, name))
            else:
                remote.delete(name)
        if create:
            remote.mkdir(name)
        work = join(work, name)
        remote.cwd(name)
    try:
        for child in local.list_dir(path):
            result += upload(session, append, os.path.join(path, child), work, child)
    finally:
        if descend:
            remote.cdup()
    return result


def remove_directory(session: "RemoteSession", name: str, path: str) -> int:
    """
    Delete the remote directory *name* (a child of the cursor) and
    everything below it.  Returns the number of files deleted; directories
    are not counted.
    """
    remote = session.remote
    result = 0
    remote.cwd(name)
    try:
        for entry in remote.list():
            if entry.name in DOT_ENTRIES:
                continue
            if entry.is_dir:
                result += remove_directory(session, entry.name, join(path, entry.name))
            else:
                remote.delete(entry.name)
                log(f"Deleted file {join(path, entry.name)}")
                result += 1
    finally:
        remote.cdup()
    remote.rmdir(name)
    log(f"Removed directory {path}")
    return result
