"""Backing filesystem rooted at a real directory.

OSFS maps virtual paths onto a directory of the host filesystem.
Virtual paths are cleaned before they are joined to the root, so ``..``
cannot escape it. Symbolic links are never followed by ``stat``, which
keeps recursive removal from descending into link targets.

OSFS does not implement RemoveAller: recursive removal walks the tree
one entry at a time through the adapter.
"""

import io
import logging
import os
from datetime import datetime
from pathlib import Path

from httpfs.errors import already_exists, is_a_directory, not_a_directory
from httpfs.filesystem.base import File, Filer
from httpfs.filesystem.models import EntryInfo, base_name, clean_path

logger = logging.getLogger(__name__)


def _scan(real_path: str) -> list[EntryInfo]:
    """List a host directory sorted by name without following links."""
    with os.scandir(real_path) as it:
        entries = [
            EntryInfo.from_stat_result(entry.name, entry.stat(follow_symlinks=False))
            for entry in it
        ]
    entries.sort(key=lambda e: e.name)
    return entries


def _file_mode(flags: int) -> str:
    """Translate os.O_* access flags into an io.FileIO mode."""
    access = flags & os.O_ACCMODE
    append = bool(flags & os.O_APPEND)
    if access == os.O_RDONLY:
        return "rb"
    if access == os.O_WRONLY:
        return "ab" if append else "wb"
    return "a+b" if append else "r+b"


class OSFile(File):
    """Handle to an open host file or directory.

    Directories have no underlying file object; their entries are
    snapshotted on the first ``readdir`` call.
    """

    def __init__(self, path: str, real_path: str, raw: io.FileIO | None) -> None:
        self._path = path
        self._real_path = real_path
        self._raw = raw
        self._entries: list[EntryInfo] | None = None
        self._entry_pos = 0
        self._closed = False

    @property
    def name(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed file: {self._path}")

    def _file(self) -> io.FileIO:
        self._check_open()
        if self._raw is None:
            raise is_a_directory(self._path)
        return self._raw

    def read(self, size: int = -1) -> bytes:
        raw = self._file()
        if size < 0:
            return raw.readall()
        return raw.read(size) or b""

    def write(self, data: bytes) -> int:
        return self._file().write(data) or 0

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._check_open()
        if self._raw is None:
            return 0
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        self._check_open()
        if self._raw is None:
            return 0
        return self._raw.tell()

    def readdir(self, n: int = 0) -> list[EntryInfo]:
        self._check_open()
        if self._raw is not None:
            raise not_a_directory(self._path)
        if self._entries is None:
            self._entries = _scan(self._real_path)
        remaining = self._entries[self._entry_pos :]
        if n > 0:
            remaining = remaining[:n]
        self._entry_pos += len(remaining)
        return remaining

    def stat(self) -> EntryInfo:
        self._check_open()
        if self._raw is None:
            st = os.stat(self._real_path)
        else:
            st = os.fstat(self._raw.fileno())
        return EntryInfo.from_stat_result(base_name(self._path), st)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._raw is not None:
            self._raw.close()


class OSFS(Filer):
    """Filesystem view of a host directory.

    Example:
        >>> fs = OSFS("/srv/www")
        >>> fs.stat("/index.html").size
        1024
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize the view.

        Args:
            root: Host directory that becomes the virtual root.

        Raises:
            FileNotFoundError: If the root does not exist.
            NotADirectoryError: If the root is not a directory.
        """
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"Root directory not found: {resolved}")
        if not resolved.is_dir():
            raise NotADirectoryError(f"Root is not a directory: {resolved}")
        self._root = resolved

    @property
    def root(self) -> Path:
        """Host directory backing the virtual root."""
        return self._root

    def _real(self, path: str) -> str:
        relative = clean_path(path).lstrip("/")
        return str(self._root / relative) if relative else str(self._root)

    def open_file(self, path: str, flags: int, perm: int) -> OSFile:
        real = self._real(path)
        cleaned = clean_path(path)
        if os.path.isdir(real):
            if flags & os.O_CREAT and flags & os.O_EXCL:
                raise already_exists(path)
            access = flags & os.O_ACCMODE
            if access != os.O_RDONLY or flags & (os.O_TRUNC | os.O_APPEND):
                raise is_a_directory(path)
            return OSFile(cleaned, real, None)

        fd = os.open(real, flags, perm)
        try:
            raw = io.FileIO(fd, _file_mode(flags), closefd=True)
        except OSError:
            os.close(fd)
            raise
        return OSFile(cleaned, real, raw)

    def mkdir(self, path: str, perm: int) -> None:
        os.mkdir(self._real(path), perm)

    def remove(self, path: str) -> None:
        real = self._real(path)
        if os.path.isdir(real) and not os.path.islink(real):
            os.rmdir(real)
        else:
            os.remove(real)
        logger.debug("Removed %s", real)

    def stat(self, path: str) -> EntryInfo:
        return EntryInfo.from_stat_result(base_name(path), os.lstat(self._real(path)))

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(self._real(path), mode)

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        os.utime(self._real(path), (atime.timestamp(), mtime.timestamp()))

    def chown(self, path: str, uid: int, gid: int) -> None:
        os.chown(self._real(path), uid, gid)

    def read_dir(self, path: str) -> list[EntryInfo]:
        return _scan(self._real(path))

    def read_file(self, path: str) -> bytes:
        return Path(self._real(path)).read_bytes()
