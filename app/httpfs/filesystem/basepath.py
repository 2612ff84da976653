"""Subtree view of another backing filesystem."""

import posixpath
from datetime import datetime

from httpfs.filesystem.base import File, Filer
from httpfs.filesystem.models import EntryInfo, clean_path


class BasePathFS(Filer):
    """Filer that roots every path at ``base`` inside another Filer.

    Paths are cleaned before they are joined, so ``..`` cannot leave the
    subtree. The view only exposes the Filer interface; a native bulk
    delete of the wrapped filesystem is not forwarded.

    Attributes:
        base: Cleaned absolute directory inside the wrapped filesystem.
    """

    def __init__(self, fs: Filer, base: str) -> None:
        self._fs = fs
        self.base = clean_path(base)

    def _full(self, path: str) -> str:
        relative = clean_path(path).lstrip("/")
        return posixpath.join(self.base, relative) if relative else self.base

    def open_file(self, path: str, flags: int, perm: int) -> File:
        return self._fs.open_file(self._full(path), flags, perm)

    def mkdir(self, path: str, perm: int) -> None:
        self._fs.mkdir(self._full(path), perm)

    def remove(self, path: str) -> None:
        self._fs.remove(self._full(path))

    def stat(self, path: str) -> EntryInfo:
        return self._fs.stat(self._full(path))

    def chmod(self, path: str, mode: int) -> None:
        self._fs.chmod(self._full(path), mode)

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        self._fs.chtimes(self._full(path), atime, mtime)

    def chown(self, path: str, uid: int, gid: int) -> None:
        self._fs.chown(self._full(path), uid, gid)

    def read_dir(self, path: str) -> list[EntryInfo]:
        return self._fs.read_dir(self._full(path))

    def read_file(self, path: str) -> bytes:
        return self._fs.read_file(self._full(path))
