"""HTTP-serving facade over a backing filesystem.

HttpFS gives a static-file HTTP server the read-only ``open`` it needs,
and re-exports the write side of the wrapped filesystem (create,
remove, change metadata) so one object covers both. Apart from
``mkdir_all``, ``remove_all`` and ``sub``, every method delegates
directly to the backing filesystem.
"""

import logging
import os
import posixpath
from datetime import datetime

from httpfs.errors import is_exist, not_a_directory
from httpfs.filesystem.base import File, Filer
from httpfs.filesystem.basepath import BasePathFS
from httpfs.filesystem.models import EntryInfo, clean_path
from httpfs.remover import RecursiveRemover

logger = logging.getLogger(__name__)


class HttpFS:
    """Adapter exposing a Filer to HTTP file serving.

    Attributes:
        fs: The wrapped backing filesystem.

    Example:
        >>> fs = HttpFS(MemFS())
        >>> fs.mkdir_all("/a/b/c", 0o755)
        >>> fs.remove_all("/a")
        >>> fs.remove_all("/a")  # already gone, still succeeds
    """

    def __init__(self, fs: Filer) -> None:
        """Initialize the adapter.

        Args:
            fs: Backing filesystem to delegate to.
        """
        self.fs = fs
        self._remover = RecursiveRemover(fs)
        logger.debug(
            "Wrapping %s (native remove_all: %s)", type(fs).__name__, self._remover.uses_native
        )

    def open(self, path: str) -> File:
        """Open a file or directory read-only.

        This is the entry point used by the HTTP layer.
        """
        return self.open_file(path, os.O_RDONLY, 0o400)

    def open_file(self, path: str, flags: int, perm: int) -> File:
        """Open a file using the given ``os.O_*`` flags and permission bits."""
        return self.fs.open_file(path, flags, perm)

    def mkdir(self, path: str, perm: int) -> None:
        """Create a directory."""
        self.fs.mkdir(path, perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        """Create every missing directory along ``path``.

        Components that already exist are skipped, so calling this on an
        existing directory (or on "/") succeeds.

        Args:
            path: Virtual directory path to create.
            perm: Permission bits of created directories.

        Raises:
            OSError: Any mkdir failure other than "already exists".
        """
        current = "/"
        for part in clean_path(path).split("/"):
            if not part:
                continue
            current = posixpath.join(current, part)
            try:
                self.fs.mkdir(current, perm)
            except OSError as e:
                if not is_exist(e):
                    raise

    def remove(self, path: str) -> None:
        """Remove a file or an empty directory."""
        self.fs.remove(path)

    def remove_all(self, path: str) -> None:
        """Remove a path and, for directories, all of its children.

        Removing a path that does not exist succeeds. When the backing
        filesystem implements RemoveAller the work is delegated to it.

        Raises:
            OSError: The first failure other than "not found".
        """
        self._remover.remove_all(path)

    def stat(self, path: str) -> EntryInfo:
        """Return metadata of the entry at ``path``."""
        return self.fs.stat(path)

    def chmod(self, path: str, mode: int) -> None:
        """Change the permission bits of an entry."""
        self.fs.chmod(path, mode)

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        """Change the access and modification times of an entry."""
        self.fs.chtimes(path, atime, mtime)

    def chown(self, path: str, uid: int, gid: int) -> None:
        """Change the owner and group of an entry."""
        self.fs.chown(path, uid, gid)

    def read_dir(self, path: str) -> list[EntryInfo]:
        """Return the entries of a directory sorted by name."""
        return self.fs.read_dir(path)

    def read_file(self, path: str) -> bytes:
        """Return the whole content of a file."""
        return self.fs.read_file(path)

    def sub(self, directory: str) -> "HttpFS":
        """Return an adapter over the subtree rooted at ``directory``.

        Args:
            directory: Existing directory that becomes the new root.

        Returns:
            HttpFS whose "/" is ``directory``.

        Raises:
            FileNotFoundError: If the directory does not exist.
            NotADirectoryError: If the path is not a directory.
        """
        info = self.fs.stat(directory)
        if not info.is_dir:
            raise not_a_directory(directory)
        logger.debug("Sub filesystem rooted at %s", clean_path(directory))
        return HttpFS(BasePathFS(self.fs, directory))
