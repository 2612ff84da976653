"""Abstract interfaces of a backing filesystem.

This module defines the Filer interface every backing filesystem
implements, the File handle it returns from ``open_file``, and the
optional RemoveAller extension for backends with a native bulk delete.

Errors are reported with the standard ``OSError`` hierarchy
(FileNotFoundError, FileExistsError, NotADirectoryError, ...); see
:mod:`httpfs.errors` for the classification helpers.
"""

import os
from abc import ABC, abstractmethod
from datetime import datetime
from types import TracebackType

from httpfs.filesystem.models import EntryInfo


class File(ABC):
    """Abstract open file or directory handle.

    Handles support random-access byte reads, seeking, and directory
    enumeration, which is everything a static-file HTTP server needs.
    They are context managers and close on exit.

    Example:
        >>> with fs.open_file("/docs", os.O_RDONLY, 0) as handle:
        ...     for entry in handle.readdir(0):
        ...         print(entry.name)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Virtual path the handle was opened with."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether the handle has been closed."""

    @abstractmethod
    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (everything remaining if negative).

        Returns:
            The bytes read; empty at end of file.

        Raises:
            IsADirectoryError: If the handle refers to a directory.
        """

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write bytes at the current position.

        Returns:
            Number of bytes written.

        Raises:
            io.UnsupportedOperation: If the handle was opened read-only.
        """

    @abstractmethod
    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the read/write position and return the new position."""

    @abstractmethod
    def tell(self) -> int:
        """Return the current read/write position."""

    @abstractmethod
    def readdir(self, n: int = 0) -> list[EntryInfo]:
        """Read entries of an open directory.

        Args:
            n: Maximum number of entries to return. If ``n <= 0`` every
                remaining entry is returned.

        Returns:
            Entries in the order the backend lists them; an empty list
            once the listing is exhausted.

        Raises:
            NotADirectoryError: If the handle refers to a file.
        """

    @abstractmethod
    def stat(self) -> EntryInfo:
        """Return metadata of the open entry."""

    @abstractmethod
    def close(self) -> None:
        """Release the handle. Closing twice is a no-op."""

    def __enter__(self) -> "File":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class Filer(ABC):
    """Abstract base class for all backing filesystems.

    A Filer provides atomic single-entry operations on a tree of
    slash-separated virtual paths.
    """

    @abstractmethod
    def open_file(self, path: str, flags: int, perm: int) -> File:
        """Open a file or directory.

        Args:
            path: Virtual path to open.
            flags: Combination of ``os.O_*`` flags.
            perm: Permission bits used when the file is created.

        Returns:
            An open File handle.

        Raises:
            FileNotFoundError: If the path (or its parent, when creating)
                does not exist.
            FileExistsError: If ``O_CREAT | O_EXCL`` was given and the
                path exists.
            IsADirectoryError: If write access to a directory was requested.
        """

    @abstractmethod
    def mkdir(self, path: str, perm: int) -> None:
        """Create a single directory.

        Raises:
            FileExistsError: If the path already exists.
            FileNotFoundError: If the parent does not exist.
        """

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a file or an empty directory.

        Raises:
            FileNotFoundError: If the path does not exist.
            OSError: With ``errno.ENOTEMPTY`` if the directory has entries.
        """

    @abstractmethod
    def stat(self, path: str) -> EntryInfo:
        """Return metadata of the entry at ``path``.

        Raises:
            FileNotFoundError: If the path does not exist.
        """

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        """Change the permission bits of an entry."""

    @abstractmethod
    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        """Change the access and modification times of an entry."""

    @abstractmethod
    def chown(self, path: str, uid: int, gid: int) -> None:
        """Change the owner and group of an entry."""

    @abstractmethod
    def read_dir(self, path: str) -> list[EntryInfo]:
        """Return the entries of a directory sorted by name."""

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        """Return the whole content of a file."""


class RemoveAller(ABC):
    """Optional extension for filesystems with a native recursive delete.

    Backends mix this in next to Filer when they can remove a whole
    subtree more efficiently than a walk of single-entry removals.
    """

    @abstractmethod
    def remove_all(self, path: str) -> None:
        """Remove ``path`` and everything below it.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
