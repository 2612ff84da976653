"""In-memory backing filesystem.

MemFS keeps a tree of directory and file nodes in memory. It is safe
to share between threads (all access goes through one re-entrant lock)
and implements the RemoveAller extension, dropping a whole subtree by
unlinking it from its parent.
"""

import errno
import io
import logging
import os
import threading
from datetime import UTC, datetime

from httpfs.errors import (
    already_exists,
    is_a_directory,
    not_a_directory,
    not_empty,
    not_found,
    permission_denied,
)
from httpfs.filesystem.base import File, Filer, RemoveAller
from httpfs.filesystem.models import EntryInfo, clean_path

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def _aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class _Node:
    __slots__ = ("name", "mode", "mtime", "atime", "uid", "gid")

    def __init__(self, name: str, mode: int) -> None:
        self.name = name
        self.mode = mode & 0o777
        now = _now()
        self.mtime = now
        self.atime = now
        self.uid = 0
        self.gid = 0

    def touch(self) -> None:
        self.mtime = _now()


class _DirNode(_Node):
    __slots__ = ("children",)

    def __init__(self, name: str, mode: int) -> None:
        super().__init__(name, mode)
        self.children: dict[str, _Node] = {}


class _FileNode(_Node):
    __slots__ = ("data",)

    def __init__(self, name: str, mode: int) -> None:
        super().__init__(name, mode)
        self.data = bytearray()


class MemFile(File):
    """Handle to an open MemFS file or directory."""

    def __init__(self, fs: "MemFS", node: _Node, path: str, flags: int) -> None:
        self._fs = fs
        self._node = node
        self._path = path
        access = flags & os.O_ACCMODE
        self._readable = access in (os.O_RDONLY, os.O_RDWR)
        self._writable = access in (os.O_WRONLY, os.O_RDWR)
        self._append = bool(flags & os.O_APPEND)
        self._pos = 0
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

    def _file_node(self) -> _FileNode:
        if not isinstance(self._node, _FileNode):
            raise is_a_directory(self._path)
        return self._node

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        node = self._file_node()
        if not self._readable:
            raise io.UnsupportedOperation("read")
        with self._fs._lock:
            end = len(node.data) if size < 0 else min(len(node.data), self._pos + size)
            chunk = bytes(node.data[self._pos : end]) if end > self._pos else b""
            self._pos += len(chunk)
            node.atime = _now()
        return chunk

    def write(self, data: bytes) -> int:
        self._check_open()
        node = self._file_node()
        if not self._writable:
            raise io.UnsupportedOperation("write")
        with self._fs._lock:
            if self._append:
                self._pos = len(node.data)
            if self._pos > len(node.data):
                node.data.extend(bytes(self._pos - len(node.data)))
            node.data[self._pos : self._pos + len(data)] = data
            self._pos += len(data)
            node.touch()
        return len(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._check_open()
        with self._fs._lock:
            if whence == os.SEEK_SET:
                target = offset
            elif whence == os.SEEK_CUR:
                target = self._pos + offset
            elif whence == os.SEEK_END:
                size = len(self._node.data) if isinstance(self._node, _FileNode) else 0
                target = size + offset
            else:
                msg = f"Invalid whence: {whence}"
                raise ValueError(msg)
        if target < 0:
            raise OSError(errno.EINVAL, os.strerror(errno.EINVAL), self._path)
        self._pos = target
        return self._pos

    def tell(self) -> int:
        self._check_open()
        return self._pos

    def readdir(self, n: int = 0) -> list[EntryInfo]:
        self._check_open()
        node = self._node
        if not isinstance(node, _DirNode):
            raise not_a_directory(self._path)
        if self._entries is None:
            with self._fs._lock:
                self._entries = [
                    self._fs._info(child) for _, child in sorted(node.children.items())
                ]
        remaining = self._entries[self._entry_pos :]
        if n > 0:
            remaining = remaining[:n]
        self._entry_pos += len(remaining)
        return remaining

    def stat(self) -> EntryInfo:
        self._check_open()
        with self._fs._lock:
            return self._fs._info(self._node)

    def close(self) -> None:
        self._closed = True


class MemFS(Filer, RemoveAller):
    """Thread-safe in-memory filesystem.

    Example:
        >>> fs = MemFS()
        >>> fs.mkdir("/docs", 0o755)
        >>> with fs.open_file("/docs/a.txt", os.O_CREAT | os.O_WRONLY, 0o644) as f:
        ...     f.write(b"hello")
        >>> fs.read_file("/docs/a.txt")
        b'hello'
    """

    def __init__(self, root_mode: int = 0o755) -> None:
        """Initialize an empty filesystem.

        Args:
            root_mode: Permission bits of the root directory.
        """
        self._lock = threading.RLock()
        self._root = _DirNode("/", root_mode)

    # -- path helpers --

    def _find(self, path: str) -> _Node | None:
        """Resolve a cleaned path; None if the final component is missing.

        Raises:
            FileNotFoundError: If an intermediate directory is missing.
            NotADirectoryError: If an intermediate component is a file.
        """
        node: _Node = self._root
        parts = [p for p in path.split("/") if p]
        for index, part in enumerate(parts):
            if not isinstance(node, _DirNode):
                raise not_a_directory(path)
            child = node.children.get(part)
            if child is None:
                if index == len(parts) - 1:
                    return None
                raise not_found(path)
            node = child
        return node

    def _lookup(self, path: str) -> _Node:
        node = self._find(path)
        if node is None:
            raise not_found(path)
        return node

    def _parent_dir(self, path: str) -> tuple[_DirNode, str]:
        parent_path, _, name = path.rpartition("/")
        parent = self._lookup(parent_path or "/")
        if not isinstance(parent, _DirNode):
            raise not_a_directory(path)
        return parent, name

    def _info(self, node: _Node) -> EntryInfo:
        size = len(node.data) if isinstance(node, _FileNode) else 0
        return EntryInfo(
            name=node.name,
            size=size,
            is_dir=isinstance(node, _DirNode),
            mode=node.mode,
            mtime=node.mtime,
            uid=node.uid,
            gid=node.gid,
        )

    # -- Filer --

    def open_file(self, path: str, flags: int, perm: int) -> MemFile:
        cleaned = clean_path(path)
        with self._lock:
            node = self._find(cleaned)
            if node is None:
                if not flags & os.O_CREAT:
                    raise not_found(path)
                parent, name = self._parent_dir(cleaned)
                node = _FileNode(name, perm)
                parent.children[name] = node
                parent.touch()
            elif flags & os.O_CREAT and flags & os.O_EXCL:
                raise already_exists(path)

            access = flags & os.O_ACCMODE
            writing = access != os.O_RDONLY or bool(flags & (os.O_TRUNC | os.O_APPEND))
            if isinstance(node, _DirNode) and writing:
                raise is_a_directory(path)
            if isinstance(node, _FileNode) and flags & os.O_TRUNC and access != os.O_RDONLY:
                node.data.clear()
                node.touch()
        return MemFile(self, node, cleaned, flags)

    def mkdir(self, path: str, perm: int) -> None:
        cleaned = clean_path(path)
        with self._lock:
            if cleaned == "/":
                raise already_exists(path)
            parent, name = self._parent_dir(cleaned)
            if name in parent.children:
                raise already_exists(path)
            parent.children[name] = _DirNode(name, perm)
            parent.touch()

    def remove(self, path: str) -> None:
        cleaned = clean_path(path)
        with self._lock:
            if cleaned == "/":
                raise permission_denied(path)
            parent, name = self._parent_dir(cleaned)
            node = parent.children.get(name)
            if node is None:
                raise not_found(path)
            if isinstance(node, _DirNode) and node.children:
                raise not_empty(path)
            del parent.children[name]
            parent.touch()

    def remove_all(self, path: str) -> None:
        cleaned = clean_path(path)
        with self._lock:
            if cleaned == "/":
                raise permission_denied(path)
            parent, name = self._parent_dir(cleaned)
            if name not in parent.children:
                raise not_found(path)
            del parent.children[name]
            parent.touch()
        logger.debug("Dropped subtree %s", cleaned)

    def stat(self, path: str) -> EntryInfo:
        cleaned = clean_path(path)
        with self._lock:
            return self._info(self._lookup(cleaned))

    def chmod(self, path: str, mode: int) -> None:
        with self._lock:
            self._lookup(clean_path(path)).mode = mode & 0o777

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        with self._lock:
            node = self._lookup(clean_path(path))
            node.atime = _aware(atime)
            node.mtime = _aware(mtime)

    def chown(self, path: str, uid: int, gid: int) -> None:
        with self._lock:
            node = self._lookup(clean_path(path))
            node.uid = uid
            node.gid = gid

    def read_dir(self, path: str) -> list[EntryInfo]:
        cleaned = clean_path(path)
        with self._lock:
            node = self._lookup(cleaned)
            if not isinstance(node, _DirNode):
                raise not_a_directory(path)
            return [self._info(child) for _, child in sorted(node.children.items())]

    def read_file(self, path: str) -> bytes:
        cleaned = clean_path(path)
        with self._lock:
            node = self._lookup(cleaned)
            if not isinstance(node, _FileNode):
                raise is_a_directory(path)
            node.atime = _now()
            return bytes(node.data)
