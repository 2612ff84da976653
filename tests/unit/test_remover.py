"""Unit tests for RecursiveRemover.

Tests the manual walk (idempotence, completeness, fail-fast, handle
release, tolerance of directories that vanish despite a failed remove)
and delegation to backends with a native bulk delete.
"""

import errno
import logging
import os
from collections.abc import Callable
from datetime import datetime

import pytest
from httpfs.errors import not_empty, not_found
from httpfs.filesystem.base import File, Filer, RemoveAller
from httpfs.filesystem.memfs import MemFS
from httpfs.filesystem.models import EntryInfo
from httpfs.remover import RecursiveRemover


class DelegatingFS(Filer):
    """Forwards every call to ``inner`` and records it; hides RemoveAller."""

    def __init__(self, inner: Filer) -> None:
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self.handles: list[File] = []

    def open_file(self, path: str, flags: int, perm: int) -> File:
        self.calls.append(("open", path))
        handle = self.inner.open_file(path, flags, perm)
        self.handles.append(handle)
        return handle

    def mkdir(self, path: str, perm: int) -> None:
        self.inner.mkdir(path, perm)

    def remove(self, path: str) -> None:
        self.calls.append(("remove", path))
        self.inner.remove(path)

    def stat(self, path: str) -> EntryInfo:
        self.calls.append(("stat", path))
        return self.inner.stat(path)

    def chmod(self, path: str, mode: int) -> None:
        self.inner.chmod(path, mode)

    def chtimes(self, path: str, atime: datetime, mtime: datetime) -> None:
        self.inner.chtimes(path, atime, mtime)

    def chown(self, path: str, uid: int, gid: int) -> None:
        self.inner.chown(path, uid, gid)

    def read_dir(self, path: str) -> list[EntryInfo]:
        return self.inner.read_dir(path)

    def read_file(self, path: str) -> bytes:
        return self.inner.read_file(path)


class FailingFile(File):
    """Directory handle whose readdir raises."""

    def __init__(self, wrapped: File, error: OSError) -> None:
        self._wrapped = wrapped
        self._error = error

    @property
    def name(self) -> str:
        return self._wrapped.name

    @property
    def closed(self) -> bool:
        return self._wrapped.closed

    def read(self, size: int = -1) -> bytes:
        return self._wrapped.read(size)

    def write(self, data: bytes) -> int:
        return self._wrapped.write(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._wrapped.seek(offset, whence)

    def tell(self) -> int:
        return self._wrapped.tell()

    def readdir(self, n: int = 0) -> list[EntryInfo]:
        raise self._error

    def stat(self) -> EntryInfo:
        return self._wrapped.stat()

    def close(self) -> None:
        self._wrapped.close()


class ErrorFS(DelegatingFS):
    """DelegatingFS with injectable failures."""

    def __init__(
        self,
        inner: Filer,
        *,
        stat_error: OSError | None = None,
        open_error: OSError | None = None,
        readdir_error: OSError | None = None,
        remove_hook: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(inner)
        self.stat_error = stat_error
        self.open_error = open_error
        self.readdir_error = readdir_error
        self.remove_hook = remove_hook

    def stat(self, path: str) -> EntryInfo:
        if self.stat_error is not None:
            raise self.stat_error
        return super().stat(path)

    def open_file(self, path: str, flags: int, perm: int) -> File:
        if self.open_error is not None:
            raise self.open_error
        handle = super().open_file(path, flags, perm)
        if self.readdir_error is not None:
            return FailingFile(handle, self.readdir_error)
        return handle

    def remove(self, path: str) -> None:
        if self.remove_hook is not None:
            self.calls.append(("remove", path))
            self.remove_hook(path)
            return
        super().remove(path)


class DotEntriesFS(DelegatingFS):
    """Lists synthetic "." and ".." entries in every directory."""

    def open_file(self, path: str, flags: int, perm: int) -> File:
        handle = super().open_file(path, flags, perm)
        info = handle.stat()
        if not info.is_dir:
            return handle
        return DotEntriesFile(handle, info)


class DotEntriesFile(FailingFile):
    def __init__(self, wrapped: File, info: EntryInfo) -> None:
        super().__init__(wrapped, OSError(errno.EIO, "unused"))
        self._info = info

    def readdir(self, n: int = 0) -> list[EntryInfo]:
        dot = EntryInfo(
            name=".", size=0, is_dir=True, mode=self._info.mode, mtime=self._info.mtime
        )
        dotdot = EntryInfo(
            name="..", size=0, is_dir=True, mode=self._info.mode, mtime=self._info.mtime
        )
        return [dot, dotdot, *self._wrapped.readdir(n)]


class NativeFS(DelegatingFS, RemoveAller):
    """DelegatingFS that advertises a native bulk delete."""

    def __init__(self, inner: MemFS, error: OSError | None = None) -> None:
        super().__init__(inner)
        self.error = error
        self.native_calls: list[str] = []

    def remove_all(self, path: str) -> None:
        self.native_calls.append(path)
        if self.error is not None:
            raise self.error
        assert isinstance(self.inner, MemFS)
        self.inner.remove_all(path)


def _build(memfs: MemFS, write_file: Callable[..., None]) -> None:
    """Create /p with three files and a nested directory."""
    memfs.mkdir("/p", 0o755)
    memfs.mkdir("/p/sub", 0o755)
    write_file(memfs, "/p/a.txt", b"a")
    write_file(memfs, "/p/b.txt", b"b")
    write_file(memfs, "/p/c.txt", b"c")
    write_file(memfs, "/p/sub/d.txt", b"d")


def _exists(fs: Filer, path: str) -> bool:
    try:
        fs.stat(path)
    except FileNotFoundError:
        return False
    return True


class TestManualWalk:
    """Tests for the walk used when the backend has no native bulk delete."""

    @pytest.mark.parametrize("path", ["/missing", "/missing/child", "relative/missing"])
    def test_missing_path_is_noop(self, memfs: MemFS, path: str) -> None:
        """Removing a path that does not exist succeeds."""
        fs = DelegatingFS(memfs)

        RecursiveRemover(fs).remove_all(path)

        assert ("remove", path) not in fs.calls

    def test_removes_file_with_single_remove(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """A plain file is removed with exactly one single-entry remove."""
        write_file(memfs, "/file.txt", b"content")
        fs = DelegatingFS(memfs)

        RecursiveRemover(fs).remove_all("/file.txt")

        assert fs.calls == [("stat", "/file.txt"), ("remove", "/file.txt")]
        assert not _exists(memfs, "/file.txt")

    def test_removes_tree(self, memfs: MemFS, write_file: Callable[..., None]) -> None:
        """After success, stat of the removed directory reports not found."""
        _build(memfs, write_file)
        fs = DelegatingFS(memfs)

        RecursiveRemover(fs).remove_all("/p")

        assert not _exists(memfs, "/p")
        assert memfs.read_dir("/") == []

    def test_removes_children_before_parent(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """Children are removed in listing order, then the directory itself."""
        _build(memfs, write_file)
        fs = DelegatingFS(memfs)

        RecursiveRemover(fs).remove_all("/p")

        removed = [path for op, path in fs.calls if op == "remove"]
        assert removed == ["/p/a.txt", "/p/b.txt", "/p/c.txt", "/p/sub/d.txt", "/p/sub", "/p"]

    def test_deep_nesting(self, memfs: MemFS, write_file: Callable[..., None]) -> None:
        """A tree ten levels deep with a file at the bottom is fully removed."""
        path = ""
        for name in "abcdefghij":
            path += f"/{name}"
            memfs.mkdir(path, 0o755)
        write_file(memfs, f"{path}/file.txt", b"deep")

        RecursiveRemover(DelegatingFS(memfs)).remove_all("/a")

        assert not _exists(memfs, "/a")

    def test_closes_every_handle(self, memfs: MemFS, write_file: Callable[..., None]) -> None:
        """Every directory handle is closed once the walk is done."""
        _build(memfs, write_file)
        fs = DelegatingFS(memfs)

        RecursiveRemover(fs).remove_all("/p")

        assert len(fs.handles) == 2
        assert all(handle.closed for handle in fs.handles)

    def test_skips_synthetic_entries(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """Listed "." and ".." entries are never recursed into."""
        _build(memfs, write_file)
        fs = DotEntriesFS(memfs)

        RecursiveRemover(fs).remove_all("/p")

        assert not _exists(memfs, "/p")
        assert all(not path.endswith(("/.", "/..")) for _, path in fs.calls)

    def test_stat_error_propagates(self, memfs: MemFS) -> None:
        """A stat failure other than not-found is raised unchanged."""
        error = OSError(errno.EIO, "stat error")
        fs = ErrorFS(memfs, stat_error=error)

        with pytest.raises(OSError) as excinfo:
            RecursiveRemover(fs).remove_all("/test")

        assert excinfo.value is error

    def test_stat_not_found_is_success(self, memfs: MemFS) -> None:
        """A not-found stat result is treated as already removed."""
        fs = ErrorFS(memfs, stat_error=not_found("/test"))

        RecursiveRemover(fs).remove_all("/test")

    def test_open_error_propagates(self, memfs: MemFS) -> None:
        """Failing to open the directory is raised unchanged."""
        memfs.mkdir("/testdir", 0o755)
        error = PermissionError(errno.EACCES, "open error", "/testdir")
        fs = ErrorFS(memfs, open_error=error)

        with pytest.raises(PermissionError) as excinfo:
            RecursiveRemover(fs).remove_all("/testdir")

        assert excinfo.value is error
        assert _exists(memfs, "/testdir")

    def test_open_not_found_is_success(self, memfs: MemFS) -> None:
        """A directory that vanishes before it is opened counts as removed."""
        memfs.mkdir("/testdir", 0o755)
        fs = ErrorFS(memfs, open_error=not_found("/testdir"))

        RecursiveRemover(fs).remove_all("/testdir")

    def test_readdir_error_propagates_and_closes(self, memfs: MemFS) -> None:
        """A listing failure is raised unchanged and the handle is still closed."""
        memfs.mkdir("/testdir", 0o755)
        error = OSError(errno.EIO, "readdir error")
        fs = ErrorFS(memfs, readdir_error=error)

        with pytest.raises(OSError) as excinfo:
            RecursiveRemover(fs).remove_all("/testdir")

        assert excinfo.value is error
        assert len(fs.handles) == 1
        assert fs.handles[0].closed
        assert _exists(memfs, "/testdir")

    def test_child_failure_is_fail_fast(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """The first child failure aborts the walk; later siblings stay untouched."""
        _build(memfs, write_file)
        error = PermissionError(errno.EACCES, "remove error", "/p/b.txt")

        def remove(path: str) -> None:
            if path == "/p/b.txt":
                raise error
            memfs.remove(path)

        fs = ErrorFS(memfs, remove_hook=remove)

        with pytest.raises(PermissionError) as excinfo:
            RecursiveRemover(fs).remove_all("/p")

        assert excinfo.value is error
        assert not _exists(memfs, "/p/a.txt")
        assert _exists(memfs, "/p/b.txt")
        assert _exists(memfs, "/p/c.txt")
        assert _exists(memfs, "/p/sub/d.txt")
        assert ("remove", "/p/c.txt") not in fs.calls

    def test_nested_child_failure_propagates(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """A failure deep in the tree reaches the caller unchanged."""
        memfs.mkdir("/parent", 0o755)
        memfs.mkdir("/parent/child", 0o755)
        write_file(memfs, "/parent/child/file.txt")
        error = OSError(errno.EIO, "remove error")

        def remove(path: str) -> None:
            if path == "/parent/child/file.txt":
                raise error
            memfs.remove(path)

        with pytest.raises(OSError) as excinfo:
            RecursiveRemover(ErrorFS(memfs, remove_hook=remove)).remove_all("/parent")

        assert excinfo.value is error
        assert _exists(memfs, "/parent/child")

    def test_final_remove_error_propagates(self, memfs: MemFS) -> None:
        """If the directory still exists after a failed remove, the error is raised."""
        memfs.mkdir("/testdir", 0o755)
        error = OSError(errno.EBUSY, "final remove error")

        def remove(path: str) -> None:
            if path == "/testdir":
                raise error
            memfs.remove(path)

        with pytest.raises(OSError) as excinfo:
            RecursiveRemover(ErrorFS(memfs, remove_hook=remove)).remove_all("/testdir")

        assert excinfo.value is error

    def test_final_remove_not_empty_is_logged(
        self, memfs: MemFS, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A directory that gained entries is reported and the error raised."""
        memfs.mkdir("/testdir", 0o755)

        def remove(path: str) -> None:
            raise not_empty(path)

        with caplog.at_level(logging.DEBUG, logger="httpfs.remover"), pytest.raises(OSError):
            RecursiveRemover(ErrorFS(memfs, remove_hook=remove)).remove_all("/testdir")

        assert "Directory /testdir gained entries during removal" in caplog.text

    def test_final_remove_error_tolerated_when_gone(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """A failed directory remove is ignored when the directory is gone anyway."""
        _build(memfs, write_file)

        def remove(path: str) -> None:
            is_dir = memfs.stat(path).is_dir
            memfs.remove(path)
            if is_dir:
                # Backend bookkeeping still counts "." and ".."
                raise not_empty(path)

        RecursiveRemover(ErrorFS(memfs, remove_hook=remove)).remove_all("/p")

        assert not _exists(memfs, "/p")

    def test_file_remove_error_propagates(
        self, memfs: MemFS, write_file: Callable[..., None]
    ) -> None:
        """Removing a plain file returns the remove result directly."""
        write_file(memfs, "/file.txt")
        error = PermissionError(errno.EPERM, "nope", "/file.txt")

        def remove(path: str) -> None:
            raise error

        with pytest.raises(PermissionError) as excinfo:
            RecursiveRemover(ErrorFS(memfs, remove_hook=remove)).remove_all("/file.txt")

        assert excinfo.value is error


class TestNativeDelegation:
    """Tests for backends implementing RemoveAller."""

    def test_uses_native(self, memfs: MemFS) -> None:
        """uses_native reflects the RemoveAller capability."""
        assert RecursiveRemover(memfs).uses_native is True
        assert RecursiveRemover(DelegatingFS(memfs)).uses_native is False

    def test_delegates_to_native(self, memfs: MemFS, write_file: Callable[..., None]) -> None:
        """The native bulk delete is invoked instead of the walk."""
        _build(memfs, write_file)
        fs = NativeFS(memfs)

        RecursiveRemover(fs).remove_all("/p")

        assert fs.native_calls == ["/p"]
        assert fs.calls == []
        assert not _exists(memfs, "/p")

    def test_native_not_found_is_success(self, memfs: MemFS) -> None:
        """A not-found result from the native delete is masked."""
        fs = NativeFS(memfs, error=not_found("/missing"))

        RecursiveRemover(fs).remove_all("/missing")

        assert fs.native_calls == ["/missing"]

    def test_native_other_error_propagates(self, memfs: MemFS) -> None:
        """Other native failures are raised unchanged."""
        error = OSError(errno.EIO, "native failure")
        fs = NativeFS(memfs, error=error)

        with pytest.raises(OSError) as excinfo:
            RecursiveRemover(fs).remove_all("/p")

        assert excinfo.value is error

    def test_memfs_native_missing_path(self, memfs: MemFS) -> None:
        """MemFS's own remove_all raises not-found, which the remover masks."""
        with pytest.raises(FileNotFoundError):
            memfs.remove_all("/missing")

        RecursiveRemover(memfs).remove_all("/missing")
