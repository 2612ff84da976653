"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable

import pytest
from httpfs.adapter import HttpFS
from httpfs.filesystem.memfs import MemFS


def _write_file(fs: MemFS | HttpFS, path: str, data: bytes = b"") -> None:
    with fs.open_file(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644) as f:
        f.write(data)


@pytest.fixture
def write_file() -> Callable[..., None]:
    """Helper that creates (or truncates) a file and writes data to it."""
    return _write_file


@pytest.fixture
def memfs() -> MemFS:
    """Empty in-memory filesystem."""
    return MemFS()


@pytest.fixture
def http_fs(memfs: MemFS) -> HttpFS:
    """HttpFS adapter over the empty ``memfs`` fixture."""
    return HttpFS(memfs)


@pytest.fixture
def site(memfs: MemFS) -> MemFS:
    """MemFS holding a small static site.

    Layout::

        /index.html
        /about.txt
        /docs/guide.txt
        /docs/api/ref.txt
        /empty/
    """
    fs = HttpFS(memfs)
    fs.mkdir_all("/docs/api", 0o755)
    fs.mkdir("/empty", 0o755)
    _write_file(memfs, "/index.html", b"<h1>home</h1>")
    _write_file(memfs, "/about.txt", b"0123456789")
    _write_file(memfs, "/docs/guide.txt", b"guide")
    _write_file(memfs, "/docs/api/ref.txt", b"reference")
    return memfs
