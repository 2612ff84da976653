"""Static-file HTTP serving on top of HttpFS.

FileServerHandler is a ``SimpleHTTPRequestHandler`` whose file access
goes exclusively through ``HttpFS.open``: the handle it returns is
read (whole or by byte range), seeked, and listed, so any backing
filesystem can be served without the handler knowing its type.
"""

import html
import io
import logging
import posixpath
import re
import sys
import urllib.parse
from functools import partial
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from httpfs import __version__
from httpfs.adapter import HttpFS
from httpfs.core.config import ServerConfig
from httpfs.errors import ErrorKind, error_kind
from httpfs.filesystem.base import File
from httpfs.filesystem.models import EntryInfo, clean_path

logger = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiableError(ValueError):
    """Raised when a byte range lies outside the file."""


def parse_byte_range(header: str | None, size: int) -> tuple[int, int] | None:
    """Parse a single-range ``Range`` header.

    Multi-range and malformed headers are ignored, in which case the
    whole file is served.

    Args:
        header: Value of the Range header, or None.
        size: Size of the file in bytes.

    Returns:
        Inclusive (start, end) byte offsets, or None to serve everything.

    Raises:
        RangeNotSatisfiableError: If the range starts beyond the file.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if match is None:
        return None
    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiableError(header)
        return max(0, size - suffix), size - 1

    start = int(first)
    end = int(last) if last else size - 1
    if end < start:
        return None
    if start >= size:
        raise RangeNotSatisfiableError(header)
    return start, min(end, size - 1)


class FileServerHandler(SimpleHTTPRequestHandler):
    """Request handler serving files from an HttpFS.

    Attributes:
        filesystem: Adapter the files are read from.
        index_file: File served for a directory when present.
        directory_listing: Whether directories without an index are listed.
    """

    server_version = f"httpfs/{__version__}"

    def __init__(
        self,
        *args: Any,
        filesystem: HttpFS,
        index_file: str = "index.html",
        directory_listing: bool = True,
        **kwargs: Any,
    ) -> None:
        self.filesystem = filesystem
        self.index_file = index_file
        self.directory_listing = directory_listing
        # The base class handles the request inside __init__
        super().__init__(*args, **kwargs)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.info("%s - %s", self.address_string(), format % args)

    # === Request handling ===

    def send_head(self) -> io.BufferedIOBase | File | None:  # type: ignore[override]
        path = self._virtual_path()
        handle = self._open(path)
        if handle is None:
            return None
        try:
            info = handle.stat()
            if info.is_dir:
                return self._send_directory(path, handle)
            return self._send_file(path, handle, info)
        except BaseException:
            handle.close()
            raise

    def _virtual_path(self) -> str:
        raw = urllib.parse.urlsplit(self.path).path
        return clean_path(urllib.parse.unquote(raw))

    def _open(self, path: str) -> File | None:
        """Open ``path``, answering the request with an error on failure."""
        try:
            return self.filesystem.open(path)
        except OSError as e:
            kind = error_kind(e)
            if kind in (ErrorKind.NOT_FOUND, ErrorKind.NOT_A_DIRECTORY):
                self.send_error(HTTPStatus.NOT_FOUND, "File not found")
            elif kind is ErrorKind.PERMISSION:
                self.send_error(HTTPStatus.FORBIDDEN, "Permission denied")
            else:
                logger.error("Failed to open %s: %s", path, e)
                self.send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Cannot open file")
            return None

    def _send_directory(self, path: str, handle: File) -> io.BufferedIOBase | File | None:
        parts = urllib.parse.urlsplit(self.path)
        if not parts.path.endswith("/"):
            handle.close()
            location = urllib.parse.urlunsplit(
                (parts.scheme, parts.netloc, parts.path + "/", parts.query, parts.fragment)
            )
            self.send_response(HTTPStatus.MOVED_PERMANENTLY)
            self.send_header("Location", location)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return None

        index = self._open_index(path)
        if index is not None:
            handle.close()
            index_path = posixpath.join(path, self.index_file)
            try:
                return self._send_file(index_path, index, index.stat())
            except BaseException:
                index.close()
                raise

        if not self.directory_listing:
            handle.close()
            self.send_error(HTTPStatus.FORBIDDEN, "Directory listing disabled")
            return None

        try:
            entries = handle.readdir(0)
        finally:
            handle.close()
        return self._send_listing(path, entries)

    def _open_index(self, path: str) -> File | None:
        try:
            index = self.filesystem.open(posixpath.join(path, self.index_file))
        except OSError:
            return None
        try:
            is_dir = index.stat().is_dir
        except BaseException:
            index.close()
            raise
        if is_dir:
            index.close()
            return None
        return index

    def _send_file(
        self, path: str, handle: File, info: EntryInfo
    ) -> io.BufferedIOBase | File | None:
        ctype = self.guess_type(path)
        last_modified = self.date_time_string(int(info.mtime.timestamp()))

        try:
            byte_range = parse_byte_range(self.headers.get("Range"), info.size)
        except RangeNotSatisfiableError:
            handle.close()
            self.send_response(HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE)
            self.send_header("Content-Range", f"bytes */{info.size}")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return None

        if byte_range is None:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-type", ctype)
            self.send_header("Content-Length", str(info.size))
            self.send_header("Last-Modified", last_modified)
            self.send_header("Accept-Ranges", "bytes")
            self.end_headers()
            return handle

        start, end = byte_range
        handle.seek(start)
        data = handle.read(end - start + 1)
        handle.close()
        self.send_response(HTTPStatus.PARTIAL_CONTENT)
        self.send_header("Content-type", ctype)
        self.send_header("Content-Range", f"bytes {start}-{end}/{info.size}")
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Last-Modified", last_modified)
        self.send_header("Accept-Ranges", "bytes")
        self.end_headers()
        return io.BytesIO(data)

    def _send_listing(self, path: str, entries: list[EntryInfo]) -> io.BytesIO:
        enc = sys.getfilesystemencoding()
        title = html.escape(f"Directory listing for {path}", quote=False)
        lines = [
            "<!DOCTYPE HTML>",
            '<html lang="en">',
            "<head>",
            f'<meta charset="{enc}">',
            f"<title>{title}</title>",
            "</head>",
            "<body>",
            f"<h1>{title}</h1>",
            "<hr>",
            "<ul>",
        ]
        for entry in entries:
            name = entry.name + "/" if entry.is_dir else entry.name
            href = urllib.parse.quote(name, errors="surrogatepass")
            label = html.escape(name, quote=False)
            lines.append(f'<li><a href="{href}">{label}</a></li>')
        lines.extend(["</ul>", "<hr>", "</body>", "</html>", ""])
        encoded = "\n".join(lines).encode(enc, "surrogateescape")

        self.send_response(HTTPStatus.OK)
        self.send_header("Content-type", f"text/html; charset={enc}")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        return io.BytesIO(encoded)


def make_server(fs: HttpFS, config: ServerConfig) -> ThreadingHTTPServer:
    """Build a threaded HTTP server for ``fs``.

    Args:
        fs: Adapter to serve.
        config: Listen address and serving options.

    Returns:
        Bound ThreadingHTTPServer; call ``serve_forever`` to run it.
    """
    handler = partial(
        FileServerHandler,
        filesystem=fs,
        index_file=config.index_file,
        directory_listing=config.directory_listing,
    )
    server = ThreadingHTTPServer((config.bind, config.port), handler)
    logger.info("Listening on http://%s:%d/", *server.server_address[:2])
    return server
