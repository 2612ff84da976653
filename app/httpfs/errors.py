"""Structured classification of filesystem errors.

Backing filesystems report failures with the standard ``OSError``
hierarchy. This module maps those exceptions onto a small set of
error kinds so callers never have to inspect error messages, and
provides constructors that build correctly populated exceptions.
"""

import errno
import os
from enum import Enum


class ErrorKind(str, Enum):
    """Kind of a filesystem error.

    Attributes:
        NOT_FOUND: The path does not exist.
        EXISTS: The path already exists.
        NOT_A_DIRECTORY: A directory was required but something else was found.
        IS_A_DIRECTORY: A non-directory was required but a directory was found.
        NOT_EMPTY: The directory still has entries.
        PERMISSION: The operation is not permitted.
        OTHER: Any other failure (I/O errors, unsupported operations, ...).
    """

    NOT_FOUND = "not_found"
    EXISTS = "exists"
    NOT_A_DIRECTORY = "not_a_directory"
    IS_A_DIRECTORY = "is_a_directory"
    NOT_EMPTY = "not_empty"
    PERMISSION = "permission"
    OTHER = "other"


_CLASS_KINDS: tuple[tuple[type[OSError], ErrorKind], ...] = (
    (FileNotFoundError, ErrorKind.NOT_FOUND),
    (FileExistsError, ErrorKind.EXISTS),
    (NotADirectoryError, ErrorKind.NOT_A_DIRECTORY),
    (IsADirectoryError, ErrorKind.IS_A_DIRECTORY),
    (PermissionError, ErrorKind.PERMISSION),
)

_ERRNO_KINDS: dict[int, ErrorKind] = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EEXIST: ErrorKind.EXISTS,
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno.EISDIR: ErrorKind.IS_A_DIRECTORY,
    errno.ENOTEMPTY: ErrorKind.NOT_EMPTY,
    errno.EACCES: ErrorKind.PERMISSION,
    errno.EPERM: ErrorKind.PERMISSION,
}


def error_kind(exc: BaseException | None) -> ErrorKind | None:
    """Classify an exception.

    The exception class is checked first, then the ``errno`` attribute,
    so a plain ``OSError(errno.ENOENT, ...)`` classifies the same way as
    a ``FileNotFoundError``.

    Args:
        exc: Exception to classify, or None.

    Returns:
        The ErrorKind, or None when ``exc`` is None.
    """
    if exc is None:
        return None
    for cls, kind in _CLASS_KINDS:
        if isinstance(exc, cls):
            return kind
    if isinstance(exc, OSError) and exc.errno is not None:
        return _ERRNO_KINDS.get(exc.errno, ErrorKind.OTHER)
    return ErrorKind.OTHER


def is_not_found(exc: BaseException | None) -> bool:
    """Return True if ``exc`` reports a missing path."""
    return error_kind(exc) is ErrorKind.NOT_FOUND


def is_exist(exc: BaseException | None) -> bool:
    """Return True if ``exc`` reports an already existing path."""
    return error_kind(exc) is ErrorKind.EXISTS


def is_not_empty(exc: BaseException | None) -> bool:
    """Return True if ``exc`` reports a non-empty directory."""
    return error_kind(exc) is ErrorKind.NOT_EMPTY


def _error(cls: type[OSError], code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


def not_found(path: str) -> OSError:
    """Build the error for a missing path."""
    return _error(FileNotFoundError, errno.ENOENT, path)


def already_exists(path: str) -> OSError:
    """Build the error for a path that already exists."""
    return _error(FileExistsError, errno.EEXIST, path)


def not_a_directory(path: str) -> OSError:
    """Build the error for a path component that is not a directory."""
    return _error(NotADirectoryError, errno.ENOTDIR, path)


def is_a_directory(path: str) -> OSError:
    """Build the error for a directory used where a file is required."""
    return _error(IsADirectoryError, errno.EISDIR, path)


def not_empty(path: str) -> OSError:
    """Build the error for removing a directory that still has entries."""
    return _error(OSError, errno.ENOTEMPTY, path)


def permission_denied(path: str) -> OSError:
    """Build the error for an operation that is not permitted."""
    return _error(PermissionError, errno.EPERM, path)
