"""Filesystem domain models.

This module defines the metadata snapshot returned by stat-like
queries on a backing filesystem, and the path helpers every backend
shares.
"""

import os
import posixpath
import stat as stat_module
from dataclasses import dataclass
from datetime import UTC, datetime

# Names some backends report for a directory itself and its parent
SYNTHETIC_ENTRIES = frozenset({".", ".."})


@dataclass(frozen=True, slots=True)
class EntryInfo:
    """Metadata of a single filesystem entry.

    This is an immutable snapshot; it is not updated when the entry
    changes afterwards.

    Attributes:
        name: Base name of the entry ("/" for the root).
        size: Size in bytes (0 for directories).
        is_dir: Whether the entry is a directory.
        mode: Permission bits (e.g. 0o644).
        mtime: Last modification time (timezone-aware, UTC).
        uid: Owner user id, None if the backend does not track owners.
        gid: Owner group id, None if the backend does not track owners.
    """

    name: str
    size: int
    is_dir: bool
    mode: int
    mtime: datetime
    uid: int | None = None
    gid: int | None = None

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.name:
            msg = "Entry name cannot be empty"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Size cannot be negative, got {self.size}"
            raise ValueError(msg)

    @property
    def perm(self) -> int:
        """Permission bits only (mode masked with 0o777)."""
        return self.mode & 0o777

    @property
    def mode_string(self) -> str:
        """ls-style mode string, e.g. ``drwxr-xr-x``."""
        kind = stat_module.S_IFDIR if self.is_dir else stat_module.S_IFREG
        return stat_module.filemode(kind | self.perm)

    @classmethod
    def from_stat_result(cls, name: str, st: os.stat_result) -> "EntryInfo":
        """Build an EntryInfo from an ``os.stat`` result.

        Args:
            name: Base name to report for the entry.
            st: Result of ``os.stat``.

        Returns:
            EntryInfo snapshot of the stat result.
        """
        is_dir = stat_module.S_ISDIR(st.st_mode)
        return cls(
            name=name,
            size=0 if is_dir else st.st_size,
            is_dir=is_dir,
            mode=stat_module.S_IMODE(st.st_mode),
            mtime=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            uid=st.st_uid,
            gid=st.st_gid,
        )


def clean_path(path: str) -> str:
    """Normalize a virtual path to an absolute slash-separated form.

    Leading ``..`` components cannot climb above the root. Only "/"
    separates components; any other character, backslash included, is
    part of a name.

    Args:
        path: Virtual path, absolute or relative to the root.

    Returns:
        Normalized absolute path ("/" for the root).
    """
    cleaned = posixpath.normpath("/" + path)
    # normpath keeps a leading "//" (POSIX allows it to be special)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def base_name(path: str) -> str:
    """Return the base name of a virtual path ("/" for the root)."""
    cleaned = clean_path(path)
    if cleaned == "/":
        return "/"
    return posixpath.basename(cleaned)
