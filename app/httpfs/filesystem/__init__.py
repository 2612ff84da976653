"""Backing filesystem interfaces and implementations.

This module provides the Filer/File interfaces every backing filesystem
implements, the optional RemoveAller extension, and the bundled
in-memory, host-directory, and subtree backends.
"""

from httpfs.filesystem.base import File, Filer, RemoveAller
from httpfs.filesystem.basepath import BasePathFS
from httpfs.filesystem.memfs import MemFile, MemFS
from httpfs.filesystem.models import SYNTHETIC_ENTRIES, EntryInfo, base_name, clean_path
from httpfs.filesystem.osfs import OSFS, OSFile

__all__ = [
    "OSFS",
    "SYNTHETIC_ENTRIES",
    "BasePathFS",
    "EntryInfo",
    "File",
    "Filer",
    "MemFS",
    "MemFile",
    "OSFile",
    "RemoveAller",
    "base_name",
    "clean_path",
]
