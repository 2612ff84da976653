"""Recursive removal of a file or directory subtree.

The remover works on top of the minimal Filer interface: stat, open a
directory, list it, and remove single entries. Backends that implement
the RemoveAller extension are handed the whole operation instead.

Semantics:
- Removing a path that does not exist succeeds.
- The first error that is not a "not found" aborts the walk and is
  raised unchanged. Entries removed before the failure stay removed.
"""

import logging
import os
import posixpath

from httpfs.errors import is_not_empty, is_not_found
from httpfs.filesystem.base import Filer, RemoveAller
from httpfs.filesystem.models import SYNTHETIC_ENTRIES

logger = logging.getLogger(__name__)


class RecursiveRemover:
    """Removes a path and, for directories, everything below it.

    The remover holds no state between calls. It is not safe against
    other actors mutating the same subtree concurrently; the backing
    filesystem owns its own consistency.

    Example:
        >>> remover = RecursiveRemover(MemFS())
        >>> remover.remove_all("/does/not/exist")  # no-op
    """

    def __init__(self, fs: Filer) -> None:
        """Initialize the remover.

        Args:
            fs: Backing filesystem to remove entries from.
        """
        self._fs = fs

    @property
    def uses_native(self) -> bool:
        """Whether the backing filesystem provides its own bulk delete."""
        return isinstance(self._fs, RemoveAller)

    def remove_all(self, path: str) -> None:
        """Remove ``path`` and all of its descendants.

        Args:
            path: Virtual path of a file or directory.

        Raises:
            OSError: The first failure other than "not found", unchanged.
        """
        if isinstance(self._fs, RemoveAller):
            try:
                self._fs.remove_all(path)
            except OSError as e:
                if not is_not_found(e):
                    raise
                logger.debug("Native remove_all: %s already absent", path)
            return

        self._remove_tree(path)

    def _remove_tree(self, path: str) -> None:
        try:
            info = self._fs.stat(path)
        except OSError as e:
            if is_not_found(e):
                return
            raise

        if not info.is_dir:
            self._fs.remove(path)
            return

        try:
            handle = self._fs.open_file(path, os.O_RDONLY, 0)
        except OSError as e:
            if is_not_found(e):
                return
            raise

        # Closed before recursing, also when listing fails
        with handle:
            entries = handle.readdir(0)

        for entry in entries:
            if entry.name in SYNTHETIC_ENTRIES:
                continue
            self._remove_tree(posixpath.join(path, entry.name))

        try:
            self._fs.remove(path)
        except OSError as e:
            # Some backends report "not empty" while only . and .. remain
            if self._is_gone(path):
                logger.debug("Remove of %s failed but the directory is gone", path)
                return
            if is_not_empty(e):
                logger.debug("Directory %s gained entries during removal", path)
            raise

    def _is_gone(self, path: str) -> bool:
        try:
            self._fs.stat(path)
        except OSError as e:
            return is_not_found(e)
        return False
