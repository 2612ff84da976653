"""Batch removal operator.

Removes several paths from an HttpFS with dry-run support and
per-path failure isolation, reporting one result per requested path.
"""

import logging
from dataclasses import dataclass

from httpfs.adapter import HttpFS
from httpfs.errors import is_not_found
from httpfs.filesystem.models import clean_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RemovalResult:
    """Result of removing a single path.

    Attributes:
        path: Virtual path that was operated on.
        success: Whether the path is gone afterwards.
        error: Error message if the removal failed, None otherwise.
        dry_run: Whether this was a dry-run (nothing removed).
        existed: Whether the path existed before the removal.
    """

    path: str
    success: bool
    error: str | None = None
    dry_run: bool = False
    existed: bool = True


class RemovalOperator:
    """Removes virtual paths recursively, one result per path.

    A failure on one path does not stop the others. The root directory
    is protected and never removed.

    Attributes:
        _fs: Adapter to remove paths from.
        _dry_run: If True, report what would be removed without removing.
    """

    def __init__(self, fs: HttpFS, dry_run: bool = False) -> None:
        """Initialize the RemovalOperator.

        Args:
            fs: Adapter to remove paths from.
            dry_run: If True, report what would be removed without removing.
        """
        self._fs = fs
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Check if operator is in dry-run mode."""
        return self._dry_run

    def delete(self, paths: list[str]) -> list[RemovalResult]:
        """Remove multiple paths and return results.

        Args:
            paths: Virtual paths to remove.

        Returns:
            List of RemovalResult, one per input path.
        """
        results: list[RemovalResult] = []

        for path in paths:
            if self._is_protected(path):
                results.append(
                    RemovalResult(
                        path=path,
                        success=False,
                        error=f"Protected path cannot be removed: {path}",
                    )
                )
                continue

            results.append(self._delete_single(path))

        return results

    def _delete_single(self, path: str) -> RemovalResult:
        existed = self._exists(path)

        if self._dry_run:
            logger.info("Dry-run: would remove %s", path)
            return RemovalResult(path=path, success=True, dry_run=True, existed=existed)

        try:
            self._fs.remove_all(path)
        except OSError as e:
            logger.warning("Failed to remove %s: %s", path, e)
            return RemovalResult(path=path, success=False, error=str(e), existed=existed)

        logger.info("Removed %s", path)
        return RemovalResult(path=path, success=True, existed=existed)

    def _exists(self, path: str) -> bool:
        try:
            self._fs.stat(path)
        except OSError as e:
            return not is_not_found(e)
        return True

    def _is_protected(self, path: str) -> bool:
        """Check if a path is protected from removal."""
        return clean_path(path) == "/"
