"""httpfs - serve any virtual filesystem over HTTP.

The HttpFS adapter wraps a backing filesystem (in-memory, host
directory, subtree view, ...) for static-file HTTP serving and
re-exports its write-side operations, including a fault-tolerant
recursive remove.
"""

__version__ = "0.1.0"

from httpfs.adapter import HttpFS  # noqa: E402
from httpfs.remover import RecursiveRemover  # noqa: E402

__all__ = ["HttpFS", "RecursiveRemover", "__version__"]
