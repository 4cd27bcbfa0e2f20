# structree/errors.py

"""
Exception types raised by structree.

Filesystem problems on individual entries are never raised: they are skipped
during traversal. What reaches the caller is one of the conditions below.
"""


from __future__ import annotations


class StructureError(Exception):
    """Base class for every error raised by structree."""


class GenerationCancelled(StructureError):
    """The caller-supplied cancellation check returned ``True``."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


class ConfigError(StructureError, ValueError):
    """A configuration value was rejected while resolving a config."""


class InvalidRootError(StructureError, ValueError):
    """The traversal root does not exist or is not a directory."""


class WorkerError(StructureError):
    """The worker process reported a failure or exited without a result."""
