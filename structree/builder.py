# structree/builder.py

"""
Eager traversal: build the complete FileEntry tree in memory.

Each directory goes through ``enter -> scan -> filter -> stat children ->
recurse``; directories are recursed into, symlinks never are. Once the tree
is complete a single metadata-aware sort pass orders it when the sort key is
not ``name`` (the filter pipeline already ordered it by name otherwise).
"""


from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from structree.cache import TraversalCache
from structree.config import StructureConfig
from structree.entry import DIRECTORY, FileEntry, decorate
from structree.errors import GenerationCancelled
from structree.filters import filter_entries, scan_directory
from structree.sorting import sort_tree

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]
CancellationCheck = Callable[[], bool]


@dataclass
class BuildResult:
    """A materialized traversal: the root entry plus run statistics."""

    root: FileEntry
    processed: int
    elapsed_ms: int


def root_entry(root: Path) -> FileEntry:
    """Directory entry for the traversal root; never decorated with metadata."""
    return FileEntry(root.name or str(root), root, DIRECTORY)


class StructureBuilder:
    """
    Build a :class:`FileEntry` tree for a directory.

    Parameters
    ----------
    config : StructureConfig
        Resolved configuration.
    on_progress : Callable[[int, str], None] | None, optional
        Called with ``(1, message)`` once per processed entry.
    is_cancelled : Callable[[], bool] | None, optional
        Polled before each directory is processed; a ``True`` result raises
        :class:`GenerationCancelled`.
    cache : TraversalCache | None, optional
        Session cache; a private one is created when omitted.
    """

    def __init__(
        self,
        config: StructureConfig,
        on_progress: ProgressCallback | None = None,
        is_cancelled: CancellationCheck | None = None,
        cache: TraversalCache | None = None,
    ) -> None:
        self.config = config
        self.on_progress = on_progress
        self.is_cancelled = is_cancelled
        self.cache = cache if cache is not None else TraversalCache()
        self.processed = 0

    def build(self, root: Path) -> BuildResult:
        """
        Traverse ``root`` and return the sorted tree.

        Raises
        ------
        GenerationCancelled
            If the cancellation check fires at any directory.
        """

        start = time.perf_counter()
        self.processed = 0
        entry = root_entry(Path(root))
        self._fill(entry, 0)
        if self.config.sort_by != "name":
            sort_tree(entry, self.config.sort_by)

        elapsed_ms = round((time.perf_counter() - start) * 1000)
        logger.info("Built tree for %s: %d items in %d ms", entry.fs_path, self.processed, elapsed_ms)
        return BuildResult(entry, self.processed, elapsed_ms)

    def _fill(self, directory: FileEntry, depth: int) -> None:
        if self.is_cancelled is not None and self.is_cancelled():
            raise GenerationCancelled()

        # The directory stays visible at the depth limit; only its contents go.
        if self.config.max_depth and depth >= self.config.max_depth:
            return

        try:
            raw = scan_directory(directory.fs_path)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory.fs_path, exc)
            return

        for item in filter_entries(raw, directory.fs_path, self.config, self.cache):
            self.processed += 1
            if self.on_progress is not None:
                self.on_progress(1, f"Processing {item.name}")

            child = FileEntry(item.name, item.path, item.kind, parent=directory)
            if self.config.needs_stat:
                decorate(child, self.cache.stat(child.fs_path), self.config)
            if child.is_dir:
                self._fill(child, depth + 1)
