# structree/streaming.py

"""
Streaming traversal: yield structural events instead of building a tree.

:class:`StreamingWalker.walk` is a generator. It suspends at every event and
only resumes when the consumer asks for the next one, so what it holds at any
time is the chain of open directories (with their filtered sibling lists),
never the whole tree.

Event order: ``start`` first, ``end`` last, and every ``directory-open`` is
matched by exactly one ``directory-close`` with the directory's children
emitted in between. Compressed directories still open and close, but their
children are not emitted.
"""


from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Union

from structree.builder import CancellationCheck, ProgressCallback, root_entry
from structree.cache import TraversalCache
from structree.config import StructureConfig
from structree.entry import FileEntry, decorate
from structree.errors import GenerationCancelled
from structree.filters import Candidate, filter_entries, scan_directory
from structree.sorting import sort_key

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 100

BRANCH = "│   "
SPACE = "    "


@dataclass(frozen=True)
class StartEvent:
    kind: ClassVar[str] = "start"
    root: FileEntry


@dataclass(frozen=True)
class FileEvent:
    kind: ClassVar[str] = "file"
    entry: FileEntry
    prefix: str
    is_last: bool


@dataclass(frozen=True)
class DirectoryOpenEvent:
    """
    A directory was reached.

    ``item_count`` is the number of children left after filtering; when
    ``compressed`` is set the children are not emitted.
    """

    kind: ClassVar[str] = "directory-open"
    entry: FileEntry
    prefix: str
    is_last: bool
    item_count: int = 0
    compressed: bool = False


@dataclass(frozen=True)
class DirectoryCloseEvent:
    kind: ClassVar[str] = "directory-close"


@dataclass(frozen=True)
class ProgressEvent:
    kind: ClassVar[str] = "progress"
    processed: int


@dataclass(frozen=True)
class EndEvent:
    kind: ClassVar[str] = "end"
    duration_ms: int
    total_items: int


StreamEvent = Union[StartEvent, FileEvent, DirectoryOpenEvent, DirectoryCloseEvent, ProgressEvent, EndEvent]


class StreamingWalker:
    """
    Event-producing counterpart of :class:`structree.builder.StructureBuilder`.

    Filtering, depth limiting, cancellation and caching behave exactly as in
    the eager builder, and entries come out in the same order.

    Parameters
    ----------
    config : StructureConfig
        Resolved configuration.
    on_progress : Callable[[int, str], None] | None, optional
        Called with ``(1, message)`` once per processed entry.
    is_cancelled : Callable[[], bool] | None, optional
        Polled before each directory listing.
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

    def walk(self, root: Path) -> Iterator[StreamEvent]:
        """
        Yield the events describing ``root``.

        Raises
        ------
        GenerationCancelled
            From the generator, when the cancellation check fires.
        """

        start = time.perf_counter()
        self.processed = 0
        root_node = root_entry(Path(root))
        yield StartEvent(root_node)

        children = self._materialize(self._list(root_node.fs_path, 0))
        yield from self._walk(children, "", 0)

        duration_ms = round((time.perf_counter() - start) * 1000)
        logger.info("Streamed %s: %d items in %d ms", root_node.fs_path, self.processed, duration_ms)
        yield EndEvent(duration_ms, self.processed)

    def _list(self, directory: Path, depth: int) -> list[Candidate]:
        if self.is_cancelled is not None and self.is_cancelled():
            raise GenerationCancelled()
        if self.config.max_depth and depth >= self.config.max_depth:
            return []
        try:
            raw = scan_directory(directory)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return []
        return filter_entries(raw, directory, self.config, self.cache)

    def _materialize(self, candidates: list[Candidate]) -> list[FileEntry]:
        entries = [FileEntry(c.name, c.path, c.kind) for c in candidates]
        if self.config.needs_stat:
            for entry in entries:
                decorate(entry, self.cache.stat(entry.fs_path), self.config)
        if self.config.sort_by != "name":
            entries.sort(key=sort_key(self.config.sort_by))
        return entries

    def _walk(self, entries: list[FileEntry], prefix: str, depth: int) -> Iterator[StreamEvent]:
        last_index = len(entries) - 1
        for index, entry in enumerate(entries):
            is_last = index == last_index

            self.processed += 1
            if self.on_progress is not None:
                self.on_progress(1, f"Processing {entry.name}")
            if self.processed % PROGRESS_EVERY == 0:
                yield ProgressEvent(self.processed)

            if not entry.is_dir:
                yield FileEvent(entry, prefix, is_last)
                continue

            candidates = self._list(entry.fs_path, depth + 1)
            compressed = self.config.should_compress(len(candidates))
            yield DirectoryOpenEvent(entry, prefix, is_last, len(candidates), compressed)
            if not compressed:
                children = self._materialize(candidates)
                yield from self._walk(children, prefix + (SPACE if is_last else BRANCH), depth + 1)
            yield DirectoryCloseEvent()
