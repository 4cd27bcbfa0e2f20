# structree/stream_format.py

"""
Per-event rendering of streaming traversals.

:class:`StreamingFormatter` turns each event into a text chunk as it
arrives. Tree, Markdown, XML and CSV output is written incrementally; JSON
cannot be, so its formatter buffers the entries and writes the whole document
when the ``end`` event arrives.
"""


from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from structree.config import StructureConfig
from structree.entry import FileEntry
from structree.formatting import (
    CSV_HEADER,
    RULE,
    collapsed_line,
    connector,
    csv_row,
    entry_line,
    json_document,
    markdown_footer,
    markdown_header,
    root_line,
    timing_lines,
    xml_close,
    xml_footer,
    xml_header,
    xml_open,
)
from structree.streaming import BRANCH, SPACE, StreamEvent


def _chunk(lines: Iterable[str]) -> str:
    return "".join(line + "\n" for line in lines)


class StreamingFormatter:
    """
    Stateful event-to-text converter for one streaming traversal.

    Parameters
    ----------
    config : StructureConfig
        Resolved configuration; ``output_format`` selects the renderer.
    """

    def __init__(self, config: StructureConfig) -> None:
        self.config = config
        self._json_stack: list[dict[str, Any]] = []
        self._xml_pending: tuple[FileEntry, int] | None = None
        self._xml_depth = 0

    def format(self, event: StreamEvent) -> str:
        """Return the text chunk for ``event`` (possibly empty)."""
        fmt = self.config.output_format
        if fmt == "json":
            return self._json(event)
        if fmt == "xml":
            return self._xml(event)
        if fmt == "csv":
            return self._csv(event)
        return self._tree(event, markdown=fmt == "markdown")

    # tree / markdown

    def _tree(self, event: StreamEvent, *, markdown: bool) -> str:
        if event.kind == "start":
            if markdown:
                return _chunk(markdown_header(event.root, self.config))
            return _chunk([root_line(event.root, self.config), RULE])
        if event.kind in ("file", "directory-open"):
            lines = [entry_line(event.entry, event.prefix + connector(event.is_last), self.config)]
            if event.kind == "directory-open" and event.compressed:
                fill = event.prefix + (SPACE if event.is_last else BRANCH)
                lines.append(collapsed_line(fill, event.item_count))
            return _chunk(lines)
        if event.kind == "end":
            if markdown:
                return _chunk(markdown_footer(event.duration_ms, event.total_items))
            return _chunk(["", *timing_lines(event.duration_ms, event.total_items)])
        return ""

    # json

    def _json(self, event: StreamEvent) -> str:
        if event.kind == "start":
            self._json_stack = [event.root.to_dict(recursive=False)]
        elif event.kind == "file":
            self._json_stack[-1]["children"].append(event.entry.to_dict(recursive=False))
        elif event.kind == "directory-open":
            node = event.entry.to_dict(recursive=False)
            self._json_stack[-1]["children"].append(node)
            self._json_stack.append(node)
        elif event.kind == "directory-close":
            self._json_stack.pop()
        elif event.kind == "end":
            structure = self._json_stack[0]
            self._json_stack = []
            return json_document(structure, self.config, event.duration_ms, event.total_items)
        return ""

    # xml

    def _xml_flush(self) -> list[str]:
        # A pending directory that gets content is written as an open tag.
        if self._xml_pending is None:
            return []
        entry, depth = self._xml_pending
        self._xml_pending = None
        return [xml_open(entry, depth, empty=False)]

    def _xml(self, event: StreamEvent) -> str:
        if event.kind == "start":
            self._xml_pending = (event.root, 1)
            self._xml_depth = 1
            return _chunk(xml_header())
        if event.kind == "directory-open":
            lines = self._xml_flush()
            self._xml_depth += 1
            self._xml_pending = (event.entry, self._xml_depth)
            return _chunk(lines)
        if event.kind == "file":
            lines = self._xml_flush()
            lines.append(xml_open(event.entry, self._xml_depth + 1, empty=True))
            return _chunk(lines)
        if event.kind == "directory-close":
            lines = self._xml_close_current()
            self._xml_depth -= 1
            return _chunk(lines)
        if event.kind == "end":
            lines = self._xml_close_current()
            lines.extend(xml_footer(event.duration_ms, event.total_items))
            return _chunk(lines)
        return ""

    def _xml_close_current(self) -> list[str]:
        if self._xml_pending is not None:
            entry, depth = self._xml_pending
            self._xml_pending = None
            return [xml_open(entry, depth, empty=True)]
        return [xml_close(self._xml_depth)]

    # csv

    def _csv(self, event: StreamEvent) -> str:
        if event.kind == "start":
            return _chunk([CSV_HEADER, csv_row(event.root)])
        if event.kind in ("file", "directory-open"):
            return csv_row(event.entry) + "\n"
        return ""


def iter_chunks(events: Iterable[StreamEvent], config: StructureConfig) -> Iterator[str]:
    """Render ``events`` lazily, skipping empty chunks."""
    formatter = StreamingFormatter(config)
    for event in events:
        chunk = formatter.format(event)
        if chunk:
            yield chunk


def render_events(events: Iterable[StreamEvent], config: StructureConfig) -> str:
    """Render a whole event stream into one document."""
    return "".join(iter_chunks(events, config))
