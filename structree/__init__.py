"""
structree: filesystem structure snapshots.

This package walks a directory tree, filters it (hidden entries, extension
whitelists, excluded folders, glob patterns and ``.gitignore`` rules),
optionally decorates entries with size, permissions and modification time,
and renders the result as a Unicode tree, JSON, Markdown, XML or CSV.

Two traversal strategies are available: an eager builder returning an
``anytree``-based :class:`FileEntry` tree, and a streaming walker yielding
events with memory bounded by the tree depth.
"""

from __future__ import annotations

import logging

from .api import (
    export_structure,
    generate,
    generate_batch,
    generate_text,
    iter_text,
    output_extension,
    stream_events,
)
from .builder import BuildResult, StructureBuilder
from .cache import TraversalCache
from .config import StructureConfig, resolve_config
from .entry import FileEntry
from .errors import ConfigError, GenerationCancelled, InvalidRootError, StructureError, WorkerError
from .formatting import render
from .gitignore import GitignoreRuleSet, resolve_gitignore
from .patterns import compile_pattern
from .sorting import sort_entries
from .stream_format import StreamingFormatter, render_events
from .streaming import StreamingWalker

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BuildResult",
    "ConfigError",
    "FileEntry",
    "GenerationCancelled",
    "GitignoreRuleSet",
    "InvalidRootError",
    "StreamingFormatter",
    "StreamingWalker",
    "StructureBuilder",
    "StructureConfig",
    "StructureError",
    "TraversalCache",
    "WorkerError",
    "compile_pattern",
    "export_structure",
    "generate",
    "generate_batch",
    "generate_text",
    "iter_text",
    "output_extension",
    "render",
    "render_events",
    "resolve_config",
    "resolve_gitignore",
    "sort_entries",
    "stream_events",
]
