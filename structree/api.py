# structree/api.py

"""
Public entry points.

:func:`generate` mirrors the two traversal strategies: it returns formatted
text in eager mode and an iterator of stream events in streaming mode.
:func:`generate_text` always returns text, and :func:`export_structure`
writes it to disk with the extension matching the output format.
:func:`generate_batch` combines several folders into one Markdown report.
"""


from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from structree.builder import CancellationCheck, ProgressCallback, StructureBuilder
from structree.cache import TraversalCache
from structree.config import StructureConfig, resolve_config
from structree.errors import GenerationCancelled, InvalidRootError, StructureError
from structree.formatting import generated_at, render
from structree.stream_format import iter_chunks
from structree.streaming import StreamEvent, StreamingWalker
from structree.worker import run_in_worker

logger = logging.getLogger(__name__)

ConfigLike = StructureConfig | Mapping[str, Any] | None


def validate_root(root: str | os.PathLike[str]) -> Path:
    """
    Resolve ``root`` and check that it is an existing directory.

    Raises
    ------
    InvalidRootError
        If the path does not exist or is not a directory.
    """

    path = Path(root).resolve()
    if not path.exists():
        raise InvalidRootError(f"Root path does not exist: {path}")
    if not path.is_dir():
        raise InvalidRootError(f"Root path is not a directory: {path}")
    return path


def stream_events(
    root: str | os.PathLike[str],
    config: ConfigLike = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
    *,
    cache: TraversalCache | None = None,
) -> Iterator[StreamEvent]:
    """
    Validate the inputs, then return the streaming walker's event iterator.

    Validation happens immediately, not on first iteration.
    """

    cfg = resolve_config(config)
    path = validate_root(root)
    return StreamingWalker(cfg, on_progress, is_cancelled, cache).walk(path)


def generate(
    root: str | os.PathLike[str],
    config: ConfigLike = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
    *,
    cache: TraversalCache | None = None,
) -> str | Iterator[StreamEvent]:
    """
    Traverse ``root`` and produce its structure.

    Parameters
    ----------
    root : str | os.PathLike
        Directory to describe.
    config : StructureConfig | Mapping | None, optional
        Full or partial configuration, resolved via
        :func:`structree.config.resolve_config`.
    on_progress : Callable[[int, str], None] | None, optional
        Called with ``(increment, message)`` per processed entry.
    is_cancelled : Callable[[], bool] | None, optional
        Cooperative cancellation check, polled before each directory.
    cache : TraversalCache | None, optional
        Session cache to reuse; by default each call gets a fresh one.

    Returns
    -------
    str | Iterator[StreamEvent]
        Formatted text in eager mode (computed in a worker process when
        ``use_worker`` is set), or the event iterator when ``use_streaming``
        is set.

    Raises
    ------
    ConfigError
        If the configuration is invalid.
    InvalidRootError
        If ``root`` is not an existing directory.
    GenerationCancelled
        If ``is_cancelled`` fires during traversal.
    """

    cfg = resolve_config(config)
    path = validate_root(root)

    if cfg.use_streaming:
        return StreamingWalker(cfg, on_progress, is_cancelled, cache).walk(path)
    if cfg.use_worker:
        return run_in_worker(path, cfg, on_progress, is_cancelled)

    result = StructureBuilder(cfg, on_progress, is_cancelled, cache).build(path)
    return render(result, cfg)


def iter_text(
    root: str | os.PathLike[str],
    config: ConfigLike = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
    *,
    cache: TraversalCache | None = None,
) -> Iterator[str]:
    """Stream ``root`` and yield formatted chunks as events arrive."""
    cfg = resolve_config(config)
    events = stream_events(root, cfg, on_progress, is_cancelled, cache=cache)
    return iter_chunks(events, cfg)


def generate_text(
    root: str | os.PathLike[str],
    config: ConfigLike = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
    *,
    cache: TraversalCache | None = None,
) -> str:
    """Like :func:`generate`, but streaming mode is rendered to text as well."""
    cfg = resolve_config(config)
    if cfg.use_streaming:
        return "".join(iter_text(root, cfg, on_progress, is_cancelled, cache=cache))
    return generate(root, cfg, on_progress, is_cancelled, cache=cache)


def output_extension(output_format: str) -> str:
    """File extension (without dot) for an output format."""
    return "txt" if output_format == "tree" else output_format


def export_structure(
    root: str | os.PathLike[str],
    config: ConfigLike = None,
    destination: str | os.PathLike[str] | None = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
) -> Path:
    """
    Generate the structure of ``root`` and write it to a file.

    Parameters
    ----------
    root : str | os.PathLike
        Directory to describe.
    config : StructureConfig | Mapping | None, optional
        Full or partial configuration.
    destination : str | os.PathLike | None, optional
        Target file. Defaults to ``<root>/structure.<ext>``, where ``ext``
        follows :func:`output_extension`.

    Returns
    -------
    pathlib.Path
        Path of the written file.
    """

    cfg = resolve_config(config)
    path = validate_root(root)
    if destination is None:
        target = path / f"structure.{output_extension(cfg.output_format)}"
    else:
        target = Path(destination)

    text = generate_text(path, cfg, on_progress, is_cancelled)
    target.write_text(text, encoding="utf-8")
    logger.info("Wrote %s structure of %s to %s", cfg.output_format, path, target)
    return target


BATCH_TITLE = "# 📊 Batch processing report"


def generate_batch(
    roots: Iterable[str | os.PathLike[str]],
    config: ConfigLike = None,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
) -> str:
    """
    Generate several folders with one configuration into a Markdown report.

    Each folder gets its own section holding its generated text in a fenced
    block. A folder that fails (missing root, worker failure) gets an error
    section instead and the remaining folders are still processed.
    Cancellation is checked before each folder; a cancelled run stops there
    and returns the sections completed so far.

    Parameters
    ----------
    roots : Iterable[str | os.PathLike]
        Folders to process, in report order.
    config : StructureConfig | Mapping | None, optional
        Configuration shared by every folder.
    on_progress : Callable[[int, str], None] | None, optional
        Called once per folder with ``(percent_increment, message)``.
    is_cancelled : Callable[[], bool] | None, optional
        Cooperative cancellation check, also passed to each traversal.

    Returns
    -------
    str
        The report, newline-terminated.

    Raises
    ------
    ConfigError
        If the configuration is invalid; raised before any folder is read.
    """

    cfg = resolve_config(config)
    folders = [Path(root) for root in roots]
    increment = round(100 / len(folders)) if folders else 0
    sections: list[str] = []

    for index, folder in enumerate(folders):
        if is_cancelled is not None and is_cancelled():
            logger.info("Batch cancelled after %d of %d folders", index, len(folders))
            break
        name = folder.name or str(folder)
        if on_progress is not None:
            on_progress(increment, f"Processing {name} ({index + 1}/{len(folders)})")

        try:
            text = generate_text(folder, cfg, None, is_cancelled)
        except GenerationCancelled:
            logger.info("Batch cancelled while processing %s", folder)
            break
        except StructureError as exc:
            logger.warning("Batch item %s failed: %s", folder, exc)
            sections.append(f"## ❌ {name}\n*Error:* {exc}\n")
        else:
            sections.append(f"## 📁 {name}\n```\n{text.rstrip()}\n```\n")

    return "\n".join([BATCH_TITLE, f"**Generated:** {generated_at()}", "", *sections]) + "\n"
