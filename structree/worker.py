# structree/worker.py

"""
Run one traversal in a separate process.

The child process shares nothing with the caller: it receives the root path
and the serialized configuration, and reports back through a queue with
messages of three shapes::

    {"type": "progress", "increment": int, "message": str}
    {"type": "result", "data": str}
    {"type": "error", "error": str}
"""


from __future__ import annotations

import logging
import multiprocessing
from pathlib import Path
from queue import Empty
from typing import Any

from structree.builder import CancellationCheck, ProgressCallback, StructureBuilder
from structree.config import StructureConfig, resolve_config
from structree.errors import GenerationCancelled, WorkerError
from structree.formatting import render
from structree.stream_format import render_events
from structree.streaming import StreamingWalker

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.05


def _worker_main(queue: Any, root: str, config_data: dict[str, Any]) -> None:
    """
    Child process entry point.

    Parameters
    ----------
    queue : multiprocessing.Queue
        Channel back to the parent; receives progress messages followed by
        exactly one ``result`` or ``error`` message.
    root : str
        Validated root directory.
    config_data : dict[str, Any]
        Output of :meth:`StructureConfig.to_dict`.
    """

    def on_progress(increment: int, message: str) -> None:
        queue.put({"type": "progress", "increment": increment, "message": message})

    try:
        config = resolve_config(config_data, use_worker=False)
        if config.use_streaming:
            walker = StreamingWalker(config, on_progress)
            text = render_events(walker.walk(Path(root)), config)
        else:
            text = render(StructureBuilder(config, on_progress).build(Path(root)), config)
    except Exception as exc:  # reported to the parent, which re-raises
        queue.put({"type": "error", "error": f"{type(exc).__name__}: {exc}"})
    else:
        queue.put({"type": "result", "data": text})


def run_in_worker(
    root: Path,
    config: StructureConfig,
    on_progress: ProgressCallback | None = None,
    is_cancelled: CancellationCheck | None = None,
) -> str:
    """
    Generate the formatted structure of ``root`` in a child process.

    Parameters
    ----------
    root : pathlib.Path
        Validated root directory.
    config : StructureConfig
        Resolved configuration, serialized across the process boundary.
    on_progress : Callable[[int, str], None] | None, optional
        Receives the child's progress messages.
    is_cancelled : Callable[[], bool] | None, optional
        Polled while waiting; a ``True`` result terminates the child.

    Returns
    -------
    str
        The formatted output produced by the child.

    Raises
    ------
    GenerationCancelled
        If ``is_cancelled`` fired before the result arrived.
    WorkerError
        If the child reported an error or died without reporting.
    """

    ctx = multiprocessing.get_context()
    queue = ctx.Queue()
    process = ctx.Process(
        target=_worker_main,
        args=(queue, str(root), config.to_dict()),
        name="structree-worker",
        daemon=True,
    )
    process.start()
    logger.debug("Started worker pid=%s for %s", process.pid, root)

    try:
        while True:
            if is_cancelled is not None and is_cancelled():
                raise GenerationCancelled()
            try:
                message = queue.get(timeout=POLL_INTERVAL)
            except Empty:
                if process.is_alive():
                    continue
                try:
                    message = queue.get(timeout=1.0)
                except Empty:
                    raise WorkerError(
                        f"Worker exited with code {process.exitcode} without a result"
                    ) from None

            kind = message.get("type")
            if kind == "progress":
                if on_progress is not None:
                    on_progress(message["increment"], message["message"])
            elif kind == "result":
                return message["data"]
            elif kind == "error":
                logger.warning("Worker failed for %s: %s", root, message["error"])
                raise WorkerError(message["error"])
    finally:
        if process.is_alive():
            process.terminate()
        process.join()
        queue.close()
