# structree/sorting.py

"""
Ordering of traversal results.

Directories come before files and symlinks for every key except ``type``,
where the kind string alone decides. Within that split, ``name`` sorts in
case-insensitive natural order, ``size`` and ``modified`` sort descending
and ``type`` sorts ascending.
"""


from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from structree.entry import FileEntry

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> tuple[Any, ...]:
    """Key under which ``file2`` sorts before ``file10``, ignoring case."""
    parts = _DIGITS.split(name.casefold())
    return tuple(int(p) if i % 2 else p for i, p in enumerate(parts)), name


def _dir_rank(entry: FileEntry) -> int:
    return 0 if entry.is_dir else 1


def _modified(entry: FileEntry) -> float:
    return entry.modified_at.timestamp() if entry.modified_at is not None else 0.0


_KEYS: dict[str, Callable[[FileEntry], Any]] = {
    "name": lambda e: (_dir_rank(e), natural_key(e.name)),
    "size": lambda e: (_dir_rank(e), -(e.size_bytes or 0)),
    "modified": lambda e: (_dir_rank(e), -_modified(e)),
    "type": lambda e: e.kind,
}


def sort_key(key: str) -> Callable[[FileEntry], Any]:
    """Return the ``list.sort`` key function for sort key ``key``."""
    try:
        return _KEYS[key]
    except KeyError:
        raise ValueError(f"Unknown sort key: {key!r}") from None


def sort_entries(entries: list[FileEntry], key: str) -> None:
    """
    Sort ``entries`` in place and recurse into every directory's children.

    The sort is stable, so entries that compare equal keep their previous
    relative order.

    Parameters
    ----------
    entries : list[FileEntry]
        Sibling entries to reorder.
    key : str
        One of ``name``, ``size``, ``modified`` or ``type``.
    """

    entries.sort(key=sort_key(key))
    for entry in entries:
        if entry.is_dir and entry.children:
            sort_tree(entry, key)


def sort_tree(root: FileEntry, key: str) -> None:
    """Reorder the children of ``root`` and of all its descendants."""
    children = list(root.children)
    sort_entries(children, key)
    root.children = children
