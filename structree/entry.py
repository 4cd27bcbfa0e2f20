# structree/entry.py

"""
The FileEntry tree model.

Eager traversals return a tree of :class:`FileEntry` nodes built on
``anytree.NodeMixin``, so results can be walked with ``PreOrderIter`` or
drawn with ``RenderTree``. Streaming traversals create the same nodes but
never attach them to a parent.
"""


from __future__ import annotations

import os
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from anytree import NodeMixin, TreeError

FILE = "file"
DIRECTORY = "directory"
SYMLINK = "symlink"
KINDS = (FILE, DIRECTORY, SYMLINK)


class FileEntry(NodeMixin):
    """
    One filesystem node of a traversal result.

    Parameters
    ----------
    name : str
        Base name of the node.
    path : pathlib.Path
        Absolute path, unique within a traversal. Stored as ``fs_path``,
        since anytree reserves ``path`` for the chain of ancestor nodes.
    kind : str
        One of ``"file"``, ``"directory"`` or ``"symlink"``.
    size_bytes : int | None, optional
        File size in bytes; anytree reserves ``size`` for the subtree count.
    modified_at : datetime | None, optional
        Last modification time, UTC.
    permissions : str | None, optional
        Permission string such as ``rwxr-x---``.
    parent : FileEntry | None, optional
        Parent directory entry.
    children : Iterable[FileEntry] | None, optional
        Initial children; only valid for directories.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        kind: str,
        *,
        size_bytes: int | None = None,
        modified_at: datetime | None = None,
        permissions: str | None = None,
        parent: FileEntry | None = None,
        children: Iterable[FileEntry] | None = None,
    ) -> None:
        if kind not in KINDS:
            raise ValueError(f"Unknown entry kind: {kind!r}")
        self.name = name
        self.fs_path = path
        self.kind = kind
        self.size_bytes = size_bytes
        self.modified_at = modified_at
        self.permissions = permissions
        self.parent = parent
        if children:
            self.children = children

    def __repr__(self) -> str:
        return f"FileEntry({self.name!r}, kind={self.kind!r})"

    def _pre_attach(self, parent: FileEntry) -> None:
        if parent.kind != DIRECTORY:
            raise TreeError(f"Cannot attach {self.name!r} under non-directory {parent.name!r}")

    @property
    def is_dir(self) -> bool:
        return self.kind == DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind == SYMLINK

    def to_dict(self, *, recursive: bool = True) -> dict[str, Any]:
        """Return the JSON shape of this entry (and its subtree)."""
        out: dict[str, Any] = {"name": self.name, "path": str(self.fs_path), "type": self.kind}
        if self.size_bytes is not None:
            out["size"] = self.size_bytes
        if self.modified_at is not None:
            out["modified"] = format_timestamp(self.modified_at)
        if self.permissions is not None:
            out["permissions"] = self.permissions
        if self.is_dir:
            out["children"] = [c.to_dict() for c in self.children] if recursive else []
        return out


def entry_kind(dir_entry: os.DirEntry) -> str:
    """Classify a scandir entry without following symlinks."""
    if dir_entry.is_symlink():
        return SYMLINK
    if dir_entry.is_dir(follow_symlinks=False):
        return DIRECTORY
    return FILE


def permissions_string(mode: int) -> str:
    """Render the nine owner/group/other permission bits as ``rwxr-x---``."""
    return "".join(ch if mode & (1 << (8 - i)) else "-" for i, ch in enumerate("rwx" * 3))


def format_timestamp(value: datetime) -> str:
    """ISO 8601 with milliseconds and a ``Z`` suffix for UTC."""
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def human_file_size(size: int) -> str:
    """Format a byte count as ``0 B``, ``512.0 B``, ``1.5 KB`` and so on."""
    if size <= 0:
        return "0 B"
    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{value:.1f} {units[index]}"


def decorate(entry: FileEntry, st: os.stat_result | None, config: Any) -> None:
    """
    Copy the requested metadata from ``st`` onto ``entry``.

    ``config`` is a :class:`structree.config.StructureConfig`; only the fields
    enabled by it are populated.
    """

    if st is None:
        return
    if config.include_size:
        entry.size_bytes = st.st_size
    if config.include_permissions:
        entry.permissions = permissions_string(st.st_mode)
    if config.include_modified_date:
        entry.modified_at = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
