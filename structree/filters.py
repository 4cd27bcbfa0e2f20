# structree/filters.py

"""
The filter pipeline applied to each directory listing.

Stages run in a fixed order and only ever narrow the listing:

1. hidden entries (names starting with ``.``) unless ``include_hidden``,
2. directories named in ``exclude_folders``,
3. files whose extension is not in ``extension_filter``,
4. entries whose path matches an ``exclude_patterns`` glob,
5. entries ignored by the governing ``.gitignore`` when ``respect_gitignore``.

A last stage orders the survivors directories-first by natural name when
sorting by name; other sort keys are applied later, once metadata exists.
"""


from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from structree.cache import TraversalCache
from structree.config import StructureConfig
from structree.entry import DIRECTORY, FILE, entry_kind
from structree.gitignore import resolve_gitignore
from structree.patterns import matches_any
from structree.sorting import natural_key


@dataclass(frozen=True)
class Candidate:
    """A raw directory listing item, classified once."""

    name: str
    path: Path
    kind: str

    @property
    def is_dir(self) -> bool:
        return self.kind == DIRECTORY

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1][1:].lower()


def scan_directory(directory: Path) -> list[Candidate]:
    """
    List ``directory`` in filesystem enumeration order.

    Raises
    ------
    OSError
        If the directory cannot be read.
    """

    with os.scandir(directory) as it:
        return [Candidate(d.name, directory / d.name, entry_kind(d)) for d in it]


def filter_entries(
    raw_entries: Iterable[Candidate],
    parent: Path,
    config: StructureConfig,
    cache: TraversalCache,
) -> list[Candidate]:
    """
    Run the filter pipeline over one directory listing.

    Parameters
    ----------
    raw_entries : Iterable[Candidate]
        Listing of ``parent`` as returned by :func:`scan_directory`.
    parent : pathlib.Path
        Directory the entries belong to.
    config : StructureConfig
        Active configuration.
    cache : TraversalCache
        Session cache used for gitignore lookups.

    Returns
    -------
    list[Candidate]
        Surviving entries, ordered for the ``name`` sort key and otherwise in
        enumeration order.
    """

    out = list(raw_entries)

    if not config.include_hidden:
        out = [c for c in out if not c.name.startswith(".")]

    if config.exclude_folders:
        excluded = set(config.exclude_folders)
        out = [c for c in out if not (c.is_dir and c.name in excluded)]

    if config.extension_filter and any(c.kind == FILE for c in out):
        allowed = set(config.extension_filter)
        out = [c for c in out if c.kind != FILE or c.extension in allowed]

    if config.exclude_patterns:
        out = [c for c in out if not matches_any(c.path, config.exclude_patterns)]

    if config.respect_gitignore:
        rules = resolve_gitignore(parent, cache)
        if rules is not None:
            out = [c for c in out if not rules.is_ignored(c.path, c.is_dir)]

    if config.sort_by == "name":
        out.sort(key=lambda c: (0 if c.is_dir else 1, natural_key(c.name)))

    return out
