# structree/patterns.py

"""
Glob-style path matching.

Patterns support ``*`` (any run of characters except ``/``), ``**`` (any run
of characters including ``/``) and ``?`` (one character except ``/``). Every
other character is literal. A pattern without a ``/`` is tested against the
base name of a candidate; a pattern with one is tested against the path.
"""


from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import PurePath
from typing import Callable

logger = logging.getLogger(__name__)

Matcher = Callable[["str | PurePath"], bool]

_SEP = "/"


def _to_posix(candidate: str | PurePath) -> str:
    """Return ``candidate`` as a string with ``/`` separators."""
    if isinstance(candidate, PurePath):
        return candidate.as_posix()
    if os.sep != _SEP:
        return candidate.replace(os.sep, _SEP)
    return candidate


def glob_to_regex(pattern: str) -> str:
    """
    Translate a glob pattern into an unanchored regular expression body.

    Parameters
    ----------
    pattern : str
        Glob pattern using ``*``, ``**`` and ``?``.

    Returns
    -------
    str
        Regular expression source; the caller adds anchors.
    """

    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**", i):
                parts.append(".*")
                i += 2
                continue
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(ch))
        i += 1
    return "".join(parts)


def _never(candidate: str | PurePath) -> bool:
    return False


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> Matcher:
    """
    Compile ``pattern`` into a predicate over paths.

    Separator-free patterns match the base name only. Patterns containing
    ``/`` must match the whole candidate, so callers pick what the candidate
    is relative to: exclude patterns see absolute paths, gitignore rules see
    paths relative to the ``.gitignore`` directory.

    A translated pattern that fails to compile falls back to substring
    containment, so a bad pattern never aborts a traversal. The empty
    pattern matches nothing.

    Parameters
    ----------
    pattern : str
        Glob pattern.

    Returns
    -------
    Callable[[str | pathlib.PurePath], bool]
        Predicate returning ``True`` when the candidate matches.
    """

    if not pattern:
        return _never

    basename_only = _SEP not in pattern
    try:
        regex = re.compile(rf"^{glob_to_regex(pattern)}$")
    except re.error as exc:
        logger.debug("Invalid pattern %r (%s); using substring match", pattern, exc)

        def contains(candidate: str | PurePath) -> bool:
            return pattern in _to_posix(candidate)

        return contains

    def match(candidate: str | PurePath) -> bool:
        text = _to_posix(candidate)
        if basename_only:
            text = text.rsplit(_SEP, 1)[-1]
        return regex.match(text) is not None

    return match


def matches_pattern(candidate: str | PurePath, pattern: str) -> bool:
    """Return whether ``candidate`` matches the glob ``pattern``."""
    return compile_pattern(pattern)(candidate)


def matches_any(candidate: str | PurePath, patterns: tuple[str, ...] | list[str]) -> bool:
    """Return whether ``candidate`` matches at least one of ``patterns``."""
    return any(compile_pattern(p)(candidate) for p in patterns)
