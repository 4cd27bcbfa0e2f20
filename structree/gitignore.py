# structree/gitignore.py

"""
Gitignore rule resolution.

For a directory, the governing ``.gitignore`` is the nearest one found by
walking upwards through its ancestors. Its patterns are matched against
paths relative to the directory that contains it. This is a pragmatic subset
of git's rules: comments, blank lines, globs, a leading ``/`` anchor and a
trailing ``/`` for directory-only rules.
"""


from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from structree.cache import ABSENT, TraversalCache
from structree.patterns import Matcher, compile_pattern

logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"


@dataclass(frozen=True)
class _Rule:
    pattern: str
    matcher: Matcher
    anchored: bool
    dir_only: bool

    @classmethod
    def parse(cls, line: str) -> _Rule:
        body = line
        dir_only = body.endswith("/") and len(body) > 1
        if dir_only:
            body = body.rstrip("/")
        anchored = body.startswith("/")
        return cls(pattern=line, matcher=compile_pattern(body), anchored=anchored, dir_only=dir_only)

    def matches(self, rel: str, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        return self.matcher("/" + rel if self.anchored else rel)


@dataclass(frozen=True)
class GitignoreRuleSet:
    """
    Patterns of one ``.gitignore`` file bound to the directory holding it.

    Attributes
    ----------
    base_dir : pathlib.Path
        Directory containing the ``.gitignore``; paths are matched relative to it.
    patterns : tuple[str, ...]
        Surviving pattern lines, in file order.
    """

    base_dir: Path
    patterns: tuple[str, ...]
    _rules: tuple[_Rule, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_rules", tuple(_Rule.parse(p) for p in self.patterns))

    def is_ignored(self, path: Path, is_dir: bool = False) -> bool:
        """Return whether ``path`` is matched by any rule of this set."""
        try:
            rel = path.relative_to(self.base_dir).as_posix()
        except ValueError:
            return False
        if rel == ".":
            return False
        return any(rule.matches(rel, is_dir) for rule in self._rules)


def parse_gitignore(text: str) -> tuple[str, ...]:
    """Return the pattern lines of a ``.gitignore`` body."""
    lines = (line.strip() for line in text.splitlines())
    return tuple(line for line in lines if line and not line.startswith("#"))


def find_nearest_gitignore(directory: Path) -> Path | None:
    """Walk from ``directory`` up to the filesystem root looking for a ``.gitignore``."""
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / GITIGNORE_NAME
        try:
            if candidate.is_file():
                return candidate
        except OSError:
            continue
    return None


def resolve_gitignore(directory: Path, cache: TraversalCache) -> GitignoreRuleSet | None:
    """
    Return the rule set governing ``directory``, or ``None`` when there is none.

    The result, including a ``None`` result, is cached under ``directory``
    itself, so siblings sharing one ``.gitignore`` each hold an entry. An
    unreadable ``.gitignore`` behaves as if it did not exist.

    Parameters
    ----------
    directory : pathlib.Path
        Directory whose entries are about to be filtered.
    cache : TraversalCache
        Session cache used for the per-directory lookup.

    Returns
    -------
    GitignoreRuleSet | None
        The governing rules, if any.
    """

    cached = cache.gitignore.get(directory)
    if cached is not None:
        return None if cached is ABSENT else cached

    rules: GitignoreRuleSet | None = None
    nearest = find_nearest_gitignore(directory)
    if nearest is not None:
        try:
            text = nearest.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug("Cannot read %s: %s", nearest, exc)
        else:
            rules = GitignoreRuleSet(nearest.parent, parse_gitignore(text))

    cache.gitignore.set(directory, ABSENT if rules is None else rules)
    return rules
