import os
import stat
from pathlib import Path

import pytest

from structree import generate_text, resolve_gitignore
from structree.cache import ABSENT, TraversalCache
from structree.gitignore import GitignoreRuleSet, find_nearest_gitignore, parse_gitignore


def _make_file(p: Path, content: str = "x"):
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")


def test_parse_drops_comments_and_blank_lines():
    text = "# build output\n\n  dist/  \n*.log\n   \n#not-a-rule\nsecret.txt\n"
    assert parse_gitignore(text) == ("dist/", "*.log", "secret.txt")


def test_nearest_gitignore_is_found_upwards(tmp_path: Path):
    _make_file(tmp_path / ".gitignore", "*.log\n")
    deep = tmp_path / "a/b/c"
    deep.mkdir(parents=True)

    assert find_nearest_gitignore(deep) == tmp_path / ".gitignore"

    _make_file(tmp_path / "a/.gitignore", "*.tmp\n")
    assert find_nearest_gitignore(deep) == tmp_path / "a/.gitignore"


def test_rules_match_relative_to_gitignore_directory(tmp_path: Path):
    rules = GitignoreRuleSet(tmp_path, ("secret.txt", "*.log", "docs/*.md", "/root-only.txt"))

    assert rules.is_ignored(tmp_path / "secret.txt")
    assert rules.is_ignored(tmp_path / "nested/error.log")
    assert rules.is_ignored(tmp_path / "docs/readme.md")
    assert rules.is_ignored(tmp_path / "root-only.txt")
    assert not rules.is_ignored(tmp_path / "sub/root-only.txt")
    assert not rules.is_ignored(tmp_path / "safe.txt")
    assert not rules.is_ignored(tmp_path.parent / "outside.log")


def test_path_rules_are_rooted_at_the_gitignore_directory(tmp_path: Path):
    rules = GitignoreRuleSet(tmp_path, ("docs/*.md",))
    assert rules.is_ignored(tmp_path / "docs/readme.md")
    assert not rules.is_ignored(tmp_path / "vendor/docs/readme.md")


def test_trailing_slash_rules_only_apply_to_directories(tmp_path: Path):
    rules = GitignoreRuleSet(tmp_path, ("build/",))
    assert rules.is_ignored(tmp_path / "build", is_dir=True)
    assert not rules.is_ignored(tmp_path / "build", is_dir=False)


def test_resolution_is_cached_per_queried_directory(tmp_path: Path):
    _make_file(tmp_path / ".gitignore", "*.log\n")
    (tmp_path / "one").mkdir()
    (tmp_path / "two").mkdir()
    cache = TraversalCache()

    first = resolve_gitignore(tmp_path / "one", cache)
    second = resolve_gitignore(tmp_path / "two", cache)

    assert first is not None and second is not None
    assert first.base_dir == second.base_dir == tmp_path
    assert first.patterns == second.patterns == ("*.log",)
    assert len(cache.gitignore) == 2

    # Snapshot semantics: later edits are not seen until the cache is cleared.
    (tmp_path / ".gitignore").write_text("*.tmp\n", encoding="utf-8")
    assert resolve_gitignore(tmp_path / "one", cache).patterns == ("*.log",)
    cache.clear()
    assert resolve_gitignore(tmp_path / "one", cache).patterns == ("*.tmp",)


def test_missing_gitignore_is_cached_as_absent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("structree.gitignore.find_nearest_gitignore", lambda directory: None)
    cache = TraversalCache()

    assert resolve_gitignore(tmp_path, cache) is None
    assert cache.gitignore.get(tmp_path) is ABSENT


@pytest.mark.skipif(os.name != "posix", reason="Permission bits test is POSIX-only")
def test_unreadable_gitignore_degrades_to_not_found(tmp_path: Path):
    ignore = tmp_path / ".gitignore"
    _make_file(ignore, "*.log\n")
    ignore.chmod(0)
    try:
        if os.access(ignore, os.R_OK):
            pytest.skip("running with privileges that bypass permission bits")
        assert resolve_gitignore(tmp_path, TraversalCache()) is None
    finally:
        ignore.chmod(stat.S_IRUSR | stat.S_IWUSR)


def test_gitignore_scenario_keeps_only_safe_file(tmp_path: Path):
    _make_file(tmp_path / ".gitignore", "secret.txt\n*.log\n")
    _make_file(tmp_path / "secret.txt")
    _make_file(tmp_path / "error.log")
    _make_file(tmp_path / "safe.txt")

    out = generate_text(tmp_path, {"respectGitignore": True, "iconStyle": "none"})

    assert "safe.txt" in out
    assert "secret.txt" not in out
    assert "error.log" not in out


def test_gitignore_disabled_keeps_everything(tmp_path: Path):
    _make_file(tmp_path / ".gitignore", "*.log\n")
    _make_file(tmp_path / "error.log")

    out = generate_text(tmp_path, {"respectGitignore": False})
    assert "error.log" in out
