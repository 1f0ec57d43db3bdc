"""Tests for vaadin_skills.services.hot_reload.HotReloader."""

import os

import pytest

from vaadin_skills.services import HotReloader


def _touch(path, text="x", offset=10):
    path.write_text(text, encoding="utf-8")
    mtime = path.stat().st_mtime + offset
    os.utime(path, (mtime, mtime))


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "skills"
    root.mkdir()
    (root / "a.md").write_text("a", encoding="utf-8")
    return root


def test_no_changes(tree):
    calls = []
    reloader = HotReloader()
    reloader.add_watch(tree, lambda: calls.append(1))
    assert reloader.check_and_apply(force=True) == 0
    assert calls == []


def test_modified_file_triggers_callback(tree):
    calls = []
    reloader = HotReloader()
    reloader.add_watch(tree, lambda: calls.append(1))

    _touch(tree / "a.md", "changed")
    assert reloader.check_and_apply(force=True) == 1
    assert calls == [1]
    # Snapshot was updated
    assert reloader.check_and_apply(force=True) == 0


def test_added_and_deleted_files(tree):
    calls = []
    reloader = HotReloader()
    reloader.add_watch(tree, lambda: calls.append(1))

    (tree / "b.md").write_text("b", encoding="utf-8")
    assert reloader.check_and_apply(force=True) == 1

    (tree / "a.md").unlink()
    assert reloader.check_and_apply(force=True) == 1
    assert len(calls) == 2


def test_pattern_filters_files(tree):
    calls = []
    reloader = HotReloader()
    reloader.add_watch(tree, lambda: calls.append(1), pattern="**/SKILL.md")

    (tree / "notes.md").write_text("n", encoding="utf-8")
    assert reloader.check_and_apply(force=True) == 0

    (tree / "pack").mkdir()
    (tree / "pack" / "SKILL.md").write_text("s", encoding="utf-8")
    assert reloader.check_and_apply(force=True) == 1


def test_only_changed_tree_reloads(tmp_path):
    skills = tmp_path / "skills"
    docs = tmp_path / "docs"
    skills.mkdir()
    docs.mkdir()
    seen = []

    reloader = HotReloader()
    reloader.add_watch(skills, lambda: seen.append("skills"))
    reloader.add_watch(docs, lambda: seen.append("docs"))

    (docs / "page.md").write_text("p", encoding="utf-8")
    reloader.check_and_apply(force=True)
    assert seen == ["docs"]


def test_disabled_unless_forced(tree):
    calls = []
    reloader = HotReloader(auto_reload=False)
    reloader.add_watch(tree, lambda: calls.append(1))

    _touch(tree / "a.md", "changed")
    assert reloader.check_and_apply() == 0
    assert reloader.check_and_apply(force=True) == 1


def test_rate_limited(tree):
    calls = []
    reloader = HotReloader(check_interval=3600)
    reloader.add_watch(tree, lambda: calls.append(1))

    assert reloader.check_and_apply() == 0   # first check records the time
    _touch(tree / "a.md", "changed")
    assert reloader.check_and_apply() == 0   # within the interval
    assert reloader.check_and_apply(force=True) == 1


def test_failing_callback_is_logged(tree, caplog):
    def broken():
        raise RuntimeError("reload failed")

    reloader = HotReloader()
    reloader.add_watch(tree, broken)
    _touch(tree / "a.md", "changed")

    assert reloader.check_and_apply(force=True) == 0
    assert "Hot-reload callback failed" in caplog.text


def test_failed_reload_is_retried(tree):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("index locked")

    reloader = HotReloader()
    reloader.add_watch(tree, flaky)
    _touch(tree / "a.md", "changed")

    assert reloader.check_and_apply(force=True) == 0
    assert reloader.check_and_apply(force=True) == 1
    assert reloader.check_and_apply(force=True) == 0
    assert len(attempts) == 2


def test_missing_root_is_ignored(tmp_path):
    reloader = HotReloader()
    reloader.add_watch(tmp_path / "missing", lambda: None)
    assert reloader.check_and_apply(force=True) == 0
