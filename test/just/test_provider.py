from __future__ import annotations

import os
from pathlib import Path
from typing import List

import pytest

from MultiJust.cache.store import ProjectCache
from MultiJust.core.project import NO_PROJECT, ProjectResolver
from MultiJust.just import execution
from MultiJust.just.config import MultiJustConfig
from MultiJust.just.execution import BuildAction
from MultiJust.just.extractor import extract_targets
from MultiJust.just.models import CACHE_VARIABLE
from MultiJust.just.provider import JustTargetProvider

_NO_MARKERS = ["__multi_just_no_such_marker__"]


class CountingExtractor:
    def __init__(self):
        self.calls = 0

    def __call__(self, path: Path) -> List[str]:
        self.calls += 1
        return extract_targets(path)


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _bump_mtime(path: Path, delta_ns: int = 5_000_000_000) -> None:
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + delta_ns))


def _provider(tmp_path: Path, cache_targets="auto", **kwargs):
    extractor = CountingExtractor()
    provider = JustTargetProvider(
        MultiJustConfig(cache_targets=cache_targets, **kwargs),
        cache=ProjectCache(),
        directory=tmp_path,
        extractor=extractor,
    )
    return provider, extractor


def test_labels_and_actions(tmp_path: Path):
    _write(tmp_path / "justfile", "build: deps\n    echo hi\n.hidden: ; echo secret\ntest:\n")
    provider, _ = _provider(tmp_path)

    actions = provider.get_targets()
    assert [a.label for a in actions] == ["just:build", "just:test"]
    assert [a.target for a in actions] == ["build", "test"]
    assert all(isinstance(a.action, BuildAction) for a in actions)
    assert actions[0].action.target == "build"
    assert actions[0].action.justfile == str(tmp_path / "justfile")
    assert actions[0].action.default_cwd() == tmp_path


def test_custom_project_type_prefix(tmp_path: Path):
    _write(tmp_path / "justfile", "build:\n")
    provider, _ = _provider(tmp_path)

    assert [a.label for a in provider.get_targets("rust")] == ["rust:build"]


def test_no_justfile_returns_empty(tmp_path: Path):
    provider, extractor = _provider(tmp_path)

    assert provider.get_targets() == []
    assert extractor.calls == 0


def test_candidates_are_tried_in_order(tmp_path: Path):
    _write(tmp_path / "Justfile", "upper:\n")
    _write(tmp_path / ".justfile", "hidden_file:\n")
    provider, _ = _provider(tmp_path, justfile_candidates=["justfile", ".justfile", "Justfile"])

    assert [a.target for a in provider.get_targets()] == ["hidden_file"]


def test_explicit_missing_path_raises(tmp_path: Path):
    provider, _ = _provider(tmp_path)

    with pytest.raises(OSError):
        provider.get_targets("just", tmp_path / "missing.just")


def test_explicit_path_is_passed_to_build_action(tmp_path: Path):
    f = _write(tmp_path / "sub" / "tasks.just", "deploy:\n")
    provider, _ = _provider(tmp_path)

    actions = provider.get_targets("just", f)
    assert [a.label for a in actions] == ["just:deploy"]
    assert actions[0].action.justfile == str(f)


def test_always_cached_parses_once(tmp_path: Path):
    f = _write(tmp_path / "justfile", "a:\nb:\n")
    provider, extractor = _provider(tmp_path, cache_targets=True)

    first = [a.label for a in provider.get_targets()]
    _write(f, "c:\n")
    _bump_mtime(f)
    second = [a.label for a in provider.get_targets()]

    assert first == second == ["just:a", "just:b"]
    assert extractor.calls == 1


def test_always_fresh_parses_every_time(tmp_path: Path):
    f = _write(tmp_path / "justfile", "a:\n")
    provider, extractor = _provider(tmp_path, cache_targets=False)

    assert [a.target for a in provider.get_targets()] == ["a"]
    f.write_text("b:\n", encoding="utf-8")
    assert [a.target for a in provider.get_targets()] == ["b"]
    assert extractor.calls == 2


def test_auto_reparses_after_edit(tmp_path: Path):
    f = _write(tmp_path / "justfile", "a:\n")
    provider, extractor = _provider(tmp_path, cache_targets="auto")

    assert [a.target for a in provider.get_targets()] == ["a"]
    f.write_text("a:\nb:\n", encoding="utf-8")
    _bump_mtime(f)
    assert [a.target for a in provider.get_targets()] == ["a", "b"]
    assert extractor.calls == 2


def test_auto_trusts_recorded_mtime_over_content(tmp_path: Path):
    f = _write(tmp_path / "justfile", "a:\n")
    provider, extractor = _provider(tmp_path, cache_targets="auto")
    assert [a.target for a in provider.get_targets()] == ["a"]

    st = f.stat()
    f.write_text("changed:\n", encoding="utf-8")
    os.utime(f, ns=(st.st_atime_ns, st.st_mtime_ns))

    assert [a.target for a in provider.get_targets()] == ["a"]
    assert extractor.calls == 1


def test_auto_deleted_file_after_caching_raises(tmp_path: Path):
    f = _write(tmp_path / "justfile", "a:\n")
    provider, _ = _provider(tmp_path, cache_targets="auto")
    provider.get_targets("just", f)

    f.unlink()
    with pytest.raises(FileNotFoundError):
        provider.get_targets("just", f)


def test_no_project_scope_still_caches(tmp_path: Path):
    _write(tmp_path / "justfile", "a:\n")
    extractor = CountingExtractor()
    cache = ProjectCache()
    provider = JustTargetProvider(
        MultiJustConfig(cache_targets=True),
        cache=cache,
        project_resolver=ProjectResolver(_NO_MARKERS),
        directory=tmp_path,
        extractor=extractor,
    )

    provider.get_targets()
    provider.get_targets()
    assert provider.project_id() == NO_PROJECT
    assert extractor.calls == 1
    assert cache.get(NO_PROJECT, CACHE_VARIABLE).targets == ["a"]


def test_cache_entry_is_keyed_by_project(tmp_path: Path):
    _write(tmp_path / "p1" / "justfile", "one:\n")
    _write(tmp_path / "p2" / "justfile", "two:\n")
    cache = ProjectCache()
    config = MultiJustConfig(cache_targets=True)

    p1 = JustTargetProvider(config, cache=cache, directory=tmp_path / "p1")
    p2 = JustTargetProvider(config, cache=cache, directory=tmp_path / "p2")

    assert [a.target for a in p1.get_targets()] == ["one"]
    assert [a.target for a in p2.get_targets()] == ["two"]
    assert cache.get(str((tmp_path / "p1").resolve()), CACHE_VARIABLE).targets == ["one"]


def test_provider_registers_cache_variable_metadata(tmp_path: Path):
    provider, _ = _provider(tmp_path)
    keys = [v.key for v in provider.cache.describe_variables(include_hidden=True)]
    assert keys == [CACHE_VARIABLE]
    assert provider.cache.describe_variables() == []


def test_non_default_candidate_is_passed_to_just(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(execution.shutil, "which", lambda tool: f"/usr/bin/{tool}")
    f = _write(tmp_path / "tasks.just", "build:\n")
    provider, _ = _provider(tmp_path, justfile_candidates=["tasks.just"])

    cmd = provider.get_targets()[0].action.command()
    assert cmd == ["/usr/bin/just", "--justfile", str(f), "--working-directory", str(tmp_path), "build"]


def test_subdirectory_falls_back_to_project_root(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    f = _write(tmp_path / "justfile", "build:\n")
    src = tmp_path / "src"
    src.mkdir()
    provider = JustTargetProvider(
        MultiJustConfig(),
        cache=ProjectCache(),
        project_resolver=ProjectResolver([".git"]),
        directory=src,
    )

    actions = provider.get_targets()
    assert provider.project_id() == str(tmp_path.resolve())
    assert [a.label for a in actions] == ["just:build"]
    assert actions[0].action.justfile == str(tmp_path.resolve() / "justfile")
    assert Path(actions[0].action.justfile).samefile(f)


def test_working_directory_wins_over_project_root(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    _write(tmp_path / "justfile", "root_target:\n")
    _write(tmp_path / "sub" / "justfile", "sub_target:\n")
    provider = JustTargetProvider(
        MultiJustConfig(),
        cache=ProjectCache(),
        project_resolver=ProjectResolver([".git"]),
        directory=tmp_path / "sub",
    )

    assert [a.target for a in provider.get_targets()] == ["sub_target"]


def test_always_cached_keeps_first_file_targets_for_other_justfile(tmp_path: Path):
    # The cache is per project: under `true` a second justfile in the same
    # project is served the first file's targets, paired with the new path.
    first = _write(tmp_path / "justfile", "a:\n")
    second = _write(tmp_path / "other.just", "b:\n")
    provider, extractor = _provider(tmp_path, cache_targets=True)

    assert [a.target for a in provider.get_targets("just", first)] == ["a"]
    actions = provider.get_targets("just", second)
    assert [a.target for a in actions] == ["a"]
    assert actions[0].action.justfile == str(second)
    assert extractor.calls == 1


def test_auto_reparses_when_another_justfile_is_requested(tmp_path: Path):
    first = _write(tmp_path / "justfile", "a:\n")
    second = _write(tmp_path / "other.just", "b:\n")
    provider, extractor = _provider(tmp_path, cache_targets="auto")

    assert [a.target for a in provider.get_targets("just", first)] == ["a"]
    assert [a.target for a in provider.get_targets("just", second)] == ["b"]
    assert extractor.calls == 2
