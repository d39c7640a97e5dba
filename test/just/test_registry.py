from __future__ import annotations

from pathlib import Path

import pytest

import MultiJust.just as just
from MultiJust import registry
from MultiJust.cache.store import ProjectCache
from MultiJust.just.config import MultiJustConfig
from MultiJust.just.provider import JustTargetProvider, set_default_provider


@pytest.fixture
def scratch_type():
    name = "scratch-type"
    yield name
    registry.get_project_type_registry().pop(name, None)


@pytest.fixture
def provider_in(tmp_path: Path):
    provider = JustTargetProvider(MultiJustConfig(), cache=ProjectCache(), directory=tmp_path)
    set_default_provider(provider)
    yield provider
    set_default_provider(None)


def test_just_package_registers_its_generator():
    definition = registry.get_project_type("just")
    assert definition is not None
    assert just.get_targets in definition.target_generators
    assert "justfile" in definition.markers


def test_registration_is_idempotent():
    just.register()
    just.register()
    generators = registry.get_project_type("just").target_generators
    assert generators.count(just.get_targets) == 1


def test_collect_targets_uses_default_provider(tmp_path: Path, provider_in):
    (tmp_path / "justfile").write_text("build:\ntest:\n", encoding="utf-8")

    labels = [a.label for a in registry.collect_targets("just")]
    assert labels == ["just:build", "just:test"]


def test_collect_targets_unknown_type_is_empty():
    assert registry.collect_targets("no-such-type") == []


def test_add_generator_creates_type(scratch_type, tmp_path: Path):
    registry.add_target_generator(scratch_type, lambda project_type: [f"{project_type}:x"], markers=["marker.txt"])

    assert registry.collect_targets(scratch_type) == ["scratch-type:x"]
    assert scratch_type in registry.list_project_types()

    assert scratch_type not in registry.detect_project_types(tmp_path)
    (tmp_path / "marker.txt").write_text("", encoding="utf-8")
    assert scratch_type in registry.detect_project_types(tmp_path)


def test_duplicate_registration_requires_replace(scratch_type):
    registry.register_project_type(registry.ProjectTypeDefinition(name=scratch_type))
    with pytest.raises(ValueError):
        registry.register_project_type(registry.ProjectTypeDefinition(name=scratch_type))

    replaced = registry.register_project_type(
        registry.ProjectTypeDefinition(name=scratch_type, metadata={"v": 2}),
        replace=True,
    )
    assert registry.get_project_type(scratch_type) is replaced
