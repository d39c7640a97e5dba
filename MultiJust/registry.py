"""
Registry of project types and the target generators attached to them.

A target generator is any callable `generator(project_type) -> list` of
labeled actions. Integrations register themselves on import; a front-end then
asks `collect_targets(name)` for everything selectable in a project type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

TargetGenerator = Callable[..., List[Any]]


@dataclass
class ProjectTypeDefinition:
    """Declarative description of a project type and its target sources."""
    name: str
    markers: List[str] = field(default_factory=list)
    target_generators: List[TargetGenerator] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def matches(self, directory: str | Path) -> bool:
        root = Path(directory)
        return any((root / m).exists() for m in self.markers)

    def collect_targets(self) -> List[Any]:
        out: List[Any] = []
        for generator in self.target_generators:
            out.extend(generator(self.name))
        return out


_project_type_registry: Dict[str, ProjectTypeDefinition] = {}


def register_project_type(definition: ProjectTypeDefinition, *, replace: bool = False) -> ProjectTypeDefinition:
    existing = _project_type_registry.get(definition.name)
    if existing is not None and not replace:
        raise ValueError(f"Project type '{definition.name}' is already registered")
    _project_type_registry[definition.name] = definition
    return definition


def add_target_generator(
    name: str,
    generator: TargetGenerator,
    *,
    markers: Sequence[str] = (),
) -> ProjectTypeDefinition:
    """Attach `generator` to project type `name`, creating the type if needed."""
    definition = _project_type_registry.get(name)
    if definition is None:
        definition = register_project_type(ProjectTypeDefinition(name=name, markers=list(markers)))

    if generator not in definition.target_generators:
        definition.target_generators.append(generator)
        logger.debug("Registered target generator %r for project type %s", generator, name)
    return definition


def get_project_type(name: str) -> Optional[ProjectTypeDefinition]:
    return _project_type_registry.get(name)


def get_project_type_registry() -> Dict[str, ProjectTypeDefinition]:
    return _project_type_registry


def list_project_types() -> List[str]:
    return sorted(_project_type_registry)


def detect_project_types(directory: str | Path) -> List[str]:
    """Names of registered project types whose markers exist in `directory`."""
    return [name for name, d in sorted(_project_type_registry.items()) if d.matches(directory)]


def collect_targets(name: str) -> List[Any]:
    definition = _project_type_registry.get(name)
    if definition is None:
        return []
    return definition.collect_targets()
