"""
multi-just

Discovers the targets declared in a project's justfile and exposes them as
labeled build actions for a command-selection front-end, with a per-project
cache invalidated by the justfile's modification time.
"""

from .cache import InvalidationPolicy, PersistentProjectCache, ProjectCache
from .core import NO_PROJECT, ProjectResolver
from .just import JustTargetProvider, LabeledAction, MultiJustConfig, extract_targets, get_targets, load_config
from .registry import add_target_generator, collect_targets, get_project_type_registry

__version__ = "0.1.0"
__all__ = [
    'InvalidationPolicy', 'JustTargetProvider', 'LabeledAction', 'MultiJustConfig',
    'NO_PROJECT', 'PersistentProjectCache', 'ProjectCache', 'ProjectResolver',
    'add_target_generator', 'collect_targets', 'extract_targets', 'get_project_type_registry',
    'get_targets', 'load_config',
    '__version__'
]
