"""justfile target discovery.

Importing this package registers `get_targets` as a target generator for the
"just" project type.
"""

from ..registry import add_target_generator
from .config import MultiJustConfig, load_config
from .execution import BuildAction, ExecutionError, ExecutionResult, build_command, run_command
from .extractor import extract_targets, parse_targets
from .models import CACHE_VARIABLE, LabeledAction, TargetSnapshot
from .provider import (
	DEFAULT_PROJECT_TYPE,
	JustTargetProvider,
	default_provider,
	get_targets,
	set_default_provider,
)


def register() -> None:
	add_target_generator(DEFAULT_PROJECT_TYPE, get_targets, markers=["justfile"])


register()

__all__ = [
	"BuildAction",
	"CACHE_VARIABLE",
	"DEFAULT_PROJECT_TYPE",
	"ExecutionError",
	"ExecutionResult",
	"JustTargetProvider",
	"LabeledAction",
	"MultiJustConfig",
	"TargetSnapshot",
	"build_command",
	"default_provider",
	"extract_targets",
	"get_targets",
	"load_config",
	"parse_targets",
	"register",
	"run_command",
	"set_default_provider",
]
