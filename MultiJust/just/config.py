from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..cache.policy import CacheSetting, InvalidationPolicy
from ..core.project import DEFAULT_PROJECT_MARKERS

DEFAULT_JUSTFILE_CANDIDATES = ("justfile",)


@dataclass(frozen=True)
class MultiJustConfig:
    """Configuration surface for justfile target discovery.

    - `cache_targets`: `"auto"` re-parses when the justfile's mtime changes,
      `True` parses once per project, `False` parses on every lookup.
    - `justfile_candidates`: basenames tried in order when no file is given.
    - `cache_dir`: when set, cached targets are kept on disk under it.
    """

    cache_targets: CacheSetting = "auto"
    justfile_candidates: List[str] = field(default_factory=lambda: list(DEFAULT_JUSTFILE_CANDIDATES))
    project_markers: List[str] = field(default_factory=lambda: list(DEFAULT_PROJECT_MARKERS))

    # Build runner
    just_executable: str = "just"
    timeout_seconds: int = 300

    cache_dir: Optional[str] = None

    def __post_init__(self):
        # Raises ValueError on unknown settings.
        InvalidationPolicy.from_setting(self.cache_targets)
        if isinstance(self.justfile_candidates, str) or not self.justfile_candidates:
            raise ValueError("justfile_candidates must be a non-empty list of basenames")
        if int(self.timeout_seconds) < 1:
            raise ValueError(f"timeout_seconds must be >= 1, got {self.timeout_seconds}")

    @property
    def invalidation_policy(self) -> InvalidationPolicy:
        return InvalidationPolicy.from_setting(self.cache_targets)

    def with_overrides(self, **overrides: Any) -> "MultiJustConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_json_dict(payload: Dict[str, Any]) -> "MultiJustConfig":
        known = {f.name for f in fields(MultiJustConfig)}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        params = dict(payload)
        for key in ("justfile_candidates", "project_markers"):
            if key in params and isinstance(params[key], (list, tuple)):
                params[key] = [str(v) for v in params[key]]
        return MultiJustConfig(**params)


def load_config(config_path: str | Path) -> MultiJustConfig:
    """Load a JSON configuration file.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the content is not a JSON object or holds invalid values
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_path}")
    return MultiJustConfig.from_json_dict(data)
