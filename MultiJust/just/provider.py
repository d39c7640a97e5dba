from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..cache.fingerprints import take_fingerprint
from ..cache.policy import build_predicate
from ..cache.store import CacheVariable, ProjectCache
from ..core.project import NO_PROJECT, ProjectResolver
from .config import MultiJustConfig
from .execution import build_command
from .extractor import extract_targets
from .models import CACHE_VARIABLE, LabeledAction, TargetSnapshot, make_label

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_TYPE = "just"

TARGETS_VARIABLE = CacheVariable(
    key=CACHE_VARIABLE,
    title="Just targets",
    category="multi-just",
    description="Target names parsed from the project's justfile.",
    hidden=True,
)


class JustTargetProvider:
    """Cached justfile targets for the project containing `directory`.

    Lookup:
    - resolve the justfile (explicit path, else first existing candidate)
    - resolve the project scope (a path, or NO_PROJECT)
    - serve the target list from the cache while the configured policy says
      it is valid, otherwise re-parse
    - label every target as `<project_type>:<target>`
    """

    def __init__(
        self,
        config: Optional[MultiJustConfig] = None,
        *,
        cache: Optional[ProjectCache] = None,
        project_resolver: Optional[ProjectResolver] = None,
        directory: Optional[str | Path] = None,
        extractor: Callable[[Path], List[str]] = extract_targets,
    ):
        self._cfg = config or MultiJustConfig()
        self._cache = cache if cache is not None else ProjectCache()
        self._resolver = project_resolver or ProjectResolver(self._cfg.project_markers)
        self._directory = Path(directory) if directory is not None else None
        self._extractor = extractor
        self._cache.register_variable(TARGETS_VARIABLE)

    @property
    def config(self) -> MultiJustConfig:
        return self._cfg

    @property
    def cache(self) -> ProjectCache:
        return self._cache

    @property
    def directory(self) -> Path:
        # Unset means "wherever the process is when asked".
        return self._directory if self._directory is not None else Path.cwd()

    def search_dirs(self) -> List[Path]:
        """The working directory, then the project root when it differs."""
        dirs = [self.directory]
        project_id = self.project_id()
        if project_id != NO_PROJECT and Path(project_id) != self.directory.resolve():
            dirs.append(Path(project_id))
        return dirs

    def resolve_justfile(self) -> Optional[Path]:
        dirs = self.search_dirs()
        for d in dirs:
            for name in self._cfg.justfile_candidates:
                candidate = d / name
                if candidate.is_file():
                    logger.debug("Using justfile %s", candidate)
                    return candidate
        logger.debug("No justfile among %s in %s", list(self._cfg.justfile_candidates), [str(d) for d in dirs])
        return None

    def project_id(self) -> str:
        return self._resolver.resolve(self.directory)

    def _parse(self, path: Path) -> TargetSnapshot:
        # Stat before reading so an edit during the read counts as a change next time.
        fingerprint = take_fingerprint(path)
        targets = list(self._extractor(path))
        logger.debug("Parsed %d targets from %s", len(targets), path)
        return TargetSnapshot(justfile=fingerprint.path, fingerprint=fingerprint, targets=targets)

    def lookup(self, file_path: Optional[str | Path] = None) -> Tuple[Optional[Path], List[str]]:
        """Return (justfile, cached target names); (None, []) when none resolves.

        An explicit `file_path` is not existence-checked: reading a missing
        file raises OSError.
        """
        path = Path(file_path) if file_path is not None else self.resolve_justfile()
        if path is None:
            return None, []

        predicate = build_predicate(self._cfg.invalidation_policy, path)
        snapshot = self._cache.get_or_compute(
            self.project_id(),
            CACHE_VARIABLE,
            predicate,
            lambda: self._parse(path),
        )
        return path, list(snapshot.targets)

    def target_names(self, file_path: Optional[str | Path] = None) -> List[str]:
        return self.lookup(file_path)[1]

    def get_targets(
        self,
        project_type: Optional[str] = None,
        file_path: Optional[str | Path] = None,
    ) -> List[LabeledAction]:
        if project_type is None:
            project_type = DEFAULT_PROJECT_TYPE

        path, names = self.lookup(file_path)
        return [
            LabeledAction(
                label=make_label(project_type, t),
                target=t,
                action=build_command(t, justfile=str(path), executable=self._cfg.just_executable),
            )
            for t in names
        ]


_default_provider: Optional[JustTargetProvider] = None


def default_provider() -> JustTargetProvider:
    global _default_provider
    if _default_provider is None:
        _default_provider = JustTargetProvider()
    return _default_provider


def set_default_provider(provider: Optional[JustTargetProvider]) -> None:
    """Replace the provider behind `get_targets`; None restores a fresh default."""
    global _default_provider
    _default_provider = provider


def get_targets(project_type: Optional[str] = None, file_path: Optional[str | Path] = None) -> List[LabeledAction]:
    """Target generator registered for the "just" project type."""
    return default_provider().get_targets(project_type, file_path)
