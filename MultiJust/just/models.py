from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..cache.fingerprints import FileFingerprint

if TYPE_CHECKING:
    from .execution import BuildAction, ExecutionResult

# Cache key under which each project's target list is stored.
CACHE_VARIABLE = "multi-just-targets"

LABEL_SEPARATOR = ":"


@dataclass(frozen=True)
class TargetSnapshot:
    """A parsed target list plus the justfile state recorded just before parsing."""

    justfile: str
    fingerprint: FileFingerprint
    targets: List[str] = field(default_factory=list)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "justfile": self.justfile,
            "fingerprint": self.fingerprint.to_json_dict(),
            "targets": list(self.targets),
        }

    @staticmethod
    def from_json_dict(payload: Dict[str, Any]) -> "TargetSnapshot":
        return TargetSnapshot(
            justfile=str(payload["justfile"]),
            fingerprint=FileFingerprint.from_json_dict(payload["fingerprint"]),
            targets=[str(t) for t in payload.get("targets") or []],
        )


@dataclass(frozen=True)
class LabeledAction:
    label: str
    target: str
    action: "BuildAction"

    def run(self, *, cwd: Optional[str] = None, timeout_seconds: int = 300, capture_output: bool = True) -> "ExecutionResult":
        return self.action.run(cwd=cwd, timeout_seconds=timeout_seconds, capture_output=capture_output)


def make_label(project_type: str, target: str) -> str:
    return f"{project_type}{LABEL_SEPARATOR}{target}"
