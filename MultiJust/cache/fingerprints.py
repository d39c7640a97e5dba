from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FileFingerprint:
    path: str
    mtime_ns: int

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_json_dict(payload: Dict[str, Any]) -> "FileFingerprint":
        return FileFingerprint(path=str(payload["path"]), mtime_ns=int(payload["mtime_ns"]))


def safe_stat_mtime_ns(path: Path) -> Optional[int]:
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


def take_fingerprint(path: str | Path) -> FileFingerprint:
    """Record the current modification time of `path`.

    Raises OSError when the file cannot be stat'ed.
    """
    p = Path(path)
    return FileFingerprint(path=str(p.resolve()), mtime_ns=int(p.stat().st_mtime_ns))


def mtime_unchanged(*, previous: Optional[FileFingerprint], path: str | Path) -> bool:
    """True iff `path` is the file recorded in `previous` and its mtime is the same.

    Missing files and missing records count as a change. Content is never hashed:
    a rewrite that keeps the mtime is not detected.
    """
    if previous is None:
        return False

    p = Path(path)
    if str(p.resolve()) != previous.path:
        return False

    cur_mtime = safe_stat_mtime_ns(p)
    if cur_mtime is None:
        return False
    return int(previous.mtime_ns) == int(cur_mtime)
