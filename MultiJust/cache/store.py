from __future__ import annotations

import json
import logging
import shutil
from dataclasses import asdict, dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]
Producer = Callable[[], Any]

_MISSING = object()


class CacheWriteError(OSError):
    """A cache entry could not be written to disk."""


@dataclass(frozen=True)
class CacheVariable:
    """Descriptive metadata for a cache key, for inventory/debugging views only."""

    key: str
    title: str = ""
    category: str = ""
    description: str = ""
    hidden: bool = False

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)


def stable_key(parts: Any) -> str:
    raw = json.dumps(parts, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return sha256(raw).hexdigest()


class ProjectCache:
    """In-process per-project cache.

    Entries are addressed by (scope_id, key). Callers never write entries
    directly; they go through `get_or_compute`, which keeps the cached value
    while `is_valid(value)` holds and otherwise stores the result of `compute()`.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, str], Any] = {}
        self._variables: Dict[str, CacheVariable] = {}

    # Storage hooks, overridden by persistent stores.
    def _load(self, scope_id: str, key: str) -> Any:
        return self._entries.get((scope_id, key), _MISSING)

    def _save(self, scope_id: str, key: str, value: Any) -> None:
        self._entries[(scope_id, key)] = value

    def _delete(self, scope_id: str, key: Optional[str]) -> None:
        if key is None:
            for k in [k for k in self._entries if k[0] == scope_id]:
                del self._entries[k]
        else:
            self._entries.pop((scope_id, key), None)

    def get(self, scope_id: str, key: str, default: Any = None) -> Any:
        value = self._load(scope_id, key)
        return default if value is _MISSING else value

    def set(self, scope_id: str, key: str, value: Any) -> None:
        self._save(scope_id, key, value)

    def invalidate(self, scope_id: str, key: Optional[str] = None) -> None:
        """Drop one entry, or every entry of `scope_id` when `key` is None."""
        self._delete(scope_id, key)

    def get_or_compute(self, scope_id: str, key: str, is_valid: Predicate, compute: Producer) -> Any:
        cached = self._load(scope_id, key)
        if cached is not _MISSING and is_valid(cached):
            logger.debug("Cache hit for %s in %s", key, scope_id)
            return cached

        logger.debug("Cache %s for %s in %s", "miss" if cached is _MISSING else "stale", key, scope_id)
        value = compute()
        self._save(scope_id, key, value)
        return value

    def register_variable(self, variable: CacheVariable) -> None:
        self._variables[variable.key] = variable

    def describe_variables(self, *, include_hidden: bool = False) -> List[CacheVariable]:
        return [v for v in self._variables.values() if include_hidden or not v.hidden]


class PersistentProjectCache(ProjectCache):
    """Project cache kept as JSON files so it survives separate processes.

    Layout: `<base_dir>/_cache/<sha256(scope)>/<key>.json`. `encode` turns a
    value into a JSON-compatible payload and `decode` reverses it. Unreadable
    or corrupt files are treated as misses.
    """

    def __init__(
        self,
        base_dir: str | Path,
        *,
        encode: Callable[[Any], Any] = lambda v: v,
        decode: Callable[[Any], Any] = lambda p: p,
    ):
        super().__init__()
        self._base_dir = Path(base_dir)
        self._encode = encode
        self._decode = decode

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def scope_dir(self, scope_id: str) -> Path:
        return self._base_dir / "_cache" / stable_key({"scope": scope_id})

    def cache_path(self, scope_id: str, key: str) -> Path:
        return self.scope_dir(scope_id) / f"{key}.json"

    def _load(self, scope_id: str, key: str) -> Any:
        path = self.cache_path(scope_id, key)
        if not path.exists():
            return _MISSING
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if data.get("scope") != scope_id or data.get("key") != key:
                return _MISSING
            return self._decode(data["payload"])
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
            return _MISSING

    def _save(self, scope_id: str, key: str, value: Any) -> None:
        path = self.cache_path(scope_id, key)
        data = {"scope": scope_id, "key": key, "payload": self._encode(value)}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as exc:
            raise CacheWriteError(f"Cannot write cache file {path}: {exc}") from exc

    def _delete(self, scope_id: str, key: Optional[str]) -> None:
        if key is None:
            shutil.rmtree(self.scope_dir(scope_id), ignore_errors=True)
        else:
            self.cache_path(scope_id, key).unlink(missing_ok=True)
