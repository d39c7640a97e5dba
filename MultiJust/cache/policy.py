from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .fingerprints import FileFingerprint, mtime_unchanged

CacheSetting = Union[bool, str]


class InvalidationPolicy(str, enum.Enum):
    ALWAYS_FRESH = "always-fresh"
    ALWAYS_CACHED = "always-cached"
    AUTO = "auto"

    @staticmethod
    def from_setting(value: Any) -> "InvalidationPolicy":
        """Map a `cache_targets` setting (`auto`, `true`, `false`) to a policy."""
        if isinstance(value, InvalidationPolicy):
            return value
        if value is True:
            return InvalidationPolicy.ALWAYS_CACHED
        if value is False:
            return InvalidationPolicy.ALWAYS_FRESH
        if isinstance(value, str):
            v = value.strip().lower()
            if v == "true":
                return InvalidationPolicy.ALWAYS_CACHED
            if v == "false":
                return InvalidationPolicy.ALWAYS_FRESH
            for member in InvalidationPolicy:
                if member.value == v:
                    return member
        raise ValueError(f"Invalid cache_targets setting: {value!r} (expected auto, true or false)")


def _recorded_fingerprint(value: Any) -> Optional[FileFingerprint]:
    return getattr(value, "fingerprint", None)


def build_predicate(
    policy: InvalidationPolicy,
    path: str | Path,
    *,
    fingerprint_of: Callable[[Any], Optional[FileFingerprint]] = _recorded_fingerprint,
) -> Callable[[Any], bool]:
    """Return the cache-validity predicate for `policy` watching `path`."""
    if policy is InvalidationPolicy.ALWAYS_FRESH:
        return lambda _cached: False
    if policy is InvalidationPolicy.ALWAYS_CACHED:
        return lambda _cached: True

    def _unchanged(cached: Any) -> bool:
        return mtime_unchanged(previous=fingerprint_of(cached), path=path)

    return _unchanged
