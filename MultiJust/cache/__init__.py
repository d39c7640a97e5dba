"""Per-project caching with modification-time invalidation."""

from .fingerprints import FileFingerprint, mtime_unchanged, safe_stat_mtime_ns, take_fingerprint
from .policy import InvalidationPolicy, build_predicate
from .store import CacheVariable, CacheWriteError, PersistentProjectCache, ProjectCache, stable_key

__all__ = [
	"CacheVariable",
	"CacheWriteError",
	"FileFingerprint",
	"InvalidationPolicy",
	"PersistentProjectCache",
	"ProjectCache",
	"build_predicate",
	"mtime_unchanged",
	"safe_stat_mtime_ns",
	"stable_key",
	"take_fingerprint",
]
