from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

# Cache scope used when the working directory is not inside any project.
NO_PROJECT = "<no-project>"

DEFAULT_PROJECT_MARKERS = (".git", ".hg", ".projectile", "justfile")


class ProjectResolver:
    """Map a working directory to a stable project identifier.

    The identifier is the absolute path of the closest enclosing directory
    that contains one of `markers`, or `NO_PROJECT`.
    """

    def __init__(self, markers: Sequence[str] = DEFAULT_PROJECT_MARKERS):
        self._markers = tuple(markers)

    @property
    def markers(self) -> tuple:
        return self._markers

    def resolve(self, directory: str | Path) -> str:
        p = Path(directory).resolve()
        if p.is_file():
            p = p.parent

        # Walk upwards until we find *some* marker.
        for cur in [p] + list(p.parents):
            if any((cur / m).exists() for m in self._markers):
                logger.debug("Resolved project root %s for %s", cur, directory)
                return str(cur)

        logger.debug("No project found at/above %s", directory)
        return NO_PROJECT
