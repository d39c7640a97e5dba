"""Shared helpers: logging setup and project resolution."""

from .project import NO_PROJECT, ProjectResolver
from .utils import setup_logging

__all__ = [
	"NO_PROJECT",
	"ProjectResolver",
	"setup_logging",
]
