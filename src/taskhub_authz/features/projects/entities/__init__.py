"""Project entities."""

from .project import Project

__all__ = [
    "Project",
]
