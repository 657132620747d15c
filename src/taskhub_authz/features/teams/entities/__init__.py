"""Team entities."""

from .team import TEAM_VISIBILITIES, Team

__all__ = [
    "Team",
    "TEAM_VISIBILITIES",
]
