"""Actor domain entity.

The authenticated caller as supplied by the identity boundary: identity,
global role, at most one organization and any number of team memberships.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ....config.constants import GlobalRole, TeamRole


@dataclass(frozen=True)
class Actor:
    """Immutable snapshot of the caller used for a single decision."""

    id: str
    name: str = ""
    global_role: GlobalRole = GlobalRole.MEMBER
    organization_id: Optional[str] = None
    team_memberships: Mapping[str, TeamRole] = field(default_factory=dict)
    is_active: bool = True

    def __post_init__(self):
        if not self.id:
            raise ValueError("Actor id cannot be empty")
        # Unknown role strings are rejected here so evaluators only ever see enum members
        object.__setattr__(self, "global_role", GlobalRole(self.global_role))
        object.__setattr__(
            self,
            "team_memberships",
            {team_id: TeamRole(role) for team_id, role in dict(self.team_memberships).items()},
        )

    @property
    def is_super_admin(self) -> bool:
        return self.global_role is GlobalRole.SUPER_ADMIN

    def belongs_to_organization(self, organization_id: Optional[str]) -> bool:
        return organization_id is not None and self.organization_id == organization_id

    def role_in_team(self, team_id: str) -> Optional[TeamRole]:
        return self.team_memberships.get(team_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "global_role": self.global_role.value,
            "organization_id": self.organization_id,
            "team_memberships": {k: v.value for k, v in self.team_memberships.items()},
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Actor":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            global_role=GlobalRole(data.get("global_role", GlobalRole.MEMBER.value)),
            organization_id=data.get("organization_id"),
            team_memberships=data.get("team_memberships") or {},
            is_active=data.get("is_active", True),
        )

    def __str__(self) -> str:
        return f"Actor({self.id}, {self.global_role.value})"
