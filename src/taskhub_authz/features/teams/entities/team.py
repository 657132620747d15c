"""Team domain entity.

This module defines the Team entity and its leadership invariant: the lead is
always a member with role ``lead`` and there is exactly one lead at a time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Mapping, Optional

from ....config.constants import ResourceType, TeamRole, Visibility
from ....core.exceptions import InvariantViolationError


TEAM_VISIBILITIES = (Visibility.PRIVATE, Visibility.ORGANIZATION, Visibility.PUBLIC)


@dataclass
class Team:
    """Team domain entity.

    Teams optionally belong to an organization; individual teams have none.
    """

    resource_type: ClassVar[ResourceType] = ResourceType.TEAM

    id: str
    lead_id: str
    name: str = ""
    organization_id: Optional[str] = None
    members: Dict[str, TeamRole] = field(default_factory=dict)
    visibility: Visibility = Visibility.ORGANIZATION
    is_active: bool = True
    version: int = 1
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        self.visibility = Visibility(self.visibility)
        if self.visibility not in TEAM_VISIBILITIES:
            raise InvariantViolationError(
                f"Invalid team visibility: {self.visibility.value}", {"team_id": self.id}
            )
        self.members = {actor_id: TeamRole(role) for actor_id, role in self.members.items()}

        if not self.lead_id:
            raise InvariantViolationError("Team must have a lead", {"team_id": self.id})

        extra_leads = [
            actor_id for actor_id, role in self.members.items()
            if role is TeamRole.LEAD and actor_id != self.lead_id
        ]
        if extra_leads:
            raise InvariantViolationError(
                "Team can only have one lead", {"team_id": self.id, "leads": sorted(extra_leads)}
            )
        self.members[self.lead_id] = TeamRole.LEAD

    def is_lead(self, actor_id: str) -> bool:
        return self.lead_id == actor_id

    def is_member(self, actor_id: str) -> bool:
        """Lead implies member."""
        return self.is_lead(actor_id) or actor_id in self.members

    def role_of(self, actor_id: str) -> Optional[TeamRole]:
        if self.is_lead(actor_id):
            return TeamRole.LEAD
        return self.members.get(actor_id)

    def add_member(self, actor_id: str, role: TeamRole = TeamRole.MEMBER) -> None:
        if self.is_member(actor_id):
            raise InvariantViolationError(
                "User is already a member of this team", {"team_id": self.id, "actor_id": actor_id}
            )
        if TeamRole(role) is TeamRole.LEAD:
            raise InvariantViolationError(
                "New members cannot join as lead; transfer leadership instead",
                {"team_id": self.id, "actor_id": actor_id},
            )
        self.members[actor_id] = TeamRole.MEMBER
        self._touch()

    def remove_member(self, actor_id: str) -> None:
        if self.is_lead(actor_id):
            raise InvariantViolationError(
                "Cannot remove team lead. Transfer leadership first.",
                {"team_id": self.id, "actor_id": actor_id},
            )
        if actor_id not in self.members:
            raise InvariantViolationError(
                "User is not a member of this team", {"team_id": self.id, "actor_id": actor_id}
            )
        del self.members[actor_id]
        self._touch()

    def change_member_role(self, actor_id: str, role: TeamRole) -> Optional[str]:
        """Change a member's role.

        Promoting to ``lead`` demotes the current lead in the same step and
        returns the previous lead's id. Demoting the lead directly is rejected,
        since it would leave the team leaderless.
        """
        role = TeamRole(role)
        if not self.is_member(actor_id):
            raise InvariantViolationError(
                "User is not a member of this team", {"team_id": self.id, "actor_id": actor_id}
            )

        if role is TeamRole.LEAD:
            if self.is_lead(actor_id):
                return None
            return self.transfer_leadership(actor_id)

        if self.is_lead(actor_id):
            raise InvariantViolationError(
                "Cannot demote the team lead. Promote another member to lead instead.",
                {"team_id": self.id, "actor_id": actor_id},
            )
        self.members[actor_id] = role
        self._touch()
        return None

    def transfer_leadership(self, new_lead_id: str) -> str:
        """Atomically demote the current lead and promote ``new_lead_id``."""
        if not self.is_member(new_lead_id):
            raise InvariantViolationError(
                "New lead must already be a team member", {"team_id": self.id, "actor_id": new_lead_id}
            )
        previous_lead = self.lead_id
        self.members[previous_lead] = TeamRole.MEMBER
        self.members[new_lead_id] = TeamRole.LEAD
        self.lead_id = new_lead_id
        self._touch()
        return previous_lead

    def detach_from_organization(self) -> None:
        self.organization_id = None
        self._touch()

    def deactivate(self) -> None:
        self.is_active = False
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "organization_id": self.organization_id,
            "lead_id": self.lead_id,
            "members": {k: v.value for k, v in self.members.items()},
            "visibility": self.visibility.value,
            "is_active": self.is_active,
            "version": self.version,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Team":
        updated_at = data.get("updated_at")
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        return cls(
            id=str(data["id"]),
            lead_id=str(data["lead_id"]),
            name=data.get("name") or "",
            organization_id=data.get("organization_id"),
            members=dict(data.get("members") or {}),
            visibility=Visibility(data.get("visibility", Visibility.ORGANIZATION.value)),
            is_active=data.get("is_active", True),
            version=data.get("version", 1),
            updated_at=updated_at or datetime.now(timezone.utc),
        )
