"""Project domain entity.

The project creator is permanent: always admin-equivalent, never removable as
a member and never re-roled.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Mapping, Optional

from ....config.constants import ProjectRole, ResourceType, Visibility
from ....core.exceptions import InvariantViolationError


@dataclass
class Project:
    """Project domain entity."""

    resource_type: ClassVar[ResourceType] = ResourceType.PROJECT

    id: str
    created_by: str
    name: str = ""
    organization_id: Optional[str] = None
    team_id: Optional[str] = None
    visibility: Visibility = Visibility.PRIVATE
    members: Dict[str, ProjectRole] = field(default_factory=dict)
    is_active: bool = True
    version: int = 1
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not self.created_by:
            raise InvariantViolationError("Project must have a creator", {"project_id": self.id})
        self.visibility = Visibility(self.visibility)
        self.members = {actor_id: ProjectRole(role) for actor_id, role in self.members.items()}
        # The creator is stored as a member so listings by membership find the project
        self.members[self.created_by] = ProjectRole.ADMIN

    def is_creator(self, actor_id: str) -> bool:
        return self.created_by == actor_id

    def role_of(self, actor_id: str) -> Optional[ProjectRole]:
        if self.is_creator(actor_id):
            return ProjectRole.ADMIN
        return self.members.get(actor_id)

    def add_member(self, actor_id: str, role: ProjectRole = ProjectRole.MEMBER) -> None:
        if actor_id in self.members or self.is_creator(actor_id):
            raise InvariantViolationError(
                "User is already a member", {"project_id": self.id, "actor_id": actor_id}
            )
        self.members[actor_id] = ProjectRole(role)
        self._touch()

    def remove_member(self, actor_id: str) -> None:
        if self.is_creator(actor_id):
            raise InvariantViolationError(
                "Cannot remove project creator", {"project_id": self.id, "actor_id": actor_id}
            )
        if actor_id not in self.members:
            raise InvariantViolationError(
                "User is not a member of this project", {"project_id": self.id, "actor_id": actor_id}
            )
        del self.members[actor_id]
        self._touch()

    def change_member_role(self, actor_id: str, role: ProjectRole) -> ProjectRole:
        """Change a member's role and return the previous one."""
        if self.is_creator(actor_id):
            raise InvariantViolationError(
                "Cannot change project creator role", {"project_id": self.id, "actor_id": actor_id}
            )
        if actor_id not in self.members:
            raise InvariantViolationError(
                "User is not a member of this project", {"project_id": self.id, "actor_id": actor_id}
            )
        previous = self.members[actor_id]
        self.members[actor_id] = ProjectRole(role)
        self._touch()
        return previous

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
            "created_by": self.created_by,
            "organization_id": self.organization_id,
            "team_id": self.team_id,
            "visibility": self.visibility.value,
            "members": {k: v.value for k, v in self.members.items()},
            "is_active": self.is_active,
            "version": self.version,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Project":
        updated_at = data.get("updated_at")
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        return cls(
            id=str(data["id"]),
            created_by=str(data["created_by"]),
            name=data.get("name") or "",
            organization_id=data.get("organization_id"),
            team_id=data.get("team_id"),
            visibility=Visibility(data.get("visibility", Visibility.PRIVATE.value)),
            members=dict(data.get("members") or {}),
            is_active=data.get("is_active", True),
            version=data.get("version", 1),
            updated_at=updated_at or datetime.now(timezone.utc),
        )
