"""Organization domain entity.

An organization has exactly one permanent owner and a set of admins. The
owner is always an admin.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Mapping, Set

from ....config.constants import ResourceType
from ....core.exceptions import InvariantViolationError


@dataclass
class Organization:
    """Organization domain entity."""

    resource_type: ClassVar[ResourceType] = ResourceType.ORGANIZATION

    id: str
    owner_id: str
    name: str = ""
    admin_ids: Set[str] = field(default_factory=set)
    is_active: bool = True
    version: int = 1
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if not self.owner_id:
            raise InvariantViolationError("Organization must have an owner", {"organization_id": self.id})
        self.admin_ids = set(self.admin_ids)
        self.admin_ids.add(self.owner_id)

    def is_owner(self, actor_id: str) -> bool:
        return self.owner_id == actor_id

    def is_admin(self, actor_id: str) -> bool:
        """Check admin status. The owner is implicitly an admin."""
        return self.is_owner(actor_id) or actor_id in self.admin_ids

    def add_admin(self, actor_id: str) -> None:
        if actor_id in self.admin_ids:
            raise InvariantViolationError(
                "User is already an admin", {"organization_id": self.id, "actor_id": actor_id}
            )
        self.admin_ids.add(actor_id)
        self._touch()

    def remove_admin(self, actor_id: str) -> None:
        if self.is_owner(actor_id):
            raise InvariantViolationError(
                "Cannot remove organization owner", {"organization_id": self.id, "actor_id": actor_id}
            )
        self.admin_ids.discard(actor_id)
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
            "owner_id": self.owner_id,
            "admin_ids": sorted(self.admin_ids),
            "is_active": self.is_active,
            "version": self.version,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Organization":
        updated_at = data.get("updated_at")
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        return cls(
            id=str(data["id"]),
            owner_id=str(data["owner_id"]),
            name=data.get("name") or "",
            admin_ids=set(data.get("admin_ids") or []),
            is_active=data.get("is_active", True),
            version=data.get("version", 1),
            updated_at=updated_at or datetime.now(timezone.utc),
        )
