"""Access decision entity."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable

from ....config.constants import NO_ACTIONS, Action, DecisionReason, ResourceType


@dataclass(frozen=True)
class Grant:
    """Actions granted by one rule, with the reason that rule reports."""

    actions: FrozenSet[Action]
    reason: DecisionReason


@dataclass(frozen=True)
class Decision:
    """Verdict for one (actor, resource, action) request.

    ``permitted_actions`` is the full set the actor holds on the resource,
    so a caller can render affordances without asking once per action.
    """

    allowed: bool
    reason: DecisionReason
    action: Action
    resource_type: ResourceType
    resource_id: str
    permitted_actions: FrozenSet[Action] = field(default=NO_ACTIONS)

    @classmethod
    def allow(
        cls,
        reason: DecisionReason,
        action: Action,
        resource_type: ResourceType,
        resource_id: str,
        permitted_actions: Iterable[Action],
    ) -> "Decision":
        return cls(True, reason, action, resource_type, resource_id, frozenset(permitted_actions))

    @classmethod
    def deny(
        cls,
        reason: DecisionReason,
        action: Action,
        resource_type: ResourceType,
        resource_id: str,
        permitted_actions: Iterable[Action] = NO_ACTIONS,
    ) -> "Decision":
        return cls(False, reason, action, resource_type, resource_id, frozenset(permitted_actions))

    @property
    def denied(self) -> bool:
        return not self.allowed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value,
            "action": self.action.value,
            "resource_type": self.resource_type.value,
            "resource_id": self.resource_id,
            # Sorted by declaration order for stable output
            "permitted_actions": [a.value for a in Action if a in self.permitted_actions],
        }
