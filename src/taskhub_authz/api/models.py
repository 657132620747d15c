"""Request and response schemas for the HTTP surface."""

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..config.constants import Action, DecisionReason, ResourceType
from ..features.access.entities.decision import Decision
from ..features.audit.entities.audit_record import AuditRecord

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class AccessCheckRequest(BaseSchema):
    resource_type: ResourceType = Field(description="Kind of resource being accessed")
    resource_id: str = Field(min_length=1, description="Resource identifier")
    action: Action = Field(description="Requested action")


class DecisionResponse(BaseSchema):
    allowed: bool
    reason: DecisionReason
    action: Action
    resource_type: ResourceType
    resource_id: str
    permitted_actions: List[Action] = Field(default_factory=list)

    @classmethod
    def from_decision(cls, decision: Decision) -> "DecisionResponse":
        return cls(**decision.to_dict())


class AuditRecordResponse(BaseSchema):
    id: str
    resource_id: str
    action: str
    field: Optional[str] = None
    actor_id: str
    actor_name: str = ""
    old_value: Any = None
    new_value: Any = None
    details: Optional[str] = None
    description: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: AuditRecord) -> "AuditRecordResponse":
        data = record.to_dict()
        data["created_at"] = record.created_at
        return cls(**data)


class PaginationMetadata(BaseSchema):
    """Pagination metadata for paginated responses."""

    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_items: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_previous: bool

    @classmethod
    def create(cls, page: int, page_size: int, total_items: int) -> "PaginationMetadata":
        total_pages = (total_items + page_size - 1) // page_size if page_size > 0 else 0
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )


class PaginatedResponse(BaseSchema, Generic[T]):
    """Generic paginated response model."""

    items: List[T]
    pagination: PaginationMetadata

    @classmethod
    def create(cls, items: List[T], page: int, page_size: int, total_items: int) -> "PaginatedResponse[T]":
        return cls(items=items, pagination=PaginationMetadata.create(page, page_size, total_items))
