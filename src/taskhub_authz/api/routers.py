"""HTTP routes: access checks and the audit trail."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..bootstrap import AuthzServices
from ..config.constants import Action, ResourceType
from ..features.identity.entities.actor import Actor
from .dependencies import get_bearer_token, get_current_actor, get_services
from .models import (
    AccessCheckRequest,
    AuditRecordResponse,
    DecisionResponse,
    PaginatedResponse,
)

router = APIRouter()


@router.post("/access/check", response_model=DecisionResponse, tags=["Access"])
async def check_access(
    request: AccessCheckRequest,
    token: str = Depends(get_bearer_token),
    services: AuthzServices = Depends(get_services),
) -> DecisionResponse:
    """Return the verdict for the caller on one resource and action."""
    decision = await services.access.check_access(
        token, request.resource_type, request.resource_id, request.action
    )
    return DecisionResponse.from_decision(decision)


@router.get(
    "/audit/{resource_id}",
    response_model=PaginatedResponse[AuditRecordResponse],
    tags=["Audit"],
)
async def list_audit_records(
    resource_id: str,
    resource_type: ResourceType = Query(ResourceType.TASK, description="Kind of the audited resource"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    services: AuthzServices = Depends(get_services),
) -> PaginatedResponse[AuditRecordResponse]:
    """List audit records of a resource the caller can read, newest first."""
    await services.access.require(actor, resource_type, resource_id, Action.READ)
    result = await services.audit.list_audit_records(resource_id, page, page_size)
    return PaginatedResponse[AuditRecordResponse].create(
        items=[AuditRecordResponse.from_record(r) for r in result.items],
        page=result.page,
        page_size=result.page_size,
        total_items=result.total,
    )
