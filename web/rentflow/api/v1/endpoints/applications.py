"""Application endpoints for managers and admins."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Path

from ....deps import ApplicationServiceDep
from ....models import Application, Lease
from ....security import PrincipalDep
from ..schemas.application_schemas import ApplicationStatusUpdate, ApplicationOut, LeaseOut

router = APIRouter(prefix="/applications")


def _application_out(application: Application, lease: Optional[Lease]) -> ApplicationOut:
    out = ApplicationOut.model_validate(application)
    out.lease = LeaseOut.model_validate(lease) if lease is not None else None
    return out


@router.get("/{application_id}", response_model=ApplicationOut)
async def get_application(
    service: ApplicationServiceDep,
    principal: PrincipalDep,
    application_id: int = Path(..., gt=0),
):
    """Application with its property, room, tenant and current lease."""
    application = await service.get_application(application_id, principal)
    lease = await service.get_current_lease(application)
    return _application_out(application, lease)


@router.put("/{application_id}/status", response_model=ApplicationOut)
async def update_application_status(
    payload: ApplicationStatusUpdate,
    service: ApplicationServiceDep,
    principal: PrincipalDep,
    application_id: int = Path(..., gt=0),
):
    """Set the application's status.

    Approval also provisions a lease (returned as ``lease``) and settles the
    tenant's referral in the background of the same request. Only the status
    change decides the response code.
    """
    result = await service.update_status(application_id, payload.status, principal)
    return _application_out(result.application, result.lease)
