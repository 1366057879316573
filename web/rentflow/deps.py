from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.infrastructure import get_session
from rentflow.services import ApplicationStatusService, VoucherService

# Type alias for dependency injection
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_application_service(sess: SessionDep) -> ApplicationStatusService:
    return ApplicationStatusService(sess)


def get_voucher_service(sess: SessionDep) -> VoucherService:
    return VoucherService(sess)


# Services bound to the request's session
ApplicationServiceDep = Annotated[ApplicationStatusService, Depends(get_application_service)]
VoucherServiceDep = Annotated[VoucherService, Depends(get_voucher_service)]
