from fastapi import APIRouter, Depends

from rentflow.roles import Role
from rentflow.security import role_required
from rentflow.api.v1.endpoints import applications, vouchers


# Create main API router
api_v1_router = APIRouter()

# Include application endpoints (manager / admin access)
api_v1_router.include_router(
    applications.router,
    tags=["applications"],
    dependencies=[Depends(role_required(Role.admin, Role.manager))]
)

# Include voucher endpoints (tenant access)
api_v1_router.include_router(
    vouchers.router,
    tags=["vouchers"]
)
