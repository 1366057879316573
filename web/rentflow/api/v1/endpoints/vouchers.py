"""Voucher endpoints for the tenant owning them."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ....deps import VoucherServiceDep
from ....roles import Role
from ....security import PrincipalDep, role_required
from ..schemas.voucher_schemas import VoucherCodeIn, VoucherOut, VoucherValidationOut, VoucherRedeemOut

router = APIRouter(
    prefix="/vouchers",
    dependencies=[Depends(role_required(Role.tenant))]
)


@router.get("", response_model=List[VoucherOut])
async def list_vouchers(
    service: VoucherServiceDep,
    principal: PrincipalDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """Vouchers owned by the caller, newest first."""
    return await service.list_for_owner(principal.id, skip=skip, limit=limit)


@router.post("/validate", response_model=VoucherValidationOut)
async def validate_voucher(payload: VoucherCodeIn, service: VoucherServiceDep, principal: PrincipalDep):
    voucher = await service.validate(payload.code, principal.id)
    return VoucherValidationOut(valid=True, voucher=VoucherOut.model_validate(voucher))


@router.post("/redeem", response_model=VoucherRedeemOut)
async def redeem_voucher(payload: VoucherCodeIn, service: VoucherServiceDep, principal: PrincipalDep):
    voucher = await service.redeem(payload.code, principal.id)
    return VoucherRedeemOut(message="Voucher applied successfully", voucher=VoucherOut.model_validate(voucher))
