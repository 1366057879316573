"""Status transitions end to end through the service layer."""

import asyncio
import logging
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from rentflow.core.exceptions import (
    AuthorizationError, NotFoundError, PersistenceError, ValidationError
)
from rentflow.infrastructure.change_feed import EntityChanged
from rentflow.models import Application, Lease, Referral, Tenant, Voucher
from rentflow.services.application_service import ApplicationStatusService, STATUS_UPDATED_EVENT
from rentflow.services.referral_service import SettlementOutcome
from rentflow.statuses import ApplicationStatus, VoucherStatus

from ..conftest import FIXED_NOW, fixed_clock


def _service(session, recorder):
    return ApplicationStatusService(
        session,
        clock=fixed_clock,
        track_event=recorder.track,
        publish_change=recorder.publish,
    )


async def _count(session, model):
    return await session.scalar(select(func.count()).select_from(model))


async def _stored_status(session_factory, application_id):
    async with session_factory() as s:
        application = await s.get(Application, application_id)
        return application.status


async def test_approval_provisions_lease_from_monthly_price(session, seed, manager, recorder):
    result = await _service(session, recorder).update_status(seed.application_id, "approved", manager)

    assert result.application.status == ApplicationStatus.Approved.value
    assert result.previous_status == ApplicationStatus.Pending.value
    assert result.lease_created is True
    lease = result.lease
    assert lease.rent_amount == Decimal("4500")
    assert lease.deposit_amount == Decimal("4500")
    assert lease.start_date == FIXED_NOW
    assert lease.end_date == FIXED_NOW + timedelta(days=365)


async def test_response_carries_property_room_and_tenant(session, seed, manager, recorder):
    result = await _service(session, recorder).update_status(seed.application_id, "Denied", manager)

    application = result.application
    assert application.property.id == seed.property_id
    assert application.room.id == seed.room_id
    assert application.tenant.id == seed.tenant_id


async def test_approval_settles_referral_with_two_vouchers(session, seed, manager, recorder):
    result = await _service(session, recorder).update_status(seed.application_id, "APPROVED", manager)

    assert result.settlement.outcome is SettlementOutcome.settled
    referral = await session.get(Referral, seed.referral_id)
    assert referral.is_completed is True

    vouchers = list((await session.execute(select(Voucher).order_by(Voucher.id))).scalars().all())
    assert sorted(v.owner_id for v in vouchers) == sorted([seed.referrer_id, seed.tenant_id])
    for voucher in vouchers:
        assert voucher.discount_amount == Decimal("100")
        assert voucher.status == VoucherStatus.Active.value
        assert voucher.expires_at == FIXED_NOW + timedelta(days=365)


async def test_approving_twice_creates_nothing_new(session_factory, seed, manager, recorder):
    async with session_factory() as s:
        first = await _service(s, recorder).update_status(seed.application_id, "approved", manager)
    async with session_factory() as s:
        second = await _service(s, recorder).update_status(seed.application_id, "approved", manager)

        assert second.lease.id == first.lease.id
        assert second.lease_created is False
        assert second.previous_status == ApplicationStatus.Approved.value
        assert second.settlement.outcome is SettlementOutcome.already_completed
        assert await _count(s, Lease) == 1
        assert await _count(s, Voucher) == 2


async def test_concurrent_approvals_settle_once(session_factory, seed, manager, recorder, caplog):
    async def approve():
        async with session_factory() as s:
            return await _service(s, recorder).update_status(seed.application_id, "approved", manager)

    with caplog.at_level(logging.INFO, logger="rentflow.services.application_service"):
        results = await asyncio.gather(approve(), approve())

    assert all(r.settlement is not None for r in results)
    outcomes = sorted((r.settlement.outcome for r in results), key=lambda o: o is not SettlementOutcome.settled)
    assert outcomes[0] is SettlementOutcome.settled
    assert outcomes[1] in (SettlementOutcome.already_completed, SettlementOutcome.lost_race)
    assert "Referral settlement failed" not in caplog.text

    assert all(r.application.status == ApplicationStatus.Approved.value for r in results)
    assert all(r.lease is not None for r in results)
    assert len({r.lease.id for r in results}) == 1
    async with session_factory() as s:
        assert await _count(s, Lease) == 1
        assert await _count(s, Voucher) == 2
        referral = await s.get(Referral, seed.referral_id)
        assert referral.is_completed is True


async def test_invalid_status_touches_nothing(session_factory, seed, manager, recorder):
    async with session_factory() as s:
        with pytest.raises(ValidationError):
            await _service(s, recorder).update_status(seed.application_id, "accepted", manager)

    assert await _stored_status(session_factory, seed.application_id) == ApplicationStatus.Pending.value
    assert recorder.events == []
    assert recorder.changes == []


@pytest.mark.parametrize("bad_id", [0, -3, "7", None, True])
async def test_bad_application_id_is_rejected(session, seed, manager, recorder, bad_id):
    with pytest.raises(ValidationError) as exc_info:
        await _service(session, recorder).update_status(bad_id, "approved", manager)

    assert exc_info.value.details["field"] == "application_id"


async def test_unknown_application_is_not_found(session, seed, manager, recorder):
    with pytest.raises(NotFoundError):
        await _service(session, recorder).update_status(424242, "approved", manager)


async def test_foreign_manager_is_forbidden_and_status_unchanged(
    session_factory, seed, other_manager, recorder
):
    async with session_factory() as s:
        with pytest.raises(AuthorizationError):
            await _service(s, recorder).update_status(seed.application_id, "approved", other_manager)

        assert await _count(s, Lease) == 0

    assert await _stored_status(session_factory, seed.application_id) == ApplicationStatus.Pending.value


async def test_admin_may_approve_any_application(session, seed, admin, recorder):
    result = await _service(session, recorder).update_status(seed.application_id, "approved", admin)

    assert result.application.status == ApplicationStatus.Approved.value
    assert result.lease is not None


async def test_denial_has_no_side_effects(session, seed, manager, recorder):
    result = await _service(session, recorder).update_status(seed.application_id, "denied", manager)

    assert result.application.status == ApplicationStatus.Denied.value
    assert result.lease is None
    assert result.settlement is None
    assert await _count(session, Lease) == 0
    assert await _count(session, Voucher) == 0


async def test_approval_without_linked_tenant_only_changes_status(session, seed, manager, recorder):
    session.add(Application(id=77, property_id=seed.property_id, tenant_id=None, email="walkin@example.com"))
    await session.commit()

    result = await _service(session, recorder).update_status(77, "approved", manager)

    assert result.application.status == ApplicationStatus.Approved.value
    assert result.lease is None
    assert await _count(session, Lease) == 0
    assert recorder.events[0][0] == "walkin@example.com"


async def test_referral_free_tenant_gets_no_vouchers(session, seed, manager, recorder):
    tenant = await session.get(Tenant, seed.tenant_id)
    tenant.referred_by_code = None
    await session.commit()

    result = await _service(session, recorder).update_status(seed.application_id, "approved", manager)

    assert result.lease is not None
    assert result.settlement.outcome is SettlementOutcome.no_referral_code
    assert await _count(session, Voucher) == 0


async def test_failed_status_write_runs_nothing_downstream(session, seed, manager, recorder, monkeypatch):
    service = _service(session, recorder)

    async def broken_update(application_id, status):
        raise OperationalError("UPDATE applications", {}, Exception("disk I/O error"))

    monkeypatch.setattr(service.uow.applications, "update_status", broken_update)

    with pytest.raises(PersistenceError):
        await service.update_status(seed.application_id, "approved", manager)

    assert await _count(session, Lease) == 0
    assert recorder.events == []


async def test_settlement_failure_does_not_undo_approval(session_factory, seed, manager, recorder, monkeypatch, caplog):
    async with session_factory() as s:
        service = _service(s, recorder)

        async def broken_settlement(tenant_id):
            raise RuntimeError("reward program offline")

        monkeypatch.setattr(service.referrals, "settle_for_tenant", broken_settlement)

        with caplog.at_level(logging.ERROR, logger="rentflow.services.application_service"):
            result = await service.update_status(seed.application_id, "approved", manager)

        assert result.application.status == ApplicationStatus.Approved.value
        assert result.lease is not None
        assert result.settlement is None
        assert "Referral settlement failed" in caplog.text

    assert await _stored_status(session_factory, seed.application_id) == ApplicationStatus.Approved.value
    async with session_factory() as s:
        assert await _count(s, Lease) == 1


async def test_lease_failure_keeps_status_and_skips_referral(session, seed, manager, recorder, monkeypatch):
    service = _service(session, recorder)

    async def broken_provision(application):
        raise RuntimeError("lease store unavailable")

    async def unexpected_settlement(tenant_id):
        raise AssertionError("settlement must wait for a lease")

    monkeypatch.setattr(service.leases, "provision", broken_provision)
    monkeypatch.setattr(service.referrals, "settle_for_tenant", unexpected_settlement)

    result = await service.update_status(seed.application_id, "approved", manager)

    assert result.application.status == ApplicationStatus.Approved.value
    assert result.lease is None


async def test_emits_one_telemetry_event_and_change_notifications(session, seed, manager, recorder):
    result = await _service(session, recorder).update_status(seed.application_id, "approved", manager)

    assert len(recorder.events) == 1
    distinct_id, event, properties = recorder.events[0]
    assert distinct_id == seed.tenant_id
    assert event == STATUS_UPDATED_EVENT
    assert properties["application_id"] == seed.application_id
    assert properties["property_id"] == seed.property_id
    assert properties["previous_status"] == "Pending"
    assert properties["new_status"] == "Approved"
    assert properties["lease_created"] is True
    assert properties["updated_by"] == manager.id

    assert recorder.changes == [
        EntityChanged("Application", seed.application_id),
        EntityChanged("Lease", result.lease.id),
    ]
