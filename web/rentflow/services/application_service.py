"""Application status transitions and the settlement chain behind approval."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.base import BaseService
from ..core.clock import Clock, utcnow
from ..core.config import Settings, get_settings
from ..core.exceptions import NotFoundError, PersistenceError, ValidationError
from ..core.unit_of_work import UnitOfWork
from ..infrastructure import change_feed
from ..infrastructure.change_feed import EntityChanged
from ..infrastructure.telemetry import track_async_event
from ..models import Application, Lease
from ..statuses import ApplicationStatus
from .access_guard import Principal, ensure_can_modify_application
from .lease_service import LeaseProvisioner
from .referral_service import ReferralSettlementService, SettlementResult

logger = logging.getLogger(__name__)

STATUS_UPDATED_EVENT = "application_status_updated"


@dataclass
class StatusTransitionResult:
    application: Application
    lease: Optional[Lease]
    previous_status: str
    lease_created: bool = False
    settlement: Optional[SettlementResult] = None


class ApplicationStatusService(BaseService):
    """Moves an application between Pending, Approved and Denied.

    The status write is committed first and is authoritative. On approval a
    lease is provisioned and the tenant's referral settled; failures there
    are logged and never undo the status or an existing lease.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        settings: Optional[Settings] = None,
        clock: Clock = utcnow,
        track_event: Callable[..., None] = track_async_event,
        publish_change: Callable[[EntityChanged], None] = change_feed.publish
    ):
        super().__init__(session)
        self.uow = UnitOfWork(session)
        self.settings = settings or get_settings()
        self.clock = clock
        self.track_event = track_event
        self.publish_change = publish_change
        self.leases = LeaseProvisioner(session, settings=self.settings, clock=clock)
        self.referrals = ReferralSettlementService(session, settings=self.settings, clock=clock)

    async def get_application(self, application_id: int, principal: Principal) -> Application:
        """Load an application for a caller allowed to manage it."""
        application = await self._load(application_id)
        ensure_can_modify_application(principal, application)
        return application

    async def get_current_lease(self, application: Application) -> Optional[Lease]:
        if application.tenant_id is None:
            return None
        return await self.uow.leases.get_active(application.property_id, application.tenant_id, self.clock())

    async def update_status(
        self,
        application_id: Any,
        requested_status: Any,
        principal: Principal
    ) -> StatusTransitionResult:
        """Apply *requested_status* to the application.

        Raises:
            ValidationError: Bad id or unrecognised status (nothing touched)
            NotFoundError: Application or its property is missing
            AuthorizationError: Caller may not manage this application
            PersistenceError: The status write itself failed
        """
        if isinstance(application_id, bool) or not isinstance(application_id, int) or application_id <= 0:
            raise ValidationError("Invalid application ID", field="application_id")
        status = ApplicationStatus.parse(requested_status)

        application = await self._load(application_id)
        ensure_can_modify_application(principal, application)

        previous_status = application.status
        property_id = application.property_id
        tenant_id = application.tenant_id
        distinct_id = tenant_id or application.email or "anonymous"

        try:
            updated = await self.uow.applications.update_status(application_id, status)
            if not updated:
                await self.uow.rollback()
                raise NotFoundError("Application", application_id)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.exception("Status update for application %s failed", application_id)
            raise PersistenceError(
                f"Could not update application {application_id}", entity="Application"
            ) from e

        logger.info(
            "Application %s: %s -> %s by %s",
            application_id, previous_status, status.value, principal.id
        )

        lease: Optional[Lease] = None
        lease_created = False
        settlement: Optional[SettlementResult] = None

        if status is ApplicationStatus.Approved and tenant_id is not None:
            try:
                provisioned = await self.leases.provision(application)
                lease, lease_created = provisioned.lease, provisioned.created
            except Exception:
                logger.exception("Lease provisioning failed for approved application %s", application_id)

            if lease is not None:
                try:
                    settlement = await self.referrals.settle_for_tenant(tenant_id)
                    logger.info(
                        "Referral settlement for tenant %s: %s",
                        tenant_id, settlement.outcome.value
                    )
                except Exception:
                    logger.exception("Referral settlement failed for tenant %s", tenant_id)

        # Settlement steps may have rolled back, which expires loaded instances
        self.session.expire_all()
        application = await self._load(application_id)
        if lease is not None:
            await self.session.refresh(lease)

        self.track_event(
            distinct_id,
            STATUS_UPDATED_EVENT,
            application_id=application_id,
            property_id=property_id,
            previous_status=previous_status,
            new_status=status.value,
            updated_by=principal.id,
            lease_created=lease_created,
            lease_id=lease.id if lease is not None else None,
        )
        self.publish_change(EntityChanged("Application", application_id))
        if lease is not None:
            self.publish_change(EntityChanged("Lease", lease.id))

        return StatusTransitionResult(
            application=application,
            lease=lease,
            previous_status=previous_status,
            lease_created=lease_created,
            settlement=settlement,
        )

    async def _load(self, application_id: int) -> Application:
        application = await self.uow.applications.get_with_details(application_id)
        if application is None:
            raise NotFoundError("Application", application_id)
        if application.property is None:
            raise NotFoundError("Property", application.property_id)
        return application
