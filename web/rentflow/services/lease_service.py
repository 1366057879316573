"""Lease provisioning for approved applications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.base import BaseService
from ..core.clock import Clock, utcnow
from ..core.config import Settings, get_settings
from ..core.exceptions import NotFoundError, SettlementError
from ..core.unit_of_work import UnitOfWork
from ..models import Application, Lease, Property

logger = logging.getLogger(__name__)


def resolve_monthly_rent(prop: Property, fallback: Decimal) -> Decimal:
    """Monthly price of a listing.

    ``price_per_month`` wins, then the legacy ``price`` column, then *fallback*.
    """
    if prop.price_per_month is not None:
        return Decimal(prop.price_per_month)
    if prop.price is not None:
        return Decimal(prop.price)
    return Decimal(fallback)


@dataclass
class ProvisionedLease:
    lease: Lease
    created: bool


class LeaseProvisioner(BaseService):
    """Idempotently ensures an approved application has a current lease."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        settings: Optional[Settings] = None,
        clock: Clock = utcnow
    ):
        super().__init__(session)
        self.uow = UnitOfWork(session)
        self.settings = settings or get_settings()
        self.clock = clock

    async def provision(self, application: Application) -> ProvisionedLease:
        """Return the lease covering now for the application's (property, tenant).

        An existing lease is reused untouched. Otherwise one is created and
        committed; if a concurrent request committed first, the unique
        constraint rejects this insert and the winner's lease is returned.

        Raises:
            SettlementError: If the lease can neither be found nor created
        """
        # Plain values: a rollback below expires every ORM instance in the session
        application_id = application.id
        property_id = application.property_id
        tenant_id = application.tenant_id
        if tenant_id is None:
            raise SettlementError("lease", f"application {application_id} has no tenant")

        now = self.clock()
        existing = await self.uow.leases.get_active(property_id, tenant_id, now)
        if existing is not None:
            logger.info("Reusing lease %s for application %s", existing.id, application_id)
            return ProvisionedLease(lease=existing, created=False)

        prop = await self.uow.properties.get(property_id)
        if prop is None:
            raise NotFoundError("Property", property_id)

        rent = resolve_monthly_rent(prop, self.settings.FALLBACK_MONTHLY_RENT)
        deposit = rent * self.settings.LEASE_DEPOSIT_MULTIPLIER

        try:
            lease = await self.uow.leases.create(obj_in={
                "property_id": property_id,
                "tenant_id": tenant_id,
                "start_date": now,
                "end_date": now + timedelta(days=self.settings.LEASE_TERM_DAYS),
                "opened_on": now.date(),
                "rent_amount": rent,
                "deposit_amount": deposit,
            })
            await self.uow.commit()
        except IntegrityError:
            await self.uow.rollback()
            logger.info(
                "Lease for property %s / tenant %s created concurrently; re-reading",
                property_id, tenant_id
            )
            winner = await self.uow.leases.get_active(property_id, tenant_id, self.clock())
            if winner is None:
                raise SettlementError("lease", "conflicting lease vanished after uniqueness violation")
            return ProvisionedLease(lease=winner, created=False)

        logger.info(
            "Created lease %s for application %s (rent %s, deposit %s)",
            lease.id, application_id, rent, deposit
        )
        return ProvisionedLease(lease=lease, created=True)
