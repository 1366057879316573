from sqlalchemy import (
    String, Integer, ForeignKey, Numeric, DateTime, Date, Boolean, Text,
    UniqueConstraint, Index, func, false
)
from sqlalchemy.orm import mapped_column, relationship, DeclarativeBase

from .statuses import ApplicationStatus, VoucherStatus


class Base(DeclarativeBase): ...


# ---------- Listings ----------
class Property(Base):
    __tablename__ = "properties"
    id              = mapped_column(Integer, primary_key=True)
    name            = mapped_column(String(200), nullable=False)
    # Identity-provider id of the manager who owns the listing
    manager_id      = mapped_column(String(64), nullable=False, index=True)
    price_per_month = mapped_column(Numeric(12, 2), nullable=True)
    # Legacy listings only ever populated this column
    price           = mapped_column(Numeric(12, 2), nullable=True)
    created_at      = mapped_column(DateTime, server_default=func.now())

    rooms        = relationship("Room", back_populates="property")
    applications = relationship("Application", back_populates="property")


class Room(Base):
    __tablename__ = "rooms"
    id              = mapped_column(Integer, primary_key=True)
    property_id     = mapped_column(ForeignKey("properties.id"), nullable=False)
    name            = mapped_column(String(120), nullable=False)
    price_per_month = mapped_column(Numeric(12, 2), nullable=True)

    property = relationship("Property", back_populates="rooms")


# ---------- People ----------
class Tenant(Base):
    __tablename__ = "tenants"
    # Identity-provider id (the principal's ``sub``)
    id               = mapped_column(String(64), primary_key=True)
    name             = mapped_column(String(120))
    email            = mapped_column(String(200))
    phone            = mapped_column(String(32))
    referral_code    = mapped_column(String(32), unique=True, nullable=True)
    # Code used at signup; written once by the signup flow
    referred_by_code = mapped_column(String(32), nullable=True)
    created_at       = mapped_column(DateTime, server_default=func.now())


# ---------- Applications & leases ----------
class Application(Base):
    __tablename__ = "applications"
    id          = mapped_column(Integer, primary_key=True)
    property_id = mapped_column(ForeignKey("properties.id"), nullable=False, index=True)
    room_id     = mapped_column(ForeignKey("rooms.id"), nullable=True)
    tenant_id   = mapped_column(ForeignKey("tenants.id"), nullable=True, index=True)
    status      = mapped_column(String(16), default=ApplicationStatus.Pending.value, nullable=False)
    applied_at  = mapped_column(DateTime, server_default=func.now())
    name        = mapped_column(String(120))
    email       = mapped_column(String(200))
    phone       = mapped_column(String(32))
    message     = mapped_column(Text)

    property = relationship("Property", back_populates="applications")
    room     = relationship("Room")
    tenant   = relationship("Tenant")


class Lease(Base):
    __tablename__ = "leases"
    __table_args__ = (
        # One lease per (property, tenant) opened on a given day; concurrent
        # approvals collide here and the loser re-reads the winner's row.
        # Only same-day openings collide: two approvals straddling midnight UTC
        # both insert. A Postgres deployment can close that gap with an
        # exclusion constraint over (property_id, tenant_id, tsrange(start, end)).
        UniqueConstraint("property_id", "tenant_id", "opened_on", name="uq_lease_property_tenant_day"),
    )
    id             = mapped_column(Integer, primary_key=True)
    property_id    = mapped_column(ForeignKey("properties.id"), nullable=False)
    tenant_id      = mapped_column(ForeignKey("tenants.id"), nullable=False)
    start_date     = mapped_column(DateTime, nullable=False)
    end_date       = mapped_column(DateTime, nullable=False)
    opened_on      = mapped_column(Date, nullable=False)
    rent_amount    = mapped_column(Numeric(12, 2), nullable=False)
    deposit_amount = mapped_column(Numeric(12, 2), nullable=False)

    property = relationship("Property")
    tenant   = relationship("Tenant")


# ---------- Referral program ----------
class Referral(Base):
    __tablename__ = "referrals"
    id                = mapped_column(Integer, primary_key=True)
    code              = mapped_column(String(32), unique=True, nullable=False)
    referrer_id       = mapped_column(ForeignKey("tenants.id"), nullable=False)
    referred_id       = mapped_column(ForeignKey("tenants.id"), nullable=False)
    is_completed      = mapped_column(Boolean, default=False, server_default=false(), nullable=False)
    completed_at      = mapped_column(DateTime, nullable=True)
    voucher_generated = mapped_column(Boolean, default=False, server_default=false(), nullable=False)
    created_at        = mapped_column(DateTime, server_default=func.now())

    vouchers = relationship("Voucher", back_populates="referral")


class Voucher(Base):
    __tablename__ = "vouchers"
    __table_args__ = (
        Index("ix_vouchers_owner_id", "owner_id"),
    )
    id               = mapped_column(Integer, primary_key=True)
    code             = mapped_column(String(80), unique=True, nullable=False)
    owner_id         = mapped_column(ForeignKey("tenants.id"), nullable=False)
    discount_amount  = mapped_column(Numeric(12, 2), nullable=False)
    discount_percent = mapped_column(Numeric(5, 2), nullable=True)
    status           = mapped_column(String(16), default=VoucherStatus.Active.value, nullable=False)
    expires_at       = mapped_column(DateTime, nullable=False)
    used_at          = mapped_column(DateTime, nullable=True)
    referral_id      = mapped_column(ForeignKey("referrals.id"), nullable=True)
    created_at       = mapped_column(DateTime, server_default=func.now())

    referral = relationship("Referral", back_populates="vouchers")
