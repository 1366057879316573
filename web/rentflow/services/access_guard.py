"""Who may change an application."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import AuthorizationError
from ..models import Application
from ..roles import Role


@dataclass(frozen=True)
class Principal:
    """Already-verified caller identity supplied by the identity provider."""

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin.value


def can_modify_application(principal: Principal, application: Application) -> bool:
    """Admins may modify any application; managers only their own listings'."""
    if principal.role == Role.admin.value:
        return True
    if principal.role == Role.manager.value:
        return application.property is not None and application.property.manager_id == principal.id
    return False


def ensure_can_modify_application(principal: Principal, application: Application) -> None:
    """Raise ``AuthorizationError`` unless *principal* may modify *application*.

    Pure check; nothing is read or written.
    """
    if not can_modify_application(principal, application):
        raise AuthorizationError(
            "Forbidden: You do not have permission to update this application"
        )
