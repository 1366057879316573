"""Who may change an application."""

import pytest

from rentflow.core.exceptions import AuthorizationError
from rentflow.models import Application, Property
from rentflow.services.access_guard import (
    Principal, can_modify_application, ensure_can_modify_application
)


def _application(manager_id="mgr-1"):
    return Application(id=1, property_id=10, property=Property(id=10, name="P", manager_id=manager_id))


def test_admin_may_modify_any_application():
    assert can_modify_application(Principal("root", "admin"), _application("someone-else"))


def test_owning_manager_may_modify():
    assert can_modify_application(Principal("mgr-1", "manager"), _application("mgr-1"))


@pytest.mark.parametrize("principal", [
    Principal("mgr-2", "manager"),
    Principal("mgr-1", "tenant"),
    Principal("mgr-1", "landlord"),
    Principal("mgr-1", ""),
])
def test_everyone_else_is_forbidden(principal):
    application = _application("mgr-1")

    assert not can_modify_application(principal, application)
    with pytest.raises(AuthorizationError) as exc_info:
        ensure_can_modify_application(principal, application)
    assert exc_info.value.status_code == 403


def test_manager_without_loaded_property_is_forbidden():
    application = Application(id=1, property_id=10)

    assert not can_modify_application(Principal("mgr-1", "manager"), application)
