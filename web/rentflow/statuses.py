from __future__ import annotations

from enum import Enum
from typing import Any

from .core.exceptions import InvalidStatusError


class ApplicationStatus(str, Enum):
    """Lifecycle of a rental application.

    ``Pending`` is the initial state; ``Approved`` provisions a lease and
    settles referrals; ``Denied`` has no side effects.
    """

    Pending = "Pending"
    Approved = "Approved"
    Denied = "Denied"

    @classmethod
    def parse(cls, value: Any) -> "ApplicationStatus":
        """Case-insensitive match against the three canonical values.

        Anything else, including non-strings and surrounding whitespace,
        raises ``InvalidStatusError``.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidStatusError(value)
        lowered = value.lower()
        for status in cls:
            if status.value.lower() == lowered:
                return status
        raise InvalidStatusError(value)


class VoucherStatus(str, Enum):
    Active = "Active"
    Used = "Used"
    Expired = "Expired"
