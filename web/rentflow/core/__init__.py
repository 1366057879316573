from .base import BaseRepository, IRepository, BaseService, IService
from .exceptions import (
    BaseError,
    NotFoundError,
    ValidationError,
    InvalidStatusError,
    AuthorizationError,
    BusinessLogicError,
    PersistenceError,
    SettlementError,
)
from .config import Settings, get_settings
from .clock import Clock, utcnow

__all__ = [
    # Base classes
    "BaseRepository",
    "IRepository",
    "BaseService",
    "IService",

    # Exceptions
    "BaseError",
    "NotFoundError",
    "ValidationError",
    "InvalidStatusError",
    "AuthorizationError",
    "BusinessLogicError",
    "PersistenceError",
    "SettlementError",

    # Config
    "Settings",
    "get_settings",

    # Time
    "Clock",
    "utcnow",
]
