from typing import Any, Optional, Dict


class BaseError(Exception):
    """Base exception class for the application"""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Exception raised when an entity is not found"""

    def __init__(self, entity: str, id: Any):
        super().__init__(
            message=f"{entity} with id {id} not found",
            status_code=404,
            details={"entity": entity, "id": id}
        )


class ValidationError(BaseError):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class InvalidStatusError(ValidationError):
    """Requested application status is not one of the canonical values"""

    def __init__(self, value: Any):
        super().__init__(
            "Invalid status. Must be Pending, Approved, or Denied",
            field="status"
        )
        self.details["value"] = value


class AuthorizationError(BaseError):
    """Exception raised for authorization errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=403)


class BusinessLogicError(BaseError):
    """Exception raised for business logic violations"""

    def __init__(self, message: str, rule: Optional[str] = None):
        details = {"rule": rule} if rule else {}
        super().__init__(
            message=message,
            status_code=422,
            details=details
        )


class PersistenceError(BaseError):
    """The authoritative write could not be stored"""

    def __init__(self, message: str, entity: Optional[str] = None):
        details = {"entity": entity} if entity else {}
        super().__init__(
            message=message,
            status_code=503,
            details=details
        )


class SettlementError(BaseError):
    """A post-commit side effect (lease, referral, voucher) failed.

    Raised inside the settlement chain and caught by the orchestrator; it never
    reaches the caller of a status transition.
    """

    def __init__(self, stage: str, message: str):
        super().__init__(
            message=f"Settlement failed during {stage}: {message}",
            status_code=500,
            details={"stage": stage}
        )
        self.stage = stage
