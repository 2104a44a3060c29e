# app/core/exceptions.py

from typing import Optional


class ServiceDeskError(Exception):
    """Base class for every failure a service operation can report."""

    kind = "ServiceDeskError"
    status_code = 400

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.kind
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class InvalidCredentials(ServiceDeskError):
    kind = "InvalidCredentials"
    status_code = 401

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(detail)


class EmailInUse(ServiceDeskError):
    kind = "EmailInUse"
    status_code = 409

    def __init__(self, detail: str = "Email already in use"):
        super().__init__(detail)


class Unauthorized(ServiceDeskError):
    kind = "Unauthorized"
    status_code = 403

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class NotFound(ServiceDeskError):
    kind = "NotFound"
    status_code = 404

    def __init__(self, entity: str = "Resource"):
        self.entity = entity
        super().__init__(f"{entity} not found")


class ValidationFailed(ServiceDeskError):
    kind = "ValidationFailed"
    status_code = 422

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail, "field": self.field}


class InvalidTransition(ValidationFailed):
    def __init__(self, reason: str):
        super().__init__("status_id", reason)


class DefaultStatusMissing(ServiceDeskError):
    kind = "DefaultStatusMissing"
    status_code = 500

    def __init__(self, detail: str = "Default status not configured"):
        super().__init__(detail)
