from enum import Enum


class UserRole(str, Enum):
    Admin = "admin"
    HOD = "hod"
    Technician = "technician"
    Requestor = "requestor"

    @classmethod
    def parse(cls, raw) -> "UserRole":
        """Map a persisted role value onto the enum; unknown values fall back to Requestor."""
        if isinstance(raw, cls):
            return raw
        if raw is None:
            return cls.Requestor
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.Requestor


class RequestPriority(str, Enum):
    Low = "Low"
    Medium = "Medium"
    High = "High"
