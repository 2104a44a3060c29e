# app/core/constants.py

from datetime import datetime, timezone

from app.models.enums import UserRole

# ==========================================================
# FIELD LIMITS
# ==========================================================
TITLE_MAX_LENGTH = 250
DESCRIPTION_MAX_LENGTH = 5000
REPLY_MAX_LENGTH = 5000

# ==========================================================
# ANALYTICS
# ==========================================================
UNASSIGNED_DEPARTMENT = "Unassigned"
DAILY_BUCKET_MAX_DAYS = 31
DEFAULT_TREND_MONTHS = 6
CSV_HEADER = ["Request No", "Title", "Date", "Status", "Priority", "Department", "Requester"]

# ==========================================================
# REQUEST VISIBILITY
# ==========================================================
# Which requests each role sees in the request list
SCOPE_OWN = "OWN"            # requester_id == user
SCOPE_ASSIGNED = "ASSIGNED"  # assigned_to_user_id == user
SCOPE_ALL = "ALL"

REQUEST_VISIBILITY_MAP = {
    UserRole.Admin: SCOPE_ALL,
    UserRole.HOD: SCOPE_ALL,
    UserRole.Technician: SCOPE_ASSIGNED,
    UserRole.Requestor: SCOPE_OWN,
}


# ==========================================================
# TIME
# ==========================================================
def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
