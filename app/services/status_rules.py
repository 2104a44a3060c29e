# app/services/status_rules.py

"""
Pure lifecycle rules over RequestStatus rows. Nothing here touches the
database, so the rules can be exercised directly in tests.
"""

from typing import Iterable, Optional

from app.core.exceptions import InvalidTransition, Unauthorized
from app.models.enums import UserRole
from app.models.service_request import ServiceRequest
from app.models.status import RequestStatus

DEFAULT_STATUS_SYSTEM_NAME = "OPEN"


def pick_default_status(statuses: Iterable[RequestStatus]) -> Optional[RequestStatus]:
    """Lowest non-null sequence wins; otherwise the row flagged OPEN."""
    statuses = list(statuses)
    sequenced = [s for s in statuses if s.sequence is not None]
    if sequenced:
        return min(sequenced, key=lambda s: s.order_key())

    for s in statuses:
        if (s.system_name or "").upper() == DEFAULT_STATUS_SYSTEM_NAME:
            return s
    return None


def sort_statuses(statuses: Iterable[RequestStatus]) -> list[RequestStatus]:
    return sorted(statuses, key=lambda s: s.order_key())


def check_transition(
    user,
    request: ServiceRequest,
    current: RequestStatus,
    target: RequestStatus,
) -> None:
    """
    Raise if `user` may not move `request` from `current` to `target`.

    - requestors never change status
    - technicians only on requests assigned to them, and only into
      statuses flagged is_allowed_for_technician
    - admin / hod may pick any status
    - nothing leaves a terminal status, and a move must change the status
    """
    role = UserRole.parse(user.role)

    if role == UserRole.Requestor:
        raise Unauthorized("Requestors cannot change request status")

    if role == UserRole.Technician:
        if request.assigned_to_user_id != user.id:
            raise Unauthorized("Request is not assigned to you")
        if not target.is_allowed_for_technician:
            raise Unauthorized(f"Status '{target.name}' is not available to technicians")

    if current.is_terminal:
        raise InvalidTransition(f"Request is already '{current.name}' and cannot change further")

    if current.id == target.id:
        raise InvalidTransition(f"Request is already '{current.name}'")
