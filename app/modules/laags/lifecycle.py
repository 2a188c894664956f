"""
Laag status lifecycle.

Planning is the only state that can move, and only forward:
Planning -> Completed, Planning -> Cancelled. Completed and Cancelled are final.
"""

from app.modules.laags.constants import PLANNING, COMPLETED, CANCELLED, LAAG_STATUSES

ALLOWED_TRANSITIONS = {
    PLANNING: {COMPLETED, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
}


class InvalidTransition(Exception):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current} to {target}")


def allowed_targets(current: str) -> set:
    return set(ALLOWED_TRANSITIONS.get(current, set()))


def check_transition(current: str, target: str) -> bool:
    """
    Validate a status write.
    Returns True when the status actually changes, False for a same-status write (no-op).
    Raises InvalidTransition for anything the lifecycle does not allow.
    """
    if target not in LAAG_STATUSES:
        raise ValueError(f"Unknown laag status: {target}")
    if target == current:
        return False
    if target not in allowed_targets(current):
        raise InvalidTransition(current, target)
    return True
