"""Attendee set reconciliation for laagAttendees."""

from typing import Any, Dict, Iterable, List, Tuple


def unique_attendees(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Active rows with duplicate attendee_id collapsed (first row wins)."""
    seen = set()
    unique = []
    for row in rows:
        if row.get("is_removed"):
            continue
        attendee_id = row.get("attendee_id")
        if attendee_id in seen:
            continue
        seen.add(attendee_id)
        unique.append(row)
    return unique


def attendee_set(submitted: Iterable[str], organizer_id: str) -> List[str]:
    """Submitted ids plus the organizer, duplicates dropped, submission order kept."""
    ids: List[str] = []
    for attendee_id in list(submitted) + [organizer_id]:
        if attendee_id and attendee_id not in ids:
            ids.append(attendee_id)
    return ids


def diff_attendees(
    active_rows: Iterable[Dict[str, Any]],
    target_ids: Iterable[str],
) -> Tuple[List[str], List[str]]:
    """
    Compare current active attendance rows with the target set of profile ids.

    Returns (row_ids_to_remove, profile_ids_to_add):
    every active row whose attendee is not in the target is removed (duplicate
    active rows of a kept attendee are removed too, so one active row remains),
    every target id without an active row is added.
    Resubmitting the same target yields two empty lists.
    """
    target = []
    for attendee_id in target_ids:
        if attendee_id and attendee_id not in target:
            target.append(attendee_id)
    target_set = set(target)

    to_remove: List[str] = []
    kept = set()
    for row in active_rows:
        if row.get("is_removed"):
            continue
        attendee_id = row.get("attendee_id")
        if attendee_id in target_set and attendee_id not in kept:
            kept.add(attendee_id)
        else:
            to_remove.append(row["id"])

    to_add = [attendee_id for attendee_id in target if attendee_id not in kept]
    return to_remove, to_add
