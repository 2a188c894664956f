"""
Shared soft-delete helpers.

Rows are never hard-deleted: each table carries a boolean flag that marks it
inactive. Every list query goes through active() so the predicate cannot be
forgotten, and every delete/remove goes through soft_delete().
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

logger = logging.getLogger(__name__)

SOFT_DELETE_FLAGS = {
    "profiles": "is_deleted",
    "groups": "is_deleted",
    "groupMembers": "is_removed",
    "laags": "is_deleted",
    "laagAttendees": "is_removed",
    "laagImages": "is_deleted",
    "comments": "is_deleted",
    "laagNotifications": "is_deleted",
}


def flag_for(table: str) -> str:
    try:
        return SOFT_DELETE_FLAGS[table]
    except KeyError:
        raise ValueError(f"Table {table} has no soft-delete flag")


def select_active(supabase: Client, table: str, columns: str = "*"):
    """Start a select on table already restricted to active rows."""
    return supabase.table(table).select(columns).eq(flag_for(table), False)


def is_active(row: Optional[Dict[str, Any]], table: str) -> bool:
    return bool(row) and not row.get(flag_for(table), False)


def soft_delete(supabase: Client, table: str, ids: List[str]) -> List[Dict[str, Any]]:
    """Flip the table's flag to true for ids. Returns the updated rows."""
    return _set_flag(supabase, table, ids, True)


def restore(supabase: Client, table: str, ids: List[str]) -> List[Dict[str, Any]]:
    return _set_flag(supabase, table, ids, False)


def _set_flag(supabase: Client, table: str, ids: List[str], value: bool) -> List[Dict[str, Any]]:
    if not ids:
        return []
    update_data: Dict[str, Any] = {flag_for(table): value}
    if table in ("groups", "laags", "laagAttendees", "comments", "profiles"):
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
    query = supabase.table(table).update(update_data)
    if len(ids) == 1:
        query = query.eq("id", ids[0])
    else:
        query = query.in_("id", list(ids))
    result = query.execute()
    logger.debug("Set %s=%s on %d %s row(s)", flag_for(table), value, len(ids), table)
    return result.data or []


def latest_row(supabase: Client, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Most recent row (active or not) matching all equality filters."""
    query = supabase.table(table).select("*")
    for column, value in filters.items():
        query = query.eq(column, value)
    result = query.order("created_at", desc=True).limit(1).execute()
    return result.data[0] if result.data else None
