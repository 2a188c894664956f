"""
Core dependencies for authentication and policy checks.

Every ownership/role decision goes through authorize(), which evaluates the rule
configured for a permission in app.config.permissions_config.
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import permissions_config as policies
from app.database.supabase_client import get_supabase
from app.core.soft_delete import is_active
from app.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

# Table holding the resource each rule is evaluated against
_RULE_TABLES = {
    policies.GROUP_MEMBER: "groups",
    policies.GROUP_OWNER: "groups",
    policies.GROUP_OWNER_OR_ADMIN: "groups",
    policies.LAAG_VIEWER: "laags",
    policies.LAAG_MEMBER: "laags",
    policies.LAAG_ORGANIZER: "laags",
    policies.LAAG_ORGANIZER_OR_ADMIN: "laags",
    policies.COMMENT_AUTHOR: "comments",
    policies.NOTIFICATION_RECIPIENT: "laagNotificationReads",
}

_NOT_FOUND = {
    "groups": "Group not found",
    "laags": "Laag not found",
    "comments": "Comment not found",
    "laagNotificationReads": "Notification not found",
}


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (profile, group_ids)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Resolve the bearer token to the caller and attach their profile (id, role, names)."""
    user_data = dict(auth_service.get_current_user(credentials.credentials))
    try:
        result = supabase.table("profiles")\
            .select("id, full_name, avatar_url, role, is_deleted")\
            .eq("id", user_data["id"])\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.error(f"Error loading profile for {user_data['id']}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load profile")
    if not result.data:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Profile not found")
    profile = result.data[0]
    if profile.get("is_deleted"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account has been deactivated")
    user_data["profile"] = profile
    user_data["role"] = profile.get("role") or "user"
    return user_data


def is_admin(user_data: dict) -> bool:
    """Admin role lives on the profile row, not in auth metadata"""
    return user_data.get("role") == "admin"


def fetch_active(supabase: Client, table: str, resource_id: str) -> Dict[str, Any]:
    """Load one row by id; missing and soft-deleted rows are both a 404."""
    result = supabase.table(table)\
        .select("*")\
        .eq("id", resource_id)\
        .limit(1)\
        .execute()
    row = result.data[0] if result.data else None
    if row is None or (table in ("groups", "laags", "comments") and not is_active(row, table)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND.get(table, "Not found"))
    return row


def get_user_group_ids(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Ids of non-deleted groups the user owns or is an active member of. Uses request-scoped cache when provided."""
    if cache is not None and "group_ids" in cache:
        return cache["group_ids"]
    members_result = supabase.table("groupMembers")\
        .select("group_id")\
        .eq("group_member", user_id)\
        .eq("is_removed", False)\
        .execute()
    owned_result = supabase.table("groups")\
        .select("id")\
        .eq("owner", user_id)\
        .eq("is_deleted", False)\
        .execute()
    owned = {g["id"] for g in (owned_result.data or [])}
    joined = {m["group_id"] for m in (members_result.data or [])} - owned
    if joined:
        # Memberships can outlive a soft-deleted group
        live = supabase.table("groups")\
            .select("id")\
            .in_("id", list(joined))\
            .eq("is_deleted", False)\
            .execute()
        joined = {g["id"] for g in (live.data or [])}
    group_ids = sorted(owned | joined)
    if cache is not None:
        cache["group_ids"] = group_ids
    return group_ids


def is_group_member(group: Dict[str, Any], user_id: str, supabase: Client) -> bool:
    """Owner, or holder of an active groupMembers row"""
    if group.get("owner") == user_id:
        return True
    member_result = supabase.table("groupMembers")\
        .select("id")\
        .eq("group_id", group["id"])\
        .eq("group_member", user_id)\
        .eq("is_removed", False)\
        .limit(1)\
        .execute()
    return bool(member_result.data)


def _deny(detail: str):
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def authorize(
    permission: str,
    user_data: dict,
    supabase: Client,
    resource_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Enforce the policy rule of `permission` for the caller.
    For resource-scoped rules the resource row is loaded (404 if missing or soft-deleted)
    and returned so callers do not need to fetch it again.
    Admins pass member/viewer rules (read access) but not owner/organizer/author rules.
    """
    rule = policies.get_rule(permission)
    user_id = user_data["id"]

    if rule == policies.ANY:
        return None
    if rule == policies.ADMIN:
        if not is_admin(user_data):
            _deny("Not authorized. Admin access required.")
        return None
    if rule == policies.SELF:
        if resource_id != user_id and not is_admin(user_data):
            _deny("You can only change your own account")
        return None

    table = _RULE_TABLES[rule]
    if resource_id is None:
        raise ValueError(f"Permission {permission} needs a resource id")
    row = fetch_active(supabase, table, resource_id)

    if rule == policies.GROUP_MEMBER:
        if not is_admin(user_data) and not is_group_member(row, user_id, supabase):
            _deny("You must be a member of this group")
    elif rule == policies.GROUP_OWNER:
        if row.get("owner") != user_id:
            _deny("Only the group owner can do this")
    elif rule == policies.GROUP_OWNER_OR_ADMIN:
        if row.get("owner") != user_id and not is_admin(user_data):
            _deny("Only the group owner or an admin can do this")
    elif rule in (policies.LAAG_VIEWER, policies.LAAG_MEMBER):
        public = rule == policies.LAAG_VIEWER and row.get("privacy") == "public"
        if not public and not is_admin(user_data) and row.get("organizer") != user_id:
            group = fetch_active(supabase, "groups", row["group_id"])
            if not is_group_member(group, user_id, supabase):
                _deny("You must be a member of this laag's group")
    elif rule == policies.LAAG_ORGANIZER:
        if row.get("organizer") != user_id:
            _deny("Only the organizer can edit this laag")
    elif rule == policies.LAAG_ORGANIZER_OR_ADMIN:
        if row.get("organizer") != user_id and not is_admin(user_data):
            _deny("Only the organizer or an admin can do this")
    elif rule == policies.COMMENT_AUTHOR:
        if row.get("user_id") != user_id:
            _deny("You can only change your own comments")
    elif rule == policies.NOTIFICATION_RECIPIENT:
        if row.get("user_id") != user_id:
            _deny("Notification not accessible")
    return row


def require_permission(required_permission: str):
    """Factory function to create a dependency for permissions whose rule needs no target resource"""
    rule = policies.get_rule(required_permission)
    if rule not in policies.GLOBAL_RULES:
        raise ValueError(f"{required_permission} is resource-scoped; call authorize() with a resource id")

    def check_permission(
        user_data: dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        authorize(required_permission, user_data, supabase)
        return user_data
    return check_permission


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns the request-scoped access cache."""
    return _get_request_cache(request)
