from supabase import Client
from app.core.soft_delete import select_active, soft_delete
from app.modules.laags.attendees import unique_attendees
from app.modules.laags.constants import PUBLIC
from app.modules.notifications import stream
from app.modules.notifications.schemas import (
    NotificationResponse, UnreadCountResponse, MarkAllReadResponse, NotificationHistoryItem
)
from app.modules.profiles.service import fetch_profile_cards
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "notification"


def laag_route(laag_id: str, group_id: str, privacy: Optional[str]) -> str:
    """Client route a notification opens: the public page for public laags, the group page otherwise"""
    if privacy == PUBLIC:
        return f"/user/laags/{laag_id}"
    return f"/user/groups/{group_id}/laags/{laag_id}?from=group"


def _by_id(rows: Optional[List[Dict[str, Any]]]) -> Dict[str, Dict[str, Any]]:
    return {r["id"]: r for r in (rows or [])}


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def active_attendee_ids(self, laag_id: str) -> List[str]:
        result = select_active(self.supabase, "laagAttendees", "id, attendee_id, is_removed")\
            .eq("laag_id", laag_id)\
            .execute()
        return [r["attendee_id"] for r in unique_attendees(result.data or [])]

    def fan_out(self, laag: Dict[str, Any], status: str, read_by: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Create one laagNotifications row for laag and one laagNotificationReads row per
        attendee active right now. read_by (the organizer on create) gets a row already read.

        Best-effort: the caller's status write is never undone. If the read rows cannot be
        inserted the notification row is soft-deleted again so no orphan shows up in history.
        Returns the notification row, or None when fan-out failed.
        """
        try:
            recipients = self.active_attendee_ids(laag["id"])
            result = self.supabase.table("laagNotifications").insert({
                "laag_id": laag["id"],
                "group_id": laag["group_id"],
                "laag_status": status,
                "is_deleted": False
            }).execute()
            if not result.data:
                raise RuntimeError("notification insert returned no row")
            notification = result.data[0]
        except Exception as e:
            logger.error(f"Notification fan-out failed for laag {laag.get('id')}: {e}")
            return None

        if not recipients:
            return notification

        now = datetime.now(timezone.utc).isoformat()
        reads = [
            {
                "notification_id": notification["id"],
                "user_id": user_id,
                "is_read": user_id == read_by,
                "read_at": now if user_id == read_by else None
            }
            for user_id in recipients
        ]
        try:
            created = self.supabase.table("laagNotificationReads").insert(reads).execute()
        except Exception as e:
            logger.error(f"Notification read fan-out failed for laag {laag['id']}: {e}")
            try:
                soft_delete(self.supabase, "laagNotifications", [notification["id"]])
            except Exception as undo_error:
                logger.error(f"Could not withdraw notification {notification['id']}: {undo_error}")
            return None

        for row in created.data or []:
            if not row.get("is_read"):
                stream.publish(row["user_id"], NEW_NOTIFICATION_EVENT, {
                    "read_id": row.get("id"),
                    "notification_id": notification["id"],
                    "laag_id": laag["id"],
                    "laag_status": status
                })
        logger.info(f"Laag {laag['id']} {status}: notified {len(reads)} attendee(s)")
        return notification

    def _notification_context(self, notifications: List[Dict[str, Any]]):
        laag_ids = sorted({n["laag_id"] for n in notifications if n.get("laag_id")})
        group_ids = sorted({n["group_id"] for n in notifications if n.get("group_id")})
        laags = {}
        groups = {}
        if laag_ids:
            laags = _by_id(self.supabase.table("laags")
                           .select("id, what, privacy, organizer, group_id")
                           .in_("id", laag_ids)
                           .execute().data)
        if group_ids:
            groups = _by_id(self.supabase.table("groups")
                            .select("id, group_name")
                            .in_("id", group_ids)
                            .execute().data)
        cards = fetch_profile_cards(self.supabase, [laag.get("organizer") for laag in laags.values()])
        return laags, groups, cards

    def list_for_user(self, user_id: str) -> List[NotificationResponse]:
        """Caller's notifications, newest first"""
        try:
            reads = self.supabase.table("laagNotificationReads")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute().data or []
            notification_ids = sorted({r["notification_id"] for r in reads})
            if not notification_ids:
                return []
            notifications = _by_id(select_active(self.supabase, "laagNotifications")
                                   .in_("id", notification_ids)
                                   .execute().data)
            laags, groups, cards = self._notification_context(list(notifications.values()))

            items = []
            for read in reads:
                notification = notifications.get(read["notification_id"])
                if notification is None:
                    continue
                laag = laags.get(notification["laag_id"], {})
                organizer = cards.get(laag.get("organizer"), {})
                items.append(NotificationResponse(
                    id=read["id"],
                    notification_id=read["notification_id"],
                    is_read=read.get("is_read", False),
                    read_at=read.get("read_at"),
                    created_at=notification.get("created_at") or read.get("created_at"),
                    laag_id=notification["laag_id"],
                    group_id=notification["group_id"],
                    laag_status=notification.get("laag_status"),
                    group_name=groups.get(notification["group_id"], {}).get("group_name"),
                    laag_what=laag.get("what"),
                    laag_privacy=laag.get("privacy"),
                    organizer_name=organizer.get("full_name"),
                    route=laag_route(notification["laag_id"], notification["group_id"], laag.get("privacy"))
                ))
            return items
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing notifications for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch notifications")

    def unread_count(self, user_id: str) -> UnreadCountResponse:
        try:
            result = self.supabase.table("laagNotificationReads")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
            return UnreadCountResponse(unread=len(result.data or []))
        except Exception as e:
            logger.error(f"Error counting unread notifications for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch notifications")

    def mark_read(self, read_id: str) -> NotificationResponse:
        try:
            result = self.supabase.table("laagNotificationReads")\
                .update({"is_read": True, "read_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", read_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Notification not found")
            row = result.data[0]
            return NotificationResponse(
                id=row["id"],
                notification_id=row["notification_id"],
                is_read=row.get("is_read", True),
                read_at=row.get("read_at"),
                created_at=row.get("created_at")
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error marking notification {read_id} read: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notification")

    def mark_all_read(self, user_id: str) -> MarkAllReadResponse:
        """One batched update over the caller's unread rows"""
        try:
            result = self.supabase.table("laagNotificationReads")\
                .update({"is_read": True, "read_at": datetime.now(timezone.utc).isoformat()})\
                .eq("user_id", user_id)\
                .eq("is_read", False)\
                .execute()
            return MarkAllReadResponse(updated=len(result.data or []))
        except Exception as e:
            logger.error(f"Error marking all notifications read for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notifications")

    def history(self, limit: int = 50) -> List[NotificationHistoryItem]:
        """Recent notifications across all groups (admin dashboard)"""
        try:
            notifications = select_active(self.supabase, "laagNotifications")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute().data or []
            laags, groups, cards = self._notification_context(notifications)
            items = []
            for n in notifications:
                laag = laags.get(n["laag_id"])
                group = groups.get(n["group_id"])
                if laag is None or group is None:
                    continue
                items.append(NotificationHistoryItem(
                    id=n["id"],
                    laag_id=n["laag_id"],
                    group_id=n["group_id"],
                    laag_status=n["laag_status"],
                    created_at=n.get("created_at"),
                    laag_what=laag.get("what"),
                    group_name=group.get("group_name"),
                    organizer=cards.get(laag.get("organizer"))
                ))
            return items
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading notification history: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch notification history")
