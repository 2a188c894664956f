from supabase import Client
from app.core import listing
from app.core.soft_delete import select_active, soft_delete
from app.modules.laags import lifecycle
from app.modules.laags.attendees import attendee_set, diff_attendees, unique_attendees
from app.modules.laags.constants import PLANNING, COMPLETED, CANCELLED, PUBLIC, SORT_FIELDS, CLEARABLE_FIELDS
from app.modules.laags.schemas import LaagCreate, LaagUpdate, LaagComplete, LaagResponse, AttendeeResponse
from app.modules.comments.service import to_comment_response
from app.modules.images.service import to_image_response
from app.modules.notifications.service import NotificationService
from app.modules.profiles.service import fetch_profile_cards
from app.storage.media_storage import MediaStorage
from typing import Any, Dict, Iterable, List, Optional, Tuple
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _group_rows(rows: Iterable[Dict[str, Any]], key: str) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row[key], []).append(row)
    return grouped


class LaagService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)
        self.notifications = NotificationService(supabase)

    # Reads

    def _hydrate(self, laags: List[Dict[str, Any]], with_comments: bool = True) -> List[LaagResponse]:
        """Attach organizer card, group name, unique active attendees, active images and comments"""
        if not laags:
            return []
        laag_ids = [laag["id"] for laag in laags]

        attendee_rows = select_active(self.supabase, "laagAttendees")\
            .in_("laag_id", laag_ids)\
            .order("created_at", desc=False)\
            .execute().data or []
        image_rows = select_active(self.supabase, "laagImages")\
            .in_("laag_id", laag_ids)\
            .order("created_at", desc=False)\
            .execute().data or []
        comment_rows = []
        if with_comments:
            comment_rows = select_active(self.supabase, "comments")\
                .in_("laag_id", laag_ids)\
                .order("created_at", desc=False)\
                .execute().data or []
        group_ids = sorted({laag["group_id"] for laag in laags})
        groups = {
            g["id"]: g for g in (self.supabase.table("groups")
                                 .select("id, group_name")
                                 .in_("id", group_ids)
                                 .execute().data or [])
        }

        attendees_by_laag = {k: unique_attendees(v) for k, v in _group_rows(attendee_rows, "laag_id").items()}
        images_by_laag = _group_rows(image_rows, "laag_id")
        comments_by_laag = _group_rows(comment_rows, "laag_id")

        profile_ids = [laag["organizer"] for laag in laags]
        profile_ids += [r["attendee_id"] for rows in attendees_by_laag.values() for r in rows]
        profile_ids += [r["user_id"] for r in comment_rows]
        cards = fetch_profile_cards(self.supabase, profile_ids)

        responses = []
        for laag in laags:
            responses.append(LaagResponse(
                **laag,
                organizer_profile=cards.get(laag["organizer"]),
                group_name=groups.get(laag["group_id"], {}).get("group_name"),
                attendees=[
                    AttendeeResponse(id=r["id"], attendee_id=r["attendee_id"], profile=cards.get(r["attendee_id"]))
                    for r in attendees_by_laag.get(laag["id"], [])
                ],
                images=[to_image_response(self.storage, r) for r in images_by_laag.get(laag["id"], [])],
                comments=[to_comment_response(r, cards) for r in comments_by_laag.get(laag["id"], [])]
            ))
        return responses

    def get_laag(self, laag: Dict[str, Any]) -> LaagResponse:
        try:
            return self._hydrate([laag])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading laag {laag.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load laag")

    def list_group_laags(
        self,
        group_id: str,
        q: Optional[str] = None,
        status: Optional[str] = None,
        privacy: Optional[str] = None,
        start_from: Optional[datetime] = None,
        start_to: Optional[datetime] = None,
        sort_by: str = "created_at",
        order: str = "desc",
        limit: int = 10,
        offset: int = 0
    ) -> List[LaagResponse]:
        """Group feed: fetch active laags, then search, filter, sort and page them"""
        if sort_by not in SORT_FIELDS:
            raise HTTPException(status_code=400, detail=f"sort_by must be one of {', '.join(SORT_FIELDS)}")
        try:
            result = select_active(self.supabase, "laags")\
                .eq("group_id", group_id)\
                .execute()
            rows = listing.search(result.data or [], q, ["what", "where", "why", "type"])
            rows = listing.filter_equals(rows, "status", status)
            rows = listing.filter_equals(rows, "privacy", privacy)
            rows = listing.filter_date_range(rows, "when_start", start_from, start_to)
            rows = listing.sort_rows(rows, sort_by, descending=order != "asc")
            return self._hydrate(listing.paginate(rows, limit, offset))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing laags of group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch laags")

    def public_feed(self, q: Optional[str] = None, limit: int = 10, offset: int = 0) -> List[LaagResponse]:
        """Active public laags from every group, newest first"""
        try:
            result = select_active(self.supabase, "laags")\
                .eq("privacy", PUBLIC)\
                .order("created_at", desc=True)\
                .execute()
            rows = listing.search(result.data or [], q, ["what", "where", "type"])
            return self._hydrate(listing.paginate(rows, limit, offset))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading public feed: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch laags")

    def upcoming(self, group_ids: List[str], limit: int = 5, offset: int = 0) -> List[LaagResponse]:
        """Planned laags in the caller's groups, soonest first"""
        if not group_ids:
            return []
        try:
            result = select_active(self.supabase, "laags")\
                .eq("status", PLANNING)\
                .in_("group_id", group_ids)\
                .order("when_start", desc=False)\
                .execute()
            return self._hydrate(listing.paginate(result.data or [], limit, offset), with_comments=False)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading upcoming laags: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch laags")

    def list_all(self, q: Optional[str] = None, limit: int = 10, offset: int = 0) -> List[LaagResponse]:
        """Admin table of every active laag; search covers what, where and the organizer's name"""
        try:
            result = select_active(self.supabase, "laags")\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []
            cards = fetch_profile_cards(self.supabase, [r["organizer"] for r in rows])
            searchable = [{**r, "organizer_profile": cards.get(r["organizer"])} for r in rows]
            matched = listing.search(searchable, q, ["what", "where", "organizer_profile.full_name"])
            page = [{k: v for k, v in r.items() if k != "organizer_profile"} for r in listing.paginate(matched, limit, offset)]
            return self._hydrate(page, with_comments=False)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing all laags: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch laags")

    # Writes

    def _check_attendees(self, group_id: str, attendee_ids: Iterable[str]) -> None:
        """Attendees must be the group's owner or active members"""
        group = self.supabase.table("groups")\
            .select("id, owner")\
            .eq("id", group_id)\
            .limit(1)\
            .execute()
        allowed = {g["owner"] for g in (group.data or [])}
        members = select_active(self.supabase, "groupMembers", "group_member")\
            .eq("group_id", group_id)\
            .execute()
        allowed |= {m["group_member"] for m in (members.data or [])}
        outsiders = sorted(set(attendee_ids) - allowed)
        if outsiders:
            raise HTTPException(status_code=400, detail="Attendees must be members of the group")

    def create_laag(self, group_id: str, laag_data: LaagCreate, organizer_id: str) -> LaagResponse:
        """
        Insert the laag, its attendees (submitted ids plus the organizer) and a
        notification for every attendee. The organizer's own copy starts read.
        """
        try:
            attendees = attendee_set(laag_data.attendees, organizer_id)
            self._check_attendees(group_id, attendees)

            fields = laag_data.model_dump(mode="json", exclude={"attendees"})
            fields.update({"organizer": organizer_id, "group_id": group_id, "is_deleted": False})
            result = self.supabase.table("laags").insert(fields).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create laag")

            laag = result.data[0]
            self.supabase.table("laagAttendees").insert([
                {"laag_id": laag["id"], "attendee_id": attendee_id, "is_removed": False}
                for attendee_id in attendees
            ]).execute()

            self.notifications.fan_out(laag, laag["status"], read_by=organizer_id)
            logger.info(f"Laag {laag['id']} created in group {group_id} by {organizer_id}")
            return self._hydrate([laag])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating laag in group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create laag")

    def reconcile_attendees(self, laag: Dict[str, Any], target_ids: List[str]) -> Tuple[List[str], List[str]]:
        """
        Make the active attendee set equal target_ids: one batched removal of rows
        no longer wanted and one batched insert for the new ids.
        Callers validate target_ids with _check_attendees before any laag write.
        Returns (removed row ids, added profile ids).
        """
        current = select_active(self.supabase, "laagAttendees")\
            .eq("laag_id", laag["id"])\
            .order("created_at", desc=False)\
            .execute().data or []
        to_remove, to_add = diff_attendees(current, target_ids)

        if to_remove:
            soft_delete(self.supabase, "laagAttendees", to_remove)
        if to_add:
            self.supabase.table("laagAttendees").insert([
                {"laag_id": laag["id"], "attendee_id": attendee_id, "is_removed": False}
                for attendee_id in to_add
            ]).execute()
        if to_remove or to_add:
            logger.info(f"Laag {laag['id']} attendees: -{len(to_remove)} +{len(to_add)}")
        return to_remove, to_add

    def _write(self, laag_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        fields["updated_at"] = _now()
        result = self.supabase.table("laags")\
            .update(fields)\
            .eq("id", laag_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Laag not found")
        return result.data[0]

    def _transition(self, laag: Dict[str, Any], target: str) -> bool:
        try:
            return lifecycle.check_transition(laag["status"], target)
        except lifecycle.InvalidTransition as e:
            raise HTTPException(status_code=409, detail=str(e))

    def update_laag(self, laag: Dict[str, Any], laag_data: LaagUpdate) -> LaagResponse:
        """
        Edit form. A status write must follow the lifecycle (same status is a no-op),
        attendees is reconciled as a target set, and moving to Completed/Cancelled notifies attendees.
        """
        try:
            fields = laag_data.model_dump(mode="json", exclude_unset=True, exclude={"attendees", "status"})
            fields = {k: v for k, v in fields.items() if v is not None or k in CLEARABLE_FIELDS}
            status_changed = False
            if laag_data.status is not None:
                status_changed = self._transition(laag, laag_data.status)
                if status_changed:
                    fields["status"] = laag_data.status

            start = listing.as_datetime(laag_data.when_start or laag.get("when_start"))
            end = listing.as_datetime(laag_data.when_end or laag.get("when_end"))
            if start is not None and end is not None and end < start:
                raise HTTPException(status_code=400, detail="when_end must not be before when_start")
            if laag_data.attendees is not None:
                self._check_attendees(laag["group_id"], laag_data.attendees)

            updated = self._write(laag["id"], fields) if fields else laag
            if laag_data.attendees is not None:
                self.reconcile_attendees(updated, laag_data.attendees)
            if status_changed:
                self.notifications.fan_out(updated, updated["status"])
            return self._hydrate([updated])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating laag {laag.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update laag")

    def cancel_laag(self, laag: Dict[str, Any]) -> LaagResponse:
        """Planning -> Cancelled, then notify the active attendees"""
        try:
            if not self._transition(laag, CANCELLED):
                raise HTTPException(status_code=409, detail="Laag is already Cancelled")
            updated = self._write(laag["id"], {"status": CANCELLED})
            self.notifications.fan_out(updated, CANCELLED)
            logger.info(f"Laag {laag['id']} cancelled")
            return self._hydrate([updated])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error cancelling laag {laag.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="Failed to cancel laag")

    def complete_laag(self, laag: Dict[str, Any], complete_data: LaagComplete) -> LaagResponse:
        """Planning -> Completed with final cost and fun meter, optional attendee/privacy/type changes"""
        try:
            if not self._transition(laag, COMPLETED):
                raise HTTPException(status_code=409, detail="Laag is already Completed")
            if complete_data.attendees is not None:
                self._check_attendees(laag["group_id"], complete_data.attendees)
            fields = complete_data.model_dump(mode="json", exclude_unset=True, exclude={"attendees"})
            fields = {k: v for k, v in fields.items() if v is not None}
            fields["status"] = COMPLETED
            updated = self._write(laag["id"], fields)
            if complete_data.attendees is not None:
                self.reconcile_attendees(updated, complete_data.attendees)
            self.notifications.fan_out(updated, COMPLETED)
            logger.info(f"Laag {laag['id']} completed")
            return self._hydrate([updated])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error completing laag {laag.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="Failed to complete laag")

    def delete_laag(self, laag_id: str) -> bool:
        try:
            updated = soft_delete(self.supabase, "laags", [laag_id])
            if not updated:
                raise HTTPException(status_code=404, detail="Laag not found")
            logger.info(f"Laag {laag_id} deleted")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting laag {laag_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete laag")
