from supabase import Client
from app.config import settings
from app.core import listing
from app.core.soft_delete import select_active, soft_delete, restore, latest_row
from app.modules.groups.schemas import (
    GroupUpdate, GroupResponse, GroupDetailResponse, GroupMemberResponse
)
from app.modules.profiles.schemas import ProfileCard
from app.modules.profiles.service import fetch_profile_cards
from app.storage.media_storage import MediaStorage, file_extension
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)

    def _to_response(self, group: Dict[str, Any], cards: Optional[Dict[str, dict]] = None) -> GroupResponse:
        data = dict(group)
        data["group_picture_url"] = self.storage.signed_url(settings.group_pictures_bucket, group.get("group_picture"))
        if cards is not None:
            data["owner_profile"] = cards.get(group.get("owner"))
        return GroupResponse(**data)

    def create_group(
        self,
        group_name: str,
        owner_id: str,
        member_ids: List[str],
        picture: Optional[Dict[str, Any]] = None
    ) -> GroupResponse:
        """
        Create a group owned by owner_id.
        no_members is written once as members + owner; the owner gets a groupMembers row too.
        picture: optional {"filename", "content", "content_type"} stored as {group_id}.{ext}
        """
        try:
            members = []
            for member_id in member_ids:
                if member_id and member_id != owner_id and member_id not in members:
                    members.append(member_id)

            result = self.supabase.table("groups").insert({
                "group_name": group_name,
                "owner": owner_id,
                "no_members": len(members) + 1,
                "is_deleted": False
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create group")

            group = result.data[0]

            if picture is not None:
                path = f"{group['id']}.{file_extension(picture.get('filename'))}"
                self.storage.upload(settings.group_pictures_bucket, path, picture["content"], picture.get("content_type"))
                updated = self.supabase.table("groups")\
                    .update({"group_picture": path})\
                    .eq("id", group["id"])\
                    .execute()
                if updated.data:
                    group = updated.data[0]

            rows = [{"group_id": group["id"], "group_member": owner_id, "is_removed": False}]
            rows.extend({"group_id": group["id"], "group_member": m, "is_removed": False} for m in members)
            self.supabase.table("groupMembers").insert(rows).execute()

            logger.info(f"Group {group['id']} created by {owner_id} with {len(members)} member(s)")
            return self._to_response(group)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating group: {e}")
            raise HTTPException(status_code=500, detail="Failed to create group")

    def list_my_groups(self, group_ids: List[str]) -> List[GroupResponse]:
        """Groups the caller owns or belongs to, newest first"""
        if not group_ids:
            return []
        try:
            result = select_active(self.supabase, "groups")\
                .in_("id", group_ids)\
                .order("created_at", desc=True)\
                .execute()
            groups = result.data or []
            cards = fetch_profile_cards(self.supabase, [g["owner"] for g in groups])
            return [self._to_response(g, cards) for g in groups]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing groups: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch groups")

    def list_all_groups(
        self,
        search: Optional[str] = None,
        size: Optional[str] = None,
        order: str = "desc",
        limit: int = 10,
        offset: int = 0
    ) -> List[GroupResponse]:
        """Admin table of every active group"""
        try:
            result = select_active(self.supabase, "groups").execute()
            rows = listing.search(result.data or [], search, ["group_name"])
            rows = listing.filter_group_size(rows, size)
            rows = listing.sort_rows(rows, "created_at", descending=order != "asc")
            page = listing.paginate(rows, limit, offset)
            cards = fetch_profile_cards(self.supabase, [g["owner"] for g in page])
            return [self._to_response(g, cards) for g in page]
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing all groups: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch groups")

    def _active_member_rows(self, group_id: str) -> List[Dict[str, Any]]:
        result = select_active(self.supabase, "groupMembers")\
            .eq("group_id", group_id)\
            .order("created_at", desc=False)\
            .execute()
        return result.data or []

    def list_members(self, group_id: str) -> List[GroupMemberResponse]:
        """Active members with their profile cards"""
        try:
            rows = self._active_member_rows(group_id)
            cards = fetch_profile_cards(self.supabase, [r["group_member"] for r in rows])
            return [
                GroupMemberResponse(**row, profile=cards.get(row["group_member"]))
                for row in rows
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing members of group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch members")

    def get_group_detail(self, group: Dict[str, Any]) -> GroupDetailResponse:
        """Group with owner card and active members; member_count is counted, no_members is left as stored"""
        try:
            members = self.list_members(group["id"])
            cards = fetch_profile_cards(self.supabase, [group["owner"]])
            base = self._to_response(group, cards)
            return GroupDetailResponse(
                **base.model_dump(),
                members=members,
                member_count=len(members)
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading group {group.get('id')}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load group")

    def update_group(self, group_id: str, group_data: GroupUpdate) -> GroupResponse:
        """Rename group"""
        try:
            result = self.supabase.table("groups")\
                .update({
                    "group_name": group_data.group_name,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", group_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Group not found")

            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update group")

    def replace_picture(self, group_id: str, filename: Optional[str], content: bytes, content_type: Optional[str]) -> GroupResponse:
        """Upload a new picture as {group_id}-{timestamp}.{ext}; the old blob is left in place"""
        try:
            stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
            path = f"{group_id}-{stamp}.{file_extension(filename)}"
            self.storage.upload(settings.group_pictures_bucket, path, content, content_type)
            result = self.supabase.table("groups")\
                .update({
                    "group_picture": path,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", group_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Group not found")

            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error replacing picture of group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update group picture")

    def delete_group(self, group_id: str) -> bool:
        """Soft delete; members, laags and notifications stay in place"""
        try:
            updated = soft_delete(self.supabase, "groups", [group_id])
            if not updated:
                raise HTTPException(status_code=404, detail="Group not found")
            logger.info(f"Group {group_id} deleted")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete group")

    def list_available_profiles(self, group_id: str, search: Optional[str] = None) -> List[ProfileCard]:
        """Profiles that could be added: not an active member, not an admin, not deleted"""
        try:
            member_ids = {r["group_member"] for r in self._active_member_rows(group_id)}
            result = select_active(self.supabase, "profiles", "id, full_name, avatar_url, role")\
                .neq("role", "admin")\
                .order("full_name", desc=False)\
                .execute()
            rows = [p for p in (result.data or []) if p["id"] not in member_ids]
            rows = listing.search(rows, search, ["full_name"])
            return [ProfileCard(id=p["id"], full_name=p.get("full_name"), avatar_url=p.get("avatar_url")) for p in rows]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing available profiles for group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch profiles")

    def add_member(self, group_id: str, profile_id: str) -> GroupMemberResponse:
        """
        Add a profile to the group.
        The most recent membership row for the pair is re-activated when one exists,
        otherwise a new row is inserted. no_members is not touched.
        """
        try:
            profile = self.supabase.table("profiles")\
                .select("id, is_deleted")\
                .eq("id", profile_id)\
                .limit(1)\
                .execute()
            if not profile.data or profile.data[0].get("is_deleted"):
                raise HTTPException(status_code=404, detail="Profile not found")

            existing = latest_row(self.supabase, "groupMembers", {"group_id": group_id, "group_member": profile_id})
            if existing and not existing.get("is_removed"):
                raise HTTPException(status_code=409, detail="Profile is already a member of this group")

            if existing:
                rows = restore(self.supabase, "groupMembers", [existing["id"]])
                row = rows[0] if rows else {**existing, "is_removed": False}
            else:
                result = self.supabase.table("groupMembers").insert({
                    "group_id": group_id,
                    "group_member": profile_id,
                    "is_removed": False
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to add member")
                row = result.data[0]

            cards = fetch_profile_cards(self.supabase, [profile_id])
            return GroupMemberResponse(**row, profile=cards.get(profile_id))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding {profile_id} to group {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add member")

    def remove_member(self, group: Dict[str, Any], member_row_id: str) -> bool:
        """Flip is_removed on one membership row; the owner's own row is kept"""
        try:
            result = self.supabase.table("groupMembers")\
                .select("*")\
                .eq("id", member_row_id)\
                .eq("group_id", group["id"])\
                .limit(1)\
                .execute()
            if not result.data or result.data[0].get("is_removed"):
                raise HTTPException(status_code=404, detail="Member not found")
            if result.data[0]["group_member"] == group["owner"]:
                raise HTTPException(status_code=400, detail="The group owner cannot be removed")

            soft_delete(self.supabase, "groupMembers", [member_row_id])
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error removing member row {member_row_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to remove member")
