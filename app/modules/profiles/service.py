from supabase import Client
from app.config import settings
from app.core import listing
from app.core.soft_delete import select_active, soft_delete
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, ProfileCard, AvatarUploadResponse
from app.storage.media_storage import MediaStorage, file_extension
from typing import Dict, Iterable, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

CARD_COLUMNS = "id, full_name, avatar_url"


def fetch_profile_cards(supabase: Client, profile_ids: Iterable[str]) -> Dict[str, dict]:
    """id -> {id, full_name, avatar_url} for the given ids (deleted profiles included, so history still renders)."""
    ids = sorted({pid for pid in profile_ids if pid})
    if not ids:
        return {}
    result = supabase.table("profiles")\
        .select(CARD_COLUMNS)\
        .in_("id", ids)\
        .execute()
    return {
        p["id"]: {"id": p["id"], "full_name": p.get("full_name"), "avatar_url": p.get("avatar_url")}
        for p in (result.data or [])
    }


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.storage = MediaStorage(supabase)

    def get_profile(self, profile_id: str) -> ProfileResponse:
        """Full profile of the caller (account settings page)"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", profile_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading profile {profile_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load profile data")

    def get_card(self, profile_id: str) -> ProfileCard:
        cards = fetch_profile_cards(self.supabase, [profile_id])
        if profile_id not in cards:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileCard(**cards[profile_id])

    def update_profile(self, profile_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Upsert account settings; only fields that were sent are written"""
        try:
            update_data = profile_data.model_dump(exclude_unset=True)
            update_data["id"] = profile_id
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("profiles").upsert(update_data).execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile {profile_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update profile")

    def upload_avatar(self, profile_id: str, filename: Optional[str], content: bytes, content_type: Optional[str]) -> AvatarUploadResponse:
        """Store the avatar as {profile_id}-{timestamp}.{ext} and point the profile at it"""
        try:
            stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
            path = f"{profile_id}-{stamp}.{file_extension(filename)}"
            self.storage.upload(settings.avatars_bucket, path, content, content_type)
            self.supabase.table("profiles")\
                .update({"avatar_url": path, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", profile_id)\
                .execute()
            return AvatarUploadResponse(
                avatar_url=path,
                signed_url=self.storage.signed_url(settings.avatars_bucket, path)
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error uploading avatar for {profile_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload avatar")

    def list_users(self, search: Optional[str] = None, limit: int = 10, offset: int = 0) -> List[ProfileResponse]:
        """Admin user table: active, non-admin profiles ordered by name, searchable by name or email"""
        try:
            result = select_active(self.supabase, "profiles")\
                .neq("role", "admin")\
                .order("full_name", desc=False)\
                .execute()
            rows = listing.search(result.data or [], search, ["full_name", "email"])
            return [ProfileResponse(**row) for row in listing.paginate(rows, limit, offset)]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch users")

    def delete_user(self, profile_id: str) -> bool:
        """Soft delete: the auth user and every row they authored are kept"""
        try:
            updated = soft_delete(self.supabase, "profiles", [profile_id])
            if not updated:
                raise HTTPException(status_code=404, detail="Profile not found")
            logger.info(f"Profile {profile_id} deactivated")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting user {profile_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user")
