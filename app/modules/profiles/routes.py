from fastapi import APIRouter, Depends, File, UploadFile
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, ProfileCard, AvatarUploadResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import authorize, get_current_user_id, require_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(current_user["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
    supabase: Client = Depends(get_supabase)
):
    """Update account settings"""
    authorize("profiles:update", current_user, supabase, current_user["id"])
    return service.update_profile(current_user["id"], profile_data)


@router.post("/me/avatar", response_model=AvatarUploadResponse)
async def upload_my_avatar(
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    content = await file.read()
    return service.upload_avatar(current_user["id"], file.filename, content, file.content_type)


@router.get("", response_model=List[ProfileResponse])
async def list_users(
    search: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    current_user: Dict = Depends(require_permission("profiles:list")),
    service: ProfileService = Depends(get_profile_service)
):
    """List user accounts (admin only)"""
    return service.list_users(search=search, limit=limit, offset=offset)


@router.get("/{profile_id}", response_model=ProfileCard)
async def get_profile_card(
    profile_id: str,
    current_user: Dict = Depends(require_permission("profiles:read")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_card(profile_id)


@router.delete("/{profile_id}", status_code=204)
async def delete_user(
    profile_id: str,
    current_user: Dict = Depends(require_permission("profiles:delete")),
    service: ProfileService = Depends(get_profile_service)
):
    """Deactivate a user account (admin only)"""
    service.delete_user(profile_id)
    return None
