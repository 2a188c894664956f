from fastapi import APIRouter, Depends, File, Form, UploadFile
from app.database.supabase_client import get_supabase
from app.modules.groups.schemas import (
    GroupUpdate, GroupResponse, GroupDetailResponse,
    GroupMemberAdd, GroupMemberResponse
)
from app.modules.groups.service import GroupService
from app.modules.profiles.schemas import ProfileCard
from app.core.dependencies import authorize, require_permission, get_current_user_id, get_access_cache, get_user_group_ids
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_name: str = Form(..., min_length=1),
    members: List[str] = Form(default=[]),
    picture: Optional[UploadFile] = File(default=None),
    user_data: Dict = Depends(require_permission("groups:create")),
    service: GroupService = Depends(get_group_service)
):
    """Create a group; the caller becomes its owner"""
    picture_data = None
    if picture is not None and picture.filename:
        picture_data = {
            "filename": picture.filename,
            "content": await picture.read(),
            "content_type": picture.content_type
        }
    return service.create_group(group_name, user_data["id"], members, picture_data)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """List groups the caller owns or is a member of"""
    group_ids = get_user_group_ids(user_data["id"], supabase, cache)
    return service.list_my_groups(group_ids)


@router.get("/all", response_model=List[GroupResponse])
async def list_all_groups(
    search: Optional[str] = None,
    size: Optional[str] = None,
    order: str = "desc",
    limit: int = 10,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("groups:list_all")),
    service: GroupService = Depends(get_group_service)
):
    """List every group (admin only). size: small | medium | large"""
    return service.list_all_groups(search=search, size=size, order=order, limit=limit, offset=offset)


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(
    group_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Get group with owner and members (only if user is a member)"""
    group = authorize("groups:read", user_data, supabase, group_id)
    return service.get_group_detail(group)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Rename group (owner only)"""
    authorize("groups:update", current_user, supabase, group_id)
    return service.update_group(group_id, group_data)


@router.post("/{group_id}/picture", response_model=GroupResponse)
async def replace_group_picture(
    group_id: str,
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    authorize("groups:update", current_user, supabase, group_id)
    content = await file.read()
    return service.replace_picture(group_id, file.filename, content, file.content_type)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete group (owner or admin)"""
    authorize("groups:delete", current_user, supabase, group_id)
    service.delete_group(group_id)
    return None


@router.get("/{group_id}/members", response_model=List[GroupMemberResponse])
async def list_members(
    group_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """List active members of a group (only if user is a member)"""
    authorize("groups:read", user_data, supabase, group_id)
    return service.list_members(group_id)


@router.get("/{group_id}/available-profiles", response_model=List[ProfileCard])
async def list_available_profiles(
    group_id: str,
    search: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Profiles the owner can add to the group"""
    authorize("groups:manage_members", current_user, supabase, group_id)
    return service.list_available_profiles(group_id, search=search)


@router.post("/{group_id}/members", response_model=GroupMemberResponse, status_code=201)
async def add_member(
    group_id: str,
    member_data: GroupMemberAdd,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Add a member to the group (owner only)"""
    authorize("groups:manage_members", current_user, supabase, group_id)
    return service.add_member(group_id, member_data.profile_id)


@router.delete("/{group_id}/members/{member_row_id}", status_code=204)
async def remove_member(
    group_id: str,
    member_row_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service),
    supabase: Client = Depends(get_supabase)
):
    """Remove a member from the group (owner only)"""
    group = authorize("groups:manage_members", current_user, supabase, group_id)
    service.remove_member(group, member_row_id)
    return None
