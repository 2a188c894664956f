from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.laags.schemas import LaagCreate, LaagUpdate, LaagComplete, LaagResponse, Privacy, Status
from app.modules.laags.service import LaagService
from app.core.dependencies import authorize, require_permission, get_current_user_id, get_access_cache, get_user_group_ids
from supabase import Client
from typing import Dict, List, Optional, Literal
from datetime import datetime

router = APIRouter(tags=["laags"])


def get_laag_service(supabase: Client = Depends(get_supabase)) -> LaagService:
    return LaagService(supabase)


@router.post("/groups/{group_id}/laags", response_model=LaagResponse, status_code=201)
async def create_laag(
    group_id: str,
    laag_data: LaagCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    """Plan (or log a completed) laag in a group the caller belongs to"""
    authorize("laags:create", current_user, supabase, group_id)
    return service.create_laag(group_id, laag_data, current_user["id"])


@router.get("/groups/{group_id}/laags", response_model=List[LaagResponse])
async def list_group_laags(
    group_id: str,
    q: Optional[str] = None,
    status: Optional[Status] = None,
    privacy: Optional[Privacy] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
    sort_by: str = "created_at",
    order: Literal["asc", "desc"] = "desc",
    limit: int = 10,
    offset: int = 0,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    """Group feed with search, status/privacy/date filters, sorting and pagination"""
    authorize("groups:read", current_user, supabase, group_id)
    return service.list_group_laags(
        group_id, q=q, status=status, privacy=privacy,
        start_from=start_from, start_to=start_to,
        sort_by=sort_by, order=order, limit=limit, offset=offset
    )


@router.get("/laags/feed", response_model=List[LaagResponse])
async def public_feed(
    q: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service)
):
    return service.public_feed(q=q, limit=limit, offset=offset)


@router.get("/laags/upcoming", response_model=List[LaagResponse])
async def upcoming_laags(
    limit: int = 5,
    offset: int = 0,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Planned laags in the caller's groups, soonest first"""
    group_ids = get_user_group_ids(current_user["id"], supabase, cache)
    return service.upcoming(group_ids, limit=limit, offset=offset)


@router.get("/laags/all", response_model=List[LaagResponse])
async def list_all_laags(
    q: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    current_user: Dict = Depends(require_permission("laags:list_all")),
    service: LaagService = Depends(get_laag_service)
):
    """List every laag (admin only)"""
    return service.list_all(q=q, limit=limit, offset=offset)


@router.get("/laags/{laag_id}", response_model=LaagResponse)
async def get_laag(
    laag_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    laag = authorize("laags:read", current_user, supabase, laag_id)
    return service.get_laag(laag)


@router.put("/laags/{laag_id}", response_model=LaagResponse)
async def update_laag(
    laag_id: str,
    laag_data: LaagUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    """Edit a laag (organizer only)"""
    laag = authorize("laags:update", current_user, supabase, laag_id)
    return service.update_laag(laag, laag_data)


@router.post("/laags/{laag_id}/cancel", response_model=LaagResponse)
async def cancel_laag(
    laag_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    laag = authorize("laags:cancel", current_user, supabase, laag_id)
    return service.cancel_laag(laag)


@router.post("/laags/{laag_id}/complete", response_model=LaagResponse)
async def complete_laag(
    laag_id: str,
    complete_data: LaagComplete,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    laag = authorize("laags:complete", current_user, supabase, laag_id)
    return service.complete_laag(laag, complete_data)


@router.delete("/laags/{laag_id}", status_code=204)
async def delete_laag(
    laag_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: LaagService = Depends(get_laag_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete a laag (organizer or admin)"""
    authorize("laags:delete", current_user, supabase, laag_id)
    service.delete_laag(laag_id)
    return None
