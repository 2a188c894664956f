from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.comments.schemas import CommentCreate, CommentUpdate, CommentResponse
from app.modules.comments.service import CommentService
from app.core.dependencies import authorize, get_current_user_id
from supabase import Client
from typing import Dict, List

router = APIRouter(tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/laags/{laag_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    laag_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    authorize("laags:read", current_user, supabase, laag_id)
    return service.list_comments(laag_id)


@router.post("/laags/{laag_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    laag_id: str,
    comment_data: CommentCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    authorize("comments:create", current_user, supabase, laag_id)
    return service.add_comment(laag_id, current_user["id"], comment_data)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    """Edit own comment"""
    authorize("comments:update", current_user, supabase, comment_id)
    return service.update_comment(comment_id, comment_data)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CommentService = Depends(get_comment_service),
    supabase: Client = Depends(get_supabase)
):
    """Delete own comment"""
    authorize("comments:delete", current_user, supabase, comment_id)
    service.delete_comment(comment_id)
    return None
